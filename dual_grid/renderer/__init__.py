"""Rendering subpackage.

The compositor only produces draw batches; drawing them is the host
backend's job. This package ships a reference backend built on Pillow:

* Batches are alpha-composited onto an RGBA image in ascending material
  order, so higher materials cover lower ones where their tiles are opaque.
* Quads pushed off the image edge by sub-tile panning are clipped.

It is meant for previews, tooling and tests rather than real-time display.
See :mod:`dual_grid.renderer.pillow`.
"""
