from typing import Dict, Tuple

import pytest

from dual_grid.batch import Viewport
from dual_grid.compositor import Compositor, composite
from dual_grid.material import variant_hash
from dual_grid.types import FULL_MASK
from tests.test_utils import (
    TILE,
    make_world,
    quad_index,
    sample_layers,
    slot_index,
)


def test_two_by_two_fixture_all_corner_samples() -> None:
    world = make_world(2, 2, material_count=2, default_material=0)
    world.place(0, 0, 1)

    batches = composite(world.grid, world.registry, world.full_viewport())
    quads = quad_index(batches)

    expected: Dict[Tuple[int, int, int], int] = {
        # material 0 covers every corner sample with the full tile
        **{(0, x, y): 0b1111 for x in range(3) for y in range(3)},
        # material 1 only where a corner touches cell (0, 0)
        (1, 0, 0): 0b0001,
        (1, 1, 0): 0b0010,
        (1, 0, 1): 0b0100,
        (1, 1, 1): 0b1000,
    }
    assert quads == expected
    assert [m for m, _ in batches] == [0, 1]
    assert len(batches[0][1]) == 9
    assert len(batches[1][1]) == 4


def test_layers_are_emitted_bottom_up() -> None:
    world = make_world(2, 1, material_count=3)
    world.place(0, 0, 2)
    world.place(1, 0, 1)
    batches = composite(world.grid, world.registry, world.full_viewport())
    assert [m for m, _ in batches] == [0, 1, 2]
    layers = sample_layers(batches)
    assert layers[(1, 0)] == [0, 1, 2]
    assert layers[(2, 1)] == [0, 1]
    quads = quad_index(batches)
    # Material 1 also claims the corner owned by higher material 2.
    assert quads[(1, 1, 1)] == 0b1100
    assert quads[(2, 1, 1)] == 0b1000


def test_one_past_edge_rendered_two_past_skipped() -> None:
    world = make_world(2, 2, material_count=2)
    world.reset(1)
    # Request three extra corner columns/rows beyond the grid.
    batches = composite(
        world.grid, world.registry, Viewport(0, 0, 5 * TILE, 5 * TILE)
    )
    quads = quad_index(batches)
    sampled = {(x, y) for (_, x, y) in quads}
    assert sampled == {(x, y) for x in range(3) for y in range(3)}
    # reset() also rebinds the default, so outer edge samples are full tiles.
    assert quads[(1, 2, 2)] == FULL_MASK


def test_edge_samples_use_default_for_missing_corners() -> None:
    world = make_world(2, 2, material_count=2, default_material=0)
    world.grid.reset(1)
    batches = composite(world.grid, world.registry, world.full_viewport())
    quads = quad_index(batches)
    assert quads[(1, 2, 1)] == 0b1010
    assert quads[(1, 1, 2)] == 0b1100
    assert quads[(1, 2, 2)] == 0b1000
    assert quads[(1, 1, 1)] == FULL_MASK
    assert (0, 1, 1) not in quads


def test_negative_samples_are_skipped() -> None:
    world = make_world(2, 2)
    batches = composite(
        world.grid, world.registry, Viewport(-2 * TILE, -TILE, 3 * TILE, 3 * TILE)
    )
    sampled = {(q.tile_x, q.tile_y) for _, b in batches for q in b.quads}
    assert sampled == {(0, 0), (0, 1)}


def test_partial_trailing_tile_is_not_rendered() -> None:
    world = make_world(4, 4)
    batches = composite(
        world.grid, world.registry, Viewport(0, 0, 3 * TILE - 1, TILE)
    )
    sampled = {(q.tile_x, q.tile_y) for _, b in batches for q in b.quads}
    assert sampled == {(0, 0), (1, 0)}


def test_destination_offset_by_subtile_remainder() -> None:
    world = make_world(4, 4)
    left, top = TILE + 3, 2 * TILE + 1
    batches = composite(
        world.grid, world.registry, Viewport(left, top, 2 * TILE, 2 * TILE)
    )
    quads = {(q.tile_x, q.tile_y): q for _, b in batches for q in b.quads}
    assert set(quads) == {(1, 2), (2, 2), (1, 3), (2, 3)}
    assert (quads[(1, 2)].dst_x, quads[(1, 2)].dst_y) == (-3, -1)
    assert (quads[(2, 3)].dst_x, quads[(2, 3)].dst_y) == (TILE - 3, TILE - 1)


def test_source_rect_points_at_slot() -> None:
    world = make_world(1, 1)
    world.place(0, 0, 1)
    batches = composite(world.grid, world.registry, world.full_viewport())
    for _, batch in batches:
        for quad in batch.quads:
            assert quad.src_x == quad.slot * TILE
            assert quad.src_y == 0
            assert quad.size == TILE


def test_empty_variant_spec_yields_canonical_slots() -> None:
    world = make_world(3, 3, material_count=2, variants={0: {}, 1: {}})
    world.place(1, 1, 1)
    world.place(2, 0, 1)
    batches = composite(world.grid, world.registry, world.full_viewport())
    for _, batch in batches:
        for quad in batch.quads:
            assert quad.slot == quad.bitmask


def test_variant_selection_uses_world_position_hash() -> None:
    variants = {0: {FULL_MASK: [16, 17, 18]}}
    world = make_world(6, 6, material_count=1, variants=variants, atlas_rows=5)
    batches = composite(world.grid, world.registry, world.full_viewport())
    choices = world.registry[0].candidates(FULL_MASK)
    assert choices == (FULL_MASK, 16, 17, 18)
    for quad in batches[0][1].quads:
        expected = choices[variant_hash(quad.tile_x, quad.tile_y, len(choices))]
        assert expected == choices[(quad.tile_x * 7919 + quad.tile_y * 6151) % 4]
        assert quad.slot == expected
    assert len({q.slot for q in batches[0][1].quads}) > 1


def test_variant_selection_is_pan_invariant() -> None:
    variants = {0: {FULL_MASK: [16, 17, 18, 19]}, 1: {0b0001: [1, 2]}}
    world = make_world(8, 8, material_count=2, variants=variants, atlas_rows=5)
    world.place(4, 4, 1)
    world.place(6, 2, 1)

    whole = Viewport(0, 0, 9 * TILE, 9 * TILE)
    panned = Viewport(3 * TILE + 2, TILE + 3, 5 * TILE, 6 * TILE)
    a = slot_index(composite(world.grid, world.registry, whole))
    b = slot_index(composite(world.grid, world.registry, panned))
    shared = set(a) & set(b)
    assert shared
    for key in shared:
        assert a[key] == b[key]


def test_repeated_passes_are_identical() -> None:
    variants = {0: {FULL_MASK: [16, 17]}}
    world = make_world(5, 5, material_count=2, variants=variants, atlas_rows=5)
    world.place(2, 2, 1)
    compositor = Compositor(world.grid, world.registry)
    first = slot_index(compositor.composite(0, 0, 6 * TILE, 6 * TILE))
    second = slot_index(compositor.composite(0, 0, 6 * TILE, 6 * TILE))
    assert first == second


def test_reset_leaves_no_stale_corners() -> None:
    world = make_world(3, 3, material_count=3)
    world.place(0, 0, 1)
    world.place(2, 2, 2)
    world.grid.reset(2)
    world.grid.default_material = 2
    batches = composite(world.grid, world.registry, world.full_viewport())
    assert [m for m, _ in batches] == [2]
    assert all(q.bitmask == FULL_MASK for q in batches[0][1].quads)
    assert len(batches[0][1]) == 16


def test_unregistered_material_in_grid_fails_assertion() -> None:
    world = make_world(2, 2, material_count=2)
    world.grid.set(0, 0, 5)
    with pytest.raises(AssertionError):
        composite(world.grid, world.registry, world.full_viewport())
