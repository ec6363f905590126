"""Tests for the shelf packing engine."""

import itertools
import random

import pytest

from resprite_core.config import AtlasConfig
from resprite_core.errors import CapacityExceeded, OversizedIcon
from resprite_core.packer import ShelfPacker, pack, packing_order_key


def padded_box(placement, padding):
    return (placement.x - padding, placement.y - padding,
            placement.x + placement.width + padding, placement.y + placement.height + padding)


def assert_valid_layout(result, variants):
    padding = result.padding
    assert len(result) == len(variants)
    assert sorted(p.variant.key for p in result.placements) == sorted(v.key for v in variants)

    for p in result.placements:
        assert p.x - padding >= 0 and p.y - padding >= 0
        assert p.x + p.width + padding <= result.width
        assert p.y + p.height + padding <= result.height

    for a, b in itertools.combinations(result.placements, 2):
        ax0, ay0, ax1, ay1 = padded_box(a, padding)
        bx0, by0, bx1, by1 = padded_box(b, padding)
        overlap = ax0 < bx1 and bx0 < ax1 and ay0 < by1 and by0 < ay1
        assert not overlap, f"{a.variant.key} overlaps {b.variant.key}"

    assert result.width * result.height >= sum(v.width * v.height for v in variants)


def test_packing_order(pin_and_marker):
    order = sorted(pin_and_marker, key=packing_order_key)
    assert [v.key for v in order] == [('pin', 2), ('marker', 2), ('pin', 1), ('marker', 1)]


def test_packing_order_ties_use_name_then_ratio(make_variant):
    variants = [make_variant('b', 1, 10, 10), make_variant('a', 2, 10, 10), make_variant('a', 1, 10, 10)]
    order = sorted(variants, key=packing_order_key)
    assert [v.key for v in order] == [('a', 1), ('a', 2), ('b', 1)]


def test_pin_and_marker_layout(pin_and_marker):
    result = ShelfPacker(padding=1, max_dimension=256).pack(pin_and_marker)

    assert (result.width, result.height) == (42, 54)
    assert result.shelves == 3
    positions = {p.variant.key: (p.x, p.y) for p in result.placements}
    assert positions == {
        ('pin', 2): (1, 1),
        ('marker', 2): (1, 27),
        ('pin', 1): (27, 1),
        # neither shelf has room left, so a new shelf opens below
        ('marker', 1): (1, 45),
    }
    assert_valid_layout(result, pin_and_marker)


def test_placement_lookup(pin_and_marker):
    result = ShelfPacker(padding=1, max_dimension=256).pack(pin_and_marker)
    assert (result.placement_for('pin', 1).x, result.placement_for('pin', 1).y) == (27, 1)
    with pytest.raises(KeyError):
        result.placement_for('pin', 3)


def test_determinism_independent_of_input_order(make_variant):
    rng = random.Random(42)
    variants = [make_variant(f"icon{i:02d}", r, rng.randint(4, 30) * r, rng.randint(4, 30) * r)
                for i in range(30) for r in (1, 2)]
    packer = ShelfPacker(padding=2, max_dimension=1024)
    first = packer.pack(variants)
    shuffled = list(variants)
    rng.shuffle(shuffled)
    second = packer.pack(shuffled)

    assert first == second
    assert_valid_layout(first, variants)


def test_many_equal_icons(make_variant):
    variants = [make_variant(f"sq{i:03d}", 1, 16, 16) for i in range(100)]
    result = ShelfPacker(padding=1, max_dimension=512).pack(variants)
    assert_valid_layout(result, variants)
    assert result.fill_ratio > 0.5


def test_zero_padding_packs_tightly(make_variant):
    variants = [make_variant(f"t{i}", 1, 8, 8) for i in range(4)]
    result = ShelfPacker(padding=0, max_dimension=64).pack(variants)
    assert_valid_layout(result, variants)
    assert result.fill_ratio == 1.0


def test_wide_icon_after_narrow_ones(make_variant):
    variants = [make_variant('tall', 1, 4, 40), make_variant('wide', 1, 120, 2)]
    result = ShelfPacker(padding=1, max_dimension=256).pack(variants)
    assert_valid_layout(result, variants)
    assert result.width >= 122


def test_unbounded_canvas(make_variant):
    variants = [make_variant(f"big{i}", 1, 300, 300) for i in range(5)]
    result = ShelfPacker(padding=1, max_dimension=None).pack(variants)
    assert_valid_layout(result, variants)


def test_empty_input():
    result = ShelfPacker().pack([])
    assert (result.width, result.height) == (0, 0)
    assert len(result) == 0
    assert result.fill_ratio == 1.0


def test_oversized_icon(make_variant):
    with pytest.raises(OversizedIcon) as excinfo:
        ShelfPacker(padding=0, max_dimension=256).pack([make_variant('road', 1, 300, 10)])
    assert excinfo.value.name == 'road'
    assert excinfo.value.max_dimension == 256


def test_padding_counts_towards_oversize(make_variant):
    variant = make_variant('edge', 1, 256, 10)
    ShelfPacker(padding=0, max_dimension=256).pack([variant])
    with pytest.raises(OversizedIcon):
        ShelfPacker(padding=1, max_dimension=256).pack([variant])


def test_capacity_exceeded(make_variant):
    variants = [make_variant(f"tile{i:04d}", 1, 200, 200) for i in range(1000)]
    with pytest.raises(CapacityExceeded) as excinfo:
        ShelfPacker(padding=1, max_dimension=256).pack(variants)
    assert excinfo.value.placed == 1
    assert excinfo.value.total == 1000


def test_fits_exactly_at_limit(make_variant):
    variants = [make_variant(f"q{i}", 1, 64, 64) for i in range(16)]
    result = ShelfPacker(padding=0, max_dimension=256).pack(variants)
    assert_valid_layout(result, variants)
    assert result.width <= 256 and result.height <= 256


def test_invalid_arguments():
    with pytest.raises(ValueError):
        ShelfPacker(padding=-1)
    with pytest.raises(ValueError):
        ShelfPacker(max_dimension=0)


def test_pack_with_config(pin_and_marker):
    result = pack(pin_and_marker, AtlasConfig(padding=1, max_dimension=256))
    assert (result.width, result.height) == (42, 54)


def test_new_shelf_per_icon_while_height_allows(make_variant):
    variants = [make_variant(name, 1, 10, 10) for name in ('a', 'b', 'c')]
    result = ShelfPacker(padding=0, max_dimension=256).pack(variants)
    assert [(p.x, p.y) for p in result.placements] == [(0, 0), (0, 10), (0, 20)]
    assert (result.width, result.height) == (10, 30)


def test_best_fit_prefers_shortest_shelf(make_variant):
    variants = [make_variant('a', 1, 10, 30), make_variant('b', 1, 20, 12),
                make_variant('c', 1, 40, 11), make_variant('d', 1, 8, 8)]
    result = ShelfPacker(padding=0, max_dimension=256).pack(variants)
    positions = {p.name: (p.x, p.y) for p in result.placements}
    assert positions['a'] == (0, 0)
    assert positions['b'] == (0, 30)
    assert positions['c'] == (0, 42)
    # shelves 0 and 1 both have room, the shorter one wins
    assert positions['d'] == (20, 30)
    assert (result.width, result.height) == (40, 53)
    assert_valid_layout(result, variants)


def test_width_doubles_when_height_limit_reached(make_variant):
    variants = [make_variant(f"s{i}", 1, 10, 10) for i in range(5)]
    result = ShelfPacker(padding=0, max_dimension=40).pack(variants)
    positions = [(p.x, p.y) for p in result.placements]
    assert positions == [(0, 0), (0, 10), (0, 20), (0, 30), (10, 0)]
    assert (result.width, result.height) == (20, 40)
