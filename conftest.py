"""Shared fixtures for resprite tests."""

import pytest

from resprite_core.icon import Bitmap, IconMetadata, IconVariant


def solid_bitmap(width, height, color=(255, 0, 0, 255)):
    return Bitmap(width, height, bytes(color) * (width * height))


def gradient_bitmap(width, height, seed=0):
    """Bitmap whose every pixel differs, for pixel fidelity checks."""
    pixels = bytearray()
    for y in range(height):
        for x in range(width):
            pixels += bytes(((x * 7 + seed) % 256, (y * 13 + seed) % 256, (x + y + seed) % 256, 255))
    return Bitmap(width, height, bytes(pixels))


@pytest.fixture
def make_variant():
    def factory(name, ratio, width, height, sdf=False, content=None, gradient=False):
        if gradient:
            bitmap = gradient_bitmap(width, height, seed=len(name) * 31 + int(ratio * 10))
        else:
            bitmap = solid_bitmap(width, height)
        return IconVariant(name, ratio, bitmap, IconMetadata(sdf=sdf, content=content))
    return factory


@pytest.fixture
def pin_and_marker(make_variant):
    return [
        make_variant('pin', 1, 12, 12),
        make_variant('pin', 2, 24, 24),
        make_variant('marker', 1, 20, 8),
        make_variant('marker', 2, 40, 16),
    ]
