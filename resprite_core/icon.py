"""
Icon data types for resprite.
A logical icon owns one rasterized variant per pixel-density ratio.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

BYTES_PER_PIXEL = 4  # RGBA


def normalize_ratio(ratio):
    """Return a ratio as an int when it is integral, else as a float."""
    value = float(ratio)
    if value <= 0:
        raise ValueError(f"Pixel ratio must be positive, got {ratio}")
    if value.is_integer():
        return int(value)
    return value


def format_ratio(ratio) -> str:
    """Format a ratio for use in keys and file names (1, 2, 1.5)."""
    return str(normalize_ratio(ratio))


@dataclass(frozen=True)
class Bitmap:
    """A rasterized RGBA pixel buffer."""

    width: int
    height: int
    pixels: bytes = field(repr=False)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Bitmap dimensions must be positive, got {self.width}x{self.height}")
        expected = self.width * self.height * BYTES_PER_PIXEL
        if len(self.pixels) != expected:
            raise ValueError(
                f"Bitmap buffer holds {len(self.pixels)} bytes, "
                f"expected {expected} for {self.width}x{self.height} RGBA"
            )


@dataclass(frozen=True)
class IconMetadata:
    """Per-icon data carried through packing untouched."""

    sdf: bool = False
    content: Optional[Tuple[int, int, int, int]] = None

    def __post_init__(self):
        if self.content is not None:
            content = tuple(self.content)
            if len(content) != 4:
                raise ValueError(f"Content insets need 4 values, got {len(content)}")
            object.__setattr__(self, 'content', content)


@dataclass(frozen=True)
class IconVariant:
    """One rasterized bitmap of one logical icon at one pixel ratio."""

    name: str
    ratio: float
    bitmap: Bitmap = field(repr=False)
    metadata: IconMetadata = field(default_factory=IconMetadata)

    @property
    def width(self) -> int:
        return self.bitmap.width

    @property
    def height(self) -> int:
        return self.bitmap.height

    @property
    def pixels(self) -> bytes:
        return self.bitmap.pixels

    @property
    def key(self) -> Tuple[str, float]:
        """Deterministic (name, ratio) ordering key."""
        return (self.name, self.ratio)
