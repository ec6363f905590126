"""
Shelf packing engine for resprite.
Places every icon variant inside one growing canvas, deterministically.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .errors import CapacityExceeded, OversizedIcon
from .icon import IconVariant


@dataclass
class Shelf:
    """A horizontal strip of the canvas, filled left to right."""
    y: int
    height: int
    used_width: int = 0


@dataclass
class Canvas:
    """Mutable packing surface, owned by the packer for one run."""
    width: int = 0
    height: int = 0
    shelves: List[Shelf] = field(default_factory=list)

    @property
    def bottom(self) -> int:
        """Y offset just below the last opened shelf."""
        if not self.shelves:
            return 0
        last = self.shelves[-1]
        return last.y + last.height


@dataclass(frozen=True)
class PlacementRect:
    """Position of one variant's content inside the final canvas."""
    variant: IconVariant
    x: int
    y: int

    @property
    def name(self) -> str:
        return self.variant.name

    @property
    def ratio(self):
        return self.variant.ratio

    @property
    def width(self) -> int:
        return self.variant.width

    @property
    def height(self) -> int:
        return self.variant.height


@dataclass(frozen=True)
class PackResult:
    """Immutable output of a pack operation."""
    width: int
    height: int
    padding: int
    placements: Tuple[PlacementRect, ...]
    shelves: int = 0

    def __len__(self) -> int:
        return len(self.placements)

    @property
    def fill_ratio(self) -> float:
        """Share of the canvas covered by unpadded variant pixels."""
        if self.width == 0 or self.height == 0:
            return 1.0
        used = sum(p.width * p.height for p in self.placements)
        return used / (self.width * self.height)

    def placement_for(self, name: str, ratio) -> PlacementRect:
        for placement in self.placements:
            if placement.name == name and placement.ratio == ratio:
                return placement
        raise KeyError(f"No placement for {name} @{ratio}x")


def packing_order_key(variant: IconVariant):
    """Decreasing height, then decreasing width, then (name, ratio)."""
    return (-variant.height, -variant.width, variant.name, variant.ratio)


class ShelfPacker:
    """Shelf packing with best-fit shelf selection and doubling growth."""

    def __init__(self, padding: int = 1, max_dimension: Optional[int] = None):
        """
        Initialize packer.

        Args:
            padding: Transparent margin in pixels on every side of each variant
            max_dimension: Maximum canvas width and height, None for unbounded
        """
        if padding < 0:
            raise ValueError(f"Padding must be non-negative, got {padding}")
        if max_dimension is not None and max_dimension <= 0:
            raise ValueError(f"Maximum dimension must be positive, got {max_dimension}")
        self.padding = padding
        self.max_dimension = max_dimension
        self.logger = logging.getLogger(__name__)

    def footprint(self, variant: IconVariant) -> Tuple[int, int]:
        """Padded size of a variant."""
        return (variant.width + 2 * self.padding,
                variant.height + 2 * self.padding)

    def pack(self, variants: Iterable[IconVariant]) -> PackResult:
        """
        Assign a non-overlapping position to every variant.

        Args:
            variants: Icon variants to place

        Returns:
            PackResult with the trimmed canvas size and one placement per variant

        Raises:
            OversizedIcon: if a single padded variant exceeds max_dimension
            CapacityExceeded: if the canvas cannot grow enough to hold all variants
        """
        order = sorted(variants, key=packing_order_key)
        self.logger.info(f"Packing {len(order)} variants (padding {self.padding}, "
                         f"max dimension {self.max_dimension or 'unbounded'})")
        self._check_sizes(order)

        canvas = Canvas()
        placements = []
        for index, variant in enumerate(order):
            fw, fh = self.footprint(variant)
            while True:
                shelf = self._find_shelf(canvas, fw, fh)
                if shelf is None:
                    shelf = self._open_shelf(canvas, fw, fh)
                if shelf is not None:
                    break
                if not self._grow(canvas):
                    self.logger.error(f"Canvas full at {canvas.width}x{canvas.height} "
                                      f"after placing {index} of {len(order)} variants")
                    raise CapacityExceeded(index, len(order), self.max_dimension)

            placements.append(PlacementRect(variant,
                                            shelf.used_width + self.padding,
                                            shelf.y + self.padding))
            shelf.used_width += fw

        # trim growth overshoot to the bounding box of the shelves
        width = max((s.used_width for s in canvas.shelves), default=0)
        height = canvas.bottom
        result = PackResult(width, height, self.padding, tuple(placements), len(canvas.shelves))
        self.logger.info(f"Packed canvas: {width}x{height} pixels, {result.shelves} shelves, "
                         f"fill ratio {result.fill_ratio:.3f}")
        return result

    def _check_sizes(self, variants: List[IconVariant]) -> None:
        if self.max_dimension is None:
            return
        for variant in variants:
            fw, fh = self.footprint(variant)
            if fw > self.max_dimension or fh > self.max_dimension:
                raise OversizedIcon(variant.name, variant.ratio, fw, fh, self.max_dimension)

    def _find_shelf(self, canvas: Canvas, fw: int, fh: int) -> Optional[Shelf]:
        """Lowest qualifying shelf, topmost among equal heights."""
        best = None
        for shelf in canvas.shelves:
            if canvas.width - shelf.used_width < fw or shelf.height < fh:
                continue
            if best is None or shelf.height < best.height:
                best = shelf
        return best

    def _open_shelf(self, canvas: Canvas, fw: int, fh: int) -> Optional[Shelf]:
        """Start a shelf at the canvas bottom edge, widening to the footprint if needed."""
        if self.max_dimension is not None and canvas.height + fh > self.max_dimension:
            return None
        if canvas.width < fw:
            canvas.width = fw
        shelf = Shelf(y=canvas.height, height=fh)
        canvas.shelves.append(shelf)
        canvas.height += fh
        self.logger.debug(f"Opened shelf {len(canvas.shelves) - 1} at y={shelf.y}, height {fh}")
        return shelf

    def _grow(self, canvas: Canvas) -> bool:
        """
        Enlarge the canvas by one doubling step once no new shelf fits.

        Doubles the width if the height already consumes at least the
        width, the height otherwise. Falls back to the other axis when the
        preferred one is at max_dimension.

        Returns:
            False when neither axis can grow
        """
        if canvas.height >= canvas.width:
            axes = ('width', 'height')
        else:
            axes = ('height', 'width')

        for axis in axes:
            current = getattr(canvas, axis)
            grown = min(current * 2, self.max_dimension)
            if grown <= current:
                continue
            setattr(canvas, axis, grown)
            self.logger.debug(f"Canvas {axis} grown {current} -> {grown}")
            return True
        return False


def pack(variants: Iterable[IconVariant], config) -> PackResult:
    """Pack variants using the padding and max dimension of an AtlasConfig."""
    return ShelfPacker(config.padding, config.max_dimension).pack(variants)
