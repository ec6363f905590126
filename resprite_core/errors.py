"""
Error taxonomy for resprite.
Every error aborts the run; no partial atlas is written.
"""

from typing import Iterable


class AtlasError(Exception):
    """Base class for all atlas build failures."""


class DuplicateVariant(AtlasError):
    """The same (name, ratio) pair was registered twice."""

    def __init__(self, name: str, ratio):
        self.name = name
        self.ratio = ratio
        super().__init__(f"Duplicate variant for icon '{name}' at ratio {ratio}x")


class MissingRatio(AtlasError):
    """An icon lacks a variant for one or more required ratios."""

    def __init__(self, name: str, ratios: Iterable):
        self.name = name
        self.ratios = tuple(ratios)
        missing = ", ".join(f"{r}x" for r in self.ratios)
        super().__init__(f"Icon '{name}' is missing ratio(s): {missing}")


class InconsistentVariant(AtlasError):
    """A variant's dimensions disagree with its ratio-1 dimensions."""

    def __init__(self, name: str, ratio, size, expected):
        self.name = name
        self.ratio = ratio
        self.size = tuple(size)
        self.expected = tuple(expected)
        super().__init__(
            f"Icon '{name}' at {ratio}x is {size[0]}x{size[1]}, "
            f"expected about {expected[0]}x{expected[1]}"
        )


class OversizedIcon(AtlasError):
    """A single padded variant does not fit within the maximum canvas dimension."""

    def __init__(self, name: str, ratio, width: int, height: int, max_dimension: int):
        self.name = name
        self.ratio = ratio
        self.width = width
        self.height = height
        self.max_dimension = max_dimension
        super().__init__(
            f"Icon '{name}' at {ratio}x needs {width}x{height} pixels with padding, "
            f"maximum canvas dimension is {max_dimension}"
        )


class CapacityExceeded(AtlasError):
    """The canvas cannot grow any further yet variants remain unplaced."""

    def __init__(self, placed: int, total: int, max_dimension: int):
        self.placed = placed
        self.total = total
        self.max_dimension = max_dimension
        super().__init__(
            f"Canvas capacity exceeded: placed {placed} of {total} variants "
            f"within {max_dimension}x{max_dimension} pixels"
        )


class RasterizationError(AtlasError):
    """An SVG source could not be loaded or rendered."""

    def __init__(self, name: str, path, reason: str):
        self.name = name
        self.path = path
        self.reason = reason
        super().__init__(f"Rendering icon '{name}' ({path}) failed: {reason}")


class AssemblyError(AtlasError):
    """Internal consistency failure while copying pixels into the canvas."""
