"""
Run configuration for resprite.
"""

import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .icon import format_ratio, normalize_ratio

DEFAULT_PADDING = 1
DEFAULT_MAX_DIMENSION = 4096
CSS_DPI = 96.0

# Pixels per unit at 96 dpi
_UNIT_SCALE = {
    '': 1.0,
    'px': 1.0,
    'in': CSS_DPI,
    'cm': CSS_DPI / 2.54,
    'mm': CSS_DPI / 25.4,
    'pt': CSS_DPI / 72.0,
    'pc': CSS_DPI / 6.0,
}
_LENGTH_RE = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-zA-Z%]*)\s*$')


@dataclass(frozen=True)
class AtlasConfig:
    """Immutable settings passed explicitly into the pipeline."""
    padding: int = DEFAULT_PADDING
    max_dimension: Optional[int] = DEFAULT_MAX_DIMENSION
    ratios: Tuple = (1,)
    split_ratios: bool = False
    threads: int = 0
    css_override: Optional[Path] = None
    buffer: Optional[str] = None  # CSS length, resolved per ratio; overrides padding

    def __post_init__(self):
        """Validate values and normalize ratios."""
        if self.buffer is not None:
            object.__setattr__(self, 'padding', padding_from_length(self.buffer))
        if self.padding < 0:
            raise ValueError(f"Padding must be non-negative, got {self.padding}")
        if self.max_dimension is not None and self.max_dimension <= 0:
            raise ValueError(f"Maximum dimension must be positive, got {self.max_dimension}")
        if self.threads < 0:
            raise ValueError(f"Thread count must be non-negative, got {self.threads}")
        ratios = tuple(sorted({normalize_ratio(r) for r in self.ratios}))
        if not ratios:
            raise ValueError("At least one pixel ratio is required")
        object.__setattr__(self, 'ratios', ratios)
        if self.css_override is not None:
            object.__setattr__(self, 'css_override', Path(self.css_override))

    def padding_for(self, ratio) -> int:
        """Padding in pixels for an atlas rendered at ratio."""
        if self.buffer is None:
            return self.padding
        return padding_from_length(self.buffer, ratio)


def parse_ratios(text: str) -> Tuple:
    """
    Parse a comma-separated ratio list such as "1,2" or "1, 1.5, 2".

    Returns:
        Sorted tuple of unique ratios
    """
    parts = [part.strip() for part in text.split(',') if part.strip()]
    if not parts:
        raise ValueError(f"No pixel ratios in '{text}'")
    try:
        values = {normalize_ratio(part.rstrip('xX')) for part in parts}
    except ValueError as e:
        raise ValueError(f"Invalid pixel ratio list '{text}': {e}") from e
    return tuple(sorted(values))


def parse_length(text: str, ratio=1) -> float:
    """
    Resolve a CSS-style absolute length to device pixels.

    Args:
        text: Length such as "2", "2px", "1mm" or "0.5pt"
        ratio: Pixel ratio the length is resolved for

    Returns:
        Length in pixels at 96 dpi times the ratio
    """
    match = _LENGTH_RE.match(text)
    if not match:
        raise ValueError(f"Invalid length: '{text}'")
    number, unit = float(match.group(1)), match.group(2).lower()
    if unit in ('em', 'ex'):
        raise ValueError("Font-dependent sizes are not supported")
    if unit == '%':
        raise ValueError("Relative sizes are not supported")
    if unit not in _UNIT_SCALE:
        raise ValueError(f"Unknown length unit '{unit}' in '{text}'")
    return number * _UNIT_SCALE[unit] * normalize_ratio(ratio)


def padding_from_length(text: str, ratio=1) -> int:
    """Padding in whole pixels at ratio, rounded up."""
    pixels = parse_length(text, ratio)
    if pixels < 0:
        raise ValueError(f"Padding must be non-negative, got '{text}'")
    return int(math.ceil(pixels))


def output_paths(base: Path, ratio=None) -> Tuple[Path, Path]:
    """
    Derive (image, manifest) paths from an output base.

    The extension of base is replaced. A ratio other than 1 adds an
    "@{ratio}x" suffix to the file stem.
    """
    base = Path(base)
    stem = base.stem
    if ratio is not None and normalize_ratio(ratio) != 1:
        stem = f"{stem}@{format_ratio(ratio)}x"
    return base.with_name(f"{stem}.png"), base.with_name(f"{stem}.json")
