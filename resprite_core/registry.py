"""
Icon registry for resprite.
Collects rasterized variants per logical name and validates ratio completeness.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import DuplicateVariant, InconsistentVariant, MissingRatio
from .icon import Bitmap, IconMetadata, IconVariant, normalize_ratio


class IconRegistry:
    """Thread-safe accumulator of icon variants."""

    def __init__(self, ratios: Iterable = (1,)):
        """
        Initialize registry for a set of required ratios.

        Args:
            ratios: Pixel ratios every logical icon must provide
        """
        self.ratios = tuple(sorted({normalize_ratio(r) for r in ratios}))
        if not self.ratios:
            raise ValueError("At least one pixel ratio is required")
        self._variants: Dict[Tuple[str, float], IconVariant] = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def __len__(self) -> int:
        with self._lock:
            return len(self._variants)

    def register(self, name: str, ratio, bitmap: Bitmap,
                 metadata: Optional[IconMetadata] = None) -> IconVariant:
        """
        Register one rasterized variant.

        Args:
            name: Logical icon name
            ratio: Pixel ratio the bitmap was rendered at
            bitmap: Rasterized RGBA pixels
            metadata: SDF flag and content insets carried to the manifest

        Returns:
            The registered IconVariant

        Raises:
            DuplicateVariant: if (name, ratio) is already registered
        """
        ratio = normalize_ratio(ratio)
        if ratio not in self.ratios:
            raise ValueError(f"Ratio {ratio}x is not configured for this run ({self.ratios})")
        variant = IconVariant(name, ratio, bitmap, metadata or IconMetadata())
        with self._lock:
            if variant.key in self._variants:
                raise DuplicateVariant(name, ratio)
            self._variants[variant.key] = variant
        self.logger.debug(f"Registered {name} @{ratio}x ({bitmap.width}x{bitmap.height})")
        return variant

    def finalize(self) -> List[IconVariant]:
        """
        Validate the collected variants and return them in deterministic order.

        Returns:
            Variants sorted by logical name, then ratio

        Raises:
            MissingRatio: if a name lacks any configured ratio
            InconsistentVariant: if a variant's size disagrees with its ratio-1 size
        """
        with self._lock:
            variants = sorted(self._variants.values(), key=lambda v: v.key)

        by_name: Dict[str, Dict[float, IconVariant]] = {}
        for variant in variants:
            by_name.setdefault(variant.name, {})[variant.ratio] = variant

        for name, family in by_name.items():
            missing = [r for r in self.ratios if r not in family]
            if missing:
                raise MissingRatio(name, missing)
            self._check_dimensions(name, family)

        self.logger.info(f"Registry finalized: {len(by_name)} icons, "
                         f"{len(variants)} variants at ratios {self.ratios}")
        return variants

    def _check_dimensions(self, name: str, family: Dict[float, IconVariant]) -> None:
        base = family.get(1)
        if base is None:
            return
        for ratio, variant in family.items():
            if ratio == 1:
                continue
            expected_w = base.width * ratio
            expected_h = base.height * ratio
            tolerance = max(1, ratio)
            if abs(variant.width - expected_w) > tolerance or abs(variant.height - expected_h) > tolerance:
                raise InconsistentVariant(
                    name, ratio, (variant.width, variant.height),
                    (round(expected_w), round(expected_h)),
                )
