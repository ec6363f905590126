"""
Manifest builder for resprite.
Aggregates the placements of every ratio variant under its logical icon name.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from .errors import AssemblyError
from .icon import IconMetadata, format_ratio, normalize_ratio
from .packer import PackResult, PlacementRect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestRecord:
    """Atlas entry for one logical icon."""
    name: str
    width: int
    height: int
    offsets: Dict = field(default_factory=dict)  # ratio -> (x, y)
    sdf: bool = False
    content: Optional[Tuple[int, int, int, int]] = None

    @property
    def pixel_ratios(self) -> List:
        return sorted(self.offsets)

    def to_dict(self) -> dict:
        """JSON-ready form with x_R / y_R keys per ratio."""
        entry = {
            'name': self.name,
            'width': self.width,
            'height': self.height,
        }
        for ratio in self.pixel_ratios:
            x, y = self.offsets[ratio]
            entry[f"x_{format_ratio(ratio)}"] = x
            entry[f"y_{format_ratio(ratio)}"] = y
        entry['pixelRatio'] = self.pixel_ratios
        entry['sdf'] = self.sdf
        if self.content is not None:
            entry['content'] = list(self.content)
        return entry


class ManifestBuilder:
    """Turns a PackResult into manifest records."""

    def build(self, pack_result: PackResult,
              metadata: Optional[Mapping[str, IconMetadata]] = None) -> Dict[str, ManifestRecord]:
        """
        Build one record per logical icon name.

        Args:
            pack_result: Packing layout
            metadata: Optional per-name overrides of the variants' own metadata

        Returns:
            Records keyed by name, in name order

        Raises:
            AssemblyError: if a (name, ratio) pair is placed twice
        """
        families: Dict[str, Dict] = {}
        for placement in pack_result.placements:
            family = families.setdefault(placement.name, {})
            if placement.ratio in family:
                raise AssemblyError(f"Duplicate placement for {placement.name} @{placement.ratio}x")
            family[placement.ratio] = placement

        metadata = metadata or {}
        records = {}
        for name in sorted(families):
            family = families[name]
            width, height = self._base_size(family)
            base = family[min(family)]
            meta = metadata.get(name, base.variant.metadata)
            records[name] = ManifestRecord(
                name=name,
                width=width,
                height=height,
                offsets={ratio: (p.x, p.y) for ratio, p in sorted(family.items())},
                sdf=meta.sdf,
                content=meta.content,
            )
        logger.info(f"Manifest built: {len(records)} icons")
        return records

    @staticmethod
    def _base_size(family: Dict) -> Tuple[int, int]:
        """Ratio-1 size, derived from the smallest ratio when 1x is absent."""
        if 1 in family:
            return family[1].width, family[1].height
        ratio = min(family)
        placement = family[ratio]
        return (max(1, round(placement.width / ratio)),
                max(1, round(placement.height / ratio)))


def build_manifest(pack_result: PackResult,
                   metadata: Optional[Mapping[str, IconMetadata]] = None) -> Dict[str, ManifestRecord]:
    return ManifestBuilder().build(pack_result, metadata)


def manifest_to_json(records: Mapping[str, ManifestRecord]) -> dict:
    return {name: record.to_dict() for name, record in records.items()}


def build_ratio_index(pack_result: PackResult, ratio) -> dict:
    """
    Mapbox sprite index for the variants of one ratio.

    Args:
        pack_result: Layout of a single-ratio atlas
        ratio: Pixel ratio of the variants to list

    Returns:
        {name: {width, height, x, y, pixelRatio}} in name order
    """
    ratio = normalize_ratio(ratio)
    placements: List[PlacementRect] = sorted(
        (p for p in pack_result.placements if p.ratio == ratio), key=lambda p: p.name)
    index = {}
    for p in placements:
        entry = {
            'width': p.width,
            'height': p.height,
            'x': p.x,
            'y': p.y,
            'pixelRatio': ratio,
        }
        meta = p.variant.metadata
        if meta.sdf:
            entry['sdf'] = True
        if meta.content is not None:
            entry['content'] = [c * ratio for c in meta.content]
        index[p.name] = entry
    return index


def write_json(data: dict, path: Path) -> None:
    """Write a manifest document with stable key order."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
        f.write('\n')
    logger.info(f"Manifest saved: {path}")
