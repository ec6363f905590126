"""
Atlas build pipeline for resprite.
Rasterize -> register -> pack -> assemble -> manifest -> write.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from PIL import Image

from .assembler import AtlasAssembler, save_png
from .config import AtlasConfig, output_paths
from .icon import IconMetadata, IconVariant
from .manifest import build_manifest, build_ratio_index, manifest_to_json, write_json
from .packer import PackResult, ShelfPacker
from .rasterizer import discover_sources, load_icon_metadata, load_sources, rasterize_all
from .registry import IconRegistry


@dataclass
class AtlasBuild:
    """One finished atlas, held in memory until every build has succeeded."""
    pack_result: PackResult
    image: Image.Image = field(repr=False)
    document: dict = field(repr=False)
    ratio: Optional[float] = None  # None for the combined atlas

    def paths(self, output_base: Path) -> Tuple[Path, Path]:
        return output_paths(output_base, self.ratio)


class AtlasBuilder:
    """Runs the full sprite pipeline for one configuration."""

    def __init__(self, config: AtlasConfig):
        self.config = config
        self.packer = ShelfPacker(config.padding, config.max_dimension)
        self.assembler = AtlasAssembler(config.threads)
        self.logger = logging.getLogger(__name__)

    def collect(self, inputs: Iterable[Path],
                metadata: Optional[Mapping[str, IconMetadata]] = None) -> List[IconVariant]:
        """
        Discover, load and rasterize SVG inputs.

        Returns:
            Finalized variants sorted by name, then ratio
        """
        paths = discover_sources(inputs)
        self.logger.info(f"Processing {len(paths)} input SVG files")
        sources = load_sources(paths, self.config.css_override)
        registry = IconRegistry(self.config.ratios)
        rasterize_all(sources, registry, metadata, self.config.threads)
        return registry.finalize()

    def build(self, variants: List[IconVariant]) -> List[AtlasBuild]:
        """
        Pack and assemble variants into one atlas, or one per ratio in split mode.
        """
        if self.config.split_ratios:
            builds = []
            for ratio in self.config.ratios:
                group = [v for v in variants if v.ratio == ratio]
                packer = ShelfPacker(self.config.padding_for(ratio), self.config.max_dimension)
                result = packer.pack(group)
                builds.append(AtlasBuild(result, self.assembler.assemble(result),
                                         build_ratio_index(result, ratio), ratio))
            return builds

        result = self.packer.pack(variants)
        document = manifest_to_json(build_manifest(result))
        return [AtlasBuild(result, self.assembler.assemble(result), document)]

    def write(self, builds: List[AtlasBuild], output_base: Path) -> List[Path]:
        written = []
        for atlas in builds:
            image_path, manifest_path = atlas.paths(output_base)
            write_json(atlas.document, manifest_path)
            save_png(atlas.image, image_path, self.logger)
            written.extend([image_path, manifest_path])
        return written

    def run(self, inputs: Iterable[Path], output_base: Path,
            metadata_path: Optional[Path] = None) -> List[AtlasBuild]:
        """
        Build and write every atlas for the given inputs.

        Nothing is written unless every stage succeeds for every atlas.
        """
        metadata: Dict[str, IconMetadata] = {}
        if metadata_path is not None:
            metadata = load_icon_metadata(metadata_path)
        variants = self.collect(inputs, metadata)
        if not variants:
            raise ValueError("No SVG files found in the given inputs")
        builds = self.build(variants)
        for atlas in builds:
            label = f"@{atlas.ratio}x" if atlas.ratio is not None else "combined"
            self.logger.info(f"Atlas {label} dimensions: "
                             f"{atlas.pack_result.width}x{atlas.pack_result.height}")
        self.write(builds, output_base)
        return builds
