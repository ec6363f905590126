"""
resprite Core Package
Builds map sprite atlases: rasterized icon variants packed into one canvas plus a manifest.
"""

from .errors import (AtlasError, DuplicateVariant, MissingRatio, InconsistentVariant,
                     OversizedIcon, CapacityExceeded, RasterizationError, AssemblyError)
from .icon import Bitmap, IconMetadata, IconVariant
from .registry import IconRegistry
from .packer import ShelfPacker, PackResult, PlacementRect, pack
from .assembler import AtlasAssembler, assemble
from .manifest import ManifestBuilder, ManifestRecord, build_manifest
from .config import AtlasConfig

__all__ = [
    'AtlasError',
    'DuplicateVariant',
    'MissingRatio',
    'InconsistentVariant',
    'OversizedIcon',
    'CapacityExceeded',
    'RasterizationError',
    'AssemblyError',
    'Bitmap',
    'IconMetadata',
    'IconVariant',
    'IconRegistry',
    'ShelfPacker',
    'PackResult',
    'PlacementRect',
    'pack',
    'AtlasAssembler',
    'assemble',
    'ManifestBuilder',
    'ManifestRecord',
    'build_manifest',
    'AtlasConfig',
]
