"""
Atlas assembler for resprite.
Copies every placed variant's pixels into one transparent RGBA canvas.
"""

import io
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from PIL import Image

from .errors import AssemblyError
from .icon import BYTES_PER_PIXEL
from .packer import PackResult, PlacementRect

TRANSPARENT = (0, 0, 0, 0)


class AtlasAssembler:
    """Builds the atlas image from a PackResult."""

    def __init__(self, threads: int = 0):
        """
        Initialize the assembler.

        Args:
            threads: Workers used to decode variant buffers, 0 for executor default
        """
        self.threads = threads
        self.logger = logging.getLogger(__name__)

    def assemble(self, pack_result: PackResult) -> Image.Image:
        """
        Create the atlas canvas.

        Args:
            pack_result: Packing layout with the variants to copy

        Returns:
            RGBA image of the packed canvas size

        Raises:
            AssemblyError: if a buffer size or placement is inconsistent
        """
        width, height = pack_result.width, pack_result.height
        self.logger.info(f"Assembling {len(pack_result)} variants into {width}x{height} canvas")
        canvas = Image.new('RGBA', (width, height), TRANSPARENT)
        if not pack_result.placements:
            return canvas

        # placements cover disjoint regions, so tiles decode independently
        with ThreadPoolExecutor(max_workers=self.threads or None) as executor:
            tiles = list(executor.map(lambda p: self._tile(p, width, height),
                                      pack_result.placements))

        for placement, tile in zip(pack_result.placements, tiles):
            # plain paste copies RGBA verbatim, no alpha compositing
            canvas.paste(tile, (placement.x, placement.y))
        return canvas

    def _tile(self, placement: PlacementRect, canvas_width: int, canvas_height: int) -> Image.Image:
        expected = placement.width * placement.height * BYTES_PER_PIXEL
        if len(placement.variant.pixels) != expected:
            raise AssemblyError(
                f"Buffer for {placement.name} @{placement.ratio}x holds "
                f"{len(placement.variant.pixels)} bytes, expected {expected}"
            )
        if (placement.x < 0 or placement.y < 0
                or placement.x + placement.width > canvas_width
                or placement.y + placement.height > canvas_height):
            raise AssemblyError(
                f"Placement of {placement.name} @{placement.ratio}x at "
                f"({placement.x}, {placement.y}) falls outside {canvas_width}x{canvas_height}"
            )
        return Image.frombytes('RGBA', (placement.width, placement.height),
                               placement.variant.pixels)


def assemble(pack_result: PackResult, threads: int = 0) -> Image.Image:
    return AtlasAssembler(threads).assemble(pack_result)


def encode_png(image: Image.Image) -> bytes:
    """Encode an atlas image to PNG bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format='PNG', optimize=False)
    return buffer.getvalue()


def save_png(image: Image.Image, path: Path, logger: Optional[logging.Logger] = None) -> None:
    """Write an atlas image to a PNG file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'wb') as f:
        f.write(encode_png(image))
    (logger or logging.getLogger(__name__)).info(f"Atlas image saved: {path}")
