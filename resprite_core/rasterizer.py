"""
SVG loading and rasterization for resprite.
Renders every source at every configured pixel ratio.
"""

import io
import json
import logging
import re
import xml.etree.ElementTree as ET
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from PIL import Image

from .errors import RasterizationError
from .icon import Bitmap, IconMetadata
from .registry import IconRegistry

SVG_NS = 'http://www.w3.org/2000/svg'
XLINK_NS = 'http://www.w3.org/1999/xlink'
UTF8_BOM = b'\xef\xbb\xbf'

ET.register_namespace('', SVG_NS)
ET.register_namespace('xlink', XLINK_NS)

_STYLESHEET_PI_RE = re.compile(rb'<\?xml-stylesheet\s+(.*?)\?>', re.DOTALL)
_PSEUDO_ATTR_RE = re.compile(rb'([\w:-]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\')')

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SvgSource:
    """An SVG document ready for rasterization."""
    name: str
    path: Path
    data: bytes = field(repr=False)

    @classmethod
    def load(cls, path: Path, css_override: Optional[Path] = None) -> 'SvgSource':
        """
        Read an SVG file and inline its stylesheet.

        Args:
            path: SVG file, the icon name is its stem
            css_override: Stylesheet used instead of any xml-stylesheet reference

        Raises:
            RasterizationError: if the file or its stylesheet cannot be read
        """
        path = Path(path)
        try:
            data = path.read_bytes()
            if data.startswith(UTF8_BOM):
                data = data[len(UTF8_BOM):]
            data = inline_stylesheet(data, path, css_override)
        except (OSError, ET.ParseError) as e:
            raise RasterizationError(path.stem, path, str(e)) from e
        return cls(path.stem, path, data)


def stylesheet_href(data: bytes) -> Optional[str]:
    """Return the href of the first text/css xml-stylesheet instruction."""
    for match in _STYLESHEET_PI_RE.finditer(data):
        attrs = {}
        for attr in _PSEUDO_ATTR_RE.finditer(match.group(1)):
            value = attr.group(2) if attr.group(2) is not None else attr.group(3)
            attrs[attr.group(1).decode('utf-8')] = value.decode('utf-8')
        if attrs.get('type') != 'text/css':
            continue
        href = attrs.get('href')
        if not href or '..' in href or '\x00' in href:
            continue
        return href
    return None


def inline_stylesheet(data: bytes, path: Path, css_override: Optional[Path] = None) -> bytes:
    """Insert the referenced (or overriding) CSS as the first <style> child of the root."""
    stylesheet = None
    href = stylesheet_href(data)
    if href is not None:
        stylesheet = path.parent / href
        logger.debug(f"{path.name}: found xml-stylesheet {stylesheet}")
    if css_override is not None:
        logger.debug(f"{path.name}: XML stylesheet overridden by {css_override}")
        stylesheet = Path(css_override)
    if stylesheet is None:
        return data

    css = stylesheet.read_text(encoding='utf-8')
    root = ET.fromstring(data)
    style = ET.Element(f'{{{SVG_NS}}}style', {'type': 'text/css'})
    style.text = css
    root.insert(0, style)
    return ET.tostring(root, encoding='utf-8', xml_declaration=False)


def discover_sources(inputs: Iterable[Path]) -> List[Path]:
    """
    Expand input files and directories into SVG paths.

    Directories contribute their *.svg files, not recursively.
    """
    result = []
    for path in map(Path, inputs):
        if path.is_file():
            result.append(path)
        elif path.is_dir():
            result.extend(sorted(p for p in path.glob('*.svg') if p.is_file()))
        else:
            raise FileNotFoundError(f"Input path does not exist: {path}")
    return result


def load_sources(paths: Iterable[Path], css_override: Optional[Path] = None) -> List[SvgSource]:
    sources = [SvgSource.load(p, css_override) for p in paths]
    logger.info(f"Loaded {len(sources)} SVG sources")
    return sources


def load_icon_metadata(path: Path) -> Dict[str, IconMetadata]:
    """
    Read per-icon metadata from a JSON file.

    Expected form: {"name": {"sdf": true, "content": [x0, y0, x1, y1]}}
    """
    with open(path, 'r', encoding='utf-8') as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Icon metadata in {path} must be a JSON object")
    metadata = {}
    for name, entry in raw.items():
        if not isinstance(entry, dict):
            raise ValueError(f"Metadata for icon '{name}' must be a JSON object")
        content = entry.get('content')
        metadata[name] = IconMetadata(
            sdf=bool(entry.get('sdf', False)),
            content=tuple(int(c) for c in content) if content is not None else None,
        )
    return metadata


def rasterize(source: SvgSource, ratio) -> Bitmap:
    """
    Render one SVG source at a pixel ratio.

    Raises:
        RasterizationError: if cairosvg or Pillow cannot handle the document
    """
    try:
        import cairosvg
        png_data = cairosvg.svg2png(bytestring=source.data, scale=ratio, dpi=96)
        with Image.open(io.BytesIO(png_data)) as img:
            rgba = img.convert('RGBA')
            return Bitmap(rgba.width, rgba.height, rgba.tobytes())
    except RasterizationError:
        raise
    except Exception as e:
        raise RasterizationError(source.name, source.path, str(e)) from e


def rasterize_all(sources: List[SvgSource], registry: IconRegistry,
                  metadata: Optional[Mapping[str, IconMetadata]] = None,
                  threads: int = 0) -> None:
    """
    Render every source at every registry ratio and register the results.

    Workers only render; completed bitmaps are registered here, by the
    single consumer of the futures. Returns once every task has finished.

    Args:
        sources: SVG sources to render
        registry: Destination registry, its ratios select the renders
        metadata: Per-name SDF flag and content insets
        threads: Worker count, 0 for executor default
    """
    metadata = metadata or {}
    known = {s.name for s in sources}
    for name in sorted(set(metadata) - known):
        logger.warning(f"Metadata given for unknown icon '{name}'")

    tasks = len(sources) * len(registry.ratios)
    logger.info(f"Rasterizing {len(sources)} icons at ratios {registry.ratios} ({tasks} tasks)")
    with ThreadPoolExecutor(max_workers=threads or None) as executor:
        futures = {
            executor.submit(rasterize, source, ratio): (source, ratio)
            for source in sources
            for ratio in registry.ratios
        }
        try:
            for future in as_completed(futures):
                source, ratio = futures[future]
                registry.register(source.name, ratio, future.result(), metadata.get(source.name))
        except Exception:
            for future in futures:
                future.cancel()
            raise
