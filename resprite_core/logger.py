"""
Logging system for resprite.
Handles console logging setup and the per-run report file.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Tuple


def setup_logging(log_level: int = logging.INFO) -> None:
    """Setup basic logging configuration."""
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def write_run_log(log_path: Path, output_base: Path, timestamp: datetime,
                  inputs: Iterable[Path], ratios: Tuple, padding: int,
                  max_dimension: Optional[int], num_icons: int, num_variants: int,
                  canvas_size: Tuple[int, int], fill_ratio: float,
                  process_time: float, error: Optional[str] = None) -> None:
    """
    Write a report for one atlas build.

    Args:
        log_path: Path to log file
        output_base: Base output path of the atlas
        timestamp: Start timestamp
        inputs: Input files and directories
        ratios: Pixel ratios rendered
        padding: Padding in pixels
        max_dimension: Maximum canvas dimension, None if unbounded
        num_icons: Number of logical icons
        num_variants: Number of variants packed
        canvas_size: Final canvas dimensions (width, height)
        fill_ratio: Share of the canvas covered by icon pixels
        process_time: Processing time in seconds
        error: Error message if the build failed
    """
    inputs = [str(p) for p in inputs]
    ratio_text = ", ".join(f"{r}x" for r in ratios)
    log_content = f"""resprite - Atlas Build Log
{'=' * 50}

Build Information:
    Output: {output_base}
    Timestamp: {timestamp.strftime('%Y-%m-%d %H:%M:%S')}
    Status: {"FAILED" if error else "SUCCESS"}

Input Parameters:
    Inputs: {', '.join(inputs) if inputs else '(none)'}
    Pixel Ratios: {ratio_text}
    Padding: {padding} pixels
    Max Canvas Dimension: {max_dimension if max_dimension else 'unbounded'}

Output Information:
    Icons: {num_icons}
    Variants Packed: {num_variants}
    Canvas Size: {canvas_size[0]} x {canvas_size[1]} pixels
    Fill Ratio: {fill_ratio:.1%}

Process Information:
    Processing Time: {process_time:.2f} seconds
    Completion Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}

"""

    if error:
        log_content += f"""Error Information:
    Error: {error}
    Status: FAILED

"""

    try:
        with open(log_path, 'w', encoding='utf-8') as f:
            f.write(log_content)
    except OSError as e:
        logger = logging.getLogger(__name__)
        logger.error(f"Failed to write log file {log_path}: {e}")


def generate_log_filename(output_base: Path) -> str:
    """
    Generate standardized log filename.

    Args:
        output_base: Base output path of the atlas

    Returns:
        Formatted log filename
    """
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{Path(output_base).stem}_{timestamp}.log"
