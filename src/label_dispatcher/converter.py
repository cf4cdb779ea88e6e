"""SVG to raster conversion through ImageMagick."""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Union

from .config import DispatchConfig
from .errors import ConversionError

logger = logging.getLogger(__name__)

# ImageMagick 7 ships `magick`; distributions on 6.x only have `convert`.
CONVERT_CANDIDATES = ("magick", "convert")

PathLike = Union[str, Path]


def resolve_convert_command(config: DispatchConfig) -> str:
    """Return the configured conversion tool or the first one on PATH."""
    if config.convert_command:
        return config.convert_command
    for candidate in CONVERT_CANDIDATES:
        found = shutil.which(candidate)
        if found:
            logger.debug("Using image conversion tool %s", found)
            return found
    raise ConversionError(
        "No image conversion tool found. Install ImageMagick or set LABEL_CONVERT_COMMAND."
    )


def build_convert_command(
    tool: str, source: PathLike, destination: PathLike, config: DispatchConfig
) -> List[str]:
    """Fit the source into the label, fill with background, pad to exact size."""
    geometry = config.dimension_spec
    return [
        tool,
        "-background", config.background,
        str(source),
        "-resize", geometry,
        "-gravity", "center",
        "-extent", geometry,
        "-flatten",
        str(destination),
    ]


def convert_to_raster(source: PathLike, destination: PathLike, config: DispatchConfig) -> None:
    """Rasterize ``source`` into ``destination`` at the configured pixel size.

    Raises ConversionError when the tool is missing or exits non-zero.
    There is no retry: a failing conversion means bad input or a broken setup.
    """
    tool = resolve_convert_command(config)
    cmd = build_convert_command(tool, source, destination, config)
    logger.info("Converting %s to %s raster", source, config.dimension_spec)

    try:
        result = subprocess.run(cmd, check=False)
    except OSError as exc:
        raise ConversionError(f"Could not run {tool}: {exc}") from exc

    if result.returncode != 0:
        raise ConversionError(
            f"Conversion of {source} failed ({tool} exited with status {result.returncode})"
        )
