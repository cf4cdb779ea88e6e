"""Print one image file: rasterize SVG input if needed, then call the driver."""

import contextlib
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from .config import DispatchConfig
from .converter import convert_to_raster
from .errors import DispatchError, PrintAdvisory, UsageError
from .printer import send_to_printer

logger = logging.getLogger(__name__)

VECTOR_SUFFIX = ".svg"

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class PrintRequest:
    input_path: Path
    config: DispatchConfig

    @classmethod
    def create(cls, input_path: Union[str, Path, None], config: DispatchConfig) -> "PrintRequest":
        """Validate the input path; raises UsageError without touching anything."""
        if input_path is None or not str(input_path).strip():
            raise UsageError("An input file path is required.")
        path = Path(input_path)
        if not path.is_file():
            raise UsageError(f"Input file not found: {path}")
        if not os.access(path, os.R_OK):
            raise UsageError(f"Input file is not readable: {path}")
        return cls(path, config)


def is_vector_image(path: Union[str, Path]) -> bool:
    return str(path).lower().endswith(VECTOR_SUFFIX)


@contextlib.contextmanager
def scoped_temp_file(suffix: str = ".png") -> Iterator[Path]:
    """Create a uniquely named temp file and delete it when the block exits."""
    fd, name = tempfile.mkstemp(prefix="label-", suffix=suffix)
    os.close(fd)
    path = Path(name)
    logger.debug("Created temp file %s", path)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("Removed temp file %s", path)


def _print(path: Path, config: DispatchConfig) -> int:
    try:
        send_to_printer(path, config)
    except PrintAdvisory as exc:
        if config.strict_print_status:
            logger.error("Print failed: %s", exc)
            return EXIT_FAILURE
        logger.warning("Printer driver reported a problem (often harmless): %s", exc)
    return EXIT_OK


def dispatch_request(request: PrintRequest) -> int:
    """Run a validated request; errors other than print advisories propagate."""
    if not is_vector_image(request.input_path):
        return _print(request.input_path, request.config)

    with scoped_temp_file() as raster:
        convert_to_raster(request.input_path, raster, request.config)
        return _print(raster, request.config)


def dispatch(input_path: Union[str, Path, None], config: Optional[DispatchConfig] = None) -> int:
    """Print ``input_path`` and return the process exit status.

    0 on success (including a non-fatal driver advisory), 1 on usage
    errors, conversion failures, a missing driver, or a driver failure
    when ``strict_print_status`` is set.
    """
    config = config or DispatchConfig()
    try:
        request = PrintRequest.create(input_path, config)
        return dispatch_request(request)
    except DispatchError as exc:
        logger.error("%s", exc)
        return exc.exit_code
