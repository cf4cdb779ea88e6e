"""Dispatcher configuration loaded from the environment (and ``.env``)."""

import logging
import os
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

from .errors import UsageError

logger = logging.getLogger(__name__)

# Printable area in dots for die-cut labels, as brother_ql defines them.
LABEL_DIMENSIONS: Dict[str, Tuple[int, int]] = {
    "62x100": (696, 1109),
    "62x29": (696, 271),
    "29x90": (306, 991),
    "38x90": (413, 991),
    "17x54": (165, 566),
}

DEFAULT_DEVICE = "usb://0x04f9:0x2028"
DEFAULT_MODEL = "QL-570"
DEFAULT_LABEL = "62x100"
DEFAULT_DIMENSIONS = LABEL_DIMENSIONS[DEFAULT_LABEL]


@dataclass(frozen=True)
class DispatchConfig:
    device_address: str = DEFAULT_DEVICE
    label_size_code: str = DEFAULT_LABEL
    target_width: int = DEFAULT_DIMENSIONS[0]
    target_height: int = DEFAULT_DIMENSIONS[1]
    printer_model: str = DEFAULT_MODEL
    backend: str = "pyusb"
    driver_command: str = "brother_ql"
    convert_command: Optional[str] = None
    background: str = "white"
    strict_print_status: bool = False

    @property
    def target_dimensions(self) -> Tuple[int, int]:
        return self.target_width, self.target_height

    @property
    def dimension_spec(self) -> str:
        """Geometry string understood by ImageMagick, e.g. ``696x1109``."""
        return f"{self.target_width}x{self.target_height}"


def _parse_int(key: str, value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        number = int(value.strip())
    except ValueError:
        raise UsageError(f"{key} must be an integer, got {value!r}")
    if number <= 0:
        raise UsageError(f"{key} must be positive, got {number}")
    return number


def _parse_bool(value: Optional[str]) -> bool:
    """Parse string to bool; default False for missing/invalid."""
    if not value:
        return False
    return value.strip().lower() in ("true", "1", "yes", "on")


def _getenv(key: str) -> Optional[str]:
    value = os.getenv(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def check_dimensions(config: DispatchConfig) -> bool:
    """Warn when the pixel size does not match the label's printable area."""
    expected = LABEL_DIMENSIONS.get(config.label_size_code)
    if expected is None or expected == config.target_dimensions:
        return True
    logger.warning(
        "Target size %s does not match label %s (%dx%d); prints may be cropped",
        config.dimension_spec,
        config.label_size_code,
        expected[0],
        expected[1],
    )
    return False


def load_config(**overrides) -> DispatchConfig:
    """Build a DispatchConfig from defaults, environment and overrides.

    Overrides set to ``None`` are ignored so argparse namespaces can be
    passed through untouched. When no pixel size is given, it follows the
    label code if the code is known.
    """
    load_dotenv()

    label = overrides.get("label_size_code") or _getenv("LABEL_SIZE") or DEFAULT_LABEL
    known = LABEL_DIMENSIONS.get(label, DEFAULT_DIMENSIONS)

    width = _parse_int("LABEL_WIDTH", _getenv("LABEL_WIDTH"))
    height = _parse_int("LABEL_HEIGHT", _getenv("LABEL_HEIGHT"))

    config = DispatchConfig(
        device_address=_getenv("LABEL_PRINTER_DEVICE") or DEFAULT_DEVICE,
        label_size_code=label,
        target_width=width or known[0],
        target_height=height or known[1],
        printer_model=_getenv("LABEL_PRINTER_MODEL") or DEFAULT_MODEL,
        backend=_getenv("LABEL_PRINTER_BACKEND") or "pyusb",
        driver_command=_getenv("LABEL_DRIVER_COMMAND") or "brother_ql",
        convert_command=_getenv("LABEL_CONVERT_COMMAND"),
        background=_getenv("LABEL_BACKGROUND") or "white",
        strict_print_status=_parse_bool(os.getenv("LABEL_STRICT_PRINT_STATUS")),
    )

    changes = {k: v for k, v in overrides.items() if v is not None}
    for key in ("target_width", "target_height"):
        if key in changes:
            changes[key] = _parse_int(key, str(changes[key]))
    if changes:
        config = replace(config, **changes)

    check_dimensions(config)
    logger.debug("Loaded configuration: %s", config)
    return config
