"""Label printer functionality via the brother_ql command line driver."""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Union

from .config import DispatchConfig
from .converter import CONVERT_CANDIDATES
from .errors import DriverNotFoundError, PrintAdvisory

logger = logging.getLogger(__name__)


def build_print_command(path: Union[str, Path], config: DispatchConfig) -> List[str]:
    return [
        config.driver_command,
        "--backend", config.backend,
        "--model", config.printer_model,
        "--printer", config.device_address,
        "print",
        "--label", config.label_size_code,
        str(path),
    ]


def send_to_printer(path: Union[str, Path], config: DispatchConfig) -> int:
    """Send a raster file to the label printer and wait for the driver.

    The driver's own output is left on the terminal. A non-zero exit
    raises PrintAdvisory; whether that is fatal is up to the caller.
    """
    cmd = build_print_command(path, config)
    logger.info("Printing %s on %s (label %s)", path, config.device_address, config.label_size_code)

    try:
        result = subprocess.run(cmd, check=False)
    except OSError as exc:
        raise DriverNotFoundError(f"Could not run {config.driver_command}: {exc}") from exc

    if result.returncode != 0:
        raise PrintAdvisory(
            f"{config.driver_command} exited with status {result.returncode}",
            returncode=result.returncode,
        )

    logger.info("Successfully sent %s to printer", path)
    return result.returncode


def check_printer_available(config: DispatchConfig) -> dict:
    """Best-effort check that the external tools can be found."""
    driver = shutil.which(config.driver_command)
    if config.convert_command:
        converter = shutil.which(config.convert_command)
    else:
        converter = next(filter(None, map(shutil.which, CONVERT_CANDIDATES)), None)

    return {
        "ok": driver is not None,
        "device": config.device_address,
        "label": config.label_size_code,
        "driver": driver,
        "converter": converter,
    }
