"""Command line entry point: ``label-dispatch [options] FILE``."""

import argparse
import contextlib
import logging
import signal
import sys
from typing import Iterator, List, Optional

from .config import load_config
from .dispatcher import EXIT_FAILURE, dispatch
from .errors import UsageError

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="label-dispatch",
        description="Print an SVG or PNG file on a Brother QL label printer.",
    )
    parser.add_argument("input", nargs="?", help="image to print (.svg is rasterized first)")
    parser.add_argument("--device", dest="device_address", help="printer address, e.g. usb://0x04f9:0x2028")
    parser.add_argument("--label", dest="label_size_code", help="brother_ql label code, e.g. 62x100")
    parser.add_argument("--width", dest="target_width", type=int, help="raster width in pixels")
    parser.add_argument("--height", dest="target_height", type=int, help="raster height in pixels")
    parser.add_argument("--model", dest="printer_model", help="printer model, e.g. QL-570")
    parser.add_argument("--backend", help="brother_ql backend (pyusb, linux_kernel, network)")
    parser.add_argument(
        "--strict",
        dest="strict_print_status",
        action="store_const",
        const=True,
        help="treat a non-zero printer driver status as a failure",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def _raise_exit(signum, _frame):
    raise SystemExit(128 + signum)


@contextlib.contextmanager
def exit_on_signals() -> Iterator[None]:
    """Turn termination signals into SystemExit so cleanup blocks still run."""
    previous = {sig: signal.signal(sig, _raise_exit) for sig in HANDLED_SIGNALS}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    if not args.input:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: an input file is required", file=sys.stderr)
        return EXIT_FAILURE

    overrides = {
        key: getattr(args, key)
        for key in (
            "device_address",
            "label_size_code",
            "target_width",
            "target_height",
            "printer_model",
            "backend",
            "strict_print_status",
        )
    }
    try:
        config = load_config(**overrides)
    except UsageError as exc:
        logger.error("%s", exc)
        return exc.exit_code

    with exit_on_signals():
        return dispatch(args.input, config)


def run() -> None:
    sys.exit(main())
