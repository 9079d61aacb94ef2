"""Command line entry point: `python -m sidecar`."""

import argparse
import asyncio
import logging
import sys

from sidecar.config import SidecarConfig, get_settings
from sidecar.core.errors import StartupError
from sidecar.infrastructure.ldb_reader import LDBReader
from sidecar.infrastructure.observability import setup_logging
from sidecar.main import Sidecar

logger = logging.getLogger("sidecar")


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="sidecar", description="Read-only HTTP sidecar for the ctlstore LDB",
    )
    parser.add_argument("--bind-addr", default=settings.bind_addr)
    parser.add_argument("--ldb-path", default=settings.ldb_path)
    parser.add_argument(
        "--max-rows", type=int, default=settings.max_rows,
        help="maximum rows a prefix scan may return (0 = unlimited)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_rows < 0:
        parser.error("--max-rows must be >= 0")

    setup_logging(settings.log_level, settings.log_format)
    sidecar = Sidecar(SidecarConfig(
        bind_addr=args.bind_addr,
        reader=LDBReader(args.ldb_path),
        max_rows=args.max_rows,
        read_timeout_seconds=settings.read_timeout_seconds,
        write_timeout_seconds=settings.write_timeout_seconds,
    ))
    try:
        asyncio.run(sidecar.start())
    except StartupError as e:
        logger.error(f"Sidecar failed to start: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
