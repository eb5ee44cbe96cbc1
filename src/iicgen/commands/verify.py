"""Verify the IIC and IICSignature embedded in an invoice."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from ..document import InvoiceDocument
from ..errors import IICError
from ..logging import configure_logging
from ..verify import load_public_key, verify_iic
from .write import add_logging_arguments

LOGGER = logging.getLogger("iicgen.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iicgen verify",
        description="Check an embedded IIC against the invoice and issuer key.",
    )
    parser.add_argument("xml", type=Path, help="Signed invoice XML.")
    parser.add_argument(
        "--public-key",
        required=True,
        type=Path,
        help="PEM public key or certificate of the issuer.",
    )
    add_logging_arguments(parser)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        public_key = load_public_key(args.public_key)
        result = verify_iic(InvoiceDocument.load(args.xml), public_key)
    except IICError as exc:
        LOGGER.error("IIC verification failed for %s: %s", args.xml, exc)
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    print(f"IIC OK: {result.iic}")
    return 0


if __name__ == "__main__":  # pragma: no cover - direct execution
    raise SystemExit(main())
