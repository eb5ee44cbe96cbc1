"""Print the IIC plaintext and its SHA-256 digest without signing."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from ..document import InvoiceDocument
from ..errors import IICError
from ..fields import extract_fields
from ..generator import build_plaintext, digest_plaintext
from ..logging import configure_logging
from .write import add_logging_arguments

LOGGER = logging.getLogger("iicgen.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iicgen plaintext",
        description="Show the values an IIC would be computed from.",
    )
    parser.add_argument("xml", type=Path, help="Invoice XML to inspect.")
    add_logging_arguments(parser)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        fields = extract_fields(InvoiceDocument.load(args.xml))
        plaintext = build_plaintext(fields)
        digest = digest_plaintext(plaintext)
    except IICError as exc:
        LOGGER.error("Cannot build IIC plaintext for %s: %s", args.xml, exc)
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    print(f"Plain IIC: {plaintext}")
    print(f"SHA-256: {digest.hex()}")
    return 0


if __name__ == "__main__":  # pragma: no cover - direct execution
    raise SystemExit(main())
