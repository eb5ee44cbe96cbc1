"""Generate the IIC of an invoice and write it back into the XML.

Reads ``Seller/@IDNum`` and the ``Invoice`` attributes ``IssueDateTime``,
``InvOrdNum``, ``BusinUnitCode``, ``TCRCode``, ``SoftCode`` and ``TotPrice``,
signs them with the issuer key and stores ``IIC`` and ``IICSignature`` on the
``Invoice`` element.

Usage::

    iicgen write INVOICE.xml --key issuer.pem [--output SIGNED.xml]

The password of an encrypted key is read from ``IICGEN_KEY_PASSWORD``.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence
from zipfile import BadZipFile

from openpyxl.utils.exceptions import InvalidFileException

from ..errors import IICError
from ..logging import ExcelLogger, ExcelLoggerConfig, RunRecord, configure_logging
from ..pipeline import WriteParams, write_iic
from ..signing import KeyFileSigner, SignerConfig

LOGGER = logging.getLogger("iicgen.cli")

PASSWORD_ENV = "IICGEN_KEY_PASSWORD"


def default_output_path(in_file: Path) -> Path:
    """Return ``<stem>_iic.xml`` next to ``in_file``."""

    return in_file.with_name(f"{in_file.stem}_iic{in_file.suffix or '.xml'}")


def add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    parser.add_argument(
        "--log-file", type=Path, help="Also write log messages to this file."
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iicgen write",
        description="Generate IIC and IICSignature and embed them in the invoice.",
    )
    parser.add_argument("xml", type=Path, help="Invoice XML to sign.")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Destination file (default: <name>_iic.xml next to the input).",
    )
    parser.add_argument(
        "--key", required=True, type=Path, help="PEM file with the RSA private key."
    )
    parser.add_argument(
        "--key-password",
        help=(
            f"Private key password. Prefer the {PASSWORD_ENV} environment "
            "variable: values given here are visible to other users in the "
            "process list."
        ),
    )
    parser.add_argument(
        "--log-plaintext",
        action="store_true",
        help="Log the IIC plaintext on the audit logger.",
    )
    parser.add_argument(
        "--run-log",
        type=Path,
        help="Append the outcome of this run to an Excel workbook.",
    )
    add_logging_arguments(parser)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, log_file=args.log_file)

    password = args.key_password
    if password is None:
        password = os.environ.get(PASSWORD_ENV)

    out_file = args.output or default_output_path(args.xml)
    params = WriteParams(
        signer=KeyFileSigner(SignerConfig(key_path=args.key, password=password)),
        in_file=args.xml,
        out_file=out_file,
        log_plaintext=args.log_plaintext,
    )

    try:
        result = write_iic(params)
    except IICError as exc:
        LOGGER.error("IIC generation failed for %s: %s", args.xml, exc)
        print(f"[ERROR] {exc}", file=sys.stderr)
        _log_run(
            args.run_log,
            RunRecord(str(args.xml), str(out_file), exc.code, message=str(exc)),
        )
        return 1

    print(f"IIC: {result.iic}")
    print(f"Invoice saved to: {out_file}")
    _log_run(
        args.run_log,
        RunRecord(str(args.xml), str(out_file), "OK", iic=result.iic),
    )
    return 0


def _log_run(destination: Path | None, record: RunRecord) -> None:
    if destination is None:
        return
    try:
        ExcelLogger(ExcelLoggerConfig(filename=str(destination))).write_rows([record])
    except (OSError, InvalidFileException, BadZipFile) as exc:
        LOGGER.warning("Cannot update run log %s: %s", destination, exc)


if __name__ == "__main__":  # pragma: no cover - direct execution
    raise SystemExit(main())
