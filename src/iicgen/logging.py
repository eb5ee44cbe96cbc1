"""Logging helpers: console/file configuration and Excel run logs.

Diagnostic messages go through the standard :mod:`logging` tree under the
``iicgen`` logger. Plaintext audit records use the separate ``iicgen.audit``
logger so they can be routed or silenced independently of errors. Each
command run can also be appended to an Excel workbook through
:class:`ExcelLogger`; those rows never contain signatures or plaintext.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Protocol, Sequence

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
RUN_LOG_COLUMNS = ("input", "output", "status", "iic", "message")


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the ``iicgen`` logger for command line use."""

    logger = logging.getLogger("iicgen")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)

        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                log_file,
                maxBytes=1_000_000,
                backupCount=5,
                encoding="utf-8",
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        logger.propagate = False

    logging.captureWarnings(True)
    return logger


class RowLike(Protocol):
    """Protocol for rows serialisable in tabular form."""

    def as_cells(self) -> Iterable[str]:
        """Return the ordered values to write to the sheet."""


@dataclass(slots=True)
class RunRecord:
    """Outcome of one command run."""

    input: str
    output: str
    status: str
    iic: str = ""
    message: str = ""

    def as_cells(self) -> list[str]:
        return [self.input, self.output, self.status, self.iic, self.message]


@dataclass(slots=True)
class ExcelLoggerConfig:
    """Configuration used by :class:`ExcelLogger`."""

    columns: Sequence[str] = RUN_LOG_COLUMNS
    filename: str = "iic-run-log.xlsx"


class ExcelLogger:
    """Append rows to an Excel workbook using :mod:`openpyxl`.

    The workbook is created with the configured header on first use; later
    calls append below the existing rows.
    """

    def __init__(self, config: ExcelLoggerConfig) -> None:
        self.config = config

    def write_rows(self, rows: Iterable[RowLike | Iterable[str]]) -> Path:
        """Persist ``rows`` and return the workbook path."""

        from openpyxl import Workbook, load_workbook

        destination = Path(self.config.filename)
        destination.parent.mkdir(parents=True, exist_ok=True)

        if destination.exists():
            workbook = load_workbook(destination)
            worksheet = workbook.active
        else:
            workbook = Workbook()
            worksheet = workbook.active
            worksheet.title = "Log"
            if self.config.columns:
                worksheet.append(list(self.config.columns))

        for row in rows:
            if hasattr(row, "as_cells"):
                cells = list(row.as_cells())  # type: ignore[union-attr]
            else:
                cells = list(row)  # type: ignore[arg-type]
            worksheet.append(cells)

        workbook.save(destination)
        return destination


__all__ = [
    "LOG_FORMAT",
    "RUN_LOG_COLUMNS",
    "configure_logging",
    "RowLike",
    "RunRecord",
    "ExcelLoggerConfig",
    "ExcelLogger",
]
