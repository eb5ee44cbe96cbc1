"""End-to-end IIC writing: load, extract, generate, embed and save."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .document import InvoiceDocument, embed_iic
from .fields import extract_fields
from .generator import IICGenerator, IICResult
from .signing import Signer

LOGGER = logging.getLogger("iicgen.pipeline")


@dataclass
class WriteParams:
    """Parameters for :func:`write_iic`."""

    signer: Signer
    in_file: Path
    out_file: Path
    log_plaintext: bool = False


def write_iic(params: WriteParams) -> IICResult:
    """Generate the IIC for ``params.in_file`` and save it to ``params.out_file``.

    Nothing is written unless generation succeeds, so a failed run leaves
    both the source and any previous output untouched.
    """

    document = InvoiceDocument.load(params.in_file)
    fields = extract_fields(document)

    generator = IICGenerator(params.signer, log_plaintext=params.log_plaintext)
    result = generator.generate(fields)

    embed_iic(document, result)
    destination = document.save(params.out_file)
    LOGGER.info("IIC %s written to %s", result.iic, destination)
    return result


__all__ = ["WriteParams", "write_iic"]
