"""IIC generation: canonical plaintext, digest, device signature and code."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Iterator

from .errors import HashError, IICError, SessionInitError, SigningError
from .fields import InvoiceFields
from .signing import Signer

LOGGER = logging.getLogger("iicgen.generator")
AUDIT_LOGGER = logging.getLogger("iicgen.audit")

DELIMITER = "|"


@dataclass(frozen=True)
class IICResult:
    """Generated code pair, unpackable as ``iic, iic_signature``."""

    iic: str
    iic_signature: str
    plaintext: str = ""

    def __iter__(self) -> Iterator[str]:
        return iter((self.iic, self.iic_signature))

    def __repr__(self) -> str:
        return f"IICResult(iic={self.iic!r})"


def build_plaintext(fields: InvoiceFields) -> str:
    """Join the invoice values with ``|`` in their declared order.

    Values are used verbatim. A value that itself contains ``|`` makes the
    result ambiguous across field boundaries; the tax authority expects this
    exact format, so no escaping is applied.
    """

    return DELIMITER.join(fields)


def digest_plaintext(plaintext: str) -> bytes:
    """Return the SHA-256 digest of the UTF-8 encoded ``plaintext``."""

    try:
        return hashlib.sha256(plaintext.encode("utf-8")).digest()
    except (UnicodeEncodeError, TypeError) as exc:
        raise HashError(f"Cannot hash IIC plaintext: {exc}") from exc


def iic_from_signature(signature: bytes) -> str:
    """Return the IIC, the lowercase hex MD5 of the device signature."""

    try:
        return hashlib.md5(signature).hexdigest()
    except TypeError as exc:
        raise HashError(f"Cannot hash IIC signature: {exc}") from exc


class IICGenerator:
    """Produce IIC code pairs with an injected :class:`~iicgen.signing.Signer`.

    Each :meth:`generate` call opens its own session, signs exactly once and
    releases the session before returning, whether it succeeds or fails.
    """

    def __init__(
        self,
        signer: Signer,
        *,
        log_plaintext: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self.signer = signer
        self.log_plaintext = log_plaintext
        self.audit_logger = logger or AUDIT_LOGGER

    def generate(self, fields: InvoiceFields) -> IICResult:
        try:
            session = self.signer.open()
        except IICError:
            raise
        except Exception as exc:
            raise SessionInitError(f"Cannot open signing session: {exc}") from exc

        with session:
            plaintext = build_plaintext(fields)
            if self.log_plaintext:
                self.audit_logger.info("Plain IIC: %s", plaintext)

            digest = digest_plaintext(plaintext)
            try:
                signature = bytes(session.sign_pkcs1v15(digest))
            except IICError:
                raise
            except Exception as exc:
                raise SigningError(f"Signing device rejected the digest: {exc}") from exc

        if not signature:
            raise SigningError("Signing device returned an empty signature")

        LOGGER.debug("Generated IIC for invoice %s", fields.inv_ord_num)
        return IICResult(
            iic=iic_from_signature(signature),
            iic_signature=signature.hex(),
            plaintext=plaintext,
        )


def generate_iic(
    signer: Signer, fields: InvoiceFields, *, log_plaintext: bool = False
) -> IICResult:
    """Shortcut for ``IICGenerator(signer).generate(fields)``."""

    return IICGenerator(signer, log_plaintext=log_plaintext).generate(fields)


__all__ = [
    "DELIMITER",
    "IICResult",
    "build_plaintext",
    "digest_plaintext",
    "iic_from_signature",
    "IICGenerator",
    "generate_iic",
]
