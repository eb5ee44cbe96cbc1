"""Check an embedded IIC against the invoice values and the issuer key."""

from __future__ import annotations

import logging
from pathlib import Path

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from cryptography.x509 import load_pem_x509_certificate

from .document import IIC_ATTRIBUTE, IIC_SIGNATURE_ATTRIBUTE, INVOICE_NODE
from .errors import DocumentError, VerificationError
from .fields import DocumentLike, attribute_of_element, extract_fields
from .generator import IICResult, build_plaintext, digest_plaintext, iic_from_signature

LOGGER = logging.getLogger("iicgen.verify")


def load_public_key(path: Path) -> rsa.RSAPublicKey:
    """Load an RSA public key from a PEM public key or certificate file."""

    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise DocumentError(f"Cannot read public key '{path}': {exc}") from exc

    try:
        if b"CERTIFICATE" in data:
            key = load_pem_x509_certificate(data).public_key()
        else:
            key = serialization.load_pem_public_key(data)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise DocumentError(f"Cannot load public key '{path}': {exc}") from exc

    if not isinstance(key, rsa.RSAPublicKey):
        raise DocumentError(f"Public key '{path}' is not an RSA key")
    return key


def verify_iic(document: DocumentLike, public_key: rsa.RSAPublicKey) -> IICResult:
    """Validate the ``IIC`` and ``IICSignature`` stored in ``document``.

    Raises :class:`VerificationError` when the signature does not match the
    invoice values or when the IIC is not derived from the signature.
    """

    fields = extract_fields(document)
    iic = attribute_of_element(document, INVOICE_NODE, IIC_ATTRIBUTE)
    signature_hex = attribute_of_element(document, INVOICE_NODE, IIC_SIGNATURE_ATTRIBUTE)

    try:
        signature = bytes.fromhex(signature_hex)
    except ValueError as exc:
        raise VerificationError(f"IICSignature is not valid hex: {exc}") from exc

    if iic_from_signature(signature) != iic.lower():
        raise VerificationError("IIC does not match the MD5 of IICSignature")

    plaintext = build_plaintext(fields)
    digest = digest_plaintext(plaintext)
    try:
        public_key.verify(signature, digest, padding.PKCS1v15(), Prehashed(hashes.SHA256()))
    except InvalidSignature as exc:
        raise VerificationError(
            "IICSignature does not match the invoice values or the public key"
        ) from exc

    LOGGER.debug("IIC %s verified", iic)
    return IICResult(iic=iic, iic_signature=signature_hex, plaintext=plaintext)


__all__ = ["load_public_key", "verify_iic"]
