"""Signing device abstraction and a software implementation.

A signer hands out short-lived sessions. Each session is a context manager
so callers release it on every exit path::

    with signer.open() as session:
        signature = session.sign_pkcs1v15(digest)

:class:`KeyFileSigner` keeps the RSA private key in a PEM file instead of a
hardware token. It produces the same PKCS#1 v1.5 signature a device would
return for a SHA-256 digest, which makes it suitable for test environments
and for issuers whose certificate is stored as a file.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

from .errors import SessionInitError, SigningError

LOGGER = logging.getLogger("iicgen.signing")

DIGEST_SIZE = hashlib.sha256().digest_size


class SigningSession:
    """Open connection to a signing device.

    Subclasses implement :meth:`sign_pkcs1v15` and :meth:`close`. ``close``
    must be safe to call more than once.
    """

    def sign_pkcs1v15(self, digest: bytes) -> bytes:
        """Return the PKCS#1 v1.5 RSA signature of a SHA-256 ``digest``."""

        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "SigningSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Signer(Protocol):
    """Capability able to open signing sessions."""

    def open(self) -> SigningSession:
        """Open a session; raises :class:`SessionInitError` on failure."""


@dataclass(frozen=True)
class SignerConfig:
    """Settings for :class:`KeyFileSigner`."""

    key_path: Path
    password: str | None = None

    def __repr__(self) -> str:
        masked = None if self.password is None else "***"
        return f"SignerConfig(key_path={self.key_path!r}, password={masked!r})"


class KeyFileSession(SigningSession):
    """Session backed by an RSA private key held in memory."""

    def __init__(self, private_key: rsa.RSAPrivateKey) -> None:
        self._private_key: rsa.RSAPrivateKey | None = private_key

    @property
    def closed(self) -> bool:
        return self._private_key is None

    @property
    def key_size(self) -> int:
        if self._private_key is None:
            raise SigningError("Signing session is closed")
        return self._private_key.key_size

    def sign_pkcs1v15(self, digest: bytes) -> bytes:
        if self._private_key is None:
            raise SigningError("Signing session is closed")
        if len(digest) != DIGEST_SIZE:
            raise SigningError(
                f"Expected a {DIGEST_SIZE}-byte SHA-256 digest, got {len(digest)} bytes"
            )
        try:
            return self._private_key.sign(
                digest, padding.PKCS1v15(), Prehashed(hashes.SHA256())
            )
        except (ValueError, TypeError) as exc:
            raise SigningError(f"Key refused to sign: {exc}") from exc

    def close(self) -> None:
        if self._private_key is not None:
            LOGGER.debug("Closing key file signing session")
        self._private_key = None


class KeyFileSigner:
    """Signer reading its RSA private key from a PEM file on every open."""

    def __init__(self, config: SignerConfig) -> None:
        self.config = config

    def open(self) -> KeyFileSession:
        path = Path(self.config.key_path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise SessionInitError(f"Cannot read private key '{path}': {exc}") from exc

        password = (
            self.config.password.encode("utf-8")
            if self.config.password is not None
            else None
        )
        try:
            key = serialization.load_pem_private_key(data, password=password)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise SessionInitError(f"Cannot load private key '{path}': {exc}") from exc

        if not isinstance(key, rsa.RSAPrivateKey):
            raise SessionInitError(f"Private key '{path}' is not an RSA key")

        LOGGER.debug("Opened key file signing session (%d-bit key)", key.key_size)
        return KeyFileSession(key)


__all__ = [
    "DIGEST_SIZE",
    "SigningSession",
    "Signer",
    "SignerConfig",
    "KeyFileSession",
    "KeyFileSigner",
]
