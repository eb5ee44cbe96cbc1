from __future__ import annotations

import logging
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from iicgen.fields import InvoiceFields
from iicgen.signing import SigningSession

GOLDEN_FIELDS = InvoiceFields(
    tin="123456789",
    issue_date_time="2023-01-01T10:00:00",
    inv_ord_num="1",
    busin_unit_code="BU1",
    tcr_code="TCR1",
    soft_code="SC1",
    tot_price="100.00",
)
GOLDEN_PLAINTEXT = "123456789|2023-01-01T10:00:00|1|BU1|TCR1|SC1|100.00"
GOLDEN_DIGEST_HEX = "9402ff2732afc293a31a0dddab76f1fde1786c86da52f19faaa3cb89a39f324f"
GOLDEN_IIC = "f0a66e3e495927b7534fa40a13ace53d"

INVOICE_XML = """<?xml version='1.0' encoding='UTF-8'?>
<RegisterInvoiceRequest xmlns="https://efi.tax.gov.me/fs/schema" Id="Request" Version="1">
  <Header SendDateTime="2023-01-01T10:00:05" UUID="0f7d1c2a-6c1e-4b7b-9d1c-5d3c2e1f0a9b"/>
  <Invoice BusinUnitCode="BU1" InvOrdNum="1" IssueDateTime="2023-01-01T10:00:00" SoftCode="SC1" TCRCode="TCR1" TotPrice="100.00" TypeOfInv="CASH">
    <Seller IDNum="123456789" IDType="TIN" Name="Prodavnica d.o.o."/>
  </Invoice>
</RegisterInvoiceRequest>
"""


class StubSession(SigningSession):
    """Returns the digest repeated eight times, like a 2048-bit signature."""

    def __init__(self, signer: "StubSigner") -> None:
        self.signer = signer

    def sign_pkcs1v15(self, digest: bytes) -> bytes:
        self.signer.digests.append(digest)
        if self.signer.sign_error is not None:
            raise self.signer.sign_error
        return digest * 8

    def close(self) -> None:
        self.signer.closed += 1


class StubSigner:
    def __init__(self, *, open_error=None, sign_error=None) -> None:
        self.open_error = open_error
        self.sign_error = sign_error
        self.opened = 0
        self.closed = 0
        self.digests: list[bytes] = []

    def open(self) -> StubSession:
        if self.open_error is not None:
            raise self.open_error
        self.opened += 1
        return StubSession(self)


@pytest.fixture(autouse=True)
def _reset_iicgen_logger():
    yield
    logger = logging.getLogger("iicgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def stub_signer() -> StubSigner:
    return StubSigner()


@pytest.fixture
def golden_fields() -> InvoiceFields:
    return GOLDEN_FIELDS


@pytest.fixture
def invoice_path(tmp_path: Path) -> Path:
    path = tmp_path / "invoice.xml"
    path.write_text(INVOICE_XML, encoding="utf-8")
    return path


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def key_path(tmp_path: Path, rsa_key: rsa.RSAPrivateKey) -> Path:
    path = tmp_path / "issuer.pem"
    path.write_bytes(
        rsa_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    return path


@pytest.fixture
def encrypted_key_path(tmp_path: Path, rsa_key: rsa.RSAPrivateKey) -> Path:
    path = tmp_path / "issuer-encrypted.pem"
    path.write_bytes(
        rsa_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.BestAvailableEncryption(b"s3cret"),
        )
    )
    return path


@pytest.fixture
def public_key_path(tmp_path: Path, rsa_key: rsa.RSAPrivateKey) -> Path:
    path = tmp_path / "issuer.pub.pem"
    path.write_bytes(
        rsa_key.public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )
    return path


@pytest.fixture
def ec_key_path(tmp_path: Path) -> Path:
    key = ec.generate_private_key(ec.SECP256R1())
    path = tmp_path / "ec.pem"
    path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    return path
