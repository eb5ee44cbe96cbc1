"""Invoice Identification Code (IIC) generation for fiscal invoices.

The public API covers field extraction, code generation with an injected
signer, and the XML helpers used to embed the result in the invoice.
"""

from .errors import (
    AttributeNotFound,
    DocumentError,
    FieldNotFound,
    HashError,
    IICError,
    SessionInitError,
    SigningError,
    VerificationError,
)
from .fields import InvoiceFields, extract_fields
from .generator import IICGenerator, IICResult, build_plaintext, generate_iic

__all__ = [
    "cli",
    "commands",
    "document",
    "errors",
    "fields",
    "generator",
    "logging",
    "pipeline",
    "signing",
    "verify",
    "AttributeNotFound",
    "DocumentError",
    "FieldNotFound",
    "HashError",
    "IICError",
    "SessionInitError",
    "SigningError",
    "VerificationError",
    "InvoiceFields",
    "extract_fields",
    "IICGenerator",
    "IICResult",
    "build_plaintext",
    "generate_iic",
]
