"""Exception hierarchy for IIC generation.

Every failure raised by the library derives from :class:`IICError` so that
command line entry points can translate them into exit codes in a single
place. Extraction errors carry the node and attribute that could not be
resolved; device errors carry the message reported by the signer.
"""

from __future__ import annotations


class IICError(Exception):
    """Base class for every error raised by :mod:`iicgen`."""

    code = "IIC_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def as_cells(self) -> list[str]:
        """Serialise the error for tabular export."""

        return [self.code, self.message]


class ExtractionError(IICError):
    """A required invoice value could not be read from the document."""

    code = "EXTRACTION"

    def __init__(self, message: str, *, node: str, attribute: str) -> None:
        super().__init__(message)
        self.node = node
        self.attribute = attribute


class FieldNotFound(ExtractionError):
    """The element holding a required attribute is missing."""

    code = "FIELD_NOT_FOUND"

    def __init__(self, node: str, attribute: str) -> None:
        super().__init__(
            f"Element '{node}' not found while reading attribute '{attribute}'",
            node=node,
            attribute=attribute,
        )


class AttributeNotFound(ExtractionError):
    """The element exists but lacks the required attribute."""

    code = "ATTRIBUTE_NOT_FOUND"

    def __init__(self, node: str, attribute: str) -> None:
        super().__init__(
            f"Attribute '{attribute}' not found on element '{node}'",
            node=node,
            attribute=attribute,
        )


class DeviceError(IICError):
    """Failure reported by the signing device or its session."""

    code = "DEVICE"


class SessionInitError(DeviceError):
    """The signing session could not be opened."""

    code = "SESSION_INIT"


class SigningError(DeviceError):
    """The signing device rejected the sign operation."""

    code = "SIGNING"


class HashError(IICError):
    """The hashing primitive could not process its input."""

    code = "HASH"


class DocumentError(IICError):
    """The invoice document could not be read or written."""

    code = "DOCUMENT"


class VerificationError(IICError):
    """An embedded IIC or IICSignature does not match the invoice."""

    code = "VERIFICATION"


__all__ = [
    "IICError",
    "ExtractionError",
    "FieldNotFound",
    "AttributeNotFound",
    "DeviceError",
    "SessionInitError",
    "SigningError",
    "HashError",
    "DocumentError",
    "VerificationError",
]
