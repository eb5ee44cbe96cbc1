"""Extraction of the invoice values that feed the IIC."""

from __future__ import annotations

from dataclasses import astuple, dataclass, fields
from typing import Iterator, Protocol, Sequence

from .errors import AttributeNotFound, FieldNotFound


class NodeLike(Protocol):
    """Element exposing its attributes by name."""

    def get(self, name: str) -> str | None:
        """Return the attribute value or ``None`` when it is absent."""


class DocumentLike(Protocol):
    """Document able to locate the first element with a given name."""

    def find(self, name: str) -> NodeLike | None:
        """Return the first matching element in document order."""


@dataclass(frozen=True)
class InvoiceFields:
    """The seven invoice values in the order they are concatenated."""

    tin: str
    issue_date_time: str
    inv_ord_num: str
    busin_unit_code: str
    tcr_code: str
    soft_code: str
    tot_price: str

    def __post_init__(self) -> None:
        for item in fields(self):
            if getattr(self, item.name) is None:
                raise TypeError(f"InvoiceFields.{item.name} must not be None")

    def __iter__(self) -> Iterator[str]:
        return iter(self.as_tuple())

    def as_tuple(self) -> tuple[str, ...]:
        return astuple(self)

    @classmethod
    def from_sequence(cls, values: Sequence[str]) -> "InvoiceFields":
        """Build the record from seven values ordered TIN, ..., TotPrice."""

        if len(values) != len(FIELD_LOCATORS):
            raise ValueError(
                f"Expected {len(FIELD_LOCATORS)} invoice values, got {len(values)}"
            )
        return cls(*values)


@dataclass(frozen=True)
class FieldLocator:
    """Where a single :class:`InvoiceFields` value lives in the document."""

    node: str
    attribute: str
    field: str


FIELD_LOCATORS: tuple[FieldLocator, ...] = (
    FieldLocator("Seller", "IDNum", "tin"),
    FieldLocator("Invoice", "IssueDateTime", "issue_date_time"),
    FieldLocator("Invoice", "InvOrdNum", "inv_ord_num"),
    FieldLocator("Invoice", "BusinUnitCode", "busin_unit_code"),
    FieldLocator("Invoice", "TCRCode", "tcr_code"),
    FieldLocator("Invoice", "SoftCode", "soft_code"),
    FieldLocator("Invoice", "TotPrice", "tot_price"),
)


def attribute_of_element(document: DocumentLike, node: str, attribute: str) -> str:
    """Return ``attribute`` of the first ``node`` element in ``document``."""

    element = document.find(node)
    if element is None:
        raise FieldNotFound(node, attribute)
    value = element.get(attribute)
    if value is None:
        raise AttributeNotFound(node, attribute)
    return value


def extract_fields(document: DocumentLike) -> InvoiceFields:
    """Read the IIC input values from ``document``.

    Stops at the first missing element or attribute; the raised error names
    both so the operator can fix the invoice without a debugger.
    """

    values = {
        locator.field: attribute_of_element(document, locator.node, locator.attribute)
        for locator in FIELD_LOCATORS
    }
    return InvoiceFields(**values)


__all__ = [
    "NodeLike",
    "DocumentLike",
    "InvoiceFields",
    "FieldLocator",
    "FIELD_LOCATORS",
    "attribute_of_element",
    "extract_fields",
]
