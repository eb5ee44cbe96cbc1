"""XML invoice documents backed by :mod:`lxml`."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from lxml import etree

from .errors import DocumentError, FieldNotFound
from .generator import IICResult

INVOICE_NODE = "Invoice"
IIC_ATTRIBUTE = "IIC"
IIC_SIGNATURE_ATTRIBUTE = "IICSignature"


class InvoiceDocument:
    """In-memory invoice tree.

    Elements are looked up by local name so the same code handles bare
    ``<Invoice>`` payloads and namespaced ``RegisterInvoiceRequest``
    envelopes.
    """

    def __init__(self, tree: etree._ElementTree) -> None:
        self.tree = tree

    @classmethod
    def load(cls, path: Path) -> "InvoiceDocument":
        """Parse ``path`` and return the document."""

        try:
            tree = etree.parse(str(path))
        except OSError as exc:
            raise DocumentError(f"Cannot read invoice '{path}': {exc}") from exc
        except etree.XMLSyntaxError as exc:
            raise DocumentError(f"Invalid XML in '{path}': {exc}") from exc
        return cls(tree)

    @classmethod
    def from_bytes(cls, data: bytes) -> "InvoiceDocument":
        try:
            root = etree.fromstring(data)
        except etree.XMLSyntaxError as exc:
            raise DocumentError(f"Invalid XML: {exc}") from exc
        return cls(etree.ElementTree(root))

    @property
    def root(self) -> etree._Element:
        return self.tree.getroot()

    def find(self, name: str) -> etree._Element | None:
        """Return the first element named ``name`` in document order."""

        for element in self.root.iter(etree.Element):
            if etree.QName(element).localname == name:
                return element
        return None

    def set_attribute(self, node: etree._Element, name: str, value: str) -> None:
        """Replace attribute ``name`` on ``node`` with ``value``."""

        node.attrib.pop(name, None)
        node.set(name, value)

    def to_bytes(self) -> bytes:
        root = self.root
        etree.indent(root, space="\t")
        root.tail = None
        return etree.tostring(
            self.tree, xml_declaration=True, encoding="UTF-8"
        )

    def save(self, path: Path) -> Path:
        """Serialise the document to ``path`` with tab indentation.

        The bytes go to a temporary sibling file first and replace
        ``path`` only once fully written, so an interrupted write never
        truncates an existing invoice.
        """

        destination = Path(path)
        data = self.to_bytes()
        temporary: Path | None = None
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            fd, name = tempfile.mkstemp(
                prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
            )
            temporary = Path(name)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            if destination.exists():
                shutil.copymode(destination, temporary)
            else:
                os.chmod(temporary, 0o644)
            os.replace(temporary, destination)
        except OSError as exc:
            if temporary is not None:
                temporary.unlink(missing_ok=True)
            raise DocumentError(f"Cannot write invoice '{destination}': {exc}") from exc
        return destination


def embed_iic(document: InvoiceDocument, result: IICResult) -> None:
    """Store ``result`` as the ``IIC``/``IICSignature`` attributes of ``Invoice``."""

    invoice = document.find(INVOICE_NODE)
    if invoice is None:
        raise FieldNotFound(INVOICE_NODE, IIC_ATTRIBUTE)
    document.set_attribute(invoice, IIC_ATTRIBUTE, result.iic)
    document.set_attribute(invoice, IIC_SIGNATURE_ATTRIBUTE, result.iic_signature)


__all__ = [
    "INVOICE_NODE",
    "IIC_ATTRIBUTE",
    "IIC_SIGNATURE_ATTRIBUTE",
    "InvoiceDocument",
    "embed_iic",
]
