from __future__ import annotations

from pathlib import Path

import pytest
from lxml import etree

from iicgen.document import InvoiceDocument, embed_iic
from iicgen.errors import DocumentError, FieldNotFound
from iicgen.generator import IICResult

from conftest import INVOICE_XML


def _invoice_attributes(path: Path) -> list[str]:
    root = etree.parse(str(path)).getroot()
    invoice = next(el for el in root.iter() if etree.QName(el).localname == "Invoice")
    return list(invoice.attrib.keys())


def test_find_ignores_namespaces(invoice_path: Path) -> None:
    document = InvoiceDocument.load(invoice_path)

    seller = document.find("Seller")

    assert seller is not None
    assert seller.get("IDNum") == "123456789"
    assert document.find("Buyer") is None


def test_find_skips_comments() -> None:
    document = InvoiceDocument.from_bytes(b"<Root><!-- note --><Invoice A='1'/></Root>")

    assert document.find("Invoice").get("A") == "1"


def test_embed_twice_keeps_single_attributes(invoice_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "signed.xml"
    document = InvoiceDocument.load(invoice_path)

    embed_iic(document, IICResult(iic="a" * 32, iic_signature="01" * 4))
    document.save(out)
    document = InvoiceDocument.load(out)
    embed_iic(document, IICResult(iic="b" * 32, iic_signature="02" * 4))
    document.save(out)

    attributes = _invoice_attributes(out)
    assert attributes.count("IIC") == 1
    assert attributes.count("IICSignature") == 1
    invoice = InvoiceDocument.load(out).find("Invoice")
    assert invoice.get("IIC") == "b" * 32
    assert invoice.get("IICSignature") == "02020202"


def test_embed_without_invoice_node_fails() -> None:
    document = InvoiceDocument.from_bytes(b"<Root/>")

    with pytest.raises(FieldNotFound):
        embed_iic(document, IICResult(iic="a" * 32, iic_signature="00"))


def test_save_uses_tabs_and_no_trailing_content(invoice_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "nested" / "out.xml"

    InvoiceDocument.load(invoice_path).save(out)

    text = out.read_text(encoding="utf-8")
    assert text.startswith("<?xml version='1.0' encoding='UTF-8'?>")
    assert "\n\t<Header" in text
    assert "\n\t\t<Seller" in text
    assert text.endswith("</RegisterInvoiceRequest>")


def test_load_reports_invalid_xml(tmp_path: Path) -> None:
    path = tmp_path / "broken.xml"
    path.write_text("<Invoice>", encoding="utf-8")

    with pytest.raises(DocumentError, match="broken.xml"):
        InvoiceDocument.load(path)


def test_load_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DocumentError):
        InvoiceDocument.load(tmp_path / "absent.xml")


def test_from_bytes_round_trips_attributes() -> None:
    document = InvoiceDocument.from_bytes(INVOICE_XML.encode("utf-8"))

    assert document.find("Invoice").get("TotPrice") == "100.00"


def test_failed_save_keeps_existing_file(invoice_path: Path, monkeypatch) -> None:
    from iicgen import document as document_module

    before = invoice_path.read_bytes()
    document = InvoiceDocument.load(invoice_path)
    embed_iic(document, IICResult(iic="a" * 32, iic_signature="00"))

    def _disk_full(src, dst):
        raise OSError("No space left on device")

    monkeypatch.setattr(document_module.os, "replace", _disk_full)

    with pytest.raises(DocumentError, match="No space left"):
        document.save(invoice_path)

    assert invoice_path.read_bytes() == before
    assert sorted(p.name for p in invoice_path.parent.iterdir()) == ["invoice.xml"]


def test_save_preserves_existing_file_mode(invoice_path: Path) -> None:
    invoice_path.chmod(0o640)

    InvoiceDocument.load(invoice_path).save(invoice_path)

    assert invoice_path.stat().st_mode & 0o777 == 0o640
