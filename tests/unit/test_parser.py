"""Unit tests for the provider invoice text parser."""

import dataclasses
from datetime import date
from decimal import Decimal

import pytest

from invoice_reader.text_parser import ProviderInvoiceTextParser, parse_invoice_text
from invoice_reader.text_parser.parser import NO_ITEMS_WARNING, NO_STRUCTURE_WARNING


SAMPLE_INVOICE = "\n".join([
    "Proveedor: Distribuidora Norte SRL",
    "CUIT: 30-71234567-8",
    "Factura N°: A-0003-00001234",
    "Fecha: 15/01/2026",
    "COD001 Yerba 1kg 2 3.250,00 6.500,00",
    "SKU-77 Azucar 10 1,250.50 12,505.00",
    "Importe Total: $19.005,00",
])


@pytest.fixture
def parser() -> ProviderInvoiceTextParser:
    """Parser with explicit tolerances and no required fields."""
    return ProviderInvoiceTextParser(
        relative_tolerance="0.01",
        absolute_tolerance="0.01",
        reconcile_total=True,
        required_fields=[],
    )


def test_parse_full_invoice(parser: ProviderInvoiceTextParser) -> None:
    """Test metadata, items and total on an invoice mixing number formats."""
    draft = parser.parse(SAMPLE_INVOICE)

    assert draft.provider_name == "Distribuidora Norte SRL"
    assert draft.provider_tax_id == "30-71234567-8"
    assert draft.invoice_number == "A-0003-00001234"
    assert draft.invoice_date == date(2026, 1, 15)
    assert draft.total_amount == Decimal("19005")
    assert len(draft.items) == 2

    first, second = draft.items
    assert first.code == "COD001"
    assert first.description == "Yerba 1kg"
    assert first.quantity == Decimal("2")
    assert first.unit_price == Decimal("3250")
    assert first.line_total == Decimal("6500")
    assert second.code == "SKU-77"
    assert second.description == "Azucar"
    assert second.unit_price == Decimal("1250.5")
    assert second.line_total == Decimal("12505")

    assert draft.warnings == ()
    assert draft.unparsed_lines == ()
    assert draft.currency == "ARS"


def test_parse_numeric_sku(parser: ProviderInvoiceTextParser) -> None:
    """Test that a barcode-like first token is taken as the item code."""
    draft = parser.parse(
        "Factura: B-0004-00000077\n"
        "7791234567890 Galletitas Clasicas 6 450,00 2700,00\n"
        "Total: 2700,00"
    )

    assert len(draft.items) == 1
    item = draft.items[0]
    assert item.code == "7791234567890"
    assert item.description == "Galletitas Clasicas"
    assert item.quantity == Decimal("6")
    assert item.unit_price == Decimal("450")
    assert item.line_total == Decimal("2700")
    assert draft.invoice_number == "B-0004-00000077"


def test_parse_item_without_code(parser: ProviderInvoiceTextParser) -> None:
    """Test an item line without code using US-style numbers."""
    draft = parser.parse(
        "Factura: C-0002-00000015\n"
        "Leche Entera 12 1,250.50 15,006.00\n"
        "Total: 15,006.00"
    )

    assert len(draft.items) == 1
    item = draft.items[0]
    assert item.code is None
    assert item.description == "Leche Entera"
    assert item.quantity == Decimal("12")
    assert item.unit_price == Decimal("1250.50")
    assert item.line_total == Decimal("15006")
    assert draft.total_amount == Decimal("15006")


def test_parse_captures_vat_percent(parser: ProviderInvoiceTextParser) -> None:
    """Test that a VAT marker inside the description is captured."""
    draft = parser.parse(
        "Factura: A-0001-00000098\n"
        "12345678 Arroz Premium IVA 21% 2 1.000,00 2.000,00\n"
        "Total: 2.000,00"
    )

    assert len(draft.items) == 1
    item = draft.items[0]
    assert item.code == "12345678"
    assert item.description == "Arroz Premium IVA 21%"
    assert item.vat_percent == Decimal("21")


def test_parse_discards_incoherent_line_silently(parser: ProviderInvoiceTextParser) -> None:
    """Test that a line failing the arithmetic check is dropped without a warning of its own."""
    line = "Shampoo Neutro 2 100,00 999,00"
    draft = parser.parse(f"Factura: A-0001-00000101\n{line}\nTotal: 999,00")

    assert draft.items == ()
    assert draft.warnings == (NO_ITEMS_WARNING,)
    assert not any("Shampoo" in warning for warning in draft.warnings)
    assert draft.unparsed_lines == (line,)
    assert draft.total_amount == Decimal("999")


def test_parse_text_without_structure(parser: ProviderInvoiceTextParser) -> None:
    """Test that unstructured text yields warnings and no total."""
    draft = parser.parse("Texto sin datos útiles")

    assert draft.items == ()
    assert draft.total_amount is None
    assert NO_ITEMS_WARNING in draft.warnings
    assert NO_STRUCTURE_WARNING in draft.warnings
    assert not draft.has_structure
    assert draft.unparsed_lines == ("Texto sin datos útiles",)


@pytest.mark.parametrize("raw", ["", "   \n\n\t", None])
def test_parse_empty_input(parser: ProviderInvoiceTextParser, raw) -> None:
    """Test that empty input never raises and reports both warnings."""
    draft = parser.parse(raw)

    assert draft.items == ()
    assert draft.warnings == (NO_ITEMS_WARNING, NO_STRUCTURE_WARNING)
    assert draft.unparsed_lines == ()


def test_parse_bytes_input(parser: ProviderInvoiceTextParser) -> None:
    """Test that UTF-8 bytes are accepted."""
    draft = parser.parse(SAMPLE_INVOICE.encode("utf-8"))

    assert draft.invoice_number == "A-0003-00001234"
    assert len(draft.items) == 2


def test_parse_is_deterministic(parser: ProviderInvoiceTextParser) -> None:
    """Test that identical input yields equal drafts."""
    assert parser.parse(SAMPLE_INVOICE) == parser.parse(SAMPLE_INVOICE)
    assert parse_invoice_text(SAMPLE_INVOICE) == parse_invoice_text(SAMPLE_INVOICE)


def test_draft_is_immutable(parser: ProviderInvoiceTextParser) -> None:
    """Test that the returned draft cannot be modified."""
    draft = parser.parse(SAMPLE_INVOICE)

    with pytest.raises(dataclasses.FrozenInstanceError):
        draft.invoice_number = "X"  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        draft.items[0].quantity = Decimal("3")  # type: ignore[misc]
    assert isinstance(draft.items, tuple)


def test_parse_crlf_line_endings(parser: ProviderInvoiceTextParser) -> None:
    """Test Windows and old Mac line endings."""
    draft = parser.parse(SAMPLE_INVOICE.replace("\n", "\r\n"))
    draft_cr = parser.parse(SAMPLE_INVOICE.replace("\n", "\r"))

    assert draft == parser.parse(SAMPLE_INVOICE)
    assert draft_cr == draft


def test_parse_accented_labels(parser: ProviderInvoiceTextParser) -> None:
    """Test accent-tolerant labels with values keeping their accents."""
    draft = parser.parse(
        "Razón Social: Lácteos del Sur SA\n"
        "Fecha de emisión: 02/03/2026\n"
        "Queso Cremoso 1 5.000,00 5.000,00"
    )

    assert draft.provider_name == "Lácteos del Sur SA"
    assert draft.invoice_date == date(2026, 3, 2)
    assert len(draft.items) == 1


def test_first_label_match_wins(parser: ProviderInvoiceTextParser) -> None:
    """Test that each header field is filled once."""
    draft = parser.parse(
        "Proveedor: Primero SA\n"
        "Proveedor: Segundo SA\n"
        "Producto 1 10,00 10,00"
    )

    assert draft.provider_name == "Primero SA"
    assert draft.unparsed_lines == ()


def test_last_total_wins_and_subtotal_ignored(parser: ProviderInvoiceTextParser) -> None:
    """Test that the bottom-most total is kept and total lines never become items."""
    draft = parser.parse(
        "Factura: A-0001-00000200\n"
        "Producto A 2 100,00 200,00\n"
        "Subtotal 1 200,00 200,00\n"
        "Total: 200,00\n"
        "Total a pagar: 242,00"
    )

    assert draft.total_amount == Decimal("242")
    assert draft.unparsed_lines == ()
    assert len(draft.items) == 1
    assert draft.items[0].description == "Producto A"


def test_reconciliation_warning(parser: ProviderInvoiceTextParser) -> None:
    """Test that a total far from the item sum adds a warning but keeps values."""
    draft = parser.parse(
        "Factura: A-0001-00000300\n"
        "Producto 2 100,00 200,00\n"
        "Total: 500,00"
    )

    assert draft.total_amount == Decimal("500")
    assert draft.items_total == Decimal("200")
    assert draft.warnings == (
        "Declared total 500.00 differs from the sum of line items 200.00",
    )


def test_reconciliation_can_be_disabled() -> None:
    """Test that reconciliation is optional."""
    parser = ProviderInvoiceTextParser(reconcile_total=False)
    draft = parser.parse(
        "Factura: A-0001-00000300\n"
        "Producto 2 100,00 200,00\n"
        "Total: 500,00"
    )

    assert draft.warnings == ()


def test_required_fields_warning() -> None:
    """Test that configured required header fields are flagged when missing."""
    parser = ProviderInvoiceTextParser(required_fields=["provider_name", "invoice_date"])
    draft = parser.parse("Factura: A-0001-00000400\nProducto 1 10,00 10,00")

    assert draft.warnings == ("Missing provider name", "Missing invoice date")
    assert draft.missing_fields == ["provider_name", "provider_tax_id", "invoice_date"]


def test_unknown_required_field_is_ignored() -> None:
    """Test that unknown field names in configuration are skipped."""
    parser = ProviderInvoiceTextParser(required_fields=["color"])

    assert parser.required_fields == ()


@pytest.mark.parametrize(
    ("text", "currency"),
    [
        ("Importe Total: US$ 1.500,00", "USD"),
        ("Moneda: USD", "USD"),
        ("Total: € 120,00", "EUR"),
        ("Importe en EUR", "EUR"),
        ("Total: $ 120,00", "ARS"),
    ],
)
def test_currency_detection(parser: ProviderInvoiceTextParser, text: str, currency: str) -> None:
    """Test currency detection with the configured default."""
    assert parser.parse(text).currency == currency


def test_default_currency_override() -> None:
    """Test that the default currency can be overridden."""
    parser = ProviderInvoiceTextParser(default_currency="CLP")

    assert parser.parse("Total: 1.000").currency == "CLP"


def test_bare_date_fallback(parser: ProviderInvoiceTextParser) -> None:
    """Test that an unlabelled date line is used when no labelled date exists."""
    draft = parser.parse(
        "Distribuidora Norte\n"
        "15/01/2026\n"
        "Producto 1 10,00 10,00"
    )

    assert draft.invoice_date == date(2026, 1, 15)
    assert draft.unparsed_lines == ("Distribuidora Norte",)
    assert NO_STRUCTURE_WARNING not in draft.warnings


def test_labelled_date_beats_bare_date(parser: ProviderInvoiceTextParser) -> None:
    """Test that a bare date is not used when a labelled one exists."""
    draft = parser.parse("01/01/2025\nFecha: 15/01/2026")

    assert draft.invoice_date == date(2026, 1, 15)
    assert draft.unparsed_lines == ("01/01/2025",)


@pytest.mark.parametrize(
    ("line", "description", "code"),
    [
        ("Pack 6 2 100,00 200,00", "Pack 6", None),
        ("ABC123 2 10,00 20,00", "ABC123", None),
        ("A1-B2 Tornillo 3/8 100 1,50 150,00", "Tornillo 3/8", "A1-B2"),
        ("Yerba Mate 1 1.234 1.234", "Yerba Mate", None),
    ],
)
def test_parse_item_line_layouts(
    parser: ProviderInvoiceTextParser, line: str, description: str, code
) -> None:
    """Test the code, description and trailing number split."""
    item = parser.parse_item_line(line)

    assert item is not None
    assert item.description == description
    assert item.code == code
    assert item.source_line == line


@pytest.mark.parametrize(
    "line",
    [
        "Yerba 3.250,00 6.500,00",
        "12345 2 10,00 20,00",
        "2 10,00 20,00",
        "Producto 0 10,00 0,00",
        "Producto 2 1,234.567 2.469,13",
        "Producto 2 100,00 200,00 extra",
    ],
)
def test_parse_item_line_rejects(parser: ProviderInvoiceTextParser, line: str) -> None:
    """Test lines that must not produce an item."""
    assert parser.parse_item_line(line) is None


@pytest.mark.parametrize(
    "line",
    [
        "Total general: $19.005,00",
        "TOTAL ARS 19.005,00",
        "Total (IVA incl.): 19.005,00",
    ],
)
def test_total_with_words_before_amount(parser: ProviderInvoiceTextParser, line: str) -> None:
    """Test that the last amount on a total line is used when no amount follows the keyword."""
    draft = parser.parse(f"Factura: A-0001-00000101\n{line}")

    assert draft.total_amount == Decimal("19005")
    assert draft.unparsed_lines == ()


def test_labelled_total_beats_trailing_amount(parser: ProviderInvoiceTextParser) -> None:
    """Test that an amount right after the keyword wins over a later worded total line."""
    draft = parser.parse("Total: 200,00\nTotal general: 500,00")

    assert draft.total_amount == Decimal("200")


def test_subtotal_never_becomes_total(parser: ProviderInvoiceTextParser) -> None:
    """Test that a subtotal line alone yields no declared total."""
    draft = parser.parse("Factura: A-0001-00000101\nSubtotal general: 1.000,00")

    assert draft.total_amount is None


@pytest.mark.parametrize("text", ["Fecha: 05/13/2026", "05/13/2026"])
def test_month_first_date_is_unset(parser: ProviderInvoiceTextParser, text: str) -> None:
    """Test that a date invalid as day/month/year is not reread month first."""
    assert parser.parse(text).invoice_date is None


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("Tax ID: 12-345-6789", "12-345-6789"),
        ("RUC: 1-2-3", "1-2-3"),
        ("NIT 900-123456-7", "900-123456-7"),
    ],
)
def test_non_cuit_tax_ids(parser: ProviderInvoiceTextParser, line: str, expected: str) -> None:
    """Test that tax ids with other group lengths are kept."""
    assert parser.parse(line).provider_tax_id == expected


def test_huge_numeric_token_does_not_raise(parser: ProviderInvoiceTextParser) -> None:
    """Test that a runaway digit sequence is not treated as an amount."""
    draft = parser.parse("Producto 1 1 " + "9" * 1000001 + "\nTotal: " + "9" * 50)

    assert draft.items == ()
    assert draft.total_amount is None
    assert NO_ITEMS_WARNING in draft.warnings
