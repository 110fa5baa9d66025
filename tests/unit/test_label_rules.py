"""Unit tests for the metadata label table."""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List

import pytest

from invoice_reader.postprocessor.normalizers import (
    DateNormalizer,
    NumberNormalizer,
    TextNormalizer,
)
from invoice_reader.postprocessor.validators import TaxIdValidator
from invoice_reader.text_parser.label_rules import (
    LabelRule,
    build_label_rules,
    build_total_rule,
)


@pytest.fixture
def rules() -> List[LabelRule]:
    """Label table with default normalizers."""
    return build_label_rules(DateNormalizer(), TaxIdValidator())


@pytest.fixture
def total_rule() -> LabelRule:
    """Total rule with the default number normalizer."""
    return build_total_rule(NumberNormalizer())


def apply(rules: List[LabelRule], line: str) -> Dict[str, Any]:
    """Run every rule over one line and collect extracted values."""
    folded = TextNormalizer.fold(line)
    values = {}
    for rule in rules:
        match = rule.match(folded)
        if match is not None:
            values[rule.field] = rule.extract(line, match)
    return values


def test_rule_table_order(rules: List[LabelRule]) -> None:
    """Test that the table covers every header field in order."""
    assert [rule.field for rule in rules] == [
        "provider_name",
        "provider_tax_id",
        "invoice_number",
        "invoice_date",
    ]


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("Proveedor: Distribuidora Norte SRL", "Distribuidora Norte SRL"),
        ("Razón social: Lácteos del Sur SA", "Lácteos del Sur SA"),
        ("RAZON SOCIAL - Molinos Río", "Molinos Río"),
        ("Empresa: Acme", "Acme"),
        ("Vendor: Global Supplies Inc.", "Global Supplies Inc."),
        ("Supplier: Northwind", "Northwind"),
    ],
)
def test_provider_variants(rules: List[LabelRule], line: str, expected: str) -> None:
    """Test provider label variants keep the original spelling of the name."""
    assert apply(rules, line)["provider_name"] == expected


def test_provider_too_short(rules: List[LabelRule]) -> None:
    """Test that a two-character provider name is not accepted."""
    assert apply(rules, "Proveedor: AB")["provider_name"] is None


@pytest.mark.parametrize(
    "line",
    [
        "CUIT: 30-71234567-8",
        "CUIL 30-71234567-8",
        "RUC: 30-71234567-8",
        "NIT - 30-71234567-8",
        "Tax ID: 30-71234567-8",
        "CUIT N° 30712345678",
    ],
)
def test_tax_id_variants(rules: List[LabelRule], line: str) -> None:
    """Test tax id label variants."""
    assert apply(rules, line)["provider_tax_id"] == "30-71234567-8"


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("Factura N°: A-0003-00001234", "A-0003-00001234"),
        ("Factura Nº 0003-00001234", "0003-00001234"),
        ("Factura Nro. 0003-00001234", "0003-00001234"),
        ("Factura: b-0004-00000077", "B-0004-00000077"),
        ("Factura A N° 0003-00001234", "A-0003-00001234"),
        ("Comprobante Nro. 0001-00000456", "0001-00000456"),
        ("Invoice No: 12345", "12345"),
        ("Invoice #: inv-2024-001", "INV-2024-001"),
        ("Invoice number: 98765", "98765"),
    ],
)
def test_invoice_number_variants(rules: List[LabelRule], line: str, expected: str) -> None:
    """Test invoice number label variants; values are upper-cased."""
    assert apply(rules, line)["invoice_number"] == expected


def test_invoice_number_requires_digit(rules: List[LabelRule]) -> None:
    """Test that a value without digits is not an invoice number."""
    assert apply(rules, "Factura: ORIGINAL")["invoice_number"] is None


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("Fecha: 15/01/2026", date(2026, 1, 15)),
        ("Fecha de emisión: 15/01/2026", date(2026, 1, 15)),
        ("Emisión: 05-03-2026", date(2026, 3, 5)),
        ("Date: 01.02.2026", date(2026, 2, 1)),
        ("Issued: 01/02/26", date(2026, 2, 1)),
        ("Fecha: 15 de enero de 2026", date(2026, 1, 15)),
    ],
)
def test_date_variants(rules: List[LabelRule], line: str, expected: date) -> None:
    """Test date label variants, accent-tolerant and day first."""
    assert apply(rules, line)["invoice_date"] == expected


def test_invalid_date_is_unset(rules: List[LabelRule]) -> None:
    """Test that an impossible labelled date is matched but left unset."""
    assert apply(rules, "Fecha: 31/02/2026")["invoice_date"] is None


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("Importe Total: $19.005,00", Decimal("19005.00")),
        ("TOTAL A PAGAR 2.000,00", Decimal("2000.00")),
        ("Grand total: US$ 1,500.00", Decimal("1500.00")),
        ("Total: 15,006.00", Decimal("15006.00")),
        ("Total 2700,00.", Decimal("2700.00")),
    ],
)
def test_total_variants(total_rule: LabelRule, line: str, expected: Decimal) -> None:
    """Test total label variants."""
    folded = TextNormalizer.fold(line)
    match = total_rule.match(folded)

    assert match is not None
    assert total_rule.extract(line, match) == expected


def test_subtotal_is_not_total(total_rule: LabelRule) -> None:
    """Test that a subtotal line does not match the total rule."""
    assert total_rule.match("Subtotal: 1.000,00") is None
