"""
Invoice Draft Data Classes.

This module defines the immutable result of one parse call: the draft
header fields, the recovered line items and the operator warnings.
"""

import json
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple


HEADER_FIELDS = ('provider_name', 'provider_tax_id', 'invoice_number', 'invoice_date')


def _decimal_str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


@dataclass(frozen=True)
class ParsedInvoiceItem:
    """
    One recovered invoice line.

    Attributes:
        code: Leading code token containing a digit ("COD001", "SKU-77")
        description: Free text between the code and the trailing numbers
        quantity: Units invoiced, always > 0
        unit_price: Price per unit, always >= 0
        line_total: Line amount, coherent with quantity x unit_price
        vat_percent: VAT rate printed on the line ("IVA 21%"), if any
        source_line: The trimmed text line the item was read from
    """
    description: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal
    code: Optional[str] = None
    vat_percent: Optional[Decimal] = None
    source_line: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'description': self.description,
            'quantity': str(self.quantity),
            'unit_price': str(self.unit_price),
            'line_total': str(self.line_total),
            'vat_percent': _decimal_str(self.vat_percent),
            'source_line': self.source_line,
        }


@dataclass(frozen=True)
class ParsedProviderInvoiceDraft:
    """
    Unvalidated, human-reviewable result of parsing one invoice text.

    Absent fields are None; collections are tuples so the draft cannot be
    mutated after it is returned.

    Attributes:
        provider_name: Supplier name from a "Proveedor:" style label
        provider_tax_id: Hyphenated tax id ("30-71234567-8")
        invoice_number: Upper-cased invoice number ("A-0003-00001234")
        invoice_date: Issue date
        items: Line items in order of appearance
        total_amount: Declared grand total, independent of the item sum
        currency: Detected currency code
        warnings: Diagnostics for the operator, never used for control flow
        unparsed_lines: Lines no rule claimed

    Example:
        >>> draft = ProviderInvoiceTextParser().parse(text)
        >>> draft.invoice_number
        'A-0003-00001234'
        >>> print(draft.to_json())
    """
    provider_name: Optional[str] = None
    provider_tax_id: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[date] = None
    items: Tuple[ParsedInvoiceItem, ...] = ()
    total_amount: Optional[Decimal] = None
    currency: str = "ARS"
    warnings: Tuple[str, ...] = ()
    unparsed_lines: Tuple[str, ...] = ()

    @property
    def header_fields(self) -> Dict[str, Any]:
        """Header fields keyed by name."""
        return {name: getattr(self, name) for name in HEADER_FIELDS}

    @property
    def missing_fields(self) -> List[str]:
        """Names of header fields that were not recovered."""
        return [name for name, value in self.header_fields.items() if value is None]

    @property
    def has_structure(self) -> bool:
        """True when at least one header field was recovered."""
        return len(self.missing_fields) < len(HEADER_FIELDS)

    @property
    def items_total(self) -> Decimal:
        """Sum of the line totals of all items."""
        return sum((item.line_total for item in self.items), Decimal("0"))

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-friendly dictionary.

        Decimals are rendered as strings to keep their exact value and
        dates as ISO-8601.
        """
        return {
            'provider_name': self.provider_name,
            'provider_tax_id': self.provider_tax_id,
            'invoice_number': self.invoice_number,
            'invoice_date': self.invoice_date.isoformat() if self.invoice_date else None,
            'total_amount': _decimal_str(self.total_amount),
            'currency': self.currency,
            'items': [item.to_dict() for item in self.items],
            'items_total': str(self.items_total),
            'warnings': list(self.warnings),
            'unparsed_lines': list(self.unparsed_lines),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def __repr__(self) -> str:
        return (
            f"ParsedProviderInvoiceDraft("
            f"invoice={self.invoice_number}, "
            f"provider={self.provider_name}, "
            f"items={len(self.items)}, "
            f"total={self.total_amount}, "
            f"warnings={len(self.warnings)})"
        )
