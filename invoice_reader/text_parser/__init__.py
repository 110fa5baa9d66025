"""
Invoice Text Parsing Module for Supplier Invoice Reader.

This module turns OCR'd supplier invoice text into a reviewable draft:
    - Metadata recognition through a declarative label table
    - Declared grand total recognition
    - Line item recognition with arithmetic validation
    - Warning synthesis for the review operator
"""

from .draft import ParsedInvoiceItem, ParsedProviderInvoiceDraft
from .label_rules import LabelRule, build_label_rules, build_total_rule
from .parser import ProviderInvoiceTextParser, parse_invoice_text

__all__ = [
    'ParsedInvoiceItem',
    'ParsedProviderInvoiceDraft',
    'LabelRule',
    'build_label_rules',
    'build_total_rule',
    'ProviderInvoiceTextParser',
    'parse_invoice_text'
]
