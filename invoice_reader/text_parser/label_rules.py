"""
Label Rules Module.

Metadata fields are recognized through an ordered table of
``LabelRule(field, pattern, normalizer)`` entries. Patterns run against the
accent-folded line with IGNORECASE; the captured ``value`` group is sliced
from the original line so names keep their accents. New label variants are
added to the table, not to the parser's control flow.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Pattern

from invoice_reader.postprocessor.normalizers import (
    DateNormalizer,
    NumberNormalizer,
    TextNormalizer,
)
from invoice_reader.postprocessor.validators import TaxIdValidator


@dataclass(frozen=True)
class LabelRule:
    """
    One label recognizer.

    Attributes:
        field: Draft attribute the rule fills
        pattern: Compiled regex with a named ``value`` group (and optionally
            a ``kind`` group for invoice letter types)
        normalizer: Turns the captured text into the field value, or None
    """
    field: str
    pattern: Pattern[str]
    normalizer: Callable[[str], Any]

    def match(self, folded_line: str) -> Optional['re.Match[str]']:
        return self.pattern.search(folded_line)

    def extract(self, line: str, match: 're.Match[str]') -> Any:
        """Slice the value from the original line and normalize it."""
        raw = line[match.start('value'):match.end('value')]
        kind = match.groupdict().get('kind')
        if kind and not raw.upper().startswith(kind.upper()):
            raw = f"{kind}-{raw}"
        return self.normalizer(raw)


def _label(regex: str) -> Pattern[str]:
    return re.compile(regex, re.IGNORECASE)


PROVIDER_PATTERN = _label(
    r'^(?:proveedor|razon\s+social|empresa|vendor|supplier)\s*[:\-]\s*(?P<value>.+)$'
)

TAX_ID_PATTERN = _label(
    r'\b(?:cuit|cuil|rut|ruc|nit|tax\s*id)\b\.?\s*(?:n[°ºo]\.?\s*)?[:\-]?\s*'
    r'(?P<value>\d[\d\-‐‑‒–—−]*\d)'
)

INVOICE_NUMBER_PATTERN = _label(
    r'\b(?:factura|comprobante|invoice)\b'
    r'(?:\s+(?P<kind>[abcem])\b)?'
    r'(?:\s*(?:numero|number|nro\.?|num\.?|n[°ºo]\.?|#))?'
    r'\s*[:#\-]?\s*'
    r'(?P<value>[a-z0-9][a-z0-9\-/]{3,})'
)

INVOICE_DATE_PATTERN = _label(
    r'\b(?:fecha(?:\s+de\s+emision)?|emision|date|issued?(?:\s+on)?)\b\s*[:\-]?\s*'
    r'(?P<value>\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}'
    r'|\d{1,2}\s+(?:de\s+)?[a-z]{3,}\.?\s+(?:de\s+)?\d{4})'
)

TOTAL_PATTERN = _label(
    r'\b(?:importe\s+total|total\s+a\s+pagar|grand\s+total|total)\b\s*[:\-]?\s*'
    r'(?P<value>(?:us\$|u\$s|\$|€|£)?\s*\d[\d.,]*)'
)

# Any amount on a total line, for "Total general: $ ..." or "TOTAL ARS ..."
AMOUNT_PATTERN = _label(r'(?P<value>(?:us\$|u\$s|\$|€|£)?\s*\d[\d.,]*)')

SUBTOTAL_PATTERN = _label(r'\bsub\s*-?\s*total')

# Bare date on its own line, used when no labelled date exists
BARE_DATE_PATTERN = re.compile(r'^\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}$')


def _provider_name(value: str) -> Optional[str]:
    name = TextNormalizer.clean_value(value)
    return name if len(name) > 2 else None


def _invoice_number(value: str) -> Optional[str]:
    number = value.strip('-/').upper()
    return number if re.search(r'\d', number) else None


def _amount(number_normalizer: NumberNormalizer) -> Callable[[str], Any]:
    def normalize(value: str):
        return number_normalizer.normalize(value.rstrip('.,'))
    return normalize


def build_label_rules(
    date_normalizer: DateNormalizer,
    tax_id_validator: TaxIdValidator
) -> List[LabelRule]:
    """
    Build the ordered metadata rule table.

    Args:
        date_normalizer: Normalizer for "Fecha" values.
        tax_id_validator: Shape validator for "CUIT" values.

    Returns:
        Rules in matching order.
    """
    return [
        LabelRule('provider_name', PROVIDER_PATTERN, _provider_name),
        LabelRule('provider_tax_id', TAX_ID_PATTERN, tax_id_validator.normalize),
        LabelRule('invoice_number', INVOICE_NUMBER_PATTERN, _invoice_number),
        LabelRule('invoice_date', INVOICE_DATE_PATTERN, date_normalizer.normalize),
    ]


def build_total_rule(number_normalizer: NumberNormalizer) -> LabelRule:
    """Rule recognizing the declared grand total line."""
    return LabelRule('total_amount', TOTAL_PATTERN, _amount(number_normalizer))


def build_total_fallback_rule(number_normalizer: NumberNormalizer) -> LabelRule:
    """Rule for the last amount on a total line with words after the keyword."""
    return LabelRule('total_amount', AMOUNT_PATTERN, _amount(number_normalizer))
