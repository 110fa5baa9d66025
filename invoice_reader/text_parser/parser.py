"""
Provider Invoice Text Parser Module.

This module provides the ProviderInvoiceTextParser class, which turns the
plain text of an OCR'd supplier invoice into a reviewable draft.

Approach:
    Each non-blank line is classified as a metadata label line, a total
    line, an item line or an ignorable line. Numbers are resolved by the
    NumberNormalizer, so classification never reasons about locale.
    Anything that is not recognized is reported through warnings; parsing
    never raises for text input.
"""

import re
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

from config import get_config
from invoice_reader.utils.logger import get_logger
from invoice_reader.postprocessor.normalizers import (
    DateNormalizer,
    NumberNormalizer,
    TextNormalizer,
)
from invoice_reader.postprocessor.validators import (
    LineItemValidator,
    TaxIdValidator,
    TotalReconciler,
)
from .draft import HEADER_FIELDS, ParsedInvoiceItem, ParsedProviderInvoiceDraft
from .label_rules import (
    BARE_DATE_PATTERN,
    SUBTOTAL_PATTERN,
    LabelRule,
    build_label_rules,
    build_total_fallback_rule,
    build_total_rule,
)

logger = get_logger(__name__)


NO_ITEMS_WARNING = "No line items were recognized"
NO_STRUCTURE_WARNING = (
    "No invoice structure was recognized (provider, tax id, invoice number or date)"
)

FIELD_LABELS = {
    'provider_name': "provider name",
    'provider_tax_id': "provider tax id",
    'invoice_number': "invoice number",
    'invoice_date': "invoice date",
}


class ProviderInvoiceTextParser:
    """
    Heuristic parser for heterogeneous supplier invoices.

    The parser holds only configuration read at construction time, so a
    single instance can be shared between threads.

    Attributes:
        number_normalizer: Resolves "3.250,00" / "1,250.50" style tokens
        date_normalizer: Resolves day-first dates
        item_validator: Checks quantity x unit price against line total
        label_rules: Ordered metadata rule table
        total_rule: Rule for the declared grand total
        total_fallback_rule: Last amount on a total line without a labelled value
        default_currency: Currency used when the text names none
        reconcile_total: Whether to warn when total and item sum differ
        required_fields: Header fields whose absence adds a warning

    Example:
        >>> parser = ProviderInvoiceTextParser()
        >>> draft = parser.parse("Factura: B-0004-00000077\\nTotal: 2700,00")
        >>> draft.invoice_number
        'B-0004-00000077'
        >>> draft.total_amount
        Decimal('2700.00')
    """

    CODE_PATTERN = re.compile(r'^(?=[A-Za-z0-9\-]*\d)[A-Za-z0-9][A-Za-z0-9\-]*$')
    VAT_PATTERN = re.compile(r'(\d{1,2}(?:[.,]\d{1,2})?)\s*%')
    LETTER_PATTERN = re.compile(r'[^\W\d_]')

    def __init__(
        self,
        relative_tolerance: Optional[float] = None,
        absolute_tolerance: Optional[float] = None,
        reconcile_total: Optional[bool] = None,
        required_fields: Optional[Sequence[str]] = None,
        default_currency: Optional[str] = None
    ) -> None:
        """
        Initialize the parser.

        Args:
            relative_tolerance: Item arithmetic tolerance as a fraction of
                the line total. If None, uses config.
            absolute_tolerance: Minimum item arithmetic tolerance. If None,
                uses config.
            reconcile_total: Warn when the declared total differs from the
                item sum. If None, uses config.
            required_fields: Header fields that must be present to avoid a
                warning. If None, uses config.
            default_currency: Currency code when none is detected.
        """
        self.number_normalizer = NumberNormalizer()
        self.date_normalizer = DateNormalizer()
        self.item_validator = LineItemValidator(relative_tolerance, absolute_tolerance)
        self.total_reconciler = TotalReconciler()

        self.label_rules: List[LabelRule] = build_label_rules(
            self.date_normalizer, TaxIdValidator()
        )
        self.total_rule: LabelRule = build_total_rule(self.number_normalizer)
        self.total_fallback_rule: LabelRule = build_total_fallback_rule(self.number_normalizer)

        self.default_currency = default_currency or get_config(
            "parser.currency.default", "ARS"
        )
        self.reconcile_total = reconcile_total if reconcile_total is not None else \
            get_config("parser.total.reconcile", True)
        configured = required_fields if required_fields is not None else \
            get_config("parser.validation.required_fields", [])
        self.required_fields = tuple(f for f in (configured or []) if f in HEADER_FIELDS)

        logger.debug(
            f"ProviderInvoiceTextParser initialized "
            f"(currency={self.default_currency}, required={self.required_fields})"
        )

    def parse(self, raw_text: Union[str, bytes, None]) -> ParsedProviderInvoiceDraft:
        """
        Parse OCR text into a draft.

        This is a total function: any text, including an empty string or
        text that is not an invoice, yields a draft. What could not be
        recognized is reported in ``warnings``.

        Args:
            raw_text: Plain OCR output with any line-ending convention.

        Returns:
            Immutable ParsedProviderInvoiceDraft.
        """
        if isinstance(raw_text, bytes):
            raw_text = raw_text.decode('utf-8', errors='replace')
        if not isinstance(raw_text, str):
            raw_text = ""

        lines = TextNormalizer.split_lines(raw_text)
        folded = [TextNormalizer.fold(line) for line in lines]
        claimed: Set[int] = set()

        # Step 1: metadata labels
        fields = self._extract_metadata(lines, folded, claimed)

        # Step 2: declared total
        total_amount = self._extract_total(lines, folded, claimed)

        # Step 3: unlabelled date fallback
        if fields.get('invoice_date') is None:
            fields['invoice_date'] = self._extract_bare_date(lines, claimed)

        # Step 4: item lines
        items = self._extract_items(lines, claimed)

        draft_fields = {name: fields.get(name) for name in HEADER_FIELDS}
        warnings = self._synthesize_warnings(draft_fields, items, total_amount)

        draft = ParsedProviderInvoiceDraft(
            items=tuple(items),
            total_amount=total_amount,
            currency=self._detect_currency(folded),
            warnings=tuple(warnings),
            unparsed_lines=tuple(
                line for index, line in enumerate(lines) if index not in claimed
            ),
            **draft_fields
        )

        logger.info(
            f"Parsed invoice text: {len(lines)} lines, {len(items)} items, "
            f"{len(draft.missing_fields)} missing header fields, "
            f"{len(warnings)} warnings"
        )
        return draft

    def _extract_metadata(
        self,
        lines: List[str],
        folded: List[str],
        claimed: Set[int]
    ) -> Dict[str, Any]:
        """
        Run the label table over every line.

        A line matched by any label is claimed even when its value fails to
        normalize; a field is filled by its first successful match only.
        """
        fields: Dict[str, Any] = {}

        for index, (line, flat) in enumerate(zip(lines, folded)):
            for rule in self.label_rules:
                match = rule.match(flat)
                if match is None:
                    continue

                claimed.add(index)
                if fields.get(rule.field) is not None:
                    continue

                value = rule.extract(line, match)
                if value is None:
                    logger.debug(f"Label for {rule.field} without usable value: '{line}'")
                    continue
                fields[rule.field] = value

        return fields

    def _extract_total(
        self,
        lines: List[str],
        folded: List[str],
        claimed: Set[int]
    ) -> Optional[Decimal]:
        """
        Find the declared grand total.

        The last qualifying line wins, since the grand total sits at the
        bottom of the document below any partial totals. Every line that
        mentions "total" is claimed so it never becomes an item.

        When no line has the amount right after the keyword, the last
        amount on the last non-subtotal "total" line is used instead.
        """
        total_amount = None
        fallback_amount = None

        for index, (line, flat) in enumerate(zip(lines, folded)):
            if 'total' not in flat.lower():
                continue
            claimed.add(index)

            match = self.total_rule.match(flat)
            value = self.total_rule.extract(line, match) if match else None
            if value is not None:
                total_amount = value
                continue

            if SUBTOTAL_PATTERN.search(flat):
                continue
            amounts = list(self.total_fallback_rule.pattern.finditer(flat))
            if amounts:
                value = self.total_fallback_rule.extract(line, amounts[-1])
                if value is not None:
                    fallback_amount = value

        if total_amount is None and fallback_amount is not None:
            logger.debug(f"Total taken from an unlabelled amount: {fallback_amount}")
            return fallback_amount
        return total_amount

    def _extract_bare_date(self, lines: List[str], claimed: Set[int]):
        for index, line in enumerate(lines):
            if index in claimed or not BARE_DATE_PATTERN.match(line):
                continue
            value = self.date_normalizer.normalize(line)
            if value is not None:
                claimed.add(index)
                return value
        return None

    def _extract_items(self, lines: List[str], claimed: Set[int]) -> List[ParsedInvoiceItem]:
        items = []
        for index, line in enumerate(lines):
            if index in claimed:
                continue
            item = self.parse_item_line(line)
            if item is not None:
                items.append(item)
                claimed.add(index)
        return items

    def parse_item_line(self, line: str) -> Optional[ParsedInvoiceItem]:
        """
        Parse one candidate item line.

        Layout: optional code token (must contain a digit), description
        tokens, then at least three trailing numeric tokens of which the
        last three are quantity, unit price and line total.

        Args:
            line: Trimmed text line.

        Returns:
            ParsedInvoiceItem, or None if the line is not a coherent item.
        """
        tokens = line.split()
        numbers, head = self._split_trailing_numbers(tokens)
        if len(numbers) < 3 or not head:
            return None

        quantity, unit_price, line_total = numbers[-3:]

        code = None
        if len(head) > 1 and self.CODE_PATTERN.match(head[0]):
            code, head = head[0], head[1:]

        description = ' '.join(head)
        if not self.LETTER_PATTERN.search(description):
            return None

        valid, reason = self.item_validator.validate(quantity, unit_price, line_total)
        if not valid:
            logger.debug(f"Discarded item candidate '{line}': {reason}")
            return None

        return ParsedInvoiceItem(
            code=code,
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            line_total=line_total,
            vat_percent=self._extract_vat(description),
            source_line=line
        )

    def _split_trailing_numbers(
        self,
        tokens: List[str]
    ) -> Tuple[List[Decimal], List[str]]:
        """
        Split tokens into the trailing numeric run and the leading text.

        Only the last three numbers are amounts; earlier numbers in the run
        ("Pack 6 2 100,00 200,00") stay in the description.
        """
        numbers: List[Decimal] = []
        index = len(tokens)
        while index > 0:
            value = self.number_normalizer.normalize(tokens[index - 1])
            if value is None:
                break
            numbers.insert(0, value)
            index -= 1

        if len(numbers) < 3:
            return numbers, tokens[:index]
        return numbers[-3:], tokens[:len(tokens) - 3]

    def _extract_vat(self, description: str) -> Optional[Decimal]:
        match = self.VAT_PATTERN.search(description)
        if match is None:
            return None
        return self.number_normalizer.normalize(match.group(1))

    def _detect_currency(self, folded: List[str]) -> str:
        text = ' '.join(folded)
        if re.search(r'US\$|U\$S|\bUSD\b|\bdolares\b', text, re.IGNORECASE):
            return "USD"
        if '€' in text or re.search(r'\bEUR\b|\beuros?\b', text, re.IGNORECASE):
            return "EUR"
        return self.default_currency

    def _synthesize_warnings(
        self,
        fields: Dict[str, Any],
        items: List[ParsedInvoiceItem],
        total_amount: Optional[Decimal]
    ) -> List[str]:
        """
        Build operator diagnostics from what was and wasn't found.

        A missing total is representable in the draft and does not add a
        warning on its own.
        """
        warnings = []

        if not items:
            warnings.append(NO_ITEMS_WARNING)

        if all(fields.get(name) is None for name in HEADER_FIELDS):
            warnings.append(NO_STRUCTURE_WARNING)
        else:
            for name in self.required_fields:
                if fields.get(name) is None:
                    warnings.append(f"Missing {FIELD_LABELS[name]}")

        if self.reconcile_total and total_amount is not None and items:
            items_total = sum((item.line_total for item in items), Decimal("0"))
            matches, message = self.total_reconciler.check(total_amount, items_total)
            if not matches:
                warnings.append(message)

        return warnings


def parse_invoice_text(raw_text: Union[str, bytes, None]) -> ParsedProviderInvoiceDraft:
    """
    Convenience function to parse invoice text with configured defaults.

    Args:
        raw_text: Plain OCR output.

    Returns:
        Parsed draft.
    """
    return ProviderInvoiceTextParser().parse(raw_text)
