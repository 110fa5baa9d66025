"""
Data Normalizers Module.

This module provides normalization functions for:
    - Numeric tokens written in either regional convention
      (``3.250,00`` or ``1,250.50``)
    - Day-first invoice dates
    - Raw OCR text (line splitting, accent folding, value cleanup)

None of the ``normalize`` methods raise on bad input: a token that cannot
be resolved yields ``None`` so callers can treat it as "not a candidate".
"""

import re
import unicodedata
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import List, Optional

from dateutil import parser as date_parser

from config import get_config
from invoice_reader.utils.exceptions import NumberFormatError
from invoice_reader.utils.logger import get_logger

logger = get_logger(__name__)


class NumberNormalizer:
    """
    Resolves an ambiguous numeric token to a canonical Decimal.

    The last separator in the token is the decimal separator when it is
    followed by one or two digits; every earlier separator is a thousands
    grouping separator. A trailing group of exactly three digits is read as
    grouping only when the token uses a single separator character,
    otherwise the token is ambiguous and rejected.

    Example:
        >>> normalizer = NumberNormalizer()
        >>> normalizer.normalize("3.250,00")
        Decimal('3250.00')
        >>> normalizer.normalize("$1,250.50")
        Decimal('1250.50')
        >>> normalizer.normalize("1,234.567") is None
        True
    """

    # Longest first so "US$" is not reduced to "US"
    CURRENCY_MARKERS = ['US$', 'U$S', 'AR$', '$', '€', '£']

    SEPARATORS = '.,'

    # Digits with single separators between them; no leading/trailing separator
    TOKEN_PATTERN = re.compile(r'^\d(?:[.,]?\d)*$')

    # Upper bound on digits in one amount; longer runs are OCR noise
    MAX_DIGITS = 18

    def normalize(self, token: Optional[str]) -> Optional[Decimal]:
        """
        Normalize a numeric token.

        Args:
            token: Raw token such as "6.500,00", "$19.005,00" or "2".

        Returns:
            Decimal value, or None if the token is not a number.
        """
        try:
            return self._resolve(token)
        except NumberFormatError as e:
            logger.debug(f"Rejected numeric token: {e}")
            return None

    def normalize_strict(self, token: Optional[str]) -> Decimal:
        """
        Normalize a numeric token, raising when it cannot be resolved.

        Raises:
            NumberFormatError: If the token is not a number.
        """
        return self._resolve(token)

    def is_numeric(self, token: Optional[str]) -> bool:
        """Check whether a token resolves to a number."""
        return self.normalize(token) is not None

    def _resolve(self, token: Optional[str]) -> Decimal:
        if not isinstance(token, str):
            raise NumberFormatError(repr(token), "not a string")

        cleaned = self._strip_currency(token)
        if not cleaned:
            raise NumberFormatError(token, "empty")
        if not self.TOKEN_PATTERN.match(cleaned):
            raise NumberFormatError(token, "unexpected characters")
        if sum(ch.isdigit() for ch in cleaned) > self.MAX_DIGITS:
            raise NumberFormatError(token[:40], "too many digits")

        positions = [i for i, ch in enumerate(cleaned) if ch in self.SEPARATORS]
        if not positions:
            return Decimal(cleaned)

        last = positions[-1]
        suffix = cleaned[last + 1:]
        kinds = {cleaned[i] for i in positions}

        if len(suffix) <= 2:
            integer_part, fraction = cleaned[:last], suffix
        elif len(suffix) == 3 and len(kinds) == 1:
            integer_part, fraction = cleaned, ''
        else:
            raise NumberFormatError(token, "ambiguous decimal suffix")

        if not self._is_well_grouped(integer_part):
            raise NumberFormatError(token, "malformed digit grouping")

        digits = re.sub(r'[.,]', '', integer_part)
        literal = f"{digits}.{fraction}" if fraction else digits
        try:
            return Decimal(literal)
        except InvalidOperation:
            raise NumberFormatError(token, "invalid decimal literal")

    def _strip_currency(self, token: str) -> str:
        cleaned = token.strip()
        for marker in self.CURRENCY_MARKERS:
            if cleaned.upper().startswith(marker):
                return cleaned[len(marker):].strip()
        return cleaned

    @staticmethod
    def _is_well_grouped(integer_part: str) -> bool:
        """First group 1-3 digits, later groups exactly 3, one grouping char."""
        if len(set(re.findall(r'[.,]', integer_part))) > 1:
            return False

        groups = re.split(r'[.,]', integer_part)
        if len(groups) == 1:
            return True

        if not 1 <= len(groups[0]) <= 3:
            return False
        return all(len(group) == 3 for group in groups[1:])


class DateNormalizer:
    """
    Normalizes day-first invoice date strings to ``datetime.date``.

    ``DD/MM/YYYY`` is tried first (``-`` and ``.`` are accepted as
    separators), then two-digit years, then a day-first dateutil parse
    for written-out dates such as "15 de enero de 2026".

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("15/01/2026")
        datetime.date(2026, 1, 15)
        >>> normalizer.normalize("31/02/2026") is None
        True
    """

    SPANISH_MONTHS = {
        'enero': 'jan', 'ene': 'jan',
        'febrero': 'feb',
        'marzo': 'mar',
        'abril': 'apr', 'abr': 'apr',
        'mayo': 'may',
        'junio': 'jun',
        'julio': 'jul',
        'agosto': 'aug', 'ago': 'aug',
        'septiembre': 'sep', 'setiembre': 'sep', 'set': 'sep',
        'octubre': 'oct',
        'noviembre': 'nov',
        'diciembre': 'dec', 'dic': 'dec',
    }

    # Fixed so a partial date never picks up components from the clock
    _DATEUTIL_DEFAULT = datetime(2000, 1, 1)

    def __init__(self, input_formats: Optional[List[str]] = None) -> None:
        self.input_formats = input_formats or get_config(
            "parser.date.input_formats",
            ["%d/%m/%Y", "%d/%m/%y"]
        )

    def normalize(self, date_str: Optional[str]) -> Optional[date]:
        """
        Normalize a date string.

        Args:
            date_str: Raw date string, e.g. "15/01/2026".

        Returns:
            Parsed date, or None if parsing fails.
        """
        if not date_str:
            return None

        cleaned = ' '.join(date_str.split())

        parsed = self._try_explicit_formats(re.sub(r'[\-.]', '/', cleaned))
        if parsed is None:
            parsed = self._try_dateutil_parser(cleaned)

        if parsed is None:
            logger.debug(f"Could not parse date: {date_str}")
            return None
        return parsed.date()

    def _try_explicit_formats(self, date_str: str) -> Optional[datetime]:
        for fmt in self.input_formats:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue
        return None

    def _try_dateutil_parser(self, date_str: str) -> Optional[datetime]:
        text = TextNormalizer.fold(date_str).lower()

        # Written-out month with a full year only; dateutil reads all-numeric
        # dates month first when day first fails
        if not re.search(r'\d{4}', text) or not re.search(r'[a-z]{3,}', text):
            return None

        text = re.sub(r'\bde\b', ' ', text)
        text = re.sub(
            r'[a-z]+',
            lambda m: self.SPANISH_MONTHS.get(m.group(0), m.group(0)),
            text
        )

        try:
            return date_parser.parse(text, dayfirst=True, default=self._DATEUTIL_DEFAULT)
        except (ValueError, OverflowError):
            return None


@lru_cache(maxsize=1024)
def _fold_char(ch: str) -> str:
    stripped = ''.join(
        c for c in unicodedata.normalize('NFD', ch) if not unicodedata.combining(c)
    )
    return stripped if len(stripped) == 1 else ch


class TextNormalizer:
    """Helpers for preparing raw OCR text for line classification."""

    @staticmethod
    def fold(text: str) -> str:
        """
        Strip accents character by character.

        The result has the same length as the input, so match offsets found
        in the folded text can slice the original and keep its spelling.

        Example:
            >>> TextNormalizer.fold("Emisión Nº")
            'Emision Nº'
        """
        return ''.join(_fold_char(ch) for ch in text)

    @staticmethod
    def split_lines(text: Optional[str]) -> List[str]:
        """Split on any line break, trim, and drop blank lines."""
        if not text:
            return []
        return [line.strip() for line in text.splitlines() if line.strip()]

    @staticmethod
    def clean_value(value: str) -> str:
        """Collapse whitespace and strip separator punctuation from a label value."""
        return ' '.join(value.split()).strip(',;: ')
