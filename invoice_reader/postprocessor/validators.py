"""
Data Validators Module.

This module provides validation functions for:
    - Line item arithmetic (quantity x unit price ~ line total)
    - Tax id shape
    - Declared total versus the sum of line items

Tolerances are read from configuration and can be overridden per instance.
"""

import re
from decimal import Decimal
from typing import Optional, Tuple, Union

from config import get_config
from invoice_reader.utils.logger import get_logger

logger = get_logger(__name__)

Number = Union[Decimal, int, float, str]


def _to_decimal(value: Number) -> Decimal:
    # str() first so 0.01 does not become 0.01000000000000000020816...
    return value if isinstance(value, Decimal) else Decimal(str(value))


class LineItemValidator:
    """
    Validates the arithmetic of a candidate invoice line.

    A line is coherent when ``|line_total - quantity * unit_price|`` is at
    most ``max(absolute_tolerance, relative_tolerance * |line_total|)``.
    The relative part absorbs rounding of unit prices printed with two
    decimals; the absolute part covers tiny totals.

    Example:
        >>> validator = LineItemValidator()
        >>> validator.is_coherent(Decimal("2"), Decimal("3250.00"), Decimal("6500.00"))
        True
        >>> validator.validate(Decimal("2"), Decimal("100"), Decimal("999"))
        (False, 'Line total 999 differs from 2 x 100 = 200')
    """

    def __init__(
        self,
        relative_tolerance: Optional[Number] = None,
        absolute_tolerance: Optional[Number] = None
    ) -> None:
        if relative_tolerance is None:
            relative_tolerance = get_config("parser.items.relative_tolerance", 0.01)
        if absolute_tolerance is None:
            absolute_tolerance = get_config("parser.items.absolute_tolerance", 0.01)

        self.relative_tolerance = _to_decimal(relative_tolerance)
        self.absolute_tolerance = _to_decimal(absolute_tolerance)

        logger.debug(
            f"LineItemValidator initialized "
            f"(relative={self.relative_tolerance}, absolute={self.absolute_tolerance})"
        )

    def tolerance_for(self, line_total: Decimal) -> Decimal:
        """Allowed deviation for a given line total."""
        return max(self.absolute_tolerance, self.relative_tolerance * abs(line_total))

    def validate(
        self,
        quantity: Decimal,
        unit_price: Decimal,
        line_total: Decimal
    ) -> Tuple[bool, str]:
        """
        Validate a candidate line with detailed feedback.

        Args:
            quantity: Parsed quantity, must be > 0.
            unit_price: Parsed unit price, must be >= 0.
            line_total: Parsed line total, must be >= 0.

        Returns:
            Tuple of (is_valid, message).
        """
        if quantity <= 0:
            return False, f"Quantity {quantity} must be positive"
        if unit_price < 0:
            return False, f"Unit price {unit_price} cannot be negative"
        if line_total < 0:
            return False, f"Line total {line_total} cannot be negative"

        expected = quantity * unit_price
        if abs(line_total - expected) > self.tolerance_for(line_total):
            return False, (
                f"Line total {line_total} differs from "
                f"{quantity} x {unit_price} = {expected}"
            )

        return True, "Valid line item"

    def is_coherent(
        self,
        quantity: Decimal,
        unit_price: Decimal,
        line_total: Decimal
    ) -> bool:
        """Check a candidate line without the explanation."""
        valid, _ = self.validate(quantity, unit_price, line_total)
        return valid


class TaxIdValidator:
    """
    Shape-only validation for provider tax ids (CUIT, RUT, RUC, NIT...).

    A valid id is three digit groups of any length joined by hyphens
    (CUIT, RUT, RUC and NIT layouts all differ). An unhyphenated
    11-digit CUIT is reformatted as ``XX-XXXXXXXX-X``. No checksum is
    verified.

    Example:
        >>> TaxIdValidator().normalize("30-71234567-8")
        '30-71234567-8'
        >>> TaxIdValidator().normalize("30712345678")
        '30-71234567-8'
    """

    TAX_ID_PATTERN = re.compile(r'^\d+-\d+-\d+$')
    BARE_CUIT_PATTERN = re.compile(r'^\d{11}$')

    # OCR often renders hyphens as dashes
    DASHES = '‐‑‒–—−'

    def normalize(self, value: Optional[str]) -> Optional[str]:
        """Return the canonical tax id, or None if the value is not id-shaped."""
        if not value:
            return None

        candidate = ''.join(value.split())
        for dash in self.DASHES:
            candidate = candidate.replace(dash, '-')

        if self.BARE_CUIT_PATTERN.match(candidate):
            candidate = f"{candidate[:2]}-{candidate[2:10]}-{candidate[10:]}"

        if self.TAX_ID_PATTERN.match(candidate):
            return candidate

        logger.debug(f"Rejected tax id value: {value}")
        return None

    def is_valid(self, value: Optional[str]) -> bool:
        return self.normalize(value) is not None


class TotalReconciler:
    """
    Compares the declared invoice total with the sum of its line items.

    A mismatch never changes the draft; it only produces a warning for the
    operator, since discounts, taxes and freight routinely make the two
    differ.
    """

    def __init__(self, relative_tolerance: Optional[Number] = None) -> None:
        if relative_tolerance is None:
            relative_tolerance = get_config("parser.total.relative_tolerance", 0.01)
        self.relative_tolerance = _to_decimal(relative_tolerance)

    def check(self, total: Decimal, items_total: Decimal) -> Tuple[bool, str]:
        """
        Check the declared total against the item sum.

        Returns:
            Tuple of (matches, message).
        """
        allowed = max(Decimal("0.01"), self.relative_tolerance * abs(total))
        if abs(total - items_total) > allowed:
            return False, (
                f"Declared total {total} differs from the sum of line items {items_total}"
            )
        return True, "Total matches line items"
