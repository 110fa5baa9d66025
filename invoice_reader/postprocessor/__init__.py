"""
Post-Processing Module for Supplier Invoice Reader.

This module provides functionality for:
    - Numeric token normalization across regional conventions
    - Day-first date normalization
    - Accent folding and line splitting of OCR text
    - Line item, tax id and total validation
"""

from .normalizers import NumberNormalizer, DateNormalizer, TextNormalizer
from .validators import LineItemValidator, TaxIdValidator, TotalReconciler

__all__ = [
    'NumberNormalizer',
    'DateNormalizer',
    'TextNormalizer',
    'LineItemValidator',
    'TaxIdValidator',
    'TotalReconciler'
]
