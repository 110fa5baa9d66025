"""
Supplier Invoice Reader - Source Package.

This package turns the plain text of OCR-captured supplier invoices into
structured drafts that an operator reviews before committing them.

Modules:
    - input_handler: OCR text file loading
    - text_parser: Draft model and heuristic invoice text parser
    - postprocessor: Number, date and text normalization, validation
    - output_handler: JSON and Excel output
    - utils: Logging, exceptions and helpers

Architecture:
    Text Input → Text Parser (normalizers, validators) → Output
"""

__version__ = "1.0.0"

__all__ = [
    'input_handler',
    'text_parser',
    'postprocessor',
    'output_handler',
    'utils'
]
