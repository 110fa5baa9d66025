"""
Input Handler Module for Supplier Invoice Reader.

Loads the plain-text output of the external OCR step:
    - Resolving files and directories
    - Validating file types
    - Decoding with configured encodings
"""

from .handler import TextInputHandler, TextDocument

__all__ = ['TextInputHandler', 'TextDocument']
