"""
Custom Exceptions Module.

This module defines the exceptions used by the outer layers of the invoice
reader (file input, export, strict number parsing). The text parser itself
never raises for text input: absence and rejection are values, and
structural problems are reported as draft warnings.

Exception Hierarchy:
    InvoiceReaderError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── InputFileNotFoundError
    │   └── UndecodableFileError
    ├── ParsingError
    │   └── NumberFormatError
    └── OutputError
        ├── ExportError
        └── JsonExportError
"""


class InvoiceReaderError(Exception):
    """
    Base exception for all invoice reader errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceReaderError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported file type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".pdf", [".txt"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class InputFileNotFoundError(InputError):
    """Raised when an input file or directory cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class UndecodableFileError(InputError):
    """Raised when a text file cannot be decoded with any configured encoding."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Unreadable text file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# PARSING ERRORS
# =============================================================================

class ParsingError(InvoiceReaderError):
    """Base exception for strict parsing helpers."""
    pass


class NumberFormatError(ParsingError):
    """Raised by strict number normalization when a token is not a number."""

    def __init__(self, token: str, reason: str = None):
        message = f"Not a number: '{token}'"
        details = {"token": token, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(InvoiceReaderError):
    """Base exception for output handling errors."""
    pass


class ExportError(OutputError):
    """Raised when the Excel review workbook cannot be written."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to export Excel file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


class JsonExportError(OutputError):
    """Raised when the JSON draft file cannot be written."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to export JSON file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'InvoiceReaderError',
    'InputError',
    'UnsupportedFileTypeError',
    'InputFileNotFoundError',
    'UndecodableFileError',
    'ParsingError',
    'NumberFormatError',
    'OutputError',
    'ExportError',
    'JsonExportError',
]
