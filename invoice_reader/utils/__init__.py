"""
Utility Module for Supplier Invoice Reader.

This module provides common utilities used across all other modules:
    - Logging configuration
    - File operations
    - Custom exceptions
"""

from .logger import setup_logger, get_logger, set_level
from .helpers import ensure_directory, get_file_extension, generate_timestamp

__all__ = [
    'setup_logger',
    'get_logger',
    'set_level',
    'ensure_directory',
    'get_file_extension',
    'generate_timestamp'
]
