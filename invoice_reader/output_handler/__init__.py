"""
Output Handler Module.

Writes parsed drafts to:
    - JSON: hand-off file for the review UI
    - Excel: review workbook with Drafts, Items and Warnings sheets
"""

from .handler import OutputHandler
from .excel_exporter import ExcelExporter
from .json_exporter import JsonExporter

__all__ = [
    'OutputHandler',
    'ExcelExporter',
    'JsonExporter'
]
