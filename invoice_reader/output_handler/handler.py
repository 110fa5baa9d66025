"""
Main Output Handler Module.

This module provides the OutputHandler class that coordinates the draft
outputs (JSON hand-off file and Excel review workbook).
"""

from typing import Any, Dict, Optional

from config import get_config
from invoice_reader.utils.logger import get_logger
from invoice_reader.text_parser.draft import ParsedProviderInvoiceDraft
from .excel_exporter import ExcelExporter
from .json_exporter import JsonExporter

logger = get_logger(__name__)


class OutputHandler:
    """
    Unified output handler for parsed drafts.

    Attributes:
        json_enabled: Whether JSON export is enabled
        excel_enabled: Whether Excel export is enabled

    Example:
        >>> handler = OutputHandler()
        >>> handler.save({"factura.txt": draft})
        {'json_path': 'outputs/...json', 'excel_path': 'outputs/...xlsx'}
    """

    def __init__(
        self,
        json_enabled: Optional[bool] = None,
        excel_enabled: Optional[bool] = None
    ) -> None:
        """
        Initialize the output handler.

        Args:
            json_enabled: Override config for JSON output.
            excel_enabled: Override config for Excel output.
        """
        self.json_enabled = json_enabled if json_enabled is not None else \
            get_config("output.json.enabled", True)
        self.excel_enabled = excel_enabled if excel_enabled is not None else \
            get_config("output.excel.enabled", True)

        self._json_exporter = None
        self._excel_exporter = None

        logger.info(
            f"OutputHandler initialized "
            f"(json={self.json_enabled}, excel={self.excel_enabled})"
        )

    @property
    def json_exporter(self) -> JsonExporter:
        """Get or create the JSON exporter."""
        if self._json_exporter is None:
            self._json_exporter = JsonExporter()
        return self._json_exporter

    @property
    def excel_exporter(self) -> ExcelExporter:
        """Get or create the Excel exporter."""
        if self._excel_exporter is None:
            self._excel_exporter = ExcelExporter()
        return self._excel_exporter

    def save(
        self,
        drafts: Dict[str, ParsedProviderInvoiceDraft],
        json_filename: Optional[str] = None,
        excel_filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Save drafts to all enabled outputs.

        Args:
            drafts: Drafts keyed by source file name, in processing order.
            json_filename: Custom JSON filename (optional).
            excel_filename: Custom Excel filename (optional).
            output_dir: Output directory (optional).

        Returns:
            Dictionary with 'json_path' and 'excel_path' (None when the
            output is disabled).

        Raises:
            JsonExportError: If the JSON file cannot be written.
            ExportError: If the Excel workbook cannot be written.
        """
        output_info = {
            'json_path': None,
            'excel_path': None
        }

        if self.json_enabled:
            output_info['json_path'] = self.json_exporter.export(
                drafts, json_filename, output_dir
            )

        if self.excel_enabled:
            output_info['excel_path'] = self.excel_exporter.export(
                drafts, excel_filename, output_dir
            )

        return output_info
