"""
Excel Exporter Module.

This module writes parsed drafts to an Excel review workbook using
openpyxl, so an operator can check the extraction side by side with the
paper invoice.

Sheets:
    - Drafts: one row per invoice with header fields and totals
    - Items: one row per recovered line item
    - Warnings: one row per warning
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import openpyxl
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config import get_config
from invoice_reader.utils.logger import get_logger
from invoice_reader.utils.helpers import ensure_directory, generate_timestamp
from invoice_reader.utils.exceptions import ExportError
from invoice_reader.text_parser.draft import ParsedProviderInvoiceDraft

logger = get_logger(__name__)


class ExcelExporter:
    """
    Exports drafts to an Excel workbook.

    Attributes:
        output_dir: Directory for output files
        sheet_name: Title of the main sheet

    Example:
        >>> exporter = ExcelExporter()
        >>> filepath = exporter.export({"factura.txt": draft}, "review.xlsx")
    """

    DRAFT_COLUMNS = [
        ('Source File', 'source_file'),
        ('Provider', 'provider_name'),
        ('Tax ID', 'provider_tax_id'),
        ('Invoice Number', 'invoice_number'),
        ('Invoice Date', 'invoice_date'),
        ('Currency', 'currency'),
        ('Total Amount', 'total_amount'),
        ('Items Total', 'items_total'),
        ('Items', 'item_count'),
        ('Warnings', 'warning_count'),
    ]

    ITEM_COLUMNS = [
        ('Source File', 'source_file'),
        ('Code', 'code'),
        ('Description', 'description'),
        ('Quantity', 'quantity'),
        ('Unit Price', 'unit_price'),
        ('Line Total', 'line_total'),
        ('VAT %', 'vat_percent'),
    ]

    WARNING_COLUMNS = [
        ('Source File', 'source_file'),
        ('Warning', 'warning'),
    ]

    HEADER_COLORS = {
        'drafts': "4472C4",
        'items': "548235",
        'warnings': "C65911",
    }

    def __init__(self) -> None:
        """Initialize the Excel exporter with configuration."""
        self.output_dir = Path(get_config("paths.output_dir", "outputs"))
        self.sheet_name = get_config("output.excel.sheet_name", "Drafts")
        self.filename_pattern = get_config(
            "output.excel.filename_pattern",
            "invoice_drafts_{timestamp}.xlsx"
        )
        logger.debug(f"ExcelExporter initialized (output_dir: {self.output_dir})")

    def export(
        self,
        drafts: Dict[str, ParsedProviderInvoiceDraft],
        filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> str:
        """
        Export drafts to an Excel file.

        Args:
            drafts: Drafts keyed by source file name.
            filename: Output filename. If None, auto-generated.
            output_dir: Output directory. If None, uses configured dir.

        Returns:
            Path to the created Excel file.

        Raises:
            ExportError: If there is nothing to export or writing fails.
        """
        if not drafts:
            raise ExportError("No drafts", "No drafts to export")

        filename = filename or self.filename_pattern.format(timestamp=generate_timestamp())
        filepath = Path(output_dir or self.output_dir) / filename

        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.title = self.sheet_name

        self._write_sheet(sheet, self.DRAFT_COLUMNS, self._draft_rows(drafts), 'drafts')
        self._write_sheet(
            workbook.create_sheet(title="Items"),
            self.ITEM_COLUMNS,
            self._item_rows(drafts),
            'items'
        )
        self._write_sheet(
            workbook.create_sheet(title="Warnings"),
            self.WARNING_COLUMNS,
            self._warning_rows(drafts),
            'warnings'
        )

        try:
            ensure_directory(filepath.parent)
            workbook.save(filepath)
        except OSError as e:
            logger.error(f"Excel export failed: {e}")
            raise ExportError(str(filepath), str(e))

        logger.info(f"Excel file saved: {filepath} ({len(drafts)} drafts)")
        return str(filepath)

    @staticmethod
    def _draft_rows(drafts: Dict[str, ParsedProviderInvoiceDraft]) -> List[Dict[str, Any]]:
        rows = []
        for source, draft in drafts.items():
            data = draft.to_dict()
            data.update({
                'source_file': source,
                'item_count': len(draft.items),
                'warning_count': len(draft.warnings),
            })
            rows.append(data)
        return rows

    @staticmethod
    def _item_rows(drafts: Dict[str, ParsedProviderInvoiceDraft]) -> List[Dict[str, Any]]:
        return [
            dict(item.to_dict(), source_file=source)
            for source, draft in drafts.items()
            for item in draft.items
        ]

    @staticmethod
    def _warning_rows(drafts: Dict[str, ParsedProviderInvoiceDraft]) -> List[Dict[str, Any]]:
        return [
            {'source_file': source, 'warning': warning}
            for source, draft in drafts.items()
            for warning in draft.warnings
        ]

    @staticmethod
    def _cell_value(value: Any) -> Any:
        """Blank for None; OCR control characters stripped from text."""
        if value is None:
            return ''
        if isinstance(value, str):
            return ILLEGAL_CHARACTERS_RE.sub('', value)
        return value

    def _write_sheet(
        self,
        sheet,
        columns: List[Tuple[str, str]],
        rows: List[Dict[str, Any]],
        palette: str
    ) -> None:
        """
        Write a header row and data rows, then size the columns.

        Args:
            sheet: openpyxl Worksheet.
            columns: (header, key) pairs.
            rows: Row dictionaries.
            palette: Key into HEADER_COLORS.
        """
        color = self.HEADER_COLORS[palette]
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        thin = Side(style='thin')
        border = Border(left=thin, right=thin, top=thin, bottom=thin)

        for col, (header_name, _) in enumerate(columns, 1):
            cell = sheet.cell(row=1, column=col, value=header_name)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border

        for row_num, row in enumerate(rows, 2):
            for col, (_, key) in enumerate(columns, 1):
                value = row.get(key)
                cell = sheet.cell(row=row_num, column=col, value=self._cell_value(value))
                cell.border = border

        for col, (header_name, key) in enumerate(columns, 1):
            max_length = max(
                [len(header_name)] + [len(str(row.get(key) or '')) for row in rows]
            )
            sheet.column_dimensions[get_column_letter(col)].width = min(max_length + 2, 60)

        sheet.freeze_panes = 'A2'
