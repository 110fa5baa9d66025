"""
JSON Exporter Module.

Writes parsed drafts to a single JSON document keyed by source file, the
hand-off format for the review UI.
"""

import json
from pathlib import Path
from typing import Dict, Optional

from config import get_config
from invoice_reader.utils.logger import get_logger
from invoice_reader.utils.helpers import ensure_directory, generate_timestamp
from invoice_reader.utils.exceptions import JsonExportError
from invoice_reader.text_parser.draft import ParsedProviderInvoiceDraft

logger = get_logger(__name__)


class JsonExporter:
    """
    Exports drafts to a JSON file.

    Example:
        >>> exporter = JsonExporter()
        >>> path = exporter.export({"factura.txt": draft}, "drafts.json")
    """

    def __init__(self) -> None:
        self.output_dir = Path(get_config("paths.output_dir", "outputs"))
        self.indent = get_config("output.json.indent", 2)
        self.filename_pattern = get_config(
            "output.json.filename_pattern",
            "invoice_drafts_{timestamp}.json"
        )

    def export(
        self,
        drafts: Dict[str, ParsedProviderInvoiceDraft],
        filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> str:
        """
        Export drafts to a JSON file.

        Args:
            drafts: Drafts keyed by source file name.
            filename: Output filename. If None, auto-generated.
            output_dir: Output directory. If None, uses configured dir.

        Returns:
            Path to the created file.

        Raises:
            JsonExportError: If the file cannot be written.
        """
        filename = filename or self.filename_pattern.format(timestamp=generate_timestamp())
        filepath = Path(output_dir or self.output_dir) / filename

        payload = {
            'documents': [
                {'source_file': source, 'draft': draft.to_dict()}
                for source, draft in drafts.items()
            ]
        }

        try:
            ensure_directory(filepath.parent)
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=self.indent, ensure_ascii=False)
        except (OSError, TypeError) as e:
            logger.error(f"JSON export failed: {e}")
            raise JsonExportError(str(filepath), str(e))

        logger.info(f"JSON file saved: {filepath} ({len(drafts)} drafts)")
        return str(filepath)
