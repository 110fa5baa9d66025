#!/usr/bin/env python3
"""
Supplier Invoice Reader - Main Entry Point.

Reads the plain-text output of an OCR capture step, parses each invoice
into a reviewable draft and writes the drafts to JSON and an Excel review
workbook.

Usage:
    Command Line:
        python main.py --input factura_0001.txt
        python main.py --input ./ocr_output/ --output ./drafts/ --no-excel

    Python:
        from main import run_parsing
        drafts = run_parsing("factura_0001.txt")
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import yaml

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import ConfigurationManager
from invoice_reader.utils.logger import setup_logger_from_config, set_level, get_logger
from invoice_reader.utils.exceptions import InputError, OutputError
from invoice_reader.text_parser import ParsedProviderInvoiceDraft


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Argument list. If None, uses sys.argv.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Supplier Invoice Reader",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Parse a single OCR text file:
        python main.py --input factura_0001.txt

    Parse a directory, JSON only:
        python main.py --input ./ocr_output/ --output ./drafts/ --no-excel
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="OCR text file or directory of text files"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output directory (default: paths.output_dir from config)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--no-excel",
        action="store_true",
        help="Disable Excel review workbook"
    )

    parser.add_argument(
        "--no-json",
        action="store_true",
        help="Disable JSON output"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)
    logger = setup_logger_from_config()

    if args.debug:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = None

    if level is not None:
        set_level(level)

    logger.info("=" * 60)
    logger.info("SUPPLIER INVOICE READER")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")

    return config


def run_parsing(
    input_path: str,
    output_path: Optional[str] = None,
    config_path: Optional[str] = None,
    enable_excel: bool = True,
    enable_json: bool = True
) -> Dict[str, ParsedProviderInvoiceDraft]:
    """
    Run the parsing pipeline over a file or directory.

    Args:
        input_path: Path to an OCR text file or a directory.
        output_path: Output directory. If None, uses config.
        config_path: Optional custom configuration file path.
        enable_excel: Whether to write the Excel review workbook.
        enable_json: Whether to write the JSON file.

    Returns:
        Drafts keyed by source file name, in processing order.

    Raises:
        InputError: If the input path is missing or unsupported.
        OutputError: If an enabled output cannot be written.

    Example:
        >>> drafts = run_parsing("ocr_output/", enable_excel=False)
        >>> for name, draft in drafts.items():
        ...     print(name, draft.invoice_number, draft.warnings)
    """
    logger = get_logger(__name__)

    ConfigurationManager(config_path)

    from invoice_reader.input_handler import TextInputHandler
    from invoice_reader.text_parser import ProviderInvoiceTextParser
    from invoice_reader.output_handler import OutputHandler

    input_handler = TextInputHandler()
    parser = ProviderInvoiceTextParser()

    files_to_process = input_handler.collect(input_path)
    logger.info(f"Processing {len(files_to_process)} files...")

    drafts: Dict[str, ParsedProviderInvoiceDraft] = {}

    for file_path in files_to_process:
        logger.info(f"Processing: {file_path.name}")

        try:
            document = input_handler.load(file_path)
        except InputError as e:
            logger.error(f"Skipping {file_path.name}: {e}")
            continue

        draft = parser.parse(document.text)
        drafts[document.filename] = draft

        logger.info(
            f"  Parsed: Invoice #{draft.invoice_number or 'N/A'}, "
            f"{len(draft.items)} items, {len(draft.warnings)} warnings"
        )
        for warning in draft.warnings:
            logger.warning(f"  {document.filename}: {warning}")

    if drafts and (enable_excel or enable_json):
        logger.info("Generating outputs...")
        output_handler = OutputHandler(json_enabled=enable_json, excel_enabled=enable_excel)
        output_info = output_handler.save(drafts, output_dir=output_path)

        if output_info.get('json_path'):
            logger.info(f"JSON output: {output_info['json_path']}")
        if output_info.get('excel_path'):
            logger.info(f"Excel output: {output_info['excel_path']}")

    return drafts


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Args:
        argv: Argument list. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, 1 for errors, 130 when interrupted).
    """
    args = parse_arguments(argv)

    try:
        initialize_system(args)
        logger = get_logger(__name__)

        drafts = run_parsing(
            input_path=args.input,
            output_path=args.output,
            config_path=args.config,
            enable_excel=not args.no_excel,
            enable_json=not args.no_json
        )

        if not drafts:
            logger.error("No files to process")
            return 1

        logger.info("=" * 60)
        logger.info(f"Parsing complete. Processed {len(drafts)} files.")
        logger.info("=" * 60)

        return 0

    except (InputError, OutputError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
