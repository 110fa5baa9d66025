"""
Text Input Handler Module.

This module loads the plain-text output of the external OCR step. It
resolves a file or a directory into text files, validates them and decodes
them with the configured encodings.

Usage:
    from invoice_reader.input_handler import TextInputHandler

    handler = TextInputHandler()
    document = handler.load("factura_0001.txt")
    documents = handler.load_batch("./ocr_output/")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from invoice_reader.utils.logger import get_logger
from invoice_reader.utils.helpers import get_file_extension
from invoice_reader.utils.exceptions import (
    InputError,
    UnsupportedFileTypeError,
    InputFileNotFoundError,
    UndecodableFileError
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class TextDocument:
    """
    A loaded OCR text file.

    Attributes:
        filepath: Original file path
        filename: Original filename
        text: Decoded file content
        encoding: Encoding that decoded the file
    """
    filepath: str
    filename: str
    text: str
    encoding: str

    def __repr__(self) -> str:
        return (
            f"TextDocument(filename='{self.filename}', "
            f"encoding='{self.encoding}', chars={len(self.text)})"
        )


class TextInputHandler:
    """
    Input handler for OCR text files.

    Attributes:
        supported_extensions: Set of accepted file extensions
        encodings: Encodings tried in order when decoding

    Example:
        >>> handler = TextInputHandler()
        >>> files = handler.collect("./ocr_output/")
        >>> document = handler.load(files[0])
        >>> print(document.text[:40])
    """

    DEFAULT_EXTENSIONS = ['.txt', '.text']
    DEFAULT_ENCODINGS = ['utf-8-sig', 'latin-1']

    def __init__(
        self,
        supported_extensions: Optional[List[str]] = None,
        encodings: Optional[List[str]] = None
    ) -> None:
        extensions = supported_extensions or get_config(
            "input.supported_extensions", self.DEFAULT_EXTENSIONS
        )
        self.supported_extensions = {ext.lower() for ext in extensions}
        self.encodings = list(encodings or get_config("input.encodings", self.DEFAULT_ENCODINGS))

        logger.debug(f"TextInputHandler initialized with extensions: {self.supported_extensions}")

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists and has a supported extension.

        Args:
            filepath: Path to the file to validate.

        Returns:
            Path object pointing to the validated file.

        Raises:
            InputFileNotFoundError: If file doesn't exist.
            InputError: If the path is not a regular file.
            UnsupportedFileTypeError: If the extension is not supported.
        """
        path = Path(filepath)

        if not path.exists():
            raise InputFileNotFoundError(str(filepath))

        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        extension = get_file_extension(path)
        if extension not in self.supported_extensions:
            raise UnsupportedFileTypeError(extension, sorted(self.supported_extensions))

        return path

    def collect(self, input_path: Union[str, Path]) -> List[Path]:
        """
        Resolve a file or directory into the text files to process.

        Args:
            input_path: File or directory path.

        Returns:
            Sorted list of file paths. Empty for a directory without
            supported files.

        Raises:
            InputFileNotFoundError: If the path doesn't exist.
            UnsupportedFileTypeError: If a single file has the wrong type.
        """
        path = Path(input_path)

        if not path.exists():
            raise InputFileNotFoundError(str(input_path))

        if path.is_file():
            return [self.validate_file(path)]

        files = sorted(
            p for p in path.iterdir()
            if p.is_file() and get_file_extension(p) in self.supported_extensions
        )

        if not files:
            logger.warning(f"No supported files found in: {path}")
        else:
            logger.info(f"Found {len(files)} files to process")

        return files

    def load(self, filepath: Union[str, Path]) -> TextDocument:
        """
        Load and decode a text file.

        Args:
            filepath: Path to the OCR text file.

        Returns:
            TextDocument with the decoded content. An empty file yields an
            empty text; the parser reports it through warnings.

        Raises:
            UndecodableFileError: If no configured encoding decodes the file.
        """
        path = self.validate_file(filepath)
        raw = path.read_bytes()

        for encoding in self.encodings:
            try:
                text = raw.decode(encoding)
            except (UnicodeDecodeError, LookupError):
                continue

            logger.debug(f"Loaded {path.name} ({encoding}, {len(raw)} bytes)")
            return TextDocument(
                filepath=str(path),
                filename=path.name,
                text=text,
                encoding=encoding
            )

        raise UndecodableFileError(str(path), f"none of {self.encodings} could decode it")

    def load_batch(self, input_path: Union[str, Path]) -> List[TextDocument]:
        """Load every supported file under a path."""
        return [self.load(path) for path in self.collect(input_path)]
