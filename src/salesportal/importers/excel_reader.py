"""
Excel file reader for campaign performance reports.
Reads the first worksheet of an uploaded workbook into header-keyed row dicts.

OOXML workbooks (.xlsx and friends) are read with openpyxl; legacy BIFF
workbooks (.xls) are read with xlrd. Both produce the same row shape.
"""

import logging
import struct
from io import BytesIO
from pathlib import Path
from typing import List, Iterator, Optional, Dict, Any, Union, BinaryIO, Sequence
from zipfile import BadZipFile
from xml.etree.ElementTree import ParseError

import xlrd
from xlrd.compdoc import CompDocError
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

ExcelSource = Union[str, Path, BinaryIO, bytes]

# Compound File Binary signature that starts every BIFF8 workbook
OLE2_SIGNATURE = b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1'


class ExcelReadError(Exception):
    """Raised when the workbook cannot be opened or parsed."""
    pass


class NoWorksheetError(ExcelReadError):
    """Raised when a workbook opens but holds no worksheets."""
    pass


class ExcelReader:
    """Reads campaign report workbooks and yields one dict per data row."""

    SUPPORTED_SUFFIXES = ('.xlsx', '.xlsm', '.xltx', '.xltm', '.xls')
    LEGACY_SUFFIXES = ('.xls',)

    def __init__(self, source: ExcelSource, filename: Optional[str] = None):
        """
        Initialize Excel reader.

        Args:
            source: Path to the workbook, raw bytes, or a binary stream
            filename: Original file name, used for messages and type checks
        """
        self.source = source
        if filename is None and isinstance(source, (str, Path)):
            filename = Path(source).name
        self.filename = filename
        self.workbook = None
        self.worksheet = None
        self.worksheet_name: Optional[str] = None
        self.is_legacy = False
        self.headers: Dict[int, str] = {}
        self.total_rows = 0

    def __enter__(self):
        """Context manager entry - load the workbook."""
        self.load_workbook()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - close the workbook."""
        if self.workbook is None:
            return
        if self.is_legacy:
            self.workbook.release_resources()
        else:
            self.workbook.close()

    def load_workbook(self):
        """Load the workbook and parse the header row of its first sheet."""
        suffix = Path(self.filename).suffix.lower() if self.filename else ""
        if suffix and suffix not in self.SUPPORTED_SUFFIXES:
            raise ExcelReadError(f"Invalid file type: {suffix}")

        content = self._read_content()
        self.is_legacy = suffix in self.LEGACY_SUFFIXES or (
            not suffix and content.startswith(OLE2_SIGNATURE)
        )

        logger.info(f"Loading Excel file: {self.filename or '<stream>'}")
        if self.is_legacy:
            self._load_legacy(content)
        else:
            self._load_ooxml(content)

        self._parse_headers()
        logger.info(f"Loaded worksheet '{self.worksheet_name}' with {len(self.headers)} columns")

    def _read_content(self) -> bytes:
        source = self.source
        try:
            if isinstance(source, (str, Path)):
                path = Path(source)
                if not path.exists():
                    raise ExcelReadError(f"File not found: {path}")
                return path.read_bytes()
            if isinstance(source, (bytes, bytearray)):
                return bytes(source)
            return source.read()
        except OSError as e:
            raise ExcelReadError(f"Failed to read Excel file: {e}") from e

    def _load_ooxml(self, content: bytes):
        try:
            self.workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile, ParseError, OSError, ValueError, KeyError) as e:
            raise ExcelReadError(f"Failed to load Excel file: {e}") from e

        if not self.workbook.worksheets:
            raise NoWorksheetError("The Excel file contains no sheets.")

        # Only the first worksheet is ingested
        self.worksheet = self.workbook.worksheets[0]
        self.worksheet_name = self.worksheet.title

    def _load_legacy(self, content: bytes):
        try:
            self.workbook = xlrd.open_workbook(file_contents=content, on_demand=True)
        except (xlrd.XLRDError, CompDocError, struct.error, OSError, ValueError, IndexError) as e:
            raise ExcelReadError(f"Failed to load Excel file: {e}") from e

        if self.workbook.nsheets == 0:
            raise NoWorksheetError("The Excel file contains no sheets.")

        try:
            self.worksheet = self.workbook.sheet_by_index(0)
        except (xlrd.XLRDError, struct.error, IndexError) as e:
            raise ExcelReadError(f"Failed to read first sheet: {e}") from e
        self.worksheet_name = self.worksheet.name

    def _iter_sheet_rows(self, first_row: int) -> Iterator[Sequence[Any]]:
        """Yield cell values row by row, starting at a 1-based row number."""
        if not self.is_legacy:
            yield from self.worksheet.iter_rows(min_row=first_row, values_only=True)
            return

        for row_idx in range(first_row - 1, self.worksheet.nrows):
            yield [self._legacy_value(cell) for cell in self.worksheet.row(row_idx)]

    def _legacy_value(self, cell: 'xlrd.sheet.Cell') -> Any:
        """Convert an xlrd cell to the value openpyxl would report."""
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        if cell.ctype == xlrd.XL_CELL_NUMBER:
            # BIFF stores every number as a double
            return int(cell.value) if float(cell.value).is_integer() else cell.value
        if cell.ctype == xlrd.XL_CELL_DATE:
            try:
                return xlrd.xldate.xldate_as_datetime(cell.value, self.workbook.datemode)
            except (xlrd.xldate.XLDateError, ValueError, OverflowError):
                return cell.value
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        if cell.ctype == xlrd.XL_CELL_ERROR:
            return None
        return cell.value

    def _parse_headers(self):
        """Map column index to the trimmed header text of the first row."""
        if self.worksheet is None:
            raise ExcelReadError("Workbook not loaded")

        self.headers = {}
        header_row = next(iter(self._iter_sheet_rows(1)), None)
        if header_row is None:
            return

        for col_idx, header in enumerate(header_row):
            if header is None:
                continue
            clean_header = str(header).strip()
            if clean_header:
                self.headers[col_idx] = clean_header
                logger.debug(f"Column {col_idx}: '{clean_header}'")

    def iter_rows(self) -> Iterator[Dict[str, Any]]:
        """Yield data rows as {header: value}; fully blank rows are skipped."""
        if self.worksheet is None:
            raise ExcelReadError("Workbook not loaded")

        if not self.headers:
            return

        for row in self._iter_sheet_rows(2):
            if not any(self._has_content(cell) for cell in row):
                continue

            values = {}
            for col_idx, header in self.headers.items():
                values[header] = row[col_idx] if col_idx < len(row) else None
            yield values

    def read_rows(self) -> List[Dict[str, Any]]:
        """Read every data row of the first worksheet."""
        rows = list(self.iter_rows())
        self.total_rows = len(rows)
        logger.info(f"Read {self.total_rows} data rows from {self.filename or '<stream>'}")
        return rows

    @staticmethod
    def _has_content(cell: Any) -> bool:
        if cell is None:
            return False
        if isinstance(cell, str):
            return bool(cell.strip())
        return True

    def get_file_info(self) -> Dict[str, Any]:
        """Get information about the loaded file."""
        if self.worksheet is None:
            return {}

        return {
            'file_name': self.filename,
            'total_rows': self.total_rows,
            'columns': list(self.headers.values()),
            'worksheet_name': self.worksheet_name,
            'format': 'xls' if self.is_legacy else 'xlsx',
        }


def read_excel_rows(source: ExcelSource, filename: Optional[str] = None) -> List[Dict[str, Any]]:
    """Read the first worksheet of a workbook into a list of row dicts."""
    with ExcelReader(source, filename) as reader:
        return reader.read_rows()
