"""
Spreadsheet importers: workbook reading, column normalization,
numeric coercion and campaign group extraction.
"""

from .excel_reader import ExcelReader, ExcelReadError, NoWorksheetError, read_excel_rows
from .column_normalizer import ColumnNormalizer, to_snake_case, normalize_row
from .numeric import parse_numeric, parse_integer, detect_currency
from .group_extractor import (
    IngestionStrategy,
    LIVE_STRATEGY,
    PRODUCT_STRATEGY,
    collect_base_names,
    extract_live_group,
    extract_product_group,
    find_group_markers,
    get_strategy,
)

__all__ = [
    'ExcelReader',
    'ExcelReadError',
    'NoWorksheetError',
    'read_excel_rows',
    'ColumnNormalizer',
    'to_snake_case',
    'normalize_row',
    'parse_numeric',
    'parse_integer',
    'detect_currency',
    'IngestionStrategy',
    'LIVE_STRATEGY',
    'PRODUCT_STRATEGY',
    'collect_base_names',
    'extract_live_group',
    'extract_product_group',
    'find_group_markers',
    'get_strategy',
]
