"""
Lenient numeric coercion for spreadsheet cells.

Cells arrive as numbers, currency-decorated strings ("RM 1,234.50"),
placeholders ("—", "-") or nothing at all. Coercion never raises: any
value that does not yield a finite number becomes 0.
"""

import logging
import math
import re
from typing import Any, Optional

from ..config.vocabulary import CurrencyVocabulary, DEFAULT_CURRENCY_VOCABULARY

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r'[^\d.\-]')
_LEADING_NUMBER = re.compile(r'-?(?:\d+\.?\d*|\.\d+)')
_SEPARATORS = re.compile(r'[,\s]')

# Counts are stored in signed 64-bit INTEGER columns
MAX_STORED_INTEGER = 2 ** 63 - 1
MIN_STORED_INTEGER = -(2 ** 63)


def _strip_currency(text: str, vocabulary: CurrencyVocabulary) -> str:
    for symbol in vocabulary.symbols:
        text = re.sub(re.escape(symbol), '', text, flags=re.IGNORECASE)
    return text


def parse_numeric(
    value: Any,
    field_name: str = "value",
    vocabulary: Optional[CurrencyVocabulary] = None,
) -> float:
    """
    Coerce a cell value to a finite float.

    Args:
        value: Raw cell value
        field_name: Used only for debug logging
        vocabulary: Currency symbols to strip (defaults to RM, $, €, £, ¥)

    Returns:
        The parsed number, or 0.0 when nothing numeric can be read
    """
    if value is None:
        return 0.0

    if isinstance(value, bool):
        return float(value)

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            logger.debug(f"Out of range {field_name} value coerced to 0")
            return 0.0
        return number if math.isfinite(number) else 0.0

    text = str(value).strip()
    if not text:
        return 0.0

    vocabulary = vocabulary or DEFAULT_CURRENCY_VOCABULARY
    cleaned = _strip_currency(text, vocabulary)
    cleaned = _SEPARATORS.sub('', cleaned)
    cleaned = _NON_NUMERIC.sub('', cleaned)

    if not cleaned or cleaned == '-':
        logger.debug(f"Non-numeric {field_name} value {value!r} coerced to 0")
        return 0.0

    # Longest leading decimal literal, so "1.2.3" reads as 1.2
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        logger.debug(f"Non-numeric {field_name} value {value!r} coerced to 0")
        return 0.0

    number = float(match.group(0))
    if not math.isfinite(number):
        return 0.0
    return number


def parse_integer(
    value: Any,
    field_name: str = "value",
    vocabulary: Optional[CurrencyVocabulary] = None,
) -> int:
    """Coerce a cell to a count; fractional values are floored, out-of-range counts become 0."""
    count = int(math.floor(parse_numeric(value, field_name, vocabulary)))
    if not MIN_STORED_INTEGER <= count <= MAX_STORED_INTEGER:
        logger.debug(f"Out of range {field_name} value {value!r} coerced to 0")
        return 0
    return count


def detect_currency(cost_value: Any, vocabulary: Optional[CurrencyVocabulary] = None) -> str:
    """Infer a currency code from the decorations of the cost cell."""
    vocabulary = vocabulary or DEFAULT_CURRENCY_VOCABULARY
    if cost_value is None:
        return vocabulary.default_code

    text = str(cost_value)
    for marker, code in vocabulary.markers:
        if marker in text:
            return code
    return vocabulary.default_code
