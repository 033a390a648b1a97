"""
Column normalization for spreadsheet rows.

Header spellings vary between exports ("Campaign ID", "campaignId",
"Gross Revenue (RM)"). Every header is reduced to snake_case and each
canonical field is then resolved through its synonym family.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from ..config.vocabulary import ColumnVocabulary, DEFAULT_COLUMN_VOCABULARY

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r'([a-z])([A-Z])')
_SEPARATOR_RUN = re.compile(r'[\s\-_]+')
_NON_WORD = re.compile(r'[^\w_]', re.ASCII)


def to_snake_case(header: Any) -> str:
    """
    Reduce a header to snake_case.

    Examples:
        "Campaign ID" -> "campaign_id"
        "campaignName" -> "campaign_name"
        "Gross Revenue (RM)" -> "gross_revenue_rm"
    """
    text = str(header)
    text = _CAMEL_BOUNDARY.sub(r'\1_\2', text)
    text = _SEPARATOR_RUN.sub('_', text)
    text = _NON_WORD.sub('', text)
    return text.lower().strip('_')


def normalize_row(raw: Mapping[Any, Any]) -> Dict[str, Any]:
    """Re-key a raw row by snake_case header; a later duplicate key overwrites an earlier one."""
    normalized: Dict[str, Any] = {}
    for key, value in raw.items():
        normalized[to_snake_case(key)] = value
    return normalized


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


class ColumnNormalizer:
    """Resolves canonical fields from normalized rows using an injected vocabulary."""

    def __init__(self, vocabulary: Optional[ColumnVocabulary] = None):
        self.vocabulary = vocabulary or DEFAULT_COLUMN_VOCABULARY

    def normalize(self, raw: Mapping[Any, Any]) -> Dict[str, Any]:
        return normalize_row(raw)

    def resolve(self, row: Mapping[str, Any], field_name: str) -> Any:
        """
        Find the value for a canonical field.

        Exact synonym keys are tried first, in vocabulary order; the first
        non-blank value wins. Only when all of them are absent or blank does
        the keyword fallback scan every key of the row.

        Returns:
            The raw cell value, or None when the field cannot be resolved
        """
        synonyms = self.vocabulary.synonyms_for(field_name)

        for candidate in synonyms.candidates:
            value = row.get(candidate)
            if not _is_blank(value):
                return value

        if not synonyms.has_fallback:
            return None

        for key, value in row.items():
            if _is_blank(value):
                continue
            if not any(word in key for word in synonyms.include_keywords):
                continue
            if any(word in key for word in synonyms.exclude_keywords):
                continue
            logger.debug(f"Resolved '{field_name}' from fallback column '{key}'")
            return value

        return None


def available_columns(row: Mapping[str, Any]) -> List[str]:
    """Column names to quote back in row error messages."""
    return list(row.keys())
