# src/salesportal/config/__init__.py
"""
Configuration module for the sales portal application.
"""

from .settings import Settings, get_settings
from .vocabulary import (
    ColumnVocabulary,
    CurrencyVocabulary,
    DEFAULT_COLUMN_VOCABULARY,
    DEFAULT_CURRENCY_VOCABULARY,
)

__all__ = [
    'Settings',
    'get_settings',
    'ColumnVocabulary',
    'CurrencyVocabulary',
    'DEFAULT_COLUMN_VOCABULARY',
    'DEFAULT_CURRENCY_VOCABULARY',
]
