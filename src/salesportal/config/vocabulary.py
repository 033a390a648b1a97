# src/salesportal/config/vocabulary.py
"""
Immutable vocabularies used by the campaign ingestion pipeline.

Spreadsheet exports arrive with many header spellings and currency
decorations. The accepted variants live here as frozen configuration so
that the normalizer and coercer can be handed a different vocabulary
without code changes.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class FieldSynonyms:
    """Ordered candidate keys for one canonical field, plus keyword fallback."""

    candidates: Tuple[str, ...]
    include_keywords: Tuple[str, ...] = ()
    exclude_keywords: Tuple[str, ...] = ()

    @property
    def has_fallback(self) -> bool:
        return len(self.include_keywords) > 0


@dataclass(frozen=True)
class ColumnVocabulary:
    """Synonym families keyed by canonical field name."""

    fields: Dict[str, FieldSynonyms]

    def synonyms_for(self, field_name: str) -> FieldSynonyms:
        try:
            return self.fields[field_name]
        except KeyError:
            # Unknown canonical fields resolve by their own name only
            return FieldSynonyms(candidates=(field_name,))


@dataclass(frozen=True)
class CurrencyVocabulary:
    """Currency decorations stripped from numbers and markers used to infer a code."""

    symbols: Tuple[str, ...] = ("RM", "$", "€", "£", "¥")
    # Checked in order; first marker found in the cost cell wins
    markers: Tuple[Tuple[str, str], ...] = (("RM", "RM"), ("$", "USD"), ("€", "EUR"))
    default_code: str = "RM"


DEFAULT_COLUMN_VOCABULARY = ColumnVocabulary(
    fields={
        "campaign_id": FieldSynonyms(("campaign_id", "campaignid")),
        "campaign_name": FieldSynonyms(("campaign_name", "campaignname", "campaign")),
        "campaign_group": FieldSynonyms(("campaign_group", "campaigngroup")),
        "cost": FieldSynonyms(("cost",)),
        "net_cost": FieldSynonyms(("net_cost", "netcost")),
        "live_views": FieldSynonyms(("live_views", "liveviews")),
        "orders_sku": FieldSynonyms(("orders_sku", "orders", "sku")),
        "gross_revenue": FieldSynonyms(
            candidates=(
                "gross_revenue",
                "grossrevenue",
                "revenue",
                "gmv",
                "total_revenue",
                "totalrevenue",
                "gross_revenue_rm",
                "grossrevenue_rm",
            ),
            include_keywords=("revenue", "gmv"),
            exclude_keywords=("cost", "roi"),
        ),
        "roi": FieldSynonyms(("roi",)),
    }
)

DEFAULT_CURRENCY_VOCABULARY = CurrencyVocabulary()


def currency_vocabulary_for(default_code: str) -> CurrencyVocabulary:
    """Default currency vocabulary with a different fallback code."""
    return CurrencyVocabulary(default_code=default_code or "RM")
