"""Tests for campaign group derivation."""

from salesportal.importers.group_extractor import (
    LIVE_MANUAL_STRATEGY,
    LIVE_STRATEGY,
    PRODUCT_STRATEGY,
    collect_base_names,
    extract_live_group,
    extract_product_group,
    get_strategy,
)
from salesportal.models.campaign import CampaignType


class TestLiveGroupMarkers:

    def test_bracket_marker(self):
        result = extract_live_group("[HIM Wellness] Flash Sale")
        assert result.group == "HIM Wellness"
        assert result.campaign_name == "[HIM Wellness] Flash Sale"
        assert result.has_marker
        assert result.warning is None

    def test_precedence_with_warning(self):
        result = extract_live_group("[A] (B) {C} Campaign")
        assert result.group == "A"
        assert result.campaign_name == "[A] (B) {C} Campaign"
        assert result.warning == (
            "Multiple group markers detected: [A], (B), {C}. "
            "Using precedence: brackets [] > parentheses () > curly braces {}."
        )

    def test_parentheses_beat_braces(self):
        result = extract_live_group("{C} promo (B)")
        assert result.group == "B"
        assert result.warning is not None

    def test_marker_content_is_trimmed(self):
        assert extract_live_group("{ Spaced } promo").group == "Spaced"

    def test_blank_marker_is_ignored(self):
        result = extract_live_group("[ ] (Real) promo")
        assert result.group == "Real"
        assert result.warning is None


class TestLiveGroupFallbacks:

    def test_base_name_fallback_rewrites_name(self):
        result = extract_live_group("Samhan Promo Oct", ["Samhan"])
        assert result.group == "Samhan"
        assert result.campaign_name == "[Samhan] Samhan Promo Oct"
        assert not result.has_marker

    def test_base_name_match_is_case_insensitive(self):
        assert extract_live_group("samhan flash", ["Samhan"]).group == "Samhan"

    def test_first_base_name_wins(self):
        # Substring matching follows batch order
        assert extract_live_group("Samhan Promo", ["Sam", "Samhan"]).group == "Sam"

    def test_unmatched_multi_word_name_is_an_error(self):
        result = extract_live_group("Random Unmatched Text", ["Samhan"])
        assert not result.is_resolved
        assert result.error == (
            'Cannot determine group for "Random Unmatched Text". '
            "Use [Group], (Group), or {Group} notation."
        )

    def test_single_word_is_its_own_group(self):
        result = extract_live_group("Standalone")
        assert result.group == "Standalone"
        assert result.campaign_name == "[Standalone] Standalone"
        assert result.error is None


def test_collect_base_names():
    names = ["Samhan", "Samhan Promo", " HIM ", None, "", "Samhan", "Glow"]
    assert collect_base_names(names) == ["Samhan", "HIM", "Glow"]


class TestProductGroups:

    def test_explicit_group(self):
        result = extract_product_group("Widget Sale", "Gadgets")
        assert result.group == "Gadgets"
        assert result.campaign_name == "Widget Sale"

    def test_name_is_group_when_column_missing(self):
        result = extract_product_group("Widget Sale [X]", None)
        assert result.group == "Widget Sale [X]"
        assert not result.has_marker

    def test_blank_group_column(self):
        assert extract_product_group("Widget", "  ").group == "Widget"


class TestStrategies:

    def test_get_strategy(self):
        assert get_strategy(CampaignType.LIVE) is LIVE_STRATEGY
        assert get_strategy(CampaignType.LIVE, manual=True) is LIVE_MANUAL_STRATEGY
        assert get_strategy(CampaignType.PRODUCT) is PRODUCT_STRATEGY
        assert get_strategy(CampaignType.PRODUCT, manual=True) is PRODUCT_STRATEGY

    def test_live_strategy_ignores_group_column(self):
        result = LIVE_STRATEGY.resolve_group("[A] Promo", "B")
        assert result.group == "A"

    def test_manual_live_honours_explicit_group(self):
        result = LIVE_MANUAL_STRATEGY.resolve_group("Promo Oct", "Samhan")
        assert result.group == "Samhan"
        assert result.campaign_name == "[Samhan] Promo Oct"

    def test_manual_live_keeps_marked_name(self):
        result = LIVE_MANUAL_STRATEGY.resolve_group("[Samhan] Promo", "Samhan")
        assert result.campaign_name == "[Samhan] Promo"

    def test_extra_fields(self):
        assert "live_views" in LIVE_STRATEGY.extra_fields
        assert PRODUCT_STRATEGY.extra_fields == ()
        assert PRODUCT_STRATEGY.split_missing_errors
