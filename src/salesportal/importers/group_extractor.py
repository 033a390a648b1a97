"""
Campaign group derivation.

Live campaigns carry their group inside the campaign name using one of
three marker styles: ``[Group]``, ``(Group)`` or ``{Group}``. When no
marker is present the group falls back to a single-word campaign name
from the same batch that the name contains. Product campaigns take an
explicit group column, or their own name.

The differences between the two pipelines are captured in an
``IngestionStrategy`` so the ingestion service runs one code path.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..models.campaign import CampaignType, GroupResolution

# Checked in precedence order: brackets > parentheses > braces
MARKER_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]", str, str], ...] = (
    ('brackets', re.compile(r'\[([^\]]+)\]'), '[', ']'),
    ('parentheses', re.compile(r'\(([^)]+)\)'), '(', ')'),
    ('curly braces', re.compile(r'\{([^}]+)\}'), '{', '}'),
)

PRECEDENCE_NOTE = "brackets [] > parentheses () > curly braces {}"


def find_group_markers(name: str) -> List[Tuple[str, str]]:
    """
    Return (rendered_marker, group) for each marker style found, in precedence order.

    Only the first match of each style is considered. Markers with blank
    content are ignored.
    """
    found = []
    for _label, pattern, opening, closing in MARKER_PATTERNS:
        match = pattern.search(name)
        if not match:
            continue
        content = match.group(1)
        if not content.strip():
            continue
        found.append((f"{opening}{content}{closing}", content.strip()))
    return found


def collect_base_names(names: Iterable[Optional[str]]) -> List[str]:
    """Single-word campaign names of a batch, de-duplicated, in first-appearance order."""
    base_names: List[str] = []
    seen = set()
    for name in names:
        if name is None:
            continue
        trimmed = str(name).strip()
        if not trimmed or any(ch.isspace() for ch in trimmed):
            continue
        if trimmed not in seen:
            seen.add(trimmed)
            base_names.append(trimmed)
    return base_names


def extract_live_group(name: str, base_names: Sequence[str] = ()) -> GroupResolution:
    """
    Derive the group of a Live campaign from its name.

    Returns a GroupResolution whose ``error`` is set when the group cannot
    be determined; such rows must be skipped by the caller.
    """
    name = name.strip()
    markers = find_group_markers(name)

    warning = None
    if len(markers) > 1:
        rendered = ", ".join(marker for marker, _group in markers)
        warning = (
            f"Multiple group markers detected: {rendered}. "
            f"Using precedence: {PRECEDENCE_NOTE}."
        )

    if markers:
        return GroupResolution(
            campaign_name=name,
            group=markers[0][1],
            has_marker=True,
            warning=warning,
        )

    lowered = name.lower()
    for base_name in base_names:
        if base_name.lower() in lowered:
            return GroupResolution(
                campaign_name=f"[{base_name}] {name}",
                group=base_name,
            )

    if any(ch.isspace() for ch in name):
        return GroupResolution(
            campaign_name=name,
            error=(
                f'Cannot determine group for "{name}". '
                f"Use [Group], (Group), or {{Group}} notation."
            ),
        )

    return GroupResolution(campaign_name=f"[{name}] {name}", group=name)


def extract_product_group(
    name: str,
    explicit_group: Optional[str] = None,
    base_names: Sequence[str] = (),
) -> GroupResolution:
    """Product campaigns use the group column when present, otherwise their own name."""
    name = name.strip()
    group = str(explicit_group).strip() if explicit_group is not None else ""
    return GroupResolution(campaign_name=name, group=group or name)


def _live_with_override(
    name: str,
    explicit_group: Optional[str] = None,
    base_names: Sequence[str] = (),
) -> GroupResolution:
    # Pre-structured entries may state the group outright
    if explicit_group is not None and str(explicit_group).strip():
        group = str(explicit_group).strip()
        has_marker = bool(find_group_markers(name))
        campaign_name = name.strip() if has_marker else f"[{group}] {name.strip()}"
        return GroupResolution(campaign_name=campaign_name, group=group, has_marker=has_marker)
    return extract_live_group(name, base_names)


# ============================================================================
# Pipeline strategies
# ============================================================================

GroupExtractor = Callable[[str, Optional[str], Sequence[str]], GroupResolution]


@dataclass(frozen=True)
class IngestionStrategy:
    """What differs between the Live and Product pipelines."""
    campaign_type: CampaignType
    extract_group: GroupExtractor
    extra_fields: Tuple[str, ...] = ()
    uses_base_names: bool = False
    # Product rows report a missing ID and a missing name separately
    split_missing_errors: bool = False

    def resolve_group(
        self,
        name: str,
        explicit_group: Optional[str] = None,
        base_names: Sequence[str] = (),
    ) -> GroupResolution:
        return self.extract_group(name, explicit_group, base_names)


def _live_from_spreadsheet(
    name: str,
    explicit_group: Optional[str] = None,
    base_names: Sequence[str] = (),
) -> GroupResolution:
    # Live exports never carry a usable group column; markers are authoritative
    return extract_live_group(name, base_names)


LIVE_STRATEGY = IngestionStrategy(
    campaign_type=CampaignType.LIVE,
    extract_group=_live_from_spreadsheet,
    extra_fields=('live_views',),
    uses_base_names=True,
)

LIVE_MANUAL_STRATEGY = IngestionStrategy(
    campaign_type=CampaignType.LIVE,
    extract_group=_live_with_override,
    extra_fields=('live_views',),
    uses_base_names=True,
)

PRODUCT_STRATEGY = IngestionStrategy(
    campaign_type=CampaignType.PRODUCT,
    extract_group=extract_product_group,
    split_missing_errors=True,
)


def get_strategy(campaign_type: CampaignType, manual: bool = False) -> IngestionStrategy:
    """Strategy for a pipeline; manual entries honour an explicit Live group."""
    if campaign_type is CampaignType.LIVE:
        return LIVE_MANUAL_STRATEGY if manual else LIVE_STRATEGY
    return PRODUCT_STRATEGY
