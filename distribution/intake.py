"""
Lead intake: turning market insights into leads.

Handles duplicate detection by source link and merging newly found
contact details into an existing lead.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional

from .models import Lead, LeadStatus, MarketInsight, Sentiment
from .regions import brand_display_name

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ContactMerge:
    """Result of comparing an insight's contact data with a stored lead."""
    has_new_data: bool = False
    requires_confirmation: bool = False
    updates: Dict[str, str] = field(default_factory=dict)


def insight_source_label(insight: MarketInsight) -> str:
    """Specific platform if detected, otherwise the first source title."""
    if insight.source_platform:
        return insight.source_platform
    source = insight.primary_source
    return source.title if source else "Unknown Source"


def insight_to_lead(
    insight: MarketInsight,
    brand: str,
    model: str,
    region: str,
    trim: str = "",
    contact_overrides: Optional[Dict[str, Optional[str]]] = None,
    clock: Callable[[], datetime] = _utcnow,
) -> Lead:
    """
    Build a NEW lead from a verified market insight.

    Args:
        insight: Search result being converted
        brand: Brand catalog id or display name used in the search
        model: Vehicle model searched for
        region: Region searched in
        trim: Optional trim / variant
        contact_overrides: Contact details confirmed by the user; keys
            name, phone, email. Missing keys fall back to the insight.
        clock: Time source for date_detected

    Returns:
        Unassigned lead ready for distribution
    """
    extracted = insight.extracted_contact
    overrides = contact_overrides or {}

    def _contact(key: str) -> Optional[str]:
        if key in overrides:
            return overrides[key] or None
        return getattr(extracted, key) if extracted else None

    # Free-text model sentiment is kept only when it is one of the known labels
    sentiment = Sentiment.parse(insight.sentiment)
    source = insight.primary_source
    return Lead.create(
        brand=brand_display_name(brand),
        model=f"{model} {trim}".strip(),
        source=insight_source_label(insight),
        intent_summary=insight.summary,
        date_detected=clock().isoformat(),
        status=LeadStatus.NEW.value,
        sentiment=sentiment.value if sentiment else None,
        region=region,
        grounding_url=source.uri if source else None,
        contact_name=_contact("name"),
        contact_phone=_contact("phone"),
        contact_email=_contact("email"),
        context_dealer=insight.context_dealer,
    )


def find_duplicate(leads: Iterable[Lead], insight: MarketInsight) -> Optional[Lead]:
    """Existing lead that was created from the same source link."""
    source = insight.primary_source
    if not source or not source.uri or source.uri == "#":
        return None
    return next((l for l in leads if l.grounding_url == source.uri), None)


def merge_contact(existing: Lead, insight: MarketInsight) -> ContactMerge:
    """
    Compare an insight's extracted contact with a stored lead.

    New values are reported as updates. When the stored lead already
    carries any contact data, applying them needs user confirmation.
    """
    extracted = insight.extracted_contact
    if not extracted or extracted.is_empty():
        return ContactMerge()

    updates: Dict[str, str] = {}
    if extracted.name and existing.contact_name != extracted.name:
        updates["contact_name"] = extracted.name
    if extracted.phone and existing.contact_phone != extracted.phone:
        updates["contact_phone"] = extracted.phone
    if extracted.email and existing.contact_email != extracted.email:
        updates["contact_email"] = extracted.email

    if not updates:
        return ContactMerge()

    has_existing = bool(existing.contact_name or existing.contact_phone or existing.contact_email)
    return ContactMerge(has_new_data=True, requires_confirmation=has_existing, updates=updates)
