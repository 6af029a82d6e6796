"""
Parser for the structured text returned by the market search model.
"""

import logging
import re
from typing import List, Optional

from distribution.models import MAX_PHONE_LENGTH, ExtractedContact, InsightSource, MarketInsight

from .prompt_templates import LEAD_ITEM_SEPARATOR

logger = logging.getLogger(__name__)

_MISSING = {"", "n/a", "na", "none", "unknown"}


def extract_value(text: str, key: str) -> str:
    """Value of the first `Key: value` line for a key, or ""."""
    match = re.search(rf"{re.escape(key)}:[ \t]*(.*)", text, re.IGNORECASE)
    return match.group(1).strip() if match else ""


def _optional(text: str, key: str) -> Optional[str]:
    value = extract_value(text, key)
    return None if value.lower() in _MISSING else value


def _phone(text: str) -> Optional[str]:
    value = _optional(text, "ContactPhone")
    if value and len(value) > MAX_PHONE_LENGTH:
        logger.debug(f"Dropping ContactPhone value of {len(value)} characters")
        return None
    return value


def parse_insight(block: str) -> Optional[MarketInsight]:
    """Parse one item; None when it has no topic."""
    topic = extract_value(block, "Topic")
    if not topic:
        return None

    contact = ExtractedContact(
        name=_optional(block, "ContactName"),
        phone=_phone(block),
        email=_optional(block, "ContactEmail"),
    )

    return MarketInsight(
        topic=topic,
        summary=extract_value(block, "Summary"),
        sentiment=extract_value(block, "Sentiment") or None,
        source_platform=_optional(block, "SourcePlatform"),
        context_dealer=_optional(block, "ContextDealer"),
        extracted_contact=None if contact.is_empty() else contact,
        sources=[InsightSource(
            title=extract_value(block, "SourceTitle") or "Unknown Source",
            uri=extract_value(block, "SourceURI") or "#",
        )],
    )


def parse_insights(text: str) -> List[MarketInsight]:
    """
    Split model output into market insights.

    Args:
        text: Raw model text with items separated by LEAD_ITEM_SEPARATOR

    Returns:
        Insights in output order; items without a topic are dropped
    """
    insights = []
    for block in (text or "").split(LEAD_ITEM_SEPARATOR):
        if not block.strip():
            continue
        insight = parse_insight(block)
        if insight is None:
            logger.debug("Skipping search item without topic")
            continue
        insights.append(insight)
    return insights
