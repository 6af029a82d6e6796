"""
Signal tables for lead scoring.

Keyword and source weights are data so they can be tuned without
touching the scoring code.
"""

from typing import List, Optional, Tuple


# (tier, points, keywords); checked top to bottom, first tier that hits wins
INTENT_KEYWORD_TIERS: List[Tuple[str, int, List[str]]] = [
    ("high", 10, [
        "cash", "approved", "urgent", "immediate", "buy now", "ready to buy",
        "financing ready", "pre-approved", "settlement", "serious buyer",
    ]),
    ("medium", 5, [
        "trade-in", "test drive", "quote", "finance", "price", "availability",
        "looking for", "interested", "specs", "installment",
    ]),
]

# (substring, points); declaration order matters, first match wins
SOURCE_WEIGHTS: List[Tuple[str, int]] = [
    ("website", 20),
    ("autotrader", 15),
    ("cars.co.za", 15),
    ("gumtree", 10),
    ("facebook marketplace", 10),
    ("4x4community", 10),
    ("forum", 8),
    ("facebook group", 5),
    ("instagram", 5),
    ("twitter", 5),
    ("web search", 5),
]

DEFAULT_SOURCE_POINTS = 5


def match_intent(text: Optional[str]) -> Tuple[Optional[str], int]:
    """
    Find the strongest intent tier present in a text.

    Returns:
        (tier name, points), or (None, 0) when no keyword matches
    """
    lowered = (text or "").lower()
    for tier, points, keywords in INTENT_KEYWORD_TIERS:
        if any(k in lowered for k in keywords):
            return tier, points
    return None, 0


def match_source(source: Optional[str]) -> Tuple[Optional[str], int]:
    """
    Weight a free-text source description.

    Returns:
        (matched key, points); (None, DEFAULT_SOURCE_POINTS) if nothing matches
    """
    lowered = (source or "").lower()
    for key, points in SOURCE_WEIGHTS:
        if key in lowered:
            return key, points
    return None, DEFAULT_SOURCE_POINTS
