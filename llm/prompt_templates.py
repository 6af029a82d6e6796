"""
Prompt Templates for AutoLead SA market search.
"""

from dataclasses import dataclass
from typing import Optional

LEAD_ITEM_SEPARATOR = "---LEAD_ITEM---"


@dataclass
class MarketSearchQuery:
    """What the dealer is looking for."""
    brand: str
    model: str
    region: str
    trim: str = ""
    condition: str = "Used"  # New, Used, Demo
    fuel: Optional[str] = None
    transmission: Optional[str] = None
    mileage_min: Optional[str] = None
    mileage_max: Optional[str] = None

    def vehicle(self) -> str:
        parts = [self.condition, self.brand, self.model]
        if self.trim:
            parts.append(self.trim)
        for extra in (self.fuel, self.transmission):
            if extra and extra != "Any":
                parts.append(extra)
        return " ".join(p for p in parts if p)


MARKET_SEARCH_TEMPLATE = """I need to find potential vehicle sales leads for a dealership in South Africa.
Search for recent (last 30 days) classified listings, forum discussions, or public social media posts for:
Vehicle: {vehicle}
Location: {region}, South Africa
{mileage}
Goal: Identify people looking to BUY.
{trim_rule}
Identify the specific platform of each result (e.g. "Facebook Group", "Facebook Marketplace",
"AutoTrader Listing", "Cars.co.za", "Gumtree", "4x4Community Forum").

Only extract contact details that are publicly visible in the snippet or title.

Format the output as a list where each item is separated by "{separator}".
Inside each item use these exact keys:
Topic: [Short Title]
Sentiment: [HOT if the person wants to buy, else Warm or Cold]
Summary: [1 sentence summary of intent including specs found]
SourceTitle: [Website Name]
SourceURI: [The URL]
SourcePlatform: [Specific platform type]
ContextDealer: [Dealer named in the snippet, else N/A]
ContactName: [Name or N/A]
ContactPhone: [Phone Number or N/A]
ContactEmail: [Email Address or N/A]
"""


def build_market_search_prompt(query: MarketSearchQuery) -> str:
    """Render the market search prompt for a query."""
    mileage = ""
    if query.mileage_min or query.mileage_max:
        mileage = f"Mileage preference: {query.mileage_min or '0'}km to {query.mileage_max or 'any'}km."
    trim_rule = ""
    if query.trim:
        trim_rule = f'The buyer must be looking for the trim/variant "{query.trim}".'
    return MARKET_SEARCH_TEMPLATE.format(
        vehicle=query.vehicle(),
        region=query.region,
        mileage=mileage,
        trim_rule=trim_rule,
        separator=LEAD_ITEM_SEPARATOR,
    )
