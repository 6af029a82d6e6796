"""
Domain types for lead distribution and scoring.

Plain dataclasses shared by the distributor, the scorer, the ledger and
the API layer. Persistence models live in database.models.
"""

import uuid
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

# Longest phone value the store accepts
MAX_PHONE_LENGTH = 50


class DealerStatus(str, Enum):
    """Dealer membership status in the partner network."""
    ACTIVE = "Active"
    PENDING = "Pending"
    SUSPENDED = "Suspended"


class BillingPlan(str, Enum):
    """Dealer subscription level, also used as assignment priority."""
    STANDARD = "Standard"
    PRO = "Pro"
    ENTERPRISE = "Enterprise"


class AssignmentType(str, Enum):
    """How far the distributor had to search to find a dealer."""
    DIRECT = "Direct"
    FALLBACK = "Fallback"
    NATIONAL = "National"


class LeadStatus(str, Enum):
    """Lead status in the pipeline."""
    NEW = "NEW"
    CONTACTED = "CONTACTED"
    QUALIFIED = "QUALIFIED"
    CONVERTED = "CONVERTED"
    ARCHIVED = "ARCHIVED"


class Sentiment(str, Enum):
    """Coarse buying-intent classification."""
    HOT = "HOT"
    WARM = "Warm"
    COLD = "Cold"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Sentiment"]:
        """Case-insensitive lookup; unknown or empty values give None."""
        if not value:
            return None
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


class UserRole(str, Enum):
    """Roles of authenticated users."""
    ADMIN = "ADMIN"
    DEALER_PRINCIPAL = "DEALER_PRINCIPAL"
    SALES_MANAGER = "SALES_MANAGER"
    SALES_EXECUTIVE = "SALES_EXECUTIVE"


# Roles that belong to a dealership rather than to the network operator
DEALER_ROLES = frozenset({
    UserRole.DEALER_PRINCIPAL.value,
    UserRole.SALES_MANAGER.value,
    UserRole.SALES_EXECUTIVE.value,
})

# Default cost per lead (ZAR) by plan
PLAN_COST_PER_LEAD: Dict[str, float] = {
    BillingPlan.ENTERPRISE.value: 150.0,
    BillingPlan.PRO.value: 250.0,
    BillingPlan.STANDARD.value: 350.0,
}


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class BillingProfile:
    """Per-dealer billing counters."""
    plan: str = BillingPlan.STANDARD.value
    cost_per_lead: float = PLAN_COST_PER_LEAD[BillingPlan.STANDARD.value]
    credits: float = 0.0
    total_spent: float = 0.0
    current_unbilled_amount: float = 0.0
    last_billed_date: Optional[str] = None

    @classmethod
    def for_plan(cls, plan: str) -> "BillingProfile":
        """Fresh profile with the plan's default cost per lead."""
        return cls(plan=plan, cost_per_lead=PLAN_COST_PER_LEAD.get(plan, 0.0))


@dataclass
class Dealer:
    """A dealership in the partner network."""
    id: str
    name: str
    brand: str
    region: str
    status: str = DealerStatus.ACTIVE.value
    leads_assigned: int = 0
    max_leads_capacity: Optional[int] = None
    billing: BillingProfile = field(default_factory=BillingProfile)

    # Profile
    detailed_aor: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class Lead:
    """A buying-intent lead."""

    # Core
    id: str
    brand: str
    model: str
    source: str
    intent_summary: str
    date_detected: str
    region: str
    status: str = LeadStatus.NEW.value
    sentiment: Optional[str] = None
    potential_value: Optional[str] = None
    grounding_url: Optional[str] = None

    # Contact
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None

    # Context
    context_dealer: Optional[str] = None
    notes: Optional[str] = None

    # Distribution
    assigned_dealer_id: Optional[str] = None
    assignment_type: Optional[str] = None

    # Reminders
    follow_up_date: Optional[str] = None

    @classmethod
    def create(cls, **kwargs) -> "Lead":
        """Create a lead with a generated id."""
        kwargs.setdefault("id", _new_id())
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class InsightSource:
    """Grounding link of a market insight."""
    title: str
    uri: str


@dataclass
class ExtractedContact:
    """Public contact details found in a search snippet."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.name or self.phone or self.email)


@dataclass
class MarketInsight:
    """A search result that may become a lead. Never persisted."""
    topic: str
    summary: str
    sentiment: Optional[str] = None
    source_platform: Optional[str] = None
    context_dealer: Optional[str] = None
    extracted_contact: Optional[ExtractedContact] = None
    sources: List[InsightSource] = field(default_factory=list)

    @property
    def primary_source(self) -> Optional[InsightSource]:
        return self.sources[0] if self.sources else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class CurrentUser:
    """Caller context used for the self-assignment override."""
    id: str
    role: str
    dealer_id: Optional[str] = None

    @property
    def is_dealer_user(self) -> bool:
        return self.role in DEALER_ROLES
