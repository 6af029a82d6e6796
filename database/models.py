"""
SQLAlchemy ORM models for AutoLead SA.

Persistent entities: dealers, leads and the lead event trail.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, Integer, Float, DateTime, Text, ForeignKey, JSON, Index,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class Dealer(Base):
    __tablename__ = "dealers"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    brand = Column(String(100), nullable=False)
    region = Column(String(50), nullable=False)
    status = Column(String(15), default="Active")  # Active, Pending, Suspended
    leads_assigned = Column(Integer, default=0, nullable=False)
    max_leads_capacity = Column(Integer, nullable=True)

    # Billing
    plan = Column(String(20), default="Standard")  # Standard, Pro, Enterprise
    cost_per_lead = Column(Float, default=350.0)
    credits = Column(Float, default=0.0)
    total_spent = Column(Float, default=0.0)
    current_unbilled_amount = Column(Float, default=0.0)
    last_billed_date = Column(String(10), nullable=True)

    # Profile
    detailed_aor = Column(Text, nullable=True)
    contact_person = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    leads = relationship("Lead", back_populates="dealer")

    __table_args__ = (
        Index("ix_dealer_brand_region", "brand", "region"),
    )


class Lead(Base):
    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=_uuid)
    brand = Column(String(100), nullable=False)
    model = Column(String(255), default="")
    source = Column(String(255), default="")
    intent_summary = Column(Text, default="")
    date_detected = Column(String(40), nullable=False)
    status = Column(String(15), default="NEW")  # NEW, CONTACTED, QUALIFIED, CONVERTED, ARCHIVED
    sentiment = Column(String(10), nullable=True)  # HOT, Warm, Cold
    potential_value = Column(String(50), nullable=True)
    region = Column(String(50), nullable=False)
    grounding_url = Column(Text, nullable=True)
    contact_name = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    contact_email = Column(String(255), nullable=True)
    context_dealer = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    assigned_dealer_id = Column(String(36), ForeignKey("dealers.id"), nullable=True, index=True)
    assignment_type = Column(String(10), nullable=True)  # Direct, Fallback, National
    follow_up_date = Column(String(40), nullable=True)
    score = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    dealer = relationship("Dealer", back_populates="leads")
    events = relationship("LeadEvent", back_populates="lead", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_lead_status_score", "status", "score"),
        Index("ix_lead_grounding_url", "grounding_url"),
    )


class LeadEvent(Base):
    __tablename__ = "lead_events"

    id = Column(String(36), primary_key=True, default=_uuid)
    lead_id = Column(String(36), ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type = Column(String(30), nullable=False)  # created, distributed, reassigned, updated
    details_json = Column(JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)

    lead = relationship("Lead", back_populates="events")
