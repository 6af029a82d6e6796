"""Shared fixtures for AutoLead SA tests."""

import os
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

# Ensure we use test settings: no external search, open auth
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("JWT_SECRET_KEY", None)

from config.settings import get_settings
from distribution.models import BillingProfile, Dealer, Lead

# Wednesday 10:00 in Johannesburg
NOW = datetime(2024, 5, 15, 8, 0, tzinfo=timezone.utc)


def make_dealer(
    dealer_id: str,
    brand: str = "Toyota",
    region: str = "Gauteng",
    plan: str = "Standard",
    leads_assigned: int = 0,
    status: str = "Active",
    max_leads_capacity=None,
) -> Dealer:
    return Dealer(
        id=dealer_id,
        name=f"{brand} {region} ({dealer_id})",
        brand=brand,
        region=region,
        status=status,
        leads_assigned=leads_assigned,
        max_leads_capacity=max_leads_capacity,
        billing=BillingProfile.for_plan(plan),
    )


def make_lead(**overrides) -> Lead:
    data = {
        "id": "lead-1",
        "brand": "Toyota",
        "model": "Hilux",
        "source": "Manual",
        "intent_summary": "",
        "date_detected": NOW.isoformat(),
        "region": "Gauteng",
    }
    data.update(overrides)
    return Lead(**data)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def dealer_network():
    """Small multi-brand network across a few regions."""
    return [
        make_dealer("toy-gp-std", region="Gauteng", plan="Standard", leads_assigned=1),
        make_dealer("toy-gp-ent", region="Gauteng", plan="Enterprise", leads_assigned=9),
        make_dealer("toy-mp-pro", region="Mpumalanga", plan="Pro"),
        make_dealer("toy-wc-ent", region="Western Cape", plan="Enterprise"),
        make_dealer("vw-fs-pro", brand="Volkswagen", region="Free State", plan="Pro"),
        make_dealer("kia-nc-std", brand="Kia", region="Northern Cape", plan="Standard"),
    ]


@pytest.fixture
def client(tmp_path, monkeypatch):
    """FastAPI test client backed by a temporary SQLite database."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'autolead.db'}")
    get_settings.cache_clear()

    from api.main import create_app
    from api.services import get_services

    get_services().reset()
    with TestClient(create_app()) as test_client:
        yield test_client

    get_services().reset()
    get_settings.cache_clear()


@pytest.fixture
def seeded_client(client):
    """Client with a small dealer network onboarded."""
    dealers = [
        {"id": "toy-gp-1", "name": "Sandton Toyota", "brand": "Toyota", "region": "Gauteng", "plan": "Pro"},
        {"id": "toy-gp-2", "name": "Midrand Toyota", "brand": "Toyota", "region": "Gauteng", "plan": "Enterprise"},
        {"id": "toy-nw-1", "name": "Rustenburg Toyota", "brand": "Toyota", "region": "North West", "plan": "Standard"},
        {"id": "vw-wc-1", "name": "Cape Town VW", "brand": "Volkswagen", "region": "Western Cape", "plan": "Pro"},
    ]
    for dealer in dealers:
        response = client.post("/api/v1/dealers", json=dealer)
        assert response.status_code == 200, response.text
    return client
