"""
API Module for AutoLead SA.

FastAPI application with routes for:
- Lead distribution and management
- Dealer network and billing
- Market insight search and conversion
"""

from .main import create_app, app

__all__ = ["create_app", "app"]
