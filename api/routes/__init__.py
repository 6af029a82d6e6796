"""
API Routes for AutoLead SA.
"""

from . import leads, dealers, insights, regions

__all__ = ["leads", "dealers", "insights", "regions"]
