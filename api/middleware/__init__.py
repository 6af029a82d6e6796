"""
API Middleware.
"""

from .auth import get_current_user, require_role
from .metrics import MetricsMiddleware

__all__ = ["get_current_user", "require_role", "MetricsMiddleware"]
