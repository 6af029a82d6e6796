"""
Market search provider implementations.
"""

from .gemini import GeminiSearchProvider, MarketSearchError

__all__ = ["GeminiSearchProvider", "MarketSearchError"]
