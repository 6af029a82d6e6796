"""
Gemini market search provider.

Calls the Gemini generateContent REST endpoint with Google Search
grounding enabled.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class MarketSearchError(RuntimeError):
    """Raised when the search provider cannot produce results."""


class GeminiSearchProvider:
    """
    Gemini provider for grounded market search.

    Uses the public REST API over httpx; no retries, callers decide.
    """

    DEFAULT_MODEL = "gemini-2.5-flash"
    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: Optional[str],
        model_id: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Gemini provider.

        Args:
            api_key: Gemini API key
            model_id: Model ID
            base_url: API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self.api_key = api_key
        self.model_id = model_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

        logger.info(f"Gemini search provider initialized: {model_id}")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model_id}:generateContent"

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "tools": [{"google_search": {}}],
        }

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts)

    async def search(self, prompt: str) -> str:
        """
        Run a grounded search prompt.

        Args:
            prompt: Search prompt

        Returns:
            Model text output

        Raises:
            MarketSearchError: missing key, transport failure or bad status
        """
        if not self.api_key:
            raise MarketSearchError("Gemini API key not configured")

        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, json=self._payload(prompt), headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Gemini search request failed: {e}")
            raise MarketSearchError(f"Search request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Gemini search failed: status={response.status_code} body={response.text[:500]}")
            raise MarketSearchError(f"Search provider returned {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise MarketSearchError("Search provider returned invalid JSON") from e

        return self._extract_text(data)
