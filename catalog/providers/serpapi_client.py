"""
SerpAPI Client - HTTP client wrapper for the SerpAPI Google Images engine.
"""

import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class SerpAPIClient:
    """
    Wrapper for SerpAPI search.

    Usage:
        client = SerpAPIClient()
        results = client.google_images("Now Foods Vitamin C 1000")
    """

    BASE_URL = "https://serpapi.com/search"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 30):
        """
        Initialize SerpAPI client.

        Args:
            api_key: SerpAPI API key. If not provided, uses settings.SERPAPI_API_KEY
            timeout: Request timeout in seconds

        Raises:
            ValueError: If no API key is configured
        """
        self.api_key = api_key or getattr(settings, "SERPAPI_API_KEY", None)
        self.timeout = timeout

        if not self.api_key:
            raise ValueError("SERPAPI_API_KEY not configured")

    def google_images(
        self,
        query: str,
        num_results: int = 10,
        **kwargs,
    ) -> Dict[str, Any]:
        """
        Search Google Images for product photos.

        Args:
            query: Image search query
            num_results: Number of results to return (default 10)
            **kwargs: Additional SerpAPI parameters

        Returns:
            SerpAPI response dictionary with images_results

        Raises:
            requests.RequestException: On network or API errors
        """
        params = {
            "engine": "google_images",
            "q": query,
            "num": num_results,
            "api_key": self.api_key,
            **kwargs,
        }
        return self._make_request(params)

    def _make_request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = requests.get(self.BASE_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error(f"SerpAPI request failed: {e}")
            raise
