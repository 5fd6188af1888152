"""
Google Images provider backed by SerpAPI.
"""

import logging
from typing import Optional

import requests

from catalog.exceptions import ProviderError, ProviderTimeoutError
from catalog.providers.base import ImageProvider, ImageQuery
from catalog.providers.serpapi_client import SerpAPIClient

logger = logging.getLogger(__name__)


class GoogleImagesProvider(ImageProvider):
    name = "google_images"

    def __init__(self, timeout=None, session=None, client: Optional[SerpAPIClient] = None):
        super().__init__(timeout=timeout, session=session)
        self._client = client

    @property
    def client(self) -> SerpAPIClient:
        # Built lazily so a missing key fails the attempt, not provider setup
        if self._client is None:
            try:
                self._client = SerpAPIClient(timeout=self.timeout)
            except ValueError as e:
                raise ProviderError(self.name, str(e)) from e
        return self._client

    def fetch(self, query: ImageQuery) -> Optional[str]:
        try:
            data = self.client.google_images(query.text, num_results=5)
        except requests.Timeout as e:
            raise ProviderTimeoutError(self.name, f"timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise ProviderError(self.name, str(e)) from e

        for result in data.get("images_results", []):
            url = result.get("original") or result.get("thumbnail")
            if url:
                return url
        return None
