"""
Base class for image providers.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings

from catalog.exceptions import ProviderError, ProviderTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class ImageQuery:
    """What a provider searches for."""

    name: str
    brand: Optional[str] = None

    @property
    def text(self) -> str:
        """Search text: brand and name, brand omitted when unknown."""
        if self.brand:
            return f"{self.brand} {self.name}".strip()
        return (self.name or "").strip()


class ImageProvider(ABC):
    """
    An external source of product image URLs.

    Subclasses set `name` and implement fetch(). fetch() returns a candidate
    URL or None; it may raise ProviderError, which the resolver records as a
    failed attempt. The resolver validates whatever URL is returned; providers
    that pick among several candidates should filter them the same way.
    """

    name: str = ""

    def __init__(self, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.timeout = timeout or getattr(settings, "CATALOG_PROVIDER_TIMEOUT", 10)
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", DEFAULT_USER_AGENT)

    @abstractmethod
    def fetch(self, query: ImageQuery) -> Optional[str]:
        """Return a candidate image URL for the query, or None."""

    def get_html(self, url: str, **kwargs) -> str:
        """
        GET a page and return its body.

        Raises:
            ProviderTimeoutError: If the request exceeds the provider timeout
            ProviderError: On any other network or HTTP error
        """
        try:
            response = self.session.get(url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response.text
        except requests.Timeout as e:
            raise ProviderTimeoutError(self.name, f"timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise ProviderError(self.name, str(e)) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(timeout={self.timeout})"
