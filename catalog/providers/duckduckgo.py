"""
DuckDuckGo image provider.

Loads the image search page and returns the first candidate that passes the
image URL checks. Candidates come from <img> tags, then from image URLs
embedded in the raw HTML when the page renders its results from script.
"""

import logging
import re
from typing import Iterable, List, Optional
from urllib.parse import quote_plus

from bs4 import BeautifulSoup

from catalog.providers.base import ImageProvider, ImageQuery
from catalog.utils.images import configured_denylist, is_valid_image_url

logger = logging.getLogger(__name__)

IMAGE_URL_PATTERN = re.compile(r"https?://[^\s\"'<>]+\.(?:jpg|jpeg|png|webp)", re.IGNORECASE)


class DuckDuckGoImageProvider(ImageProvider):
    name = "duckduckgo"

    SEARCH_URL = "https://duckduckgo.com/?q={query}&iax=images&ia=images"
    MAX_IMG_TAGS = 20
    MAX_EMBEDDED_URLS = 10

    def __init__(self, timeout=None, session=None, denylist: Optional[Iterable[str]] = None):
        super().__init__(timeout=timeout, session=session)
        self.denylist = tuple(denylist) if denylist is not None else configured_denylist()

    def fetch(self, query: ImageQuery) -> Optional[str]:
        html = self.get_html(self.SEARCH_URL.format(query=quote_plus(query.text)))
        for url in self.candidate_urls(html):
            if is_valid_image_url(url, self.denylist):
                return url
        logger.debug(f"DuckDuckGo: no usable image for '{query.text}'")
        return None

    def candidate_urls(self, html: str) -> List[str]:
        """Image URLs from <img> tags first, then from embedded script data."""
        soup = BeautifulSoup(html, "html.parser")
        candidates = []

        for img in soup.find_all("img", limit=self.MAX_IMG_TAGS):
            src = img.get("src") or img.get("data-src") or img.get("data-lazy-src")
            if src and src.startswith("http"):
                candidates.append(src)

        for url in IMAGE_URL_PATTERN.findall(html)[:self.MAX_EMBEDDED_URLS]:
            if url not in candidates:
                candidates.append(url)

        return candidates
