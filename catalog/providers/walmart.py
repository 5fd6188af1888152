"""
Walmart image provider.

Reads the image of the first grid item on the walmart.com search page.
"""

import logging
from typing import Optional
from urllib.parse import quote_plus

from bs4 import BeautifulSoup

from catalog.providers.base import ImageProvider, ImageQuery

logger = logging.getLogger(__name__)


class WalmartImageProvider(ImageProvider):
    name = "walmart"

    SEARCH_URL = "https://www.walmart.com/search/?query={query}"
    ITEM_IMAGE_SELECTOR = '[data-testid="grid-view-item-image"]'

    def fetch(self, query: ImageQuery) -> Optional[str]:
        html = self.get_html(self.SEARCH_URL.format(query=quote_plus(query.text)))
        url = self.first_item_image_url(html)
        if not url:
            logger.debug(f"Walmart: no grid item image for '{query.text}'")
        return url

    def first_item_image_url(self, html: str) -> Optional[str]:
        """src of the <img> inside the first grid item, if absolute."""
        soup = BeautifulSoup(html, "html.parser")
        item = soup.select_one(self.ITEM_IMAGE_SELECTOR)
        if not item:
            return None

        img = item if item.name == "img" else item.find("img")
        src = img.get("src") if img else None
        if src and src.startswith("http"):
            return src
        return None
