"""
iHerb image provider.

Takes the product image of the first search result on iherb.com.
"""

import logging
from typing import Optional
from urllib.parse import quote_plus

from bs4 import BeautifulSoup

from catalog.providers.base import ImageProvider, ImageQuery

logger = logging.getLogger(__name__)


class IHerbImageProvider(ImageProvider):
    name = "iherb"

    SEARCH_URL = "https://www.iherb.com/search?kw={query}"
    IMAGE_SELECTOR = "a.product-image img"

    def fetch(self, query: ImageQuery) -> Optional[str]:
        html = self.get_html(self.SEARCH_URL.format(query=quote_plus(query.text)))
        return self.first_product_image_url(html)

    def first_product_image_url(self, html: str) -> Optional[str]:
        soup = BeautifulSoup(html, "html.parser")
        img = soup.select_one(self.IMAGE_SELECTOR)
        src = img.get("src") if img else None
        if src and src.startswith("http"):
            return src
        return None
