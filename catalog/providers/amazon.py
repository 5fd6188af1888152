"""
Amazon image provider.

Searches amazon.com, opens the first organic result and reads the main
product image from the detail page.
"""

import logging
from typing import Optional
from urllib.parse import quote_plus, urljoin

from bs4 import BeautifulSoup

from catalog.providers.base import ImageProvider, ImageQuery

logger = logging.getLogger(__name__)


class AmazonImageProvider(ImageProvider):
    name = "amazon"

    BASE_URL = "https://www.amazon.com"
    SEARCH_URL = BASE_URL + "/s?k={query}"
    RESULT_SELECTOR = "div.s-main-slot div[data-asin][data-component-type='s-search-result']"
    LINK_SELECTOR = "h2 a.a-link-normal, a.a-link-normal.s-no-outline"

    def fetch(self, query: ImageQuery) -> Optional[str]:
        search_html = self.get_html(self.SEARCH_URL.format(query=quote_plus(query.text)))
        detail_url = self.first_result_url(search_html)
        if not detail_url:
            logger.debug(f"Amazon: no search result for '{query.text}'")
            return None

        return self.main_image_url(self.get_html(detail_url))

    def first_result_url(self, html: str) -> Optional[str]:
        """Absolute URL of the first organic search result."""
        soup = BeautifulSoup(html, "html.parser")
        for result in soup.select(self.RESULT_SELECTOR):
            if not result.get("data-asin"):
                continue
            link = result.select_one(self.LINK_SELECTOR)
            if link and link.get("href"):
                return urljoin(self.BASE_URL, link["href"])
        return None

    @staticmethod
    def main_image_url(html: str) -> Optional[str]:
        """Read the landing image, falling back to the hi-res and dynamic images."""
        soup = BeautifulSoup(html, "html.parser")

        landing = soup.select_one("img#landingImage")
        if landing:
            url = landing.get("data-old-hires") or landing.get("src")
            if url:
                return url

        hires = soup.select_one("img[data-old-hires]")
        if hires and hires.get("data-old-hires"):
            return hires["data-old-hires"]

        dynamic = soup.select_one("img.a-dynamic-image")
        if dynamic and dynamic.get("src"):
            return dynamic["src"]

        return None
