"""
Image URL checks shared by the resolver and the providers.
"""

from typing import Any, Iterable

from django.conf import settings

DEFAULT_DENYLIST = (
    "bat.bing.com",
    "pixel.gif",
    "tracking",
    "analytics",
    "placeholder",
    "data:image",
    "logo",
    "icon",
    "spinner",
    "loading",
    "1x1",
    "banner",
    "searchbann",
)


def configured_denylist() -> tuple:
    """settings.CATALOG_IMAGE_URL_DENYLIST, or the default markers."""
    return tuple(getattr(settings, "CATALOG_IMAGE_URL_DENYLIST", DEFAULT_DENYLIST))


def is_valid_image_url(url: Any, denylist: Iterable[str] = DEFAULT_DENYLIST) -> bool:
    """
    Check whether a candidate URL is usable as a product image.

    The URL must be an http(s) string and contain none of the denylisted
    substrings (case-insensitive). Surrounding whitespace is ignored.
    """
    if not isinstance(url, str) or not url:
        return False

    lowered = url.strip().lower()
    if not lowered.startswith(("http://", "https://")):
        return False

    return not any(marker.lower() in lowered for marker in denylist)
