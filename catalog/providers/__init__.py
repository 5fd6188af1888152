"""
Image providers.

Each provider turns an ImageQuery (product name plus brand) into a candidate
image URL, or None. Providers are tried in the order configured by
CATALOG_IMAGE_PROVIDERS; see catalog.providers.registry.
"""

from catalog.providers.base import ImageProvider, ImageQuery
from catalog.providers.registry import PROVIDER_REGISTRY, build_providers

__all__ = [
    "ImageProvider",
    "ImageQuery",
    "PROVIDER_REGISTRY",
    "build_providers",
]
