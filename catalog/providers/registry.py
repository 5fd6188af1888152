"""
Provider registry.

Maps the names used in CATALOG_IMAGE_PROVIDERS to provider classes.
"""

from typing import Dict, Iterable, List, Optional, Type

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from catalog.providers.amazon import AmazonImageProvider
from catalog.providers.base import ImageProvider
from catalog.providers.duckduckgo import DuckDuckGoImageProvider
from catalog.providers.google_images import GoogleImagesProvider
from catalog.providers.iherb import IHerbImageProvider
from catalog.providers.walmart import WalmartImageProvider

PROVIDER_REGISTRY: Dict[str, Type[ImageProvider]] = {
    provider.name: provider
    for provider in (
        AmazonImageProvider,
        WalmartImageProvider,
        IHerbImageProvider,
        DuckDuckGoImageProvider,
        GoogleImagesProvider,
    )
}


def build_providers(
    names: Optional[Iterable[str]] = None,
    timeout: Optional[float] = None,
) -> List[ImageProvider]:
    """
    Instantiate providers in the given order.

    Args:
        names: Provider names (default settings.CATALOG_IMAGE_PROVIDERS)
        timeout: Per-request timeout passed to every provider

    Raises:
        ImproperlyConfigured: If a name is not registered
    """
    if names is None:
        names = getattr(settings, "CATALOG_IMAGE_PROVIDERS", list(PROVIDER_REGISTRY))

    providers = []
    for name in names:
        name = name.strip()
        if not name:
            continue
        try:
            provider_class = PROVIDER_REGISTRY[name]
        except KeyError:
            raise ImproperlyConfigured(
                f"Unknown image provider '{name}'. Available: {sorted(PROVIDER_REGISTRY)}"
            )
        providers.append(provider_class(timeout=timeout))
    return providers
