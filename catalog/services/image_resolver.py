"""
Image Resolver.

Fills in missing primary images by asking an ordered list of providers.

Per product:
    Pending -> Trying(provider 1) -> Resolved
                                  -> Trying(provider 2) -> ... -> Unresolved

Providers are tried strictly in order; the first candidate URL
(stripped of surrounding whitespace) that passes is_valid_image_url() wins.
A provider that raises (including a timeout) counts as having no result.
A resolved URL is written as the product's primary image; an unresolved
product is left untouched.

Batch resolution runs products concurrently with a bounded thread pool.
Providers for a single product are always tried one after another.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from django.conf import settings
from django.db import DatabaseError, connections, transaction
from django.db.models import Exists, OuterRef, Q, QuerySet

from catalog.exceptions import ProviderError
from catalog.models import Product, ProductImage
from catalog.providers.base import ImageProvider, ImageQuery
from catalog.providers.registry import build_providers
from catalog.utils.images import DEFAULT_DENYLIST, configured_denylist, is_valid_image_url

logger = logging.getLogger(__name__)

REASON_NO_VALID_IMAGE = "no provider returned a valid image"
REASON_NO_PROVIDERS = "no providers configured"


class ResolutionStatus:
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


@dataclass
class ProviderAttempt:
    """Outcome of asking one provider."""

    provider_name: str
    succeeded: bool
    value: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider_name,
            "succeeded": self.succeeded,
            "value": self.value,
            "error": self.error,
        }


@dataclass
class AttributeResolutionAttempt:
    """Result of resolving the image of one product."""

    entry_id: int
    attempts: List[ProviderAttempt] = field(default_factory=list)
    status: str = ResolutionStatus.UNRESOLVED
    value: Optional[str] = None
    provider: Optional[str] = None
    reason: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "status": self.status,
            "value": self.value,
            "provider": self.provider,
            "reason": self.reason,
            "attempts": [attempt.to_dict() for attempt in self.attempts],
        }


@dataclass
class ImageResolutionReport:
    """Aggregate of a batch resolution."""

    processed: int = 0
    resolved: int = 0
    unresolved: int = 0
    unresolved_entries: List[int] = field(default_factory=list)
    by_provider: Dict[str, int] = field(default_factory=dict)
    attempts: List[AttributeResolutionAttempt] = field(default_factory=list)

    def add(self, attempt: AttributeResolutionAttempt) -> None:
        self.processed += 1
        self.attempts.append(attempt)
        if attempt.resolved:
            self.resolved += 1
            self.by_provider[attempt.provider] = self.by_provider.get(attempt.provider, 0) + 1
        else:
            self.unresolved += 1
            self.unresolved_entries.append(attempt.entry_id)

    def to_dict(self, include_attempts: bool = False) -> Dict[str, Any]:
        data = {
            "processed": self.processed,
            "resolved": self.resolved,
            "unresolved": self.unresolved,
            "unresolved_entries": sorted(self.unresolved_entries),
            "by_provider": dict(self.by_provider),
        }
        if include_attempts:
            data["attempts"] = [attempt.to_dict() for attempt in self.attempts]
        return data


@dataclass(frozen=True)
class ResolverConfig:
    denylist: Tuple[str, ...] = DEFAULT_DENYLIST
    max_workers: int = 4

    @classmethod
    def from_settings(cls) -> "ResolverConfig":
        return cls(
            denylist=configured_denylist(),
            max_workers=getattr(settings, "CATALOG_IMAGE_RESOLVER_WORKERS", 4),
        )


def products_missing_primary_image() -> QuerySet:
    """Products with no primary image, or only a primary image with an empty URL."""
    usable_primary = ProductImage.objects.filter(
        product=OuterRef("pk"),
        is_primary=True,
    ).exclude(Q(image_url="") | Q(image_url__isnull=True))

    return (
        Product.objects
        .select_related("brand")
        .annotate(has_primary=Exists(usable_primary))
        .filter(has_primary=False)
        .order_by("id")
    )


class ImageResolver:
    """
    Resolves product images through an ordered provider list.

    Args:
        providers: Providers in the order they are tried (from settings
            when omitted)
        config: ResolverConfig (from settings when omitted)
    """

    def __init__(
        self,
        providers: Optional[Sequence[ImageProvider]] = None,
        config: Optional[ResolverConfig] = None,
    ):
        self.config = config or ResolverConfig.from_settings()
        self.providers = list(providers) if providers is not None else build_providers()

    def query_for(self, entry: Product) -> ImageQuery:
        brand = entry.brand.name if entry.brand_id and entry.brand else None
        return ImageQuery(name=entry.name, brand=brand)

    def resolve_image(self, entry: Product) -> AttributeResolutionAttempt:
        """
        Try each provider in order and persist the first valid image.

        Args:
            entry: Product without a usable primary image

        Returns:
            AttributeResolutionAttempt recording every provider tried
        """
        result = AttributeResolutionAttempt(entry_id=entry.id)

        if not self.providers:
            result.reason = REASON_NO_PROVIDERS
            return result

        query = self.query_for(entry)

        for provider in self.providers:
            try:
                candidate = provider.fetch(query)
            except ProviderError as e:
                logger.warning(f"Provider {provider.name} failed for product {entry.id}: {e}")
                result.attempts.append(ProviderAttempt(provider.name, False, error=str(e)))
                continue
            except Exception as e:
                logger.exception(f"Provider {provider.name} crashed for product {entry.id}")
                result.attempts.append(ProviderAttempt(
                    provider.name,
                    False,
                    error=f"{type(e).__name__}: {e}",
                ))
                continue

            if isinstance(candidate, str):
                candidate = candidate.strip()

            if not is_valid_image_url(candidate, self.config.denylist):
                if candidate:
                    logger.debug(f"Provider {provider.name} returned rejected URL: {candidate}")
                result.attempts.append(ProviderAttempt(
                    provider.name,
                    False,
                    value=candidate,
                    error="rejected" if candidate else None,
                ))
                continue

            result.attempts.append(ProviderAttempt(provider.name, True, value=candidate))
            result.status = ResolutionStatus.RESOLVED
            result.value = candidate
            result.provider = provider.name
            self.save_primary_image(entry, candidate, provider.name)
            logger.info(f"Resolved image for product {entry.id} via {provider.name}")
            return result

        result.reason = REASON_NO_VALID_IMAGE
        logger.info(f"No image found for product {entry.id} ({len(result.attempts)} providers tried)")
        return result

    @staticmethod
    def save_primary_image(entry: Product, url: str, source: str) -> ProductImage:
        """Update the product's primary image row, or insert one."""
        with transaction.atomic():
            image = (
                ProductImage.objects
                .select_for_update()
                .filter(product_id=entry.id, is_primary=True)
                .order_by("id")
                .first()
            )
            if image is None:
                return ProductImage.objects.create(
                    product_id=entry.id,
                    image_url=url,
                    alt_text=entry.name[:500],
                    is_primary=True,
                    source=source,
                )

            image.image_url = url
            image.source = source
            image.save(update_fields=["image_url", "source", "updated_at"])
            return image

    def resolve_missing(
        self,
        products: Iterable[Product],
        max_workers: Optional[int] = None,
    ) -> ImageResolutionReport:
        """
        Resolve images for a batch of products concurrently.

        Each product is handled by one worker. A product whose resolution
        fails with a database error is reported as unresolved.

        Args:
            products: Products to resolve (see products_missing_primary_image)
            max_workers: Thread pool size (default from config)

        Returns:
            ImageResolutionReport
        """
        products = list(products)
        max_workers = max(1, max_workers or self.config.max_workers)
        report = ImageResolutionReport()

        if not products:
            return report

        logger.info(f"Resolving images for {len(products)} products with {max_workers} workers")

        if max_workers == 1:
            # Run inline so the caller's connection and transaction are used
            for product in products:
                report.add(self._resolve_safely(product, self.resolve_image))
            return self._finish(report)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_entry = {
                executor.submit(self._resolve_safely, product, self._resolve_in_worker): product
                for product in products
            }

            for future in as_completed(future_to_entry):
                report.add(future.result())

        return self._finish(report)

    @staticmethod
    def _resolve_safely(entry: Product, resolve) -> AttributeResolutionAttempt:
        try:
            return resolve(entry)
        except DatabaseError as e:
            logger.error(f"Failed to store image for product {entry.id}: {e}")
            return AttributeResolutionAttempt(
                entry_id=entry.id,
                reason=f"database error: {e}",
            )

    def _resolve_in_worker(self, entry: Product) -> AttributeResolutionAttempt:
        # Worker threads get their own DB connections; release them per task
        try:
            return self.resolve_image(entry)
        finally:
            connections.close_all()

    @staticmethod
    def _finish(report: ImageResolutionReport) -> ImageResolutionReport:
        report.attempts.sort(key=lambda attempt: attempt.entry_id)
        logger.info(
            f"Image resolution finished: {report.resolved}/{report.processed} resolved "
            f"({report.by_provider}), {report.unresolved} unresolved"
        )
        return report
