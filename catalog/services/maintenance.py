"""
Recorded maintenance runs.

Wraps reconciliation and image resolution in a ReconciliationRun row so
every batch (Celery task or management command) leaves an audit record
with its report. A run that raises is marked failed, captured to Sentry
and the exception re-raised.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from catalog.models import ReconciliationRun, ReconciliationRunKind
from catalog.monitoring import (
    add_reconciliation_breadcrumb,
    capture_partial_failure,
    capture_reconciliation_error,
)
from catalog.providers.registry import build_providers
from catalog.services.image_resolver import (
    ImageResolutionReport,
    ImageResolver,
    products_missing_primary_image,
)
from catalog.services.reconciliation import CatalogReconciler, ReconciliationReport

logger = logging.getLogger(__name__)


def run_reconciliation(dry_run: bool = False) -> Tuple[ReconciliationRun, ReconciliationReport]:
    """
    Reconcile the catalog and record the run.

    Returns:
        (ReconciliationRun, ReconciliationReport)
    """
    run = ReconciliationRun.objects.create(
        kind=ReconciliationRunKind.RECONCILE,
        dry_run=dry_run,
    )
    add_reconciliation_breadcrumb(
        "Reconciliation started",
        run_kind=ReconciliationRunKind.RECONCILE,
        extra_data={"run_id": run.id, "dry_run": dry_run},
    )

    try:
        report = CatalogReconciler(dry_run=dry_run).reconcile()
    except Exception as e:
        logger.error(f"Reconciliation run {run.id} failed: {e}")
        run.fail(str(e))
        capture_reconciliation_error(
            e,
            run_kind=ReconciliationRunKind.RECONCILE,
            run_id=run.id,
            extra_context={"dry_run": dry_run},
        )
        raise

    run.complete(report.to_dict())

    failures = len(report.errors) + len(report.failed_groups)
    if failures:
        capture_partial_failure(
            f"Reconciliation run {run.id} finished with {failures} failures",
            run_kind=ReconciliationRunKind.RECONCILE,
            failures=failures,
            extra_data={"run_id": run.id},
        )

    return run, report


def run_image_resolution(
    limit: Optional[int] = None,
    max_workers: Optional[int] = None,
    provider_names: Optional[Iterable[str]] = None,
) -> Tuple[ReconciliationRun, ImageResolutionReport]:
    """
    Resolve images for products missing a primary image and record the run.

    Args:
        limit: Maximum number of products to process
        max_workers: Thread pool size (default from settings)
        provider_names: Provider order (default from settings)

    Returns:
        (ReconciliationRun, ImageResolutionReport)
    """
    options: Dict[str, Any] = {
        "limit": limit,
        "max_workers": max_workers,
        "providers": list(provider_names) if provider_names is not None else None,
    }
    run = ReconciliationRun.objects.create(kind=ReconciliationRunKind.RESOLVE_IMAGES)
    add_reconciliation_breadcrumb(
        "Image resolution started",
        run_kind=ReconciliationRunKind.RESOLVE_IMAGES,
        extra_data={"run_id": run.id, **options},
    )

    try:
        resolver = ImageResolver(providers=build_providers(options["providers"]))
        products = products_missing_primary_image()
        if limit:
            products = products[:limit]
        report = resolver.resolve_missing(products, max_workers=max_workers)
    except Exception as e:
        logger.error(f"Image resolution run {run.id} failed: {e}")
        run.fail(str(e))
        capture_reconciliation_error(
            e,
            run_kind=ReconciliationRunKind.RESOLVE_IMAGES,
            run_id=run.id,
            extra_context=options,
        )
        raise

    run.complete(report.to_dict())
    return run, report
