"""
Celery tasks for catalog maintenance.

Both tasks are routed to the maintenance queue (config/celery.py) and
scheduled nightly by Celery Beat: reconciliation first, image resolution
an hour later so deleted duplicates are not resolved.
"""

import logging
from typing import Any, Dict, List, Optional

from celery import shared_task

from catalog.services.maintenance import run_image_resolution, run_reconciliation

logger = logging.getLogger(__name__)


@shared_task(name="catalog.tasks.reconcile_catalog_task")
def reconcile_catalog_task(dry_run: bool = False) -> Dict[str, Any]:
    """
    Reconcile labels and duplicates across the catalog.

    Args:
        dry_run: Compute the report without writing

    Returns:
        Dict with the run id and the reconciliation report
    """
    logger.info(f"Reconcile task started (dry_run={dry_run})")
    run, report = run_reconciliation(dry_run=dry_run)

    return {
        "run_id": run.id,
        "status": run.status,
        "report": report.to_dict(),
    }


@shared_task(name="catalog.tasks.resolve_missing_images_task")
def resolve_missing_images_task(
    limit: Optional[int] = None,
    max_workers: Optional[int] = None,
    providers: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Resolve primary images for products that have none.

    Args:
        limit: Maximum number of products to process
        max_workers: Thread pool size
        providers: Provider names in the order they are tried

    Returns:
        Dict with the run id and the resolution report
    """
    logger.info(f"Image resolution task started (limit={limit})")
    run, report = run_image_resolution(
        limit=limit,
        max_workers=max_workers,
        provider_names=providers,
    )

    return {
        "run_id": run.id,
        "status": run.status,
        "report": report.to_dict(),
    }
