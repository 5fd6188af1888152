"""
Sentry error tracking for catalog maintenance runs.

The SDK itself is initialised in config/settings/base.py when SENTRY_DSN is
set; without a DSN every call here is a no-op.

- Breadcrumbs mark the phases of a run (classification, grouping, ...)
- Run-level failures are captured with the run kind and its report
- Provider failures during image resolution become breadcrumbs only

Usage:
    from catalog.monitoring import capture_reconciliation_error

    try:
        report = CatalogReconciler().reconcile()
    except Exception as e:
        capture_reconciliation_error(e, run_kind="reconcile")
        raise
"""

import logging
from typing import Any, Dict, Optional

import sentry_sdk

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {
    "api_key",
    "apikey",
    "authorization",
    "password",
    "secret",
    "token",
}


def _filter_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Replace values of sensitive keys, recursing into nested dicts."""
    if not isinstance(data, dict):
        return data

    filtered = {}
    for key, value in data.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
            filtered[key] = "[Filtered]"
        elif isinstance(value, dict):
            filtered[key] = _filter_sensitive_data(value)
        else:
            filtered[key] = value
    return filtered


def add_reconciliation_breadcrumb(
    message: str,
    run_kind: str,
    level: str = "info",
    extra_data: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Add a breadcrumb describing a step of a maintenance run.

    Args:
        message: Description of the step
        run_kind: "reconcile" or "resolve_images"
        level: Breadcrumb level (info, warning, error)
        extra_data: Additional context, filtered for sensitive keys
    """
    data = {"run_kind": run_kind}
    if extra_data:
        data.update(_filter_sensitive_data(extra_data))

    sentry_sdk.add_breadcrumb(
        category="catalog",
        message=message,
        level=level,
        data=data,
    )


def capture_reconciliation_error(
    error: Exception,
    run_kind: str,
    run_id: Optional[int] = None,
    extra_context: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Capture a failed maintenance run to Sentry.

    Args:
        error: The exception that aborted the run
        run_kind: "reconcile" or "resolve_images"
        run_id: ReconciliationRun id, when one was recorded
        extra_context: Additional context (partial report, options)
    """
    add_reconciliation_breadcrumb(
        message=f"Error: {type(error).__name__}",
        run_kind=run_kind,
        level="error",
        extra_data=extra_context,
    )

    with sentry_sdk.new_scope() as scope:
        scope.set_tag("catalog.run_kind", run_kind)
        if run_id is not None:
            scope.set_extra("run_id", run_id)
        if extra_context:
            scope.set_extra("run_context", _filter_sensitive_data(extra_context))
        sentry_sdk.capture_exception(error)

    logger.debug(f"Captured {run_kind} error to Sentry: {error}")


def capture_partial_failure(
    message: str,
    run_kind: str,
    failures: int,
    extra_data: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Report a run that finished with per-entry or per-group failures.
    """
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("catalog.run_kind", run_kind)
        scope.set_extra("failures", failures)
        if extra_data:
            scope.set_extra("run_data", _filter_sensitive_data(extra_data))
        sentry_sdk.capture_message(message, level="warning")
