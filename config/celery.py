"""
Celery configuration for the Catalog Reconciliation Service.

This module configures Celery for the offline batch jobs (catalog
reconciliation and image resolution) on a dedicated maintenance queue.
"""

import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("catalog_reconciliation")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

# Configure task queues
app.conf.task_queues = {
    "maintenance": {
        "exchange": "maintenance",
        "routing_key": "maintenance",
    },
    "default": {
        "exchange": "default",
        "routing_key": "default",
    },
}

# Default task routing
app.conf.task_default_queue = "default"
app.conf.task_default_exchange = "default"
app.conf.task_default_routing_key = "default"

# Route batch jobs to the maintenance queue
app.conf.task_routes = {
    "catalog.tasks.reconcile_catalog_task": {"queue": "maintenance"},
    "catalog.tasks.resolve_missing_images_task": {"queue": "maintenance"},
}

# Configure Celery Beat schedule for periodic tasks
app.conf.beat_schedule = {
    "reconcile-catalog-nightly": {
        "task": "catalog.tasks.reconcile_catalog_task",
        "schedule": crontab(hour=3, minute=0),
    },
    # Runs after reconciliation so deleted duplicates are not resolved
    "resolve-missing-images-nightly": {
        "task": "catalog.tasks.resolve_missing_images_task",
        "schedule": crontab(hour=4, minute=0),
        "kwargs": {"limit": 200},
    },
}
