"""
Project package for the Catalog Reconciliation Service.

Imports the Celery app so shared_task decorators bind to it when Django starts.
"""

from .celery import app as celery_app

__all__ = ("celery_app",)
