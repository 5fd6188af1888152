"""
URL configuration for the Catalog Reconciliation Service.

The service has no public API; only the Django admin is mounted so operators
can edit classification rules and review reconciliation runs.
"""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    # Django Admin
    path("admin/", admin.site.urls),
]
