"""
Django admin configuration for catalog models.

Rule tables are edited here; reconciliation runs are read-only.
"""

import json

from django.contrib import admin
from django.db.models import Count
from django.utils.html import format_html

from catalog.models import (
    Brand,
    Category,
    ClassificationRuleRecord,
    Product,
    ProductImage,
    ReconciliationRun,
    ReconciliationRunStatus,
)


class LabelAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "product_count", "updated_at"]
    search_fields = ["name", "slug"]
    readonly_fields = ["created_at", "updated_at"]
    ordering = ["name"]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(product_count=Count("products"))

    @admin.display(description="Products", ordering="product_count")
    def product_count(self, obj):
        return obj.product_count


admin.site.register(Brand, LabelAdmin)
admin.site.register(Category, LabelAdmin)


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 0
    fields = ["image_url", "alt_text", "is_primary", "source"]


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "brand", "category", "price", "updated_at"]
    list_filter = ["brand", "category"]
    search_fields = ["name", "sku"]
    list_select_related = ["brand", "category"]
    readonly_fields = ["created_at", "updated_at"]
    inlines = [ProductImageInline]


@admin.register(ClassificationRuleRecord)
class ClassificationRuleRecordAdmin(admin.ModelAdmin):
    """
    Admin interface for classification rules.

    Rules are evaluated in sort_order; the first match wins.
    """

    list_display = ["target_label_name", "label_type", "sort_order", "keyword_list", "is_active"]
    list_filter = ["label_type", "is_active"]
    list_editable = ["sort_order", "is_active"]
    search_fields = ["target_label_name"]
    ordering = ["label_type", "sort_order", "id"]

    @admin.display(description="Keywords")
    def keyword_list(self, obj):
        return ", ".join(obj.keywords or [])


@admin.register(ReconciliationRun)
class ReconciliationRunAdmin(admin.ModelAdmin):
    """Read-only view of maintenance runs and their reports."""

    list_display = ["id", "kind", "status_badge", "dry_run", "started_at", "duration_display"]
    list_filter = ["kind", "status", "dry_run"]
    readonly_fields = [
        "kind",
        "status",
        "dry_run",
        "started_at",
        "completed_at",
        "report_display",
        "error_message",
    ]
    exclude = ["report"]
    ordering = ["-started_at"]

    def has_add_permission(self, request):
        return False

    @admin.display(description="Status")
    def status_badge(self, obj):
        colors = {
            ReconciliationRunStatus.RUNNING: "#17a2b8",
            ReconciliationRunStatus.COMPLETED: "#28a745",
            ReconciliationRunStatus.FAILED: "#dc3545",
        }
        return format_html(
            '<span style="color: {};">{}</span>',
            colors.get(obj.status, "#6c757d"),
            obj.get_status_display(),
        )

    @admin.display(description="Duration")
    def duration_display(self, obj):
        seconds = obj.duration_seconds
        if seconds is None:
            return "-"
        return f"{seconds:.1f}s"

    @admin.display(description="Report")
    def report_display(self, obj):
        return format_html("<pre>{}</pre>", json.dumps(obj.report, indent=2))
