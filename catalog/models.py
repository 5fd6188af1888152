"""
Django models for the Catalog Reconciliation Service.

Models: Brand, Category, Product, ProductImage, ClassificationRuleRecord,
        ReconciliationRun

Brand, Category, Product and ProductImage map onto the storefront catalog
tables. ClassificationRuleRecord holds the operator-editable rule tables and
ReconciliationRun records each batch job for review.
"""

from decimal import Decimal
from django.db import models
from django.utils import timezone
from django.core.validators import MinValueValidator

from catalog.utils.normalization import slugify_label


class LabelType(models.TextChoices):
    """Kinds of label a product carries."""

    BRAND = "brand", "Brand"
    CATEGORY = "category", "Category"


class ReconciliationRunKind(models.TextChoices):
    """Batch jobs recorded as ReconciliationRun rows."""

    RECONCILE = "reconcile", "Catalog Reconciliation"
    RESOLVE_IMAGES = "resolve_images", "Image Resolution"


class ReconciliationRunStatus(models.TextChoices):
    """Status of a reconciliation run."""

    RUNNING = "running", "Running"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class Label(models.Model):
    """
    Shared fields for Brand and Category.

    Names are unique case-insensitively (enforced by the reconciler, which
    looks labels up with iexact); slugs are derived from the name.
    """

    name = models.CharField(
        max_length=200,
        help_text="Display name",
    )
    slug = models.SlugField(
        max_length=200,
        unique=True,
        blank=True,
        help_text="URL-safe identifier",
    )
    description = models.TextField(
        blank=True,
        default="",
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        """Auto-generate slug if not provided."""
        if not self.slug:
            base_slug = slugify_label(self.name) or "label"
            self.slug = base_slug
            # Ensure uniqueness
            counter = 1
            while type(self).objects.filter(slug=self.slug).exclude(id=self.id).exists():
                self.slug = f"{base_slug}-{counter}"
                counter += 1
        super().save(*args, **kwargs)


class Brand(Label):
    """Product brand. "Unknown" is the protected sentinel."""

    class Meta(Label.Meta):
        db_table = "brands"
        verbose_name = "Brand"
        verbose_name_plural = "Brands"


class Category(Label):
    """Product category. "General" is the protected sentinel."""

    class Meta(Label.Meta):
        db_table = "product_categories"
        verbose_name = "Category"
        verbose_name_plural = "Categories"


class Product(models.Model):
    """
    A product record as persisted by ingestion.

    A null brand or category resolves to the corresponding sentinel label.
    Labels are PROTECTed so a referenced brand or category can never be
    deleted out from under a product.
    """

    name = models.CharField(max_length=500)
    sku = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Not guaranteed unique across scrape runs",
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="0 means the price is unset",
    )
    long_description = models.TextField(blank=True, default="")

    brand = models.ForeignKey(
        Brand,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="products",
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="products",
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "products"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["name"], name="products_name_idx"),
            models.Index(fields=["sku"], name="products_sku_idx"),
        ]

    def __str__(self):
        return self.name

    @property
    def primary_image(self):
        """Return the primary ProductImage or None."""
        return self.images.filter(is_primary=True).order_by("id").first()

    @property
    def primary_image_url(self):
        """URL of the primary image, or None if the product has none."""
        image = self.primary_image
        if image and image.image_url:
            return image.image_url
        return None


class ProductImage(models.Model):
    """
    Images for products.

    At most one row per product should carry is_primary=True; the image
    resolver updates that row in place when it exists.
    """

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="images",
    )
    image_url = models.URLField(max_length=1000)
    alt_text = models.CharField(max_length=500, blank=True, default="")
    is_primary = models.BooleanField(default=False)
    source = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Provider that supplied the image",
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "product_images"
        ordering = ["-is_primary", "id"]
        indexes = [
            models.Index(fields=["product", "is_primary"], name="product_images_primary_idx"),
        ]

    def __str__(self):
        return f"{self.product} - {self.image_url}"


class ClassificationRuleRecord(models.Model):
    """
    One row of a brand or category rule table.

    Rules are evaluated in sort_order; the first rule whose keywords match a
    product name wins. Rows are configuration: reconciliation runs read
    them and never write them.
    """

    label_type = models.CharField(
        max_length=20,
        choices=LabelType.choices,
    )
    target_label_name = models.CharField(
        max_length=200,
        help_text="Brand or category assigned when a keyword matches",
    )
    keywords = models.JSONField(
        default=list,
        blank=True,
        help_text="Ordered list of keywords",
    )
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "classification_rules"
        ordering = ["label_type", "sort_order", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["label_type", "target_label_name"],
                name="unique_rule_target_per_label_type",
            ),
        ]
        verbose_name = "Classification Rule"
        verbose_name_plural = "Classification Rules"

    def __str__(self):
        return f"{self.label_type}: {self.target_label_name}"


class ReconciliationRun(models.Model):
    """
    Tracks individual reconciliation and image-resolution runs.

    The report JSON is the serialized ReconciliationReport or
    ImageResolutionReport of the run.
    """

    kind = models.CharField(
        max_length=20,
        choices=ReconciliationRunKind.choices,
    )
    status = models.CharField(
        max_length=20,
        choices=ReconciliationRunStatus.choices,
        default=ReconciliationRunStatus.RUNNING,
    )
    dry_run = models.BooleanField(default=False)

    # Timing
    started_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)

    # Results
    report = models.JSONField(default=dict, blank=True)
    error_message = models.TextField(blank=True, default="")

    class Meta:
        db_table = "reconciliation_runs"
        ordering = ["-started_at"]
        indexes = [
            models.Index(fields=["kind", "started_at"], name="reconciliation_runs_kind_idx"),
        ]

    def __str__(self):
        return f"Run {self.id} - {self.kind} ({self.status})"

    @property
    def duration_seconds(self):
        """Calculate run duration."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def complete(self, report: dict):
        """Mark run as completed and store its report."""
        self.status = ReconciliationRunStatus.COMPLETED
        self.completed_at = timezone.now()
        self.report = report
        self.save(update_fields=["status", "completed_at", "report"])

    def fail(self, error_message: str):
        """Mark run as failed."""
        self.status = ReconciliationRunStatus.FAILED
        self.completed_at = timezone.now()
        self.error_message = error_message
        self.save(update_fields=["status", "completed_at", "error_message"])
