"""
Catalog Reconciliation Service.

Applies classification and duplicate-collapsing decisions to the catalog,
then compacts the brand and category tables.

Pipeline Order:
1. Ensure the sentinel labels ("Unknown" brand, "General" category) exist
2. Load every product once and classify it against both rule tables
3. Apply staged label changes, one transaction per product
4. Re-load products and group duplicates by canonical name
5. Delete the losers of each group, one transaction per group
6. Compact labels: merge junk and duplicate-named labels into their
   canonical label, then delete labels nothing references

Failure Semantics:
- A product whose labels cannot be updated is logged and skipped
- A duplicate group whose deletion fails is reported; other groups proceed
- Labels are PROTECTed foreign keys, so a label is never deleted while a
  product still references it

Running reconcile() on an already reconciled catalog is a no-op.

Usage:
    from catalog.services.reconciliation import CatalogReconciler

    report = CatalogReconciler().reconcile()
    print(report.to_dict())
"""

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count
from django.utils import timezone

from catalog.exceptions import CatalogReconciliationError, LabelResolutionError
from catalog.models import Brand, Category, LabelType, Product
from catalog.services.classifier import RuleTable
from catalog.services.duplicate_grouper import DuplicateGroup, GroupingConfig, group_duplicates
from catalog.services.rule_loader import load_rule_tables, sentinel_name
from catalog.utils.normalization import normalize, slugify_label

logger = logging.getLogger(__name__)

LABEL_MODELS = {
    LabelType.BRAND: Brand,
    LabelType.CATEGORY: Category,
}

# Product foreign key field per label type
LABEL_FIELDS = {
    LabelType.BRAND: "brand",
    LabelType.CATEGORY: "category",
}

DEFAULT_LABEL_MAX_NAME_LENGTH = 30
DEFAULT_JUNK_LABEL_MARKERS = ("Paging",)


@dataclass(frozen=True)
class ReconciliationConfig:
    """Per-run snapshot of the reconciliation settings."""

    grouping: GroupingConfig = GroupingConfig()
    match_mode: str = "word"
    preserve_unmatched_labels: bool = False
    label_max_name_length: int = DEFAULT_LABEL_MAX_NAME_LENGTH
    junk_label_markers: Tuple[str, ...] = DEFAULT_JUNK_LABEL_MARKERS

    @classmethod
    def from_settings(cls) -> "ReconciliationConfig":
        return cls(
            grouping=GroupingConfig.from_settings(),
            match_mode=getattr(settings, "CATALOG_KEYWORD_MATCH_MODE", "word"),
            preserve_unmatched_labels=getattr(
                settings, "CATALOG_PRESERVE_UNMATCHED_LABELS", False
            ),
            label_max_name_length=getattr(
                settings, "CATALOG_LABEL_MAX_NAME_LENGTH", DEFAULT_LABEL_MAX_NAME_LENGTH
            ),
            junk_label_markers=tuple(
                getattr(settings, "CATALOG_JUNK_LABEL_MARKERS", DEFAULT_JUNK_LABEL_MARKERS)
            ),
        )


@dataclass
class ReconciliationReport:
    """Counts and failures from one reconciliation run."""

    dry_run: bool = False
    entries_scanned: int = 0
    entries_reclassified: int = 0
    entries_deleted: int = 0
    duplicate_groups: int = 0
    labels_created: int = 0
    labels_deleted: int = 0
    labels_merged: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    failed_groups: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        """True when the run changed nothing."""
        return not (
            self.entries_reclassified
            or self.entries_deleted
            or self.labels_created
            or self.labels_deleted
            or self.labels_merged
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StagedClassification:
    """
    A label change for one product.

    brand_name/category_name are None when that label stays as it is.
    """

    entry_id: int
    brand_name: Optional[str] = None
    category_name: Optional[str] = None


class CatalogReconciler:
    """
    Orchestrates classification, duplicate removal and label compaction.

    Rule tables are loaded once per reconciler (defaults from the database
    or catalog.rules) and never mutated.

    Args:
        brand_table: Brand RuleTable (loaded when omitted)
        category_table: Category RuleTable (loaded when omitted)
        config: ReconciliationConfig (from settings when omitted)
        dry_run: Compute the report without writing anything
    """

    def __init__(
        self,
        brand_table: Optional[RuleTable] = None,
        category_table: Optional[RuleTable] = None,
        config: Optional[ReconciliationConfig] = None,
        dry_run: bool = False,
    ):
        self.config = config or ReconciliationConfig.from_settings()
        self.dry_run = dry_run

        if brand_table is None or category_table is None:
            loaded_brands, loaded_categories = load_rule_tables(self.config.match_mode)
            brand_table = brand_table or loaded_brands
            category_table = category_table or loaded_categories

        self.tables = {
            LabelType.BRAND: brand_table,
            LabelType.CATEGORY: category_table,
        }

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def reconcile(self) -> ReconciliationReport:
        """
        Run the full reconciliation pipeline.

        Returns:
            ReconciliationReport with counts and per-unit failures
        """
        report = ReconciliationReport(dry_run=self.dry_run)
        mode = "dry run" if self.dry_run else "live"
        logger.info(f"Starting catalog reconciliation ({mode})")

        self.ensure_sentinels(report)

        products = list(Product.objects.all().order_by("id"))
        report.entries_scanned = len(products)

        staged = self.stage_classifications(products)
        self.apply_classifications(staged, report)

        # Grouping must observe the post-classification catalog
        if not self.dry_run:
            products = list(Product.objects.all().order_by("id"))

        groups = group_duplicates(products, self.config.grouping)
        report.duplicate_groups = len(groups)
        self.delete_losers(groups, report)

        projected = None
        if self.dry_run:
            projected = self._project_references(products, staged, groups)

        for label_type in (LabelType.BRAND, LabelType.CATEGORY):
            self.compact_labels(label_type, report, projected_references=projected)

        logger.info(
            f"Reconciliation finished ({mode}): "
            f"{report.entries_scanned} scanned, "
            f"{report.entries_reclassified} reclassified, "
            f"{report.entries_deleted} deleted in {report.duplicate_groups} groups, "
            f"{report.labels_created} labels created, "
            f"{report.labels_merged} merged, "
            f"{report.labels_deleted} deleted, "
            f"{len(report.errors)} errors"
        )

        return report

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def find_label(self, label_type: str, name: str):
        """
        Find a label by name, preferring an exact match over a case variant.
        """
        model = LABEL_MODELS[label_type]
        label = model.objects.filter(name=name).order_by("id").first()
        if label is None:
            label = model.objects.filter(name__iexact=name).order_by("id").first()
        return label

    def get_or_create_label(self, label_type: str, name: str):
        """
        Return (label, created) for a label name.

        A unique-slug collision during creation (another writer created the
        row first) is recovered by re-querying by name and then by slug.

        Raises:
            LabelResolutionError: If the row still cannot be found
        """
        label = self.find_label(label_type, name)
        if label is not None:
            return label, False

        model = LABEL_MODELS[label_type]
        try:
            with transaction.atomic():
                label = model.objects.create(name=name)
            logger.info(f"Created {label_type} '{name}' (slug: {label.slug})")
            return label, True
        except IntegrityError as e:
            logger.warning(f"Conflict creating {label_type} '{name}', re-querying: {e}")

        label = self.find_label(label_type, name)
        if label is None:
            label = model.objects.filter(slug=slugify_label(name)).first()
        if label is None:
            raise LabelResolutionError(label_type, name)
        return label, False

    def ensure_sentinels(self, report: ReconciliationReport) -> None:
        """Make sure both sentinel labels exist."""
        for label_type in (LabelType.BRAND, LabelType.CATEGORY):
            name = sentinel_name(label_type)
            if self.dry_run:
                if self.find_label(label_type, name) is None:
                    report.labels_created += 1
                continue

            _, created = self.get_or_create_label(label_type, name)
            if created:
                report.labels_created += 1

    def _sentinel(self, label_type: str):
        return self.find_label(label_type, sentinel_name(label_type))

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def stage_classifications(self, products: Sequence[Product]) -> List[StagedClassification]:
        """
        Classify every product and stage the ones whose labels change.

        A null foreign key compares as its sentinel, so a product with no
        brand that classifies to "Unknown" is staged once to make the
        sentinel explicit.
        """
        label_ids = {
            label_type: {} for label_type in LABEL_MODELS
        }
        staged = []

        for product in products:
            change = StagedClassification(entry_id=product.id)

            for label_type, table in self.tables.items():
                fk_name = LABEL_FIELDS[label_type]
                current_id = getattr(product, f"{fk_name}_id")

                if table.match(product.name) is None:
                    if self.config.preserve_unmatched_labels and current_id is not None:
                        continue
                    target_name = table.default_label
                else:
                    target_name = table.classify(product.name)

                if target_name not in label_ids[label_type]:
                    label = self.find_label(label_type, target_name)
                    label_ids[label_type][target_name] = label.id if label else None
                target_id = label_ids[label_type][target_name]

                if target_id is None or target_id != current_id:
                    setattr(change, f"{fk_name}_name", target_name)

            if change.brand_name is not None or change.category_name is not None:
                staged.append(change)

        logger.info(f"Staged label changes for {len(staged)} of {len(products)} products")
        return staged

    def apply_classifications(
        self,
        staged: Sequence[StagedClassification],
        report: ReconciliationReport,
    ) -> None:
        """
        Write staged label changes, one transaction per product.

        Failures are logged and recorded; the remaining products are still
        processed.
        """
        if self.dry_run:
            report.entries_reclassified += len(staged)
            pending = set()
            for change in staged:
                for label_type, name in (
                    (LabelType.BRAND, change.brand_name),
                    (LabelType.CATEGORY, change.category_name),
                ):
                    if name is None or name.lower() == sentinel_name(label_type).lower():
                        # Missing sentinels are counted by ensure_sentinels()
                        continue
                    if self.find_label(label_type, name) is None:
                        pending.add((label_type, name.lower()))
            report.labels_created += len(pending)
            return

        for change in staged:
            created = 0
            try:
                with transaction.atomic():
                    updates = {"updated_at": timezone.now()}
                    for label_type, name in (
                        (LabelType.BRAND, change.brand_name),
                        (LabelType.CATEGORY, change.category_name),
                    ):
                        if name is None:
                            continue
                        label, was_created = self.get_or_create_label(label_type, name)
                        created += int(was_created)
                        updates[LABEL_FIELDS[label_type]] = label

                    Product.objects.filter(id=change.entry_id).update(**updates)
            except (DatabaseError, CatalogReconciliationError) as e:
                logger.error(f"Failed to reclassify product {change.entry_id}: {e}")
                report.errors.append({
                    "entry_id": change.entry_id,
                    "stage": "classification",
                    "error": str(e),
                })
                continue

            report.entries_reclassified += 1
            report.labels_created += created

    # ------------------------------------------------------------------
    # Duplicates
    # ------------------------------------------------------------------

    def delete_losers(self, groups: Sequence[DuplicateGroup], report: ReconciliationReport) -> None:
        """
        Delete the losers of every duplicate group, one transaction per group.

        Product images cascade with their product. A failed group is rolled
        back as a whole and reported.
        """
        for group in groups:
            logger.info(
                f"Group '{group.canonical_key}': keeping {group.survivor.id}, "
                f"deleting {group.loser_ids}"
            )

            if self.dry_run:
                report.entries_deleted += len(group.losers)
                continue

            try:
                with transaction.atomic():
                    _, deleted = Product.objects.filter(id__in=group.loser_ids).delete()
            except DatabaseError as e:
                logger.error(f"Failed to delete duplicates for '{group.canonical_key}': {e}")
                report.failed_groups.append({
                    **group.to_dict(),
                    "error": str(e),
                })
                continue

            report.entries_deleted += deleted.get(Product._meta.label, 0)

    # ------------------------------------------------------------------
    # Compaction
    # ------------------------------------------------------------------

    def is_junk_name(self, name: str) -> bool:
        """Oversized names and names carrying a placeholder marker are junk."""
        if len(name) > self.config.label_max_name_length:
            return True
        lowered = name.lower()
        return any(marker.lower() in lowered for marker in self.config.junk_label_markers)

    def plan_merges(self, label_type: str, labels: Sequence[Any]) -> Dict[int, Optional[Any]]:
        """
        Decide which labels are merged away and where their products go.

        Returns:
            Mapping of junk label id -> canonical label. The canonical label
            is None only when the sentinel does not exist yet (dry run).
        """
        table = self.tables[label_type]
        sentinel_lower = sentinel_name(label_type).lower()
        target_names = set(table.target_names)
        protected = {name.lower() for name in target_names} | {sentinel_lower}

        sentinel = None
        for label in labels:
            if label.name.lower() == sentinel_lower and (
                sentinel is None or label.name == sentinel_name(label_type)
            ):
                sentinel = label

        def preference(label) -> Tuple:
            return (
                label is not sentinel,
                label.name not in target_names,
                label.name.lower() not in protected,
                label.id,
            )

        merges = {}

        by_key = defaultdict(list)
        for label in labels:
            by_key[normalize(label.name)].append(label)

        canonical_for = {}
        for members in by_key.values():
            canonical = min(members, key=preference)
            for label in members:
                canonical_for[label.id] = canonical

        for label in labels:
            if label is sentinel:
                continue

            canonical = canonical_for[label.id]
            if canonical is not label:
                target = canonical
                if canonical.name.lower() not in protected and self.is_junk_name(canonical.name):
                    target = sentinel
                merges[label.id] = target
            elif label.name.lower() not in protected and self.is_junk_name(label.name):
                merges[label.id] = sentinel

        return merges

    def compact_labels(
        self,
        label_type: str,
        report: ReconciliationReport,
        projected_references: Optional[Dict[str, Dict[int, int]]] = None,
    ) -> None:
        """
        Merge junk/duplicate labels, then delete unreferenced labels.

        The sentinel is never merged away or deleted.
        """
        model = LABEL_MODELS[label_type]
        fk_name = LABEL_FIELDS[label_type]
        labels = list(model.objects.all().order_by("id"))
        merges = self.plan_merges(label_type, labels)
        sentinel = self._sentinel(label_type)

        if self.dry_run:
            counts = defaultdict(int, (projected_references or {}).get(label_type, {}))
            for label_id, target in merges.items():
                logger.info(f"Would merge {label_type} {label_id} into {target or 'sentinel'}")
                if target is not None:
                    counts[target.id] += counts[label_id]
                counts[label_id] = 0
            report.labels_merged += len(merges)
            report.labels_deleted += sum(
                1 for label in labels
                if label.id not in merges
                and (sentinel is None or label.id != sentinel.id)
                and counts[label.id] == 0
            )
            return

        by_id = {label.id: label for label in labels}
        for label_id, target in merges.items():
            label = by_id[label_id]
            target = target or sentinel
            try:
                with transaction.atomic():
                    moved = Product.objects.filter(**{fk_name: label}).update(
                        **{fk_name: target, "updated_at": timezone.now()}
                    )
                    label.delete()
            except DatabaseError as e:
                logger.error(f"Failed to merge {label_type} '{label.name}' into '{target}': {e}")
                report.errors.append({
                    "label_type": label_type,
                    "label_id": label_id,
                    "stage": "merge",
                    "error": str(e),
                })
                continue

            logger.info(
                f"Merged {label_type} '{label.name}' into '{target.name}' ({moved} products moved)"
            )
            report.labels_merged += 1

        unused = model.objects.annotate(
            reference_count=Count("products"),
        ).filter(reference_count=0)
        if sentinel is not None:
            unused = unused.exclude(id=sentinel.id)

        for label in unused.order_by("id"):
            try:
                with transaction.atomic():
                    # Re-check inside the transaction; PROTECT backs this up
                    if Product.objects.filter(**{fk_name: label}).exists():
                        continue
                    label.delete()
            except DatabaseError as e:
                logger.error(f"Failed to delete unused {label_type} '{label.name}': {e}")
                report.errors.append({
                    "label_type": label_type,
                    "label_id": label.id,
                    "stage": "delete",
                    "error": str(e),
                })
                continue

            logger.info(f"Deleted unused {label_type} '{label.name}'")
            report.labels_deleted += 1

    def _project_references(
        self,
        products: Sequence[Product],
        staged: Sequence[StagedClassification],
        groups: Sequence[DuplicateGroup],
    ) -> Dict[str, Dict[int, int]]:
        """
        Reference counts per label as they would be after a live run.

        Used by dry runs, which cannot read post-mutation counts.
        """
        staged_by_id = {change.entry_id: change for change in staged}
        deleted_ids = {loser.id for group in groups for loser in group.losers}
        sentinels = {
            label_type: self._sentinel(label_type) for label_type in LABEL_MODELS
        }
        counts = {label_type: defaultdict(int) for label_type in LABEL_MODELS}

        for product in products:
            if product.id in deleted_ids:
                continue

            change = staged_by_id.get(product.id)
            for label_type in LABEL_MODELS:
                fk_name = LABEL_FIELDS[label_type]
                new_name = getattr(change, f"{fk_name}_name") if change else None

                if new_name is not None:
                    label = self.find_label(label_type, new_name)
                    label_id = label.id if label else None
                else:
                    label_id = getattr(product, f"{fk_name}_id")
                    if label_id is None and sentinels[label_type] is not None:
                        label_id = sentinels[label_type].id

                if label_id is not None:
                    counts[label_type][label_id] += 1

        return {label_type: dict(values) for label_type, values in counts.items()}
