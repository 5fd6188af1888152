"""
Tests for CatalogReconciler.

Covers:
- Reclassification against the default rule tables
- Duplicate removal and survivor choice
- Label compaction (junk merge, duplicate-name merge, unused deletion)
- Idempotence and dry-run parity
- Per-entry and per-group failure isolation
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError, IntegrityError
from django.db.models import ProtectedError
from django.db.models.query import QuerySet
from django.test import override_settings

from catalog.exceptions import LabelResolutionError
from catalog.models import Brand, Category, LabelType, Product, ProductImage
from catalog.services.classifier import ClassificationRule, RuleTable
from catalog.services.duplicate_grouper import group_duplicates
from catalog.services.reconciliation import (
    CatalogReconciler,
    ReconciliationConfig,
    ReconciliationReport,
)


def label_names(model):
    return sorted(model.objects.values_list("name", flat=True))


@pytest.mark.django_db
class TestReclassification:
    """Products are assigned the first matching rule target, else the sentinel."""

    def test_assigns_brand_and_category_from_rules(self, make_product):
        product = make_product("Now Foods Vitamin C 1000mg", price="12.00")

        report = CatalogReconciler().reconcile()

        product.refresh_from_db()
        assert product.brand.name == "Now Foods"
        assert product.category.name == "Vitamins"
        assert report.entries_reclassified == 1

    def test_unmatched_product_gets_sentinels(self, make_product):
        product = make_product("Mystery Widget")

        CatalogReconciler().reconcile()

        product.refresh_from_db()
        assert product.brand.name == "Unknown"
        assert product.category.name == "General"

    def test_sentinels_created_even_for_empty_catalog(self):
        report = CatalogReconciler().reconcile()

        assert Brand.objects.filter(name="Unknown").exists()
        assert Category.objects.filter(name="General").exists()
        assert report.labels_created == 2
        assert report.entries_scanned == 0

    def test_unmatched_product_reset_even_with_real_label(self, make_product):
        acme = Brand.objects.create(name="Acme Labs")
        product = make_product("Mystery Widget", brand=acme)

        CatalogReconciler().reconcile()

        product.refresh_from_db()
        assert product.brand.name == "Unknown"
        assert not Brand.objects.filter(name="Acme Labs").exists()

    @override_settings(CATALOG_PRESERVE_UNMATCHED_LABELS=True)
    def test_unmatched_product_keeps_real_label_when_preserving(self, make_product):
        acme = Brand.objects.create(name="Acme Labs")
        product = make_product("Mystery Widget", brand=acme)

        CatalogReconciler().reconcile()

        product.refresh_from_db()
        assert product.brand_id == acme.id

    def test_reuses_case_variant_of_target_label(self, make_product):
        existing = Brand.objects.create(name="NOW FOODS")
        product = make_product("Now Foods Omega-3")

        report = CatalogReconciler().reconcile()

        product.refresh_from_db()
        assert product.brand_id == existing.id
        assert Brand.objects.filter(name__iexact="now foods").count() == 1
        # Only the two sentinels are new
        assert report.labels_created == 2

    def test_first_matching_rule_wins(self, make_product):
        tables = (
            RuleTable(LabelType.BRAND, "Unknown", [
                ClassificationRule("Alpha", ("widget",)),
                ClassificationRule("Beta", ("widget",)),
            ]),
            RuleTable(LabelType.CATEGORY, "General", []),
        )
        product = make_product("Super Widget")

        CatalogReconciler(brand_table=tables[0], category_table=tables[1]).reconcile()

        product.refresh_from_db()
        assert product.brand.name == "Alpha"

    @override_settings(CATALOG_KEYWORD_MATCH_MODE="substring")
    def test_substring_mode_matches_inside_words(self, make_product):
        tables = (
            RuleTable(LabelType.BRAND, "Unknown", [ClassificationRule("Now Foods", ("Now",))],
                      match_mode="substring"),
            RuleTable(LabelType.CATEGORY, "General", [], match_mode="substring"),
        )
        product = make_product("Known Remedy")

        CatalogReconciler(brand_table=tables[0], category_table=tables[1]).reconcile()

        product.refresh_from_db()
        assert product.brand.name == "Now Foods"


@pytest.mark.django_db
class TestDuplicateRemoval:
    """One survivor per canonical name; losers are deleted with their images."""

    def test_keeps_priced_entry(self, make_product):
        cheap = make_product("Now Foods Vitamin C 1000mg", price="0.00")
        priced = make_product("NOW FOODS vitamin-c 1000mg", price="19.99")

        report = CatalogReconciler().reconcile()

        assert list(Product.objects.values_list("id", flat=True)) == [priced.id]
        assert not Product.objects.filter(id=cheap.id).exists()
        assert report.duplicate_groups == 1
        assert report.entries_deleted == 1

    def test_placeholder_price_loses_to_real_price(self, make_product):
        make_product("Flexcin Joint Cream", price="25.00")
        real = make_product("Flexcin Joint Cream", price="31.50")

        CatalogReconciler().reconcile()

        assert list(Product.objects.values_list("id", flat=True)) == [real.id]

    def test_long_description_breaks_price_tie(self, make_product):
        described = make_product(
            "Enzymedica Digest Gold",
            price="40.00",
            long_description="A thorough description of a digestive enzyme blend, well over fifty characters.",
        )
        make_product("Enzymedica Digest Gold", price="40.00", long_description="Short")

        CatalogReconciler().reconcile()

        assert list(Product.objects.values_list("id", flat=True)) == [described.id]

    def test_newest_entry_wins_full_tie(self, make_product):
        make_product("Carlson Fish Oil", price="10.00")
        newest = make_product("Carlson Fish Oil", price="10.00")

        CatalogReconciler().reconcile()

        assert list(Product.objects.values_list("id", flat=True)) == [newest.id]

    def test_sku_suffix_does_not_split_group(self, make_product):
        make_product("Carlson Fish Oil SKU: 1234", price="10.00")
        make_product("Carlson Fish Oil", price="10.00")

        report = CatalogReconciler().reconcile()

        assert report.duplicate_groups == 1
        assert Product.objects.count() == 1

    def test_loser_images_are_removed(self, make_product):
        loser = make_product("Carlson Fish Oil", price="0.00")
        ProductImage.objects.create(
            product=loser,
            image_url="https://example.com/fish-oil.jpg",
            is_primary=True,
        )
        make_product("Carlson Fish Oil", price="10.00")

        CatalogReconciler().reconcile()

        assert ProductImage.objects.count() == 0

    def test_failed_group_is_reported_and_rolled_back(self, make_product):
        make_product("Carlson Fish Oil", price="0.00")
        make_product("Carlson Fish Oil", price="10.00")
        reconciler = CatalogReconciler()
        report = ReconciliationReport()
        groups = group_duplicates(list(Product.objects.all()))

        with patch.object(QuerySet, "delete", side_effect=DatabaseError("database is locked")):
            reconciler.delete_losers(groups, report)

        assert Product.objects.count() == 2
        assert report.entries_deleted == 0
        assert len(report.failed_groups) == 1
        assert report.failed_groups[0]["canonical_key"] == "carlsonfishoil"
        assert "database is locked" in report.failed_groups[0]["error"]

    def test_names_without_canonical_key_are_kept(self, make_product):
        green_tea = make_product("日本茶", price="10.00")
        ginseng = make_product("高丽参", price="12.00")

        report = CatalogReconciler().reconcile()

        assert sorted(Product.objects.values_list("id", flat=True)) == [green_tea.id, ginseng.id]
        assert report.duplicate_groups == 0
        assert report.entries_deleted == 0


@pytest.mark.django_db
class TestLabelCompaction:
    """Junk and duplicate labels are merged; unreferenced labels are deleted."""

    @override_settings(CATALOG_PRESERVE_UNMATCHED_LABELS=True)
    def test_paging_category_merged_into_general(self, make_product):
        paging = Category.objects.create(name="Paging 2 of 40")
        product = make_product("Mystery Widget", category=paging)

        report = CatalogReconciler().reconcile()

        product.refresh_from_db()
        assert product.category.name == "General"
        assert not Category.objects.filter(id=paging.id).exists()
        assert report.labels_merged == 1

    @override_settings(CATALOG_PRESERVE_UNMATCHED_LABELS=True)
    def test_oversized_brand_merged_into_unknown(self, make_product):
        junk = Brand.objects.create(name="Click Here For More Great Products Today")
        product = make_product("Mystery Widget", brand=junk)

        CatalogReconciler().reconcile()

        product.refresh_from_db()
        assert product.brand.name == "Unknown"

    @override_settings(CATALOG_PRESERVE_UNMATCHED_LABELS=True)
    def test_duplicate_named_labels_collapse_to_oldest(self, make_product):
        first = Brand.objects.create(name="Acme Labs")
        second = Brand.objects.create(name="ACME-LABS")
        a = make_product("Acme Thing", brand=first)
        b = make_product("Acme Other", brand=second)

        report = CatalogReconciler().reconcile()

        a.refresh_from_db()
        b.refresh_from_db()
        assert a.brand_id == first.id
        assert b.brand_id == first.id
        assert not Brand.objects.filter(id=second.id).exists()
        assert report.labels_merged == 1

    def test_rule_target_wins_duplicate_group(self, make_product):
        variant = Brand.objects.create(name="Now-Foods")
        target = Brand.objects.create(name="Now Foods")
        product = make_product("Now Foods Omega-3", brand=variant)

        CatalogReconciler().reconcile()

        product.refresh_from_db()
        assert product.brand_id == target.id
        assert not Brand.objects.filter(id=variant.id).exists()

    def test_unreferenced_labels_deleted(self, make_product):
        Brand.objects.create(name="Orphan Brand")
        Category.objects.create(name="Orphan Category")

        report = CatalogReconciler().reconcile()

        assert label_names(Brand) == ["Unknown"]
        assert label_names(Category) == ["General"]
        assert report.labels_deleted == 2

    def test_sentinels_never_deleted(self):
        CatalogReconciler().reconcile()
        CatalogReconciler().reconcile()

        assert Brand.objects.filter(name="Unknown").exists()
        assert Category.objects.filter(name="General").exists()

    def test_referenced_label_is_protected(self, make_product):
        brand = Brand.objects.create(name="Carlson")
        make_product("Carlson Fish Oil", brand=brand)

        with pytest.raises(ProtectedError):
            brand.delete()

    def test_every_product_references_existing_labels(self, messy_catalog):
        CatalogReconciler().reconcile()

        for product in Product.objects.all():
            assert Brand.objects.filter(id=product.brand_id).exists()
            assert Category.objects.filter(id=product.category_id).exists()


@pytest.mark.django_db
class TestFullRun:
    """End-to-end behaviour on a messy catalog."""

    def test_messy_catalog_report(self, messy_catalog):
        report = CatalogReconciler().reconcile()

        assert report.entries_scanned == 3
        assert report.entries_reclassified == 2
        assert report.duplicate_groups == 1
        assert report.entries_deleted == 1
        assert report.labels_created == 2
        assert report.labels_merged == 2
        assert report.labels_deleted == 1
        assert report.errors == []
        assert report.failed_groups == []

    def test_messy_catalog_final_state(self, messy_catalog):
        CatalogReconciler().reconcile()

        assert label_names(Brand) == ["Now Foods", "Unknown"]
        assert label_names(Category) == ["General", "Vitamins"]

        priced = Product.objects.get(id=messy_catalog["products"]["priced"].id)
        mystery = Product.objects.get(id=messy_catalog["products"]["mystery"].id)
        assert priced.brand.name == "Now Foods"
        assert priced.category.name == "Vitamins"
        assert mystery.brand.name == "Unknown"
        assert mystery.category.name == "General"

    def test_second_run_is_noop(self, messy_catalog):
        CatalogReconciler().reconcile()
        snapshot = list(Product.objects.values_list("id", "brand_id", "category_id"))

        report = CatalogReconciler().reconcile()

        assert report.is_noop
        assert list(Product.objects.values_list("id", "brand_id", "category_id")) == snapshot

    def test_dry_run_writes_nothing(self, messy_catalog):
        before = (
            list(Product.objects.values_list("id", "brand_id", "category_id")),
            label_names(Brand),
            label_names(Category),
        )

        report = CatalogReconciler(dry_run=True).reconcile()

        after = (
            list(Product.objects.values_list("id", "brand_id", "category_id")),
            label_names(Brand),
            label_names(Category),
        )
        assert before == after
        assert report.dry_run is True

    def test_dry_run_predicts_live_run(self, messy_catalog):
        predicted = CatalogReconciler(dry_run=True).reconcile().to_dict()
        actual = CatalogReconciler().reconcile().to_dict()

        predicted.pop("dry_run")
        actual.pop("dry_run")
        assert predicted == actual

    def test_label_failure_skips_only_that_product(self, make_product):
        failing = make_product("Now Foods Vitamin C 1000mg", price="10.00")
        other = make_product("Carlson Fish Oil", price="10.00")
        original = CatalogReconciler.get_or_create_label

        def flaky(self, label_type, name):
            if name == "Now Foods":
                raise LabelResolutionError(label_type, name)
            return original(self, label_type, name)

        with patch.object(CatalogReconciler, "get_or_create_label", autospec=True, side_effect=flaky):
            report = CatalogReconciler().reconcile()

        failing.refresh_from_db()
        other.refresh_from_db()
        assert other.brand.name == "Carlson"
        # The whole product update rolled back, category included
        assert failing.brand_id is None
        assert failing.category_id is None
        assert report.errors[0]["entry_id"] == failing.id
        assert report.entries_reclassified == 1


@pytest.mark.django_db
class TestGetOrCreateLabel:
    """Label lookup and creation, including recovery from creation conflicts."""

    def test_returns_existing_case_variant(self):
        existing = Brand.objects.create(name="CARLSON")

        label, created = CatalogReconciler().get_or_create_label(LabelType.BRAND, "Carlson")

        assert label == existing
        assert created is False

    def test_creates_missing_label(self):
        label, created = CatalogReconciler().get_or_create_label(LabelType.CATEGORY, "Herbal Teas")

        assert created is True
        assert label.slug == "herbal-teas"

    def test_conflict_recovered_by_name(self):
        existing = Brand.objects.create(name="Carlson")
        reconciler = CatalogReconciler()
        original = CatalogReconciler.find_label
        calls = []

        def missing_first_time(self, label_type, name):
            calls.append(name)
            if len(calls) == 1:
                return None
            return original(self, label_type, name)

        with patch.object(CatalogReconciler, "find_label", autospec=True, side_effect=missing_first_time), \
                patch.object(Brand.objects, "create", side_effect=IntegrityError("UNIQUE constraint failed")):
            label, created = reconciler.get_or_create_label(LabelType.BRAND, "Carlson")

        assert label == existing
        assert created is False
        assert Brand.objects.count() == 1

    def test_conflict_recovered_by_slug(self):
        existing = Brand.objects.create(name="Carlson Labs", slug="carlson")

        with patch.object(Brand.objects, "create", side_effect=IntegrityError("UNIQUE constraint failed")):
            label, created = CatalogReconciler().get_or_create_label(LabelType.BRAND, "Carlson!")

        assert label == existing
        assert created is False

    def test_unrecoverable_conflict_raises(self):
        with patch.object(Brand.objects, "create", side_effect=IntegrityError("UNIQUE constraint failed")):
            with pytest.raises(LabelResolutionError):
                CatalogReconciler().get_or_create_label(LabelType.BRAND, "Carlson")

        assert not Brand.objects.exists()

class TestReconciliationConfig:
    """Settings snapshot."""

    @override_settings(CATALOG_PLACEHOLDER_PRICE=Decimal("9.99"), CATALOG_LABEL_MAX_NAME_LENGTH=12)
    def test_from_settings(self):
        config = ReconciliationConfig.from_settings()

        assert config.grouping.placeholder_price == Decimal("9.99")
        assert config.label_max_name_length == 12
        assert config.junk_label_markers == ("Paging",)

    def test_report_is_noop_only_without_changes(self):
        assert ReconciliationReport().is_noop
        assert not ReconciliationReport(labels_merged=1).is_noop
