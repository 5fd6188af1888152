"""
Tests for duplicate grouping and survivor ranking.
"""

from decimal import Decimal
from types import SimpleNamespace

from catalog.services.duplicate_grouper import (
    GroupingConfig,
    group_duplicates,
    partition_by_canonical_key,
    rank_entries,
)


def entry(id, name, price="0", description=""):
    return SimpleNamespace(
        id=id,
        name=name,
        price=Decimal(price),
        long_description=description,
    )


LONG = "x" * 51


class TestGroupDuplicates:
    """Grouping by canonical key."""

    def test_singletons_produce_no_group(self):
        assert group_duplicates([entry(1, "A"), entry(2, "B")]) == []

    def test_groups_case_and_punctuation_variants(self):
        groups = group_duplicates([
            entry(1, "Now Foods Vitamin C"),
            entry(2, "NOW FOODS vitamin-c"),
            entry(3, "Carlson Fish Oil"),
        ])

        assert len(groups) == 1
        assert groups[0].canonical_key == "nowfoodsvitaminc"
        assert sorted(groups[0].entry_ids) == [1, 2]

    def test_exactly_one_survivor_per_group(self):
        entries = [entry(i, "Same Name") for i in range(1, 6)]

        groups = group_duplicates(entries)

        assert len(groups) == 1
        assert len(groups[0].losers) == 4
        assert groups[0].survivor.id not in groups[0].loser_ids

    def test_groups_sorted_by_key(self):
        groups = group_duplicates([
            entry(1, "Zinc"), entry(2, "zinc"),
            entry(3, "Arnica"), entry(4, "ARNICA"),
        ])
        assert [g.canonical_key for g in groups] == ["arnica", "zinc"]

    def test_empty_key_entries_are_never_grouped(self):
        groups = group_duplicates([
            entry(1, "!!!"),
            entry(2, ""),
            entry(3, "日本茶", "10.00"),
            entry(4, "高丽参", "12.00"),
        ])
        assert groups == []

    def test_empty_key_does_not_hide_other_groups(self):
        groups = group_duplicates([
            entry(1, "!!!"), entry(2, "???"),
            entry(3, "Zinc"), entry(4, "ZINC"),
        ])
        assert [g.canonical_key for g in groups] == ["zinc"]

    def test_partition_keeps_input_order(self):
        partitions = partition_by_canonical_key([entry(2, "a"), entry(1, "A")])
        assert [e.id for e in partitions["a"]] == [2, 1]


class TestSurvivorRanking:
    """Non-zero price > non-placeholder price > long description > larger id."""

    def test_non_zero_price_beats_zero(self):
        ranked = rank_entries([entry(5, "x", "0", LONG), entry(1, "x", "25.00")])
        assert ranked[0].id == 1

    def test_real_price_beats_placeholder(self):
        ranked = rank_entries([entry(5, "x", "25.00", LONG), entry(1, "x", "12.00")])
        assert ranked[0].id == 1

    def test_long_description_beats_short(self):
        ranked = rank_entries([entry(5, "x", "12.00", "short"), entry(1, "x", "12.00", LONG)])
        assert ranked[0].id == 1

    def test_description_must_exceed_threshold(self):
        ranked = rank_entries([entry(1, "x", "12.00", "x" * 50), entry(2, "x", "12.00")])
        assert ranked[0].id == 2

    def test_larger_id_wins_tie(self):
        ranked = rank_entries([entry(1, "x", "12.00"), entry(9, "x", "12.00"), entry(4, "x", "12.00")])
        assert [e.id for e in ranked] == [9, 4, 1]

    def test_custom_placeholder(self):
        config = GroupingConfig(placeholder_price=Decimal("9.99"))
        ranked = rank_entries([entry(5, "x", "9.99"), entry(1, "x", "25.00")], config)
        assert ranked[0].id == 1

    def test_missing_price_counts_as_zero(self):
        unpriced = SimpleNamespace(id=9, name="x", price=None, long_description="")
        ranked = rank_entries([unpriced, entry(1, "x", "3.00")])
        assert ranked[0].id == 1

    def test_priced_entry_beats_unset_and_placeholder(self):
        groups = group_duplicates([
            entry(3, "Carlson Fish Oil", "0"),
            entry(2, "carlson fish-oil", "25.00"),
            entry(1, "CARLSON FISH OIL", "19.99"),
        ])

        assert groups[0].survivor.id == 1
        assert groups[0].loser_ids == [2, 3]
