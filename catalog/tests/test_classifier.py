"""
Tests for the rule-table classifier.
"""

import pytest

from catalog.rules import DEFAULT_BRAND_RULES, DEFAULT_CATEGORY_RULES
from catalog.services.classifier import (
    MATCH_MODE_SUBSTRING,
    ClassificationRule,
    RuleTable,
    classify,
)
from catalog.services.rule_loader import rules_from_pairs


@pytest.fixture
def brand_table():
    return RuleTable("brand", "Unknown", rules_from_pairs(DEFAULT_BRAND_RULES))


@pytest.fixture
def category_table():
    return RuleTable("category", "General", rules_from_pairs(DEFAULT_CATEGORY_RULES))


class TestClassify:
    """First matching rule wins; no match returns the default."""

    def test_first_match_wins(self):
        rules = [
            ClassificationRule("Alpha", ("widget",)),
            ClassificationRule("Beta", ("super widget",)),
        ]
        assert classify("Super Widget", rules, "Unknown") == "Alpha"

    def test_default_when_nothing_matches(self):
        rules = [ClassificationRule("Alpha", ("widget",))]
        assert classify("Gadget", rules, "Unknown") == "Unknown"

    def test_empty_table_returns_default(self):
        assert classify("Anything", [], "General") == "General"

    def test_empty_name_returns_default(self):
        rules = [ClassificationRule("Alpha", ("widget",))]
        assert classify("", rules, "Unknown") == "Unknown"


class TestWordMatching:
    """Keywords match whole tokens in the default mode."""

    def test_multi_word_keyword_must_be_contiguous(self):
        rule = ClassificationRule("Blood Sugar", ("blood sugar",))
        assert rule.matches("Blood Sugar Support")
        assert not rule.matches("Sugar Free Blood Tonic")

    def test_keyword_inside_word_does_not_match(self):
        rule = ClassificationRule("Now Foods", ("Now",))
        assert not rule.matches("Known Remedy")
        assert rule.matches("Now Foods C-1000")

    def test_trailing_space_keyword(self):
        rule = ClassificationRule("Standard Enzyme", ("SE ",))
        assert rule.matches("SE Catalyn 360ct")
        assert not rule.matches("Seasonal Allergy")

    def test_substring_mode_matches_inside_words(self):
        rule = ClassificationRule("Now Foods", ("Now",))
        assert rule.matches("Known Remedy", MATCH_MODE_SUBSTRING)


class TestDefaultTables:
    """The shipped rule tables."""

    @pytest.mark.parametrize("name,expected", [
        ("Now Foods Vitamin C 1000mg", "Now Foods"),
        ("Natures Plus Source of Life", "Nature's Plus"),
        ("Hi Tech Lipodrene 90ct", "HI-Tech"),
        ("Host Defense Turkey Tail", "Host Defence"),
        ("Perrin's Naturals Nutrient Booster", "Perrin's Naturals"),
        ("Mystery Widget", "Unknown"),
    ])
    def test_brands(self, brand_table, name, expected):
        assert brand_table.classify(name) == expected

    @pytest.mark.parametrize("name,expected", [
        ("Glucose Balance Formula", "Blood Sugar"),
        ("Hemp Oil Tincture 1000mg", "CBD Shop"),
        ("Arnica Cream", "Homeopathic"),
        ("Melatonin 5mg", "Sleep Health"),
        ("Now Foods Vitamin C 1000mg", "Vitamins"),
        ("Mystery Widget", "General"),
    ])
    def test_categories(self, category_table, name, expected):
        assert category_table.classify(name) == expected


class TestRuleTable:
    def test_rejects_unknown_match_mode(self):
        with pytest.raises(ValueError, match="Unknown keyword match mode"):
            RuleTable("brand", "Unknown", [], match_mode="fuzzy")

    def test_match_returns_none_for_default(self, brand_table):
        assert brand_table.match("Mystery Widget") is None
        assert brand_table.match("Carlson Fish Oil").target_label_name == "Carlson"

    def test_target_names_keep_order(self):
        table = RuleTable("brand", "Unknown", [
            ClassificationRule("B", ("b",)),
            ClassificationRule("A", ("a",)),
            ClassificationRule("B", ("bb",)),
        ])
        assert table.target_names == ["B", "A"]
        assert len(table) == 3

    def test_rules_are_immutable(self):
        rule = ClassificationRule("Alpha", ["widget"])
        assert rule.keywords == ("widget",)
        with pytest.raises(AttributeError):
            rule.target_label_name = "Beta"
