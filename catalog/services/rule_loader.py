"""
Rule Table Loader.

Builds the brand and category RuleTables for one run. Active
ClassificationRuleRecord rows are preferred; when a label type has no active
rows the defaults in catalog.rules are used. Tables are built fresh on
every call and never cached across runs.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from django.conf import settings

from catalog.models import ClassificationRuleRecord, LabelType
from catalog.rules import DEFAULT_BRAND_RULES, DEFAULT_CATEGORY_RULES
from catalog.services.classifier import ClassificationRule, RuleTable

logger = logging.getLogger(__name__)

DEFAULT_RULES = {
    LabelType.BRAND: DEFAULT_BRAND_RULES,
    LabelType.CATEGORY: DEFAULT_CATEGORY_RULES,
}


def sentinel_name(label_type: str) -> str:
    """Return the configured sentinel label name for a label type."""
    if label_type == LabelType.BRAND:
        return getattr(settings, "CATALOG_UNKNOWN_BRAND_NAME", "Unknown")
    return getattr(settings, "CATALOG_GENERAL_CATEGORY_NAME", "General")


def rules_from_pairs(pairs: Iterable[Tuple[str, Sequence[str]]]) -> List[ClassificationRule]:
    """Convert (target, keywords) pairs into ClassificationRules."""
    return [ClassificationRule(target, tuple(keywords)) for target, keywords in pairs]


def load_rule_table(label_type: str, match_mode: Optional[str] = None) -> RuleTable:
    """
    Load the rule table for one label type.

    Args:
        label_type: LabelType.BRAND or LabelType.CATEGORY
        match_mode: Keyword match mode (default from settings)

    Returns:
        RuleTable with the sentinel as its default label
    """
    match_mode = match_mode or getattr(settings, "CATALOG_KEYWORD_MATCH_MODE", "word")

    records = ClassificationRuleRecord.objects.filter(
        label_type=label_type,
        is_active=True,
    ).order_by("sort_order", "id")

    rules = [
        ClassificationRule(record.target_label_name, tuple(record.keywords or []))
        for record in records
    ]

    if rules:
        logger.debug(f"Loaded {len(rules)} {label_type} rules from the database")
    else:
        rules = rules_from_pairs(DEFAULT_RULES[label_type])
        logger.debug(f"No active {label_type} rules stored, using {len(rules)} defaults")

    return RuleTable(
        label_type=label_type,
        default_label=sentinel_name(label_type),
        rules=rules,
        match_mode=match_mode,
    )


def load_rule_tables(match_mode: Optional[str] = None) -> Tuple[RuleTable, RuleTable]:
    """Load (brand_table, category_table) for a run."""
    return (
        load_rule_table(LabelType.BRAND, match_mode),
        load_rule_table(LabelType.CATEGORY, match_mode),
    )
