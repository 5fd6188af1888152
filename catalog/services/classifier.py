"""
Rule-Table Classifier.

Assigns a brand or category name to a product from its free-text name by
walking an ordered rule table. The first rule with a matching keyword wins;
there is no scoring and no longest-match preference. When nothing matches
the table's default (sentinel) label is returned, so classification never
fails.

Keyword Matching Modes:
    word (default):
        Keyword and product name are tokenized on non-alphanumeric
        boundaries. A keyword matches when its tokens appear as a
        contiguous run of the name's tokens, so "Now" matches
        "Now Foods C-1000" but not "Known Remedy".

    substring:
        Case-insensitive substring containment against the raw name.
        This reproduces the storefront cleanup scripts, including their
        false positives ("Now" inside "Known").

Example:
    >>> table = RuleTable(
    ...     label_type="brand",
    ...     default_label="Unknown",
    ...     rules=[ClassificationRule("Now Foods", ["Now"])],
    ... )
    >>> table.classify("Now Foods Vitamin C")
    'Now Foods'
    >>> table.classify("Unbranded Widget 500mg")
    'Unknown'
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from catalog.utils.normalization import tokenize

logger = logging.getLogger(__name__)

MATCH_MODE_WORD = "word"
MATCH_MODE_SUBSTRING = "substring"
MATCH_MODES = (MATCH_MODE_WORD, MATCH_MODE_SUBSTRING)


@dataclass(frozen=True)
class ClassificationRule:
    """
    One (target label, keywords) pair of a rule table.

    Keywords keep their authored order; they are stored as a tuple so a
    loaded rule cannot be mutated during a run.
    """

    target_label_name: str
    keywords: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "keywords", tuple(self.keywords))

    def matches(self, name: str, match_mode: str = MATCH_MODE_WORD) -> bool:
        """Return True if any keyword matches the product name."""
        if match_mode == MATCH_MODE_SUBSTRING:
            haystack = (name or "").lower()
            return any(
                keyword and keyword.lower() in haystack
                for keyword in self.keywords
            )

        name_tokens = tokenize(name)
        return any(
            _contains_token_run(name_tokens, tokenize(keyword))
            for keyword in self.keywords
        )


def _contains_token_run(tokens: Sequence[str], needle: Sequence[str]) -> bool:
    """Check whether needle occurs as a contiguous run inside tokens."""
    if not needle or len(needle) > len(tokens):
        return False

    width = len(needle)
    first = needle[0]
    for start in range(len(tokens) - width + 1):
        if tokens[start] == first and list(tokens[start:start + width]) == list(needle):
            return True
    return False


def classify(
    name: str,
    rules: Iterable[ClassificationRule],
    default: str,
    match_mode: str = MATCH_MODE_WORD,
) -> str:
    """
    Classify a product name against an ordered list of rules.

    Args:
        name: Raw (non-normalized) product name
        rules: Rules in evaluation order
        default: Label returned when no rule matches
        match_mode: "word" or "substring"

    Returns:
        The target label name of the first matching rule, or default
    """
    for rule in rules:
        if rule.matches(name, match_mode):
            return rule.target_label_name
    return default


class RuleTable:
    """
    Immutable, ordered rule table for one label type.

    Built once per run from configuration and only read afterwards.
    """

    def __init__(
        self,
        label_type: str,
        default_label: str,
        rules: Iterable[ClassificationRule],
        match_mode: str = MATCH_MODE_WORD,
    ):
        if match_mode not in MATCH_MODES:
            raise ValueError(
                f"Unknown keyword match mode '{match_mode}', expected one of {MATCH_MODES}"
            )

        self.label_type = label_type
        self.default_label = default_label
        self.match_mode = match_mode
        self._rules = tuple(rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    def __repr__(self) -> str:
        return (
            f"RuleTable(label_type={self.label_type!r}, default_label={self.default_label!r}, "
            f"rules={len(self._rules)}, match_mode={self.match_mode!r})"
        )

    @property
    def rules(self) -> Tuple[ClassificationRule, ...]:
        return self._rules

    @property
    def target_names(self) -> List[str]:
        """Target label names in table order, without duplicates."""
        seen = []
        for rule in self._rules:
            if rule.target_label_name not in seen:
                seen.append(rule.target_label_name)
        return seen

    def classify(self, name: str) -> str:
        """Classify a product name, falling back to the default label."""
        return classify(name, self._rules, self.default_label, self.match_mode)

    def match(self, name: str) -> Optional[ClassificationRule]:
        """Return the first matching rule, or None when the default applies."""
        for rule in self._rules:
            if rule.matches(name, self.match_mode):
                return rule
        return None
