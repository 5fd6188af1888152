"""
Duplicate Grouper.

Partitions a catalog snapshot into equivalence classes by canonical name
(see catalog.utils.normalization.normalize) and picks one survivor per class.

Survivor Ranking (each step only breaks ties left by the previous one):
1. A non-zero price beats a zero (unset) price
2. A price other than the placeholder price (default 25.00) beats it
3. A long description longer than the threshold (default 50) beats a
   shorter or empty one
4. The larger id beats the smaller id

The grouper is read-only: it never touches the database. Entries can be
Product instances or any object exposing id, name, price and
long_description.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Sequence, Tuple

from django.conf import settings

from catalog.utils.normalization import normalize

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION_MIN_LENGTH = 50
DEFAULT_PLACEHOLDER_PRICE = Decimal("25.00")


@dataclass(frozen=True)
class GroupingConfig:
    """Thresholds for survivor ranking."""

    description_min_length: int = DEFAULT_DESCRIPTION_MIN_LENGTH
    placeholder_price: Decimal = DEFAULT_PLACEHOLDER_PRICE

    @classmethod
    def from_settings(cls) -> "GroupingConfig":
        return cls(
            description_min_length=getattr(
                settings, "CATALOG_DESCRIPTION_MIN_LENGTH", DEFAULT_DESCRIPTION_MIN_LENGTH
            ),
            placeholder_price=_to_decimal(
                getattr(settings, "CATALOG_PLACEHOLDER_PRICE", DEFAULT_PLACEHOLDER_PRICE)
            ),
        )


@dataclass
class DuplicateGroup:
    """Entries sharing one canonical key: one survivor, one or more losers."""

    canonical_key: str
    survivor: Any
    losers: List[Any] = field(default_factory=list)

    @property
    def entry_ids(self) -> List[int]:
        return [self.survivor.id] + [loser.id for loser in self.losers]

    @property
    def loser_ids(self) -> List[int]:
        return [loser.id for loser in self.losers]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "canonical_key": self.canonical_key,
            "survivor_id": self.survivor.id,
            "loser_ids": self.loser_ids,
        }


def _to_decimal(value: Any) -> Decimal:
    """Coerce a price to Decimal; missing or malformed prices count as 0."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def survivor_rank_key(entry: Any, config: GroupingConfig = GroupingConfig()) -> Tuple:
    """
    Sort key for survivor ranking; the smallest key is the survivor.

    Booleans sort False before True, so each "is worse" flag pushes an
    entry down; the id is negated so larger ids sort first.
    """
    price = _to_decimal(getattr(entry, "price", None))
    description = getattr(entry, "long_description", None) or ""

    return (
        price == 0,
        price == config.placeholder_price,
        not len(description) > config.description_min_length,
        -int(entry.id),
    )


def rank_entries(entries: Sequence[Any], config: GroupingConfig = GroupingConfig()) -> List[Any]:
    """Return entries ordered best first."""
    return sorted(entries, key=lambda entry: survivor_rank_key(entry, config))


def partition_by_canonical_key(entries: Sequence[Any]) -> Dict[str, List[Any]]:
    """Group entries by normalize(name), keeping input order inside a group."""
    partitions = defaultdict(list)
    for entry in entries:
        partitions[normalize(entry.name)].append(entry)
    return dict(partitions)


def group_duplicates(
    entries: Sequence[Any],
    config: GroupingConfig = GroupingConfig(),
) -> List[DuplicateGroup]:
    """
    Find duplicate groups in a catalog snapshot.

    Partitions of size 1 produce no group. Products whose names normalize
    to the empty string (punctuation-only or non-Latin names) share no
    identity, so they are never grouped.

    Args:
        entries: Catalog entries to examine
        config: Ranking thresholds

    Returns:
        DuplicateGroups sorted by canonical key, losers in rank order
    """
    groups = []

    for key, members in sorted(partition_by_canonical_key(entries).items()):
        if not key:
            if len(members) > 1:
                logger.warning(
                    f"Skipping {len(members)} products with an empty canonical name: "
                    f"{[getattr(m, 'id', None) for m in members]}"
                )
            continue

        if len(members) < 2:
            continue

        ranked = rank_entries(members, config)
        groups.append(DuplicateGroup(
            canonical_key=key,
            survivor=ranked[0],
            losers=ranked[1:],
        ))

    if groups:
        logger.debug(
            f"Found {len(groups)} duplicate groups covering "
            f"{sum(len(g.losers) for g in groups)} losers"
        )

    return groups
