"""
Product name normalization utility functions.

Provides the canonical comparison key used to group duplicate products, the
slug rule for brand and category rows, and the tokenizer behind
word-boundary keyword matching.

Normalization Rules:
- Lowercase transformation
- Strip a trailing "SKU: ..." annotation
- Trim whitespace
- Drop every character that is not a lowercase ASCII letter or digit
"""

import re
from typing import List, Optional

# Trailing SKU annotation left behind by the scraper, e.g. "Vitamin C SKU: 1234"
SKU_SUFFIX_PATTERN = re.compile(r"(?:^|\s+)sku:.*$", re.IGNORECASE | re.DOTALL)

NON_ALPHANUMERIC_PATTERN = re.compile(r"[^a-z0-9]")
NON_ALPHANUMERIC_RUN_PATTERN = re.compile(r"[^a-z0-9]+")
TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


def normalize(name: Optional[str]) -> str:
    """
    Normalize a product name into its canonical grouping key.

    The SKU suffix is stripped before characters are collapsed, so the
    literal "sku" inside an annotation never survives into the key.
    The result is only used for grouping and is never shown to users.

    Args:
        name: The product name to normalize

    Returns:
        The canonical key (possibly empty)

    Example:
        >>> normalize("Dr. Tony's Blood Sugar SKU: 12345")
        'drtonysbloodsugar'
    """
    if not name:
        return ""

    result = name.lower()

    result = SKU_SUFFIX_PATTERN.sub("", result)

    result = result.strip()

    return NON_ALPHANUMERIC_PATTERN.sub("", result)


def slugify_label(name: Optional[str]) -> str:
    """
    Derive the slug for a brand or category name.

    Every run of non-alphanumeric characters becomes a single hyphen and
    leading/trailing hyphens are trimmed.

    Example:
        >>> slugify_label("Nature's Plus")
        'nature-s-plus'
    """
    if not name:
        return ""

    return NON_ALPHANUMERIC_RUN_PATTERN.sub("-", name.lower()).strip("-")


def tokenize(text: Optional[str]) -> List[str]:
    """
    Split text into lowercase alphanumeric tokens.

    Example:
        >>> tokenize("HI-Tech Pharmaceuticals")
        ['hi', 'tech', 'pharmaceuticals']
    """
    if not text:
        return []

    return TOKEN_PATTERN.findall(text.lower())
