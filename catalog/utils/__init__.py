"""
Utility functions for the catalog application.

- normalization.py: Canonical keys, label slugs and keyword tokens
- images.py: Image URL validation and the URL denylist
"""

from .images import DEFAULT_DENYLIST, is_valid_image_url
from .normalization import normalize, slugify_label, tokenize

__all__ = [
    "DEFAULT_DENYLIST",
    "is_valid_image_url",
    "normalize",
    "slugify_label",
    "tokenize",
]
