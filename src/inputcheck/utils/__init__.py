"""Pipeline utilities."""

from inputcheck.utils.slug import derive_canonical_query, slugify, vault_slug
from inputcheck.utils.text import (
    first_sentence,
    has_url,
    is_near_duplicate,
    split_sentences,
    strip_urls,
    token_overlap,
)

__all__ = [
    "derive_canonical_query",
    "first_sentence",
    "has_url",
    "is_near_duplicate",
    "slugify",
    "split_sentences",
    "strip_urls",
    "token_overlap",
    "vault_slug",
]
