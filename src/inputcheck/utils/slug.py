# SPDX-License-Identifier: MIT
"""Slug & canonical-query derivation.

Pure and deterministic: the same cleaned question always yields the same slug
and canonical query, and ``slugify(slugify(x)) == slugify(x)``.
"""

from __future__ import annotations

import hashlib
import re
import unicodedata

from inputcheck.utils.text import STOPWORDS, normalize_whitespace, tokenize

DEFAULT_SLUG_MAX_LENGTH = 80
UNTITLED_SLUG = "inputcheck-untitled"
HASHED_SLUG_PREFIX = "q-"
HASHED_SLUG_DIGEST_CHARS = 12

CANONICAL_MAX_WORDS = 12

# canonical_query 앞부분에서 제거할 의문사/조동사
_LEADING_WORDS = frozenset(
    {
        "what", "whats", "what's", "why", "how", "when", "where", "who", "which",
        "is", "are", "was", "were", "do", "does", "did", "can", "could", "should",
        "would", "will", "i", "im", "i'm", "you", "we", "it", "there", "causes", "cause", "my", "your",
        "a", "an", "the", "please", "tell", "me", "explain", "know", "about", "if",
    }
)  # fmt: skip


def slugify(text: str, max_length: int = DEFAULT_SLUG_MAX_LENGTH) -> str:
    """텍스트 → URL-safe slug.

    lowercase, 영숫자 이외 문자열은 하이픈 하나로, 앞뒤 하이픈 제거, 단어 경계에서 길이 제한.

    Args:
        text: 원본 텍스트
        max_length: 최대 길이

    Returns:
        slug (빈 입력이면 "")
    """
    folded = unicodedata.normalize("NFKD", text or "").encode("ascii", "ignore").decode("ascii")
    folded = re.sub(r"['`]", "", folded.lower())
    slug = re.sub(r"[^a-z0-9]+", "-", folded).strip("-")

    if len(slug) > max_length:
        cut = slug[:max_length]
        if slug[max_length] != "-" and "-" in cut:
            cut = cut.rsplit("-", 1)[0]
        slug = cut.strip("-")

    return slug


def vault_slug(cleaned_question: str, max_length: int = DEFAULT_SLUG_MAX_LENGTH) -> str:
    """vault_node.slug.

    빈 질문은 고정 slug, ASCII로 접히지 않는 질문(CJK 등)은 질문 해시 기반 slug.
    """
    slug = slugify(cleaned_question, max_length)
    if slug:
        return slug
    if not tokenize(cleaned_question):
        return UNTITLED_SLUG
    digest = hashlib.sha256(normalize_whitespace(cleaned_question).encode("utf-8")).hexdigest()
    return f"{HASHED_SLUG_PREFIX}{digest[:HASHED_SLUG_DIGEST_CHARS]}"


def derive_canonical_query(cleaned_question: str, max_words: int = CANONICAL_MAX_WORDS) -> str:
    """cleaned_question → 짧은 검색 구문 (entity + attribute).

    의문사/조동사 제거, 구두점/따옴표 제거, 최대 ``max_words`` 단어.
    """
    words = [w.replace("’", "'") for w in tokenize(cleaned_question)]
    if not words:
        return ""

    start = 0
    while start < len(words) - 1 and words[start] in _LEADING_WORDS:
        start += 1
    # short cores stay short: "What is JSON?" -> "json"
    core = words[start:]

    if len(core) > max_words:
        head, rest = core[:1], core[1:]
        rest = [w for w in rest if w.replace("'", "") not in STOPWORDS]
        core = (head + rest)[:max_words]

    return " ".join(w.replace("'", "") for w in core)


__all__ = [
    "DEFAULT_SLUG_MAX_LENGTH",
    "UNTITLED_SLUG",
    "HASHED_SLUG_PREFIX",
    "slugify",
    "vault_slug",
    "derive_canonical_query",
]
