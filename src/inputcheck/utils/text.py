# SPDX-License-Identifier: MIT
"""Text helpers shared by the normalizer, classifier and validator."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List

STOPWORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "if", "of", "to", "in", "on", "at", "for", "with",
        "by", "from", "about", "as", "into", "is", "are", "was", "were", "be", "been", "being",
        "do", "does", "did", "can", "could", "should", "would", "will", "shall", "may", "might",
        "i", "im", "me", "my", "you", "your", "we", "our", "it", "its", "this", "that", "these",
        "those", "there", "what", "why", "how", "when", "where", "who", "which", "so", "just",
        "really", "also", "very", "any", "some", "not", "no", "dont", "know", "get", "got",
    }
)  # fmt: skip

# letters and digits of any script
RE_WORD = re.compile(r"[^\W_]+(?:['’-][^\W_]+)*")
RE_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")
RE_URL = re.compile(
    r"(?i)(?:\bhttps?://\S+|\bwww\.\S+|\b[a-z0-9-]+(?:\.[a-z0-9-]+)*\.(?:com|org|net|io|co|gov|edu|ai|app)\b(?:/\S*)?)"
)
RE_CLICK_HERE = re.compile(r"(?i)\bclick here\b[:.]?")
# self-references that must never reach user-facing strings
RE_META_REFERENCE = re.compile(
    r"(?i)\b(?:as an ai|i am an ai|i'm an ai|(?:as )?a language model|json|(?:this|the) prompt|input ?check|system prompt)\b"
)


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def tokenize(text: str) -> List[str]:
    """소문자 단어 토큰."""
    return [t.replace("’", "'") for t in RE_WORD.findall((text or "").lower())]


def content_tokens(text: str) -> List[str]:
    return [t for t in tokenize(text) if t.replace("'", "") not in STOPWORDS]


def word_count(text: str) -> int:
    return len((text or "").split())


@lru_cache(maxsize=1024)
def _term_pattern(term: str) -> re.Pattern:
    return re.compile(r"(?<![^\W_])" + re.escape(term.lower()) + r"(?![^\W_])")


def contains_term(text: str, term: str) -> bool:
    """단어 경계 기준 포함 여부 (text는 소문자화됨)."""
    return bool(_term_pattern(term).search((text or "").lower()))


def find_terms(text: str, terms: Iterable[str]) -> List[str]:
    lowered = (text or "").lower()
    return [t for t in terms if _term_pattern(t).search(lowered)]


def split_sentences(text: str) -> List[str]:
    text = normalize_whitespace(text)
    if not text:
        return []
    return [s.strip() for s in RE_SENTENCE_END.split(text) if s.strip()]


def first_sentence(text: str) -> str:
    sentences = split_sentences(text)
    return sentences[0] if sentences else ""


def token_overlap(a: str, b: str) -> float:
    """두 문장의 토큰 겹침 비율 (큰 집합 기준, 0.0 ~ 1.0)."""
    ta, tb = set(tokenize(a)), set(tokenize(b))
    if not ta or not tb:
        return 0.0
    return len(ta & tb) / max(len(ta), len(tb))


def is_near_duplicate(a: str, b: str, threshold: float = 0.9) -> bool:
    if normalize_whitespace(a).lower() == normalize_whitespace(b).lower():
        return True
    return token_overlap(a, b) > threshold


def has_url(text: str) -> bool:
    return bool(RE_URL.search(text or ""))


def has_meta_reference(text: str, topic: str = "") -> bool:
    """AI/JSON/프롬프트 자기 언급 여부.

    질문 자체가 다루는 용어(topic에 있는 것)는 자기 언급으로 보지 않는다.
    """
    allowed = (topic or "").lower()
    return any(m.group(0).lower() not in allowed for m in RE_META_REFERENCE.finditer(text or ""))


def strip_urls(text: str) -> str:
    """URL 및 'click here' 제거."""
    cleaned = RE_URL.sub("", text or "")
    cleaned = RE_CLICK_HERE.sub("", cleaned)
    cleaned = re.sub(r"\(\s*\)", "", cleaned)
    cleaned = re.sub(r"\s+([,.;:!?])", r"\1", cleaned)
    return normalize_whitespace(cleaned)


def ensure_sentence_end(text: str) -> str:
    text = text.rstrip()
    if text and text[-1] not in ".!?":
        text = text.rstrip(",;:-") + "."
    return text


def snake_tag(text: str, max_words: int = 4) -> str:
    """자유 텍스트 → snake_case 태그."""
    words = [w.replace("'", "").replace("-", "_") for w in tokenize(text)][:max_words]
    return "_".join(w for w in words if w)


__all__ = [
    "STOPWORDS",
    "normalize_whitespace",
    "tokenize",
    "content_tokens",
    "word_count",
    "contains_term",
    "find_terms",
    "split_sentences",
    "first_sentence",
    "token_overlap",
    "is_near_duplicate",
    "has_url",
    "has_meta_reference",
    "strip_urls",
    "ensure_sentence_end",
    "snake_tag",
]
