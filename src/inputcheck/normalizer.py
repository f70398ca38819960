# SPDX-License-Identifier: MIT
"""Question normalizer.

원문 질문 → NormalizedQuestion (cleaned_question, canonical_query, primary_intent, sub_intents).

처리 흐름:
  (1) ask 단위 clause 분리 (?, 문장 끝, "and also", "i dont know ...", "and how ...")
  (2) dominant intent 선택: 첫 번째 명시적 질문 (없으면 첫 clause)
  (3) 지시어만 있는 질문 ("what should I do")은 앞 문장 맥락과 결합
  (4) 나머지 clause → sub_intents 태그
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import List, Optional, Tuple

from inputcheck.lexicon import PROBLEM_TERMS, SUB_INTENT_TAGS
from inputcheck.models import NormalizedQuestion
from inputcheck.utils.slug import derive_canonical_query
from inputcheck.utils.text import content_tokens, find_terms, normalize_whitespace, snake_tag, tokenize

logger = logging.getLogger(__name__)

INTERROGATIVE_OPENERS = frozenset(
    {
        "what", "whats", "what's", "why", "how", "when", "where", "who", "which",
        "is", "are", "was", "were", "do", "does", "did", "can", "could", "should",
        "would", "will", "am", "has", "have", "isn't", "aren't", "can't",
    }
)  # fmt: skip

_YES_NO_OPENERS = frozenset({"is", "are", "was", "were", "does", "do", "did", "can", "could", "should", "would", "will"})

# 비격식 표현 정리 (순서 중요)
PHRASE_FIXES: List[Tuple[str, str]] = [
    (r"\bdont\b", "don't"),
    (r"\bdoesnt\b", "doesn't"),
    (r"\bcant\b", "can't"),
    (r"\bwont\b", "won't"),
    (r"\bisnt\b", "isn't"),
    (r"\bim\b", "I'm"),
    (r"\bive\b", "I've"),
    (r"\bu\b", "you"),
    (r"\bur\b", "your"),
    (r"\bgonna\b", "going to"),
    (r"\bwanna\b", "want to"),
    (r"\bkinda\b", "somewhat"),
    (r"\ba good way to\b", "a viable way to"),
    (r"\b(?:pls|plz|please|lol|thx|thanks|tbh|btw)\b", ""),
]

_ASK_CUES = re.compile(r"(?i)\b(?:i (?:dont|don't|do not) know|not sure|wondering|need help|help me|how to)\b")
_FILLER_CLAUSE = re.compile(
    r"(?i)^(?:hi|hello|hey|thanks|thank you|help|please help|i want to know|i was wondering|just wondering|quick question)\W*$"
)
_SO_PREFIX = re.compile(r"(?i)^so\s+")
# "I have chest pain" -> about chest pain
_SYMPTOM_PREFIX = re.compile(
    r"(?i)^(?:i(?:'ve| have)? got|i have(?! to\b)|i am having|i'm having|im having|i keep getting|i keep having|i noticed)\s+"
)
# "I want to ..." / "I'm pregnant" -> if I ...
_SELF_CLAUSE = re.compile(r"(?i)^(?:i|i'm|im|i've|ive|i'd|we|we're)(?![\w'])")
# "my basement floods" -> if my basement floods, "my jeep" -> about my jeep
_POSSESSIVE = re.compile(r"(?i)^(?:my|our)(?![\w'])(?:\s+\S+)?(.*)$")
_VERB_CUE = re.compile(
    r"(?i)(?<![\w'])(?:is|are|was|were|has|had|keeps?|will|did|does|wont|cant|isnt|doesnt|\w+n't|\w+ed|\w*[^s\W]s)(?![\w'])"
)
_GENERIC_WHAT_TO_DO = re.compile(r"(?i)^(?:so\s+)?(?:what|how)\s+(?:should|do|can)\s+i\s+(?:do|handle|deal with)(?:\s+(?:it|this|that))?$")
_ANAPHOR = re.compile(r"(?i)(?<![\w'])(?:it|this|that)(?![\w'])")
_ABOUT_ANAPHOR = re.compile(r"(?i)(?<![\w'])about\s+(?:it|this|that)(?![\w'])")
_LATIN = re.compile(r"[A-Za-z]")
_QUESTION_MARKS = re.compile(r"[?？]+")
_CLAUSE_END = re.compile(r"[!;！；。]+|\.(?=\s|$)")
_STRIP_CHARS = " ?.!,;:-\"'¿¡？。！"
# punctuation, separators, control chars and non-pictographic symbols
_IGNORABLE_CATEGORIES = ("P", "Z", "C", "Sc", "Sm", "Sk")

_ARTICLE_CUES = frozenset(
    {"a", "an", "the", "worth", "good", "bad", "safe", "viable", "better", "possible", "legal", "normal", "ok", "okay", "too", "still", "really"}
)


@dataclass
class _Clause:
    text: str
    is_question: bool
    is_ask: bool


def _situation(statement: str) -> Optional[str]:
    """1인칭 진술 → "about <대상>" 또는 "if <진술>".

    증상/문제 보유 진술은 주어를 떼고 대상만, 그 밖의 1인칭 절은 진술 전체를 유지한다
    (소유격 "my"/"our" 포함). 1인칭 진술이 아니면 None.
    """
    statement = _SO_PREFIX.sub("", statement)
    if not statement:
        return None
    m = _SYMPTOM_PREFIX.match(statement)
    if m:
        return f"about {statement[m.end():]}"
    statement = statement[0].lower() + statement[1:]
    if _SELF_CLAUSE.match(statement):
        return f"if {statement}"
    m = _POSSESSIVE.match(statement)
    if m:
        return f"if {statement}" if _VERB_CUE.search(m.group(1)) else f"about {statement}"
    return None


class Normalizer:
    """원문 질문 정규화기.

    Normalizer는 순수 함수처럼 동작한다: 같은 입력은 항상 같은 NormalizedQuestion을 만든다.
    """

    def __init__(self, max_sub_intents: int = 5):
        self.max_sub_intents = max_sub_intents

    def normalize(self, raw_input: str) -> NormalizedQuestion:
        """원문 질문 정규화.

        Args:
            raw_input: 사용자 원문 (빈 문자열/스팸 허용)

        Returns:
            NormalizedQuestion
        """
        text = normalize_whitespace(raw_input)
        clauses = self._split_clauses(text)

        if not clauses:
            return self._unworded(text)

        dominant_idx = self._pick_dominant(clauses)
        dominant = clauses[dominant_idx]
        consumed = {dominant_idx}

        # "what should I do" 같은 지시형 질문은 직전 진술과 결합
        question_text = dominant.text
        context_idx = self._context_statement(clauses, dominant_idx)
        if context_idx is not None:
            statement = clauses[context_idx].text
            situation = _situation(statement) or f"about {statement}"
            if _GENERIC_WHAT_TO_DO.match(question_text):
                question_text = f"what should I do {situation}"
            elif _ABOUT_ANAPHOR.search(question_text):
                question_text = _ABOUT_ANAPHOR.sub(situation, question_text, count=1)
            else:
                subject = _SYMPTOM_PREFIX.sub("", _SO_PREFIX.sub("", statement))
                question_text = _ANAPHOR.sub(subject, question_text, count=1)
            consumed.add(context_idx)

        cleaned = self._clean_question(question_text, dominant.is_question or context_idx is not None)
        canonical = derive_canonical_query(cleaned)
        primary_intent = self._describe_intent(cleaned)

        sub_intents: List[str] = []
        for i, clause in enumerate(clauses):
            if i in consumed:
                continue
            tag = self._tag_clause(clause.text)
            if tag and tag not in sub_intents:
                sub_intents.append(tag)
            if len(sub_intents) >= self.max_sub_intents:
                break

        ask_count = sum(1 for c in clauses if c.is_ask)
        has_question = any(c.is_ask for c in clauses) or context_idx is not None

        result = NormalizedQuestion(
            cleaned_question=cleaned,
            canonical_query=canonical,
            primary_intent=primary_intent,
            sub_intents=tuple(sub_intents),
            ask_count=max(ask_count, 1),
            has_question=has_question,
        )
        logger.debug("normalized %r -> %r (asks=%d)", text[:80], cleaned, result.ask_count)
        return result

    def _unworded(self, text: str) -> NormalizedQuestion:
        """단어로 나뉘지 않는 입력 (빈 입력, 구두점만, 이모지/기호만)."""
        residue = "".join(ch for ch in text if not unicodedata.category(ch).startswith(_IGNORABLE_CATEGORIES))
        cleaned = normalize_whitespace(text).strip(_STRIP_CHARS) if residue else ""
        if cleaned:
            logger.debug("no word tokens in %r; keeping raw text", text[:80])
            cleaned += "?"
        return NormalizedQuestion(
            cleaned_question=cleaned,
            canonical_query="",
            primary_intent=self._describe_intent(cleaned),
            sub_intents=(),
            ask_count=1 if cleaned else 0,
            has_question=False,
        )

    # ------------------------------------------------------------
    # clause 분리
    # ------------------------------------------------------------

    def _split_clauses(self, text: str) -> List[_Clause]:
        if not text:
            return []

        t = _QUESTION_MARKS.sub("? | ", text)
        t = _CLAUSE_END.sub(" | ", t)
        t = re.sub(r"(?i)\s+(?:and also|but also|also|plus)\s+", " | ", t)
        t = re.sub(r"(?i),\s*(?=(?:is|are|should|can|could|what|how|why|do|does|will)\b)", " | ", t)
        t = re.sub(r"(?i)\s+(?:and\s+|but\s+)?(?=i\s+(?:dont|don't|do not)\s+know\b)", " | ", t)
        t = re.sub(
            r"(?i)\s+(?:and|but|or)\s+(?=(?:how|what|where|why|when|which|who|should|can|could|is|are|do|does|will|would)\b)",
            " | ",
            t,
        )
        t = re.sub(
            r"(?i)(?<=[a-z0-9])\s+(?=(?:how|what|where|why|which)\s+(?:do|does|can|should|would|is|are)\s)",
            " | ",
            t,
        )

        clauses: List[_Clause] = []
        for part in t.split("|"):
            part = normalize_whitespace(part).strip(",:- ")
            asked = part.endswith("?")
            part = part.rstrip("? ")
            if not part or _FILLER_CLAUSE.match(part):
                continue
            words = tokenize(part)
            if not words:
                continue
            # "¿Cómo ...?", "如何 ...?": no English opener to go by
            is_question = words[0] in INTERROGATIVE_OPENERS or (
                asked and (part.startswith("¿") or not words[0].isascii())
            )
            is_ask = is_question or bool(_ASK_CUES.search(part))
            clauses.append(_Clause(text=part, is_question=is_question, is_ask=is_ask))
        return clauses

    def _pick_dominant(self, clauses: List[_Clause]) -> int:
        for i, c in enumerate(clauses):
            if c.is_question:
                return i
        for i, c in enumerate(clauses):
            if c.is_ask:
                return i
        return 0

    def _context_statement(self, clauses: List[_Clause], dominant_idx: int) -> Optional[int]:
        """지시형 질문이면 결합할 직전 진술 clause 인덱스."""
        text = clauses[dominant_idx].text
        anaphoric = bool(_ANAPHOR.search(text)) and len(content_tokens(text)) <= 1
        if not (_GENERIC_WHAT_TO_DO.match(text) or anaphoric):
            return None
        for i in range(dominant_idx - 1, -1, -1):
            if not clauses[i].is_ask and content_tokens(clauses[i].text):
                return i
        return None

    # ------------------------------------------------------------
    # 질문 정리
    # ------------------------------------------------------------

    def _clean_question(self, text: str, is_question: bool) -> str:
        q = text
        for pattern, repl in PHRASE_FIXES:
            q = re.sub(pattern, repl, q, flags=re.IGNORECASE)
        q = normalize_whitespace(q).strip(_STRIP_CHARS)

        if not q:
            return ""

        # 라틴 문자가 없는 진술은 영어 틀로 감싸지 않는다
        if not is_question and _LATIN.search(q):
            situation = _situation(q)
            if situation:
                q = f"what should I do {situation}"
            elif find_terms(q, PROBLEM_TERMS):
                q = f"what causes {q}"
            else:
                q = f"what should I know about {q}"

        q = re.sub(r"(?<![\w'])i(?![\w'])", "I", q)
        q = re.sub(r"(?<![\w'])i'", "I'", q)
        return q[0].upper() + q[1:] + "?"

    def _describe_intent(self, cleaned: str) -> str:
        """plain-language primary intent."""
        words = cleaned.rstrip("?").split()
        if not words:
            return ""
        lower = [w.lower() for w in words]
        body = " ".join(words[1:])

        if lower[:4] == ["what", "should", "i", "do"] and len(words) > 5:
            return "decide what to do " + " ".join(words[4:])
        if lower[:2] == ["what", "causes"]:
            return "diagnose what causes " + " ".join(words[2:])
        if lower[0] == "why":
            return "understand why " + body
        if lower[0] == "how" and len(lower) > 2 and lower[1] in ("do", "can", "should") and lower[2] in ("i", "you", "we"):
            return "learn how to " + " ".join(words[3:])
        if lower[:2] == ["how", "to"]:
            return "learn how to " + " ".join(words[2:])
        if lower[0] in ("what", "which", "who", "when", "where", "how"):
            if len(lower) > 2 and lower[1] in ("is", "are"):
                return "understand " + " ".join(words[2:])
            return "find out " + " ".join(lower)
        if lower[0] in _YES_NO_OPENERS and len(words) > 1:
            rest = words[1:]
            for i in range(1, len(rest)):
                if rest[i].lower() in _ARTICLE_CUES:
                    return "evaluate whether " + " ".join(rest[:i] + [lower[0]] + rest[i:])
            return "evaluate whether " + " ".join(lower)
        return "understand " + " ".join(words)

    def _tag_clause(self, clause: str) -> str:
        for tag, terms in SUB_INTENT_TAGS:
            if find_terms(clause, terms):
                return tag
        return snake_tag(" ".join(content_tokens(clause)), max_words=3)


def normalize_question(raw_input: str, max_sub_intents: int = 5) -> NormalizedQuestion:
    """정규화 편의 함수."""
    return Normalizer(max_sub_intents=max_sub_intents).normalize(raw_input)


__all__ = ["Normalizer", "normalize_question", "INTERROGATIVE_OPENERS"]
