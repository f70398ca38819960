# SPDX-License-Identifier: MIT
"""Classifier pass 1 (pre-composition gate).

NormalizedQuestion + 원문 텍스트만으로 flags, YMYL, clarification_required, answer_mode를 결정한다.
answer_mode는 Composer가 직접 답변을 만들지, 일반 정보 + 전문가 연결 답변을 만들지 결정하는
제어 의존성이다.
"""

from __future__ import annotations

import re
from typing import List, Optional

from inputcheck.classify.ymyl import YmylAssessment, YmylDetector
from inputcheck.lexicon import (
    BROAD_PATTERNS,
    BUSINESS_TERMS,
    COMPARISON_TERMS,
    CONTEXTUAL_TERMS,
    LIFESTYLE_TERMS,
    PERSONAL_DECISION_MARKERS,
    PROBLEM_TERMS,
    QUESTION_TYPE_BY_YMYL,
    REPAIR_DECISION_TERMS,
    SPAM_PATTERNS,
    VERTICAL_RULES,
)
from inputcheck.models import AnswerMode, Flag, GateDecision, NormalizedQuestion, QuestionType, Vertical
from inputcheck.utils.text import content_tokens, find_terms, normalize_whitespace, tokenize

_DEFAULT_DETECTOR = YmylDetector()

# "how do I ..." / "I don't know ..." are phrasing, not personal context
_IMPERSONAL_PHRASES = re.compile(r"(?i)\b(?:how (?:do|can|should) i|i (?:dont|don't|do not) know|where do i start)\b")
_PERSONAL = re.compile(r"(?i)(?<![\w'])(?:i|i'm|im|i've|ive|my|me|mine)(?![\w'])")
_DETAIL = re.compile(r"(?i)\d|\b(?:years? old|yo|budget of)\b")
_CONSONANT_RUN = re.compile(r"[bcdfghjklmnpqrstvwxz]{5,}")
_VOWEL = re.compile(r"[aeiou]")
# "gym", "myth", "lynx"
_Y_ONLY_MAX_LEN = 5


def gate(
    normalized: NormalizedQuestion,
    raw_text: str,
    *,
    truncated: bool = False,
    detector: Optional[YmylDetector] = None,
) -> GateDecision:
    """Classifier pass 1.

    Args:
        normalized: Normalizer 출력
        raw_text: (잘린) 원문 텍스트
        truncated: 입력이 max_chars로 잘렸는지
        detector: YMYL 탐지기 (None이면 기본 사전)

    Returns:
        GateDecision (immutable)
    """
    text = normalize_whitespace(raw_text)
    ymyl = (detector or _DEFAULT_DETECTOR).assess(text)

    off_topic = is_off_topic(text, normalized, ymyl)
    personal = is_personal(text)
    personal_decision = bool(find_terms(text, PERSONAL_DECISION_MARKERS))
    has_detail = bool(_DETAIL.search(text))
    vague = not off_topic and is_vague(normalized, text)

    flags: List[Flag] = []
    if vague:
        flags.append(Flag.VAGUE_SCOPE)
    if normalized.ask_count >= 2:
        flags.append(Flag.STACKED_ASKS)
    if not off_topic and not has_detail and ((ymyl.is_ymyl and personal) or (personal_decision and vague)):
        flags.append(Flag.MISSING_CONTEXT)
    if ymyl.is_ymyl:
        flags.append(Flag.SAFETY_RISK)
    if off_topic:
        flags.append(Flag.OFF_TOPIC)
    if truncated:
        flags.append(Flag.TRUNCATED_INPUT)

    clarification_required = ymyl.is_severe or (Flag.MISSING_CONTEXT in flags and personal_decision)

    if off_topic:
        answer_mode = AnswerMode.DEGRADED
    elif clarification_required or ymyl.is_severe:
        answer_mode = AnswerMode.GENERAL_INFORMATION
    else:
        answer_mode = AnswerMode.DIRECT

    return GateDecision(
        flags=tuple(flags),
        ymyl_category=ymyl.category,
        ymyl_risk_level=ymyl.risk_level,
        clarification_required=clarification_required,
        answer_mode=answer_mode,
        question_type=infer_question_type(normalized, ymyl, off_topic),
        vertical=guess_vertical(text),
        contextual=bool(find_terms(text, CONTEXTUAL_TERMS)),
        personal=personal,
    )


# ============================================================
# 판정 함수
# ============================================================


def is_off_topic(text: str, normalized: NormalizedQuestion, ymyl: Optional[YmylAssessment] = None) -> bool:
    """질문으로 바꿀 수 없는 입력 (빈 입력, 스팸, 실제 단어 없음).

    질문 형태도 사전 단서(YMYL, 버티컬, 문제/비교/비즈니스 용어)도 없는 입력에
    단어 같지 않은 토큰이 섞여 있고 실제 단어가 2개 미만이면 off_topic.
    """
    if not normalized.cleaned_question or not content_tokens(text):
        return True
    for pattern in SPAM_PATTERNS:
        if re.search(pattern, text, flags=re.IGNORECASE):
            return True

    words = [w for w in tokenize(text) if w.isalpha()]
    real = [w for w in words if looks_like_word(w)]
    if not real:
        return True
    if normalized.has_question:
        return False
    if len(real) * 2 < len(words):
        return True
    return len(real) < len(words) and len(content_tokens(" ".join(real))) < 2 and not _has_lexicon_hit(text, ymyl)


def looks_like_word(word: str) -> bool:
    """라틴 문자 토큰의 발음 가능성 휴리스틱 (다른 문자 체계는 판단하지 않음)."""
    if not word.isascii():
        return True
    if len(word) > 20 or _CONSONANT_RUN.search(word):
        return False
    if _VOWEL.search(word):
        return True
    return "y" in word and len(word) <= _Y_ONLY_MAX_LEN


def _has_lexicon_hit(text: str, ymyl: Optional[YmylAssessment]) -> bool:
    if ymyl is not None and ymyl.is_ymyl:
        return True
    if guess_vertical(text) != Vertical.GENERAL:
        return True
    return any(find_terms(text, terms) for terms in (PROBLEM_TERMS, COMPARISON_TERMS, BUSINESS_TERMS))


def is_personal(text: str) -> bool:
    return bool(_PERSONAL.search(_IMPERSONAL_PHRASES.sub(" ", text)))


def is_vague(normalized: NormalizedQuestion, text: str) -> bool:
    """범위가 지나치게 넓거나 대상이 없는 질문."""
    if len(content_tokens(normalized.canonical_query)) < 2:
        return True
    lowered = f"{normalized.canonical_query}\n{text.lower()}"
    return any(re.search(p, line) for p in BROAD_PATTERNS for line in lowered.splitlines())


def infer_question_type(normalized: NormalizedQuestion, ymyl: YmylAssessment, off_topic: bool) -> QuestionType:
    """dominant intent 기준 질문 유형 (우선순위 순)."""
    if off_topic:
        return QuestionType.UNKNOWN

    intent = normalized.primary_intent.lower()
    dominant = f"{normalized.cleaned_question} {intent}".lower()

    if ymyl.is_severe and ymyl.category in QUESTION_TYPE_BY_YMYL:
        return QUESTION_TYPE_BY_YMYL[ymyl.category]
    if find_terms(dominant, REPAIR_DECISION_TERMS):
        return QuestionType.REPAIR_DECISION
    if intent.startswith("diagnose") or find_terms(dominant, PROBLEM_TERMS):
        return QuestionType.DIAGNOSTIC
    if find_terms(dominant, COMPARISON_TERMS):
        return QuestionType.COMPARISON
    if find_terms(dominant, BUSINESS_TERMS):
        return QuestionType.BUSINESS_STRATEGY
    if ymyl.category in QUESTION_TYPE_BY_YMYL:
        return QUESTION_TYPE_BY_YMYL[ymyl.category]
    if intent.startswith("learn how to"):
        return QuestionType.HOW_TO
    if find_terms(dominant, LIFESTYLE_TERMS):
        return QuestionType.LIFESTYLE_CHOICE
    return QuestionType.FACT_LOOKUP


def guess_vertical(text: str) -> Vertical:
    """버티컬 라우팅: 모든 키워드 그룹이 매칭되는 첫 번째 버티컬."""
    for vertical, groups in VERTICAL_RULES:
        if all(find_terms(text, group) for group in groups):
            return vertical
    return Vertical.GENERAL


__all__ = [
    "gate",
    "is_off_topic",
    "looks_like_word",
    "is_personal",
    "is_vague",
    "infer_question_type",
    "guess_vertical",
]
