# SPDX-License-Identifier: MIT
"""Content Composer.

GeneratorDraft + NormalizedQuestion + GateDecision → Composition.

Generator 초안은 신뢰하지 않는다. 구조 규칙은 여기서 직접 강제한다:
  - capsule: 한 문장, 최대 25단어, URL 제거
  - mini_answer: URL/메타 언급 문장 제거, 최대 5문장, capsule 중복 선두 문장 제거
  - pros/cons/personal_checks 최대 3개, steps 중복 제거 후 최대 5개
  - 안전 모드(general_information): talk_to_pro, 전문가 연결 step/tool/문장 보장
  - share blocks, vault node는 결정적으로 생성
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from inputcheck.compose.draft import GeneratorDraft, as_dict, as_list, as_text
from inputcheck.config import CompositionSettings
from inputcheck.lexicon import (
    CRITICAL_FOLLOW_UPS,
    DEFAULT_FOLLOW_UP,
    EMERGENCY_TOOL,
    FOLLOW_UP_BY_QUESTION_TYPE,
    FOLLOW_UP_TEMPLATES,
    PROVIDER_NAMES,
    PROVIDER_TOOLS,
    REFERRAL_TERMS,
    TOPIC_LEAD_WORDS,
)
from inputcheck.models import (
    ActionProtocol,
    ActionType,
    AnswerMode,
    Composition,
    ContentCapsule,
    DecisionFrame,
    Dimension,
    Flag,
    GateDecision,
    NormalizedQuestion,
    PersonalCheck,
    ProCon,
    QuestionType,
    RiskLevel,
    ShareBlocks,
    VaultNode,
    YmylCategory,
)
from inputcheck.utils.slug import slugify, vault_slug
from inputcheck.utils.text import (
    STOPWORDS,
    content_tokens,
    ensure_sentence_end,
    find_terms,
    first_sentence,
    has_meta_reference,
    is_near_duplicate,
    normalize_whitespace,
    snake_tag,
    split_sentences,
    strip_urls,
    tokenize,
)

logger = logging.getLogger(__name__)

# ============================================================
# 기본값 테이블
# ============================================================

DEFAULT_ACTION_BY_TYPE: Dict[QuestionType, ActionType] = {
    QuestionType.DIAGNOSTIC: ActionType.DIAGNOSTIC_STEPS,
    QuestionType.REPAIR_DECISION: ActionType.DECISION_CHECKLIST,
    QuestionType.COMPARISON: ActionType.COMPARISON,
    QuestionType.BUSINESS_STRATEGY: ActionType.BUSINESS_STRATEGY,
    QuestionType.CAREER_STRATEGY: ActionType.CAREER_STRATEGY,
    QuestionType.HOW_TO: ActionType.SELF_EDUCATION,
    QuestionType.FACT_LOOKUP: ActionType.SELF_EDUCATION,
    QuestionType.UNKNOWN: ActionType.SELF_EDUCATION,
    QuestionType.HEALTH_INFORMATION: ActionType.TALK_TO_PRO,
    QuestionType.LEGAL_INFORMATION: ActionType.TALK_TO_PRO,
}

DEFAULT_EFFORT: Dict[ActionType, str] = {
    ActionType.DIAGNOSTIC_STEPS: "30-60 minutes",
    ActionType.DECISION_CHECKLIST: "1-2 hours",
    ActionType.TALK_TO_PRO: "one appointment",
    ActionType.SELF_EDUCATION: "15-30 minutes",
    ActionType.COMPARISON: "1-2 hours",
    ActionType.CAREER_STRATEGY: "a few weeks",
    ActionType.BUSINESS_STRATEGY: "a few weeks",
}

PLACEHOLDERS = frozenset({"n/a", "na", "none", "null", "nil", "-", "tbd", "no insight", "no owned insight", "not applicable"})

EMERGENCY_STEP = "If symptoms are sudden, severe or getting worse, call emergency services immediately."
DEGRADED_FOLLOW_UP = "What is one specific question you want answered, including the product or situation involved?"

FOLLOW_UP_TOPIC_MAX_WORDS = 6


# ============================================================
# Composer
# ============================================================


class ContentComposer:
    """Generator 초안을 구조 규칙에 맞는 Composition으로 변환."""

    def __init__(
        self,
        settings: Optional[CompositionSettings] = None,
        near_duplicate_threshold: float = 0.9,
    ):
        """
        Args:
            settings: 구조 규칙 설정
            near_duplicate_threshold: near-duplicate 판정 임계값 (토큰 겹침 비율)
        """
        self.settings = settings or CompositionSettings()
        self.near_duplicate_threshold = near_duplicate_threshold

    def assemble(
        self,
        draft: GeneratorDraft,
        normalized: NormalizedQuestion,
        decision: GateDecision,
    ) -> Composition:
        """초안 → Composition.

        Args:
            draft: 파싱된 Generator 초안
            normalized: 정규화된 질문
            decision: Classifier pass 1 결과 (answer_mode 포함)

        Returns:
            Composition
        """
        safety = decision.answer_mode == AnswerMode.GENERAL_INFORMATION
        topic = follow_up_topic(normalized.canonical_query)

        capsule_text = self._capsule(draft.answer_capsule)
        mini_answer = self._mini_answer(
            draft.mini_answer, capsule_text, normalized.cleaned_question, decision if safety else None
        )
        capsule = ContentCapsule(
            answer_capsule_25w=capsule_text,
            mini_answer=mini_answer,
            owned_insight=self._owned_insight(draft.owned_insight, normalized.cleaned_question),
        )

        limit = self.settings.max_frame_items
        frame = DecisionFrame(
            question_type=decision.question_type,
            pros=self._pros_cons(draft.pros, topic)[:limit],
            cons=self._pros_cons(draft.cons, topic)[:limit],
            personal_checks=self._personal_checks(draft.personal_checks)[:limit],
        )

        cleaned = normalized.cleaned_question
        if safety:
            logger.debug("safety gate applied (%s/%s)", decision.ymyl_category.value, decision.ymyl_risk_level.value)

        return Composition(
            capsule=capsule,
            decision_frame=frame,
            action_protocol=self._action_protocol(draft, decision, safety),
            next_best_question=self._next_best_question(draft.next_best_question, normalized, decision),
            share_blocks=build_share_blocks(cleaned, mini_answer, self.settings.share_link_line),
            vault_node=VaultNode(
                slug=vault_slug(cleaned, self.settings.slug_max_length),
                vertical_guess=decision.vertical,
            ),
        )

    # ------------------------------------------------------------
    # capsule / mini answer
    # ------------------------------------------------------------

    def _capsule(self, text: str) -> str:
        sentence = first_sentence(strip_urls(text))
        words = sentence.split()
        if len(words) > self.settings.capsule_max_words:
            sentence = " ".join(words[: self.settings.capsule_max_words])
        return ensure_sentence_end(sentence) if sentence else ""

    def _mini_answer(self, text: str, capsule: str, topic: str, safety_decision: Optional[GateDecision]) -> str:
        max_sentences = self.settings.mini_answer_max_sentences
        sentences = [
            ensure_sentence_end(s)
            for s in split_sentences(strip_urls(text))
            if s.strip(" .") and not has_meta_reference(s, topic)
        ]

        if len(sentences) >= 3 and capsule and is_near_duplicate(sentences[0], capsule, self.near_duplicate_threshold):
            sentences = sentences[1:]

        if safety_decision is not None and not any(find_terms(s, REFERRAL_TERMS) for s in sentences):
            sentences = sentences[: max_sentences - 1] + [referral_sentence(safety_decision)]

        return " ".join(sentences[:max_sentences])

    def _owned_insight(self, text: str, topic: str) -> str:
        insight = first_sentence(strip_urls(text))
        if insight.strip(" .").lower() in PLACEHOLDERS or has_meta_reference(insight, topic):
            return ""
        return ensure_sentence_end(insight) if insight.strip(" .") else ""

    # ------------------------------------------------------------
    # decision frame
    # ------------------------------------------------------------

    def _pros_cons(self, items: Sequence[Any], topic: str) -> Tuple[ProCon, ...]:
        out: List[ProCon] = []
        seen = set()
        for item in items:
            if isinstance(item, dict):
                label, reason = as_text(item.get("label")), as_text(item.get("reason"))
                raw_tags = as_list(item.get("tags"))
            elif isinstance(item, str):
                label, reason = _split_label(item)
                raw_tags = []
            else:
                continue

            label, reason = strip_urls(label), strip_urls(reason)
            if not label:
                label = " ".join(reason.split()[:5])
            if not label or label.lower() in seen:
                continue
            seen.add(label.lower())

            tags = _dedupe(snake_tag(as_text(t), max_words=4) for t in raw_tags)
            out.append(
                ProCon(
                    label=label,
                    reason=reason,
                    tags=tuple(tags) or (snake_tag(label, max_words=3),),
                    spawn_question_slug=slugify(spawn_question(label, topic), self.settings.slug_max_length),
                )
            )
        return tuple(out)

    def _personal_checks(self, items: Sequence[Any]) -> Tuple[PersonalCheck, ...]:
        out: List[PersonalCheck] = []
        for item in items:
            data: Dict[str, Any] = as_dict(item) if isinstance(item, dict) else {"prompt": as_text(item)}
            prompt = strip_urls(as_text(data.get("prompt")))
            label = strip_urls(as_text(data.get("label"))) or " ".join(prompt.split()[:4])
            if not label and not prompt:
                continue
            out.append(
                PersonalCheck(
                    label=label,
                    prompt=prompt or label,
                    dimension=Dimension.from_str(data.get("dimension"), Dimension.GENERAL),
                )
            )
        return tuple(out)

    # ------------------------------------------------------------
    # action protocol
    # ------------------------------------------------------------

    def _action_protocol(self, draft: GeneratorDraft, decision: GateDecision, safety: bool) -> ActionProtocol:
        if safety:
            action_type = ActionType.TALK_TO_PRO
        else:
            default = DEFAULT_ACTION_BY_TYPE.get(decision.question_type, ActionType.DECISION_CHECKLIST)
            action_type = ActionType.from_str(draft.action_type, default)

        steps = _dedupe(ensure_sentence_end(strip_urls(as_text(s))) for s in draft.steps)
        tools = _dedupe(snake_tag(strip_urls(as_text(t)), max_words=6) for t in draft.recommended_tools)

        if safety:
            steps = self._safety_steps(steps, decision)
            front = [PROVIDER_TOOLS[decision.ymyl_category]]
            if _is_emergency(decision):
                front.append(EMERGENCY_TOOL)
            tools = front + [t for t in tools if t not in front]

        effort = strip_urls(draft.estimated_effort) or DEFAULT_EFFORT[action_type]

        return ActionProtocol(
            type=action_type,
            steps=tuple(steps[: self.settings.max_steps]),
            estimated_effort=effort,
            recommended_tools=tuple(tools[: self.settings.max_tools]),
        )

    def _safety_steps(self, steps: List[str], decision: GateDecision) -> List[str]:
        """전문가 연결 step 보장 (critical이면 응급 step을 맨 앞에)."""
        lead: List[str] = []
        if _is_emergency(decision) and not (steps and "emergency" in steps[0].lower()):
            lead = [EMERGENCY_STEP]

        room = self.settings.max_steps - len(lead)
        kept = steps[:room]
        if not any(find_terms(s, REFERRAL_TERMS) for s in kept):
            referral = next((s for s in steps if find_terms(s, REFERRAL_TERMS)), None) or referral_step(decision)
            kept = kept[: room - 1] + [referral]
        return lead + kept

    # ------------------------------------------------------------
    # next best question
    # ------------------------------------------------------------

    def _next_best_question(self, candidate: str, normalized: NormalizedQuestion, decision: GateDecision) -> str:
        if _is_critical(decision):
            return critical_follow_up(decision.ymyl_category)
        if decision.has(Flag.OFF_TOPIC):
            return DEGRADED_FOLLOW_UP
        question = normalize_whitespace(strip_urls(candidate))
        if question and is_deeper_follow_up(question, normalized.cleaned_question, self.near_duplicate_threshold):
            return question[0].upper() + question[1:]
        return synthesize_follow_up(normalized, decision.question_type, self.near_duplicate_threshold)


# ============================================================
# 결정적 헬퍼
# ============================================================


def build_share_blocks(cleaned_question: str, mini_answer: str, link_line: str) -> ShareBlocks:
    answer_only = f"{cleaned_question}\n\n{mini_answer}"
    return ShareBlocks(answer_only=answer_only, answer_with_link=f"{answer_only}\n\n{link_line}")


def follow_up_topic(canonical_query: str) -> str:
    """canonical_query → follow-up 템플릿 {topic}.

    앞쪽 평가어/기능어("legal to", "want to")는 건너뛰고 나머지를 최대 6단어까지 쓴다.
    건너뛴 것이 없고 길면 첫 stopword 앞까지의 핵심 구문.
    """
    words = canonical_query.split()
    start = 0
    while start < len(words) - 1 and (words[start] in STOPWORDS or words[start] in TOPIC_LEAD_WORDS):
        start += 1
    if start or len(words) <= FOLLOW_UP_TOPIC_MAX_WORDS:
        rest = words[start : start + FOLLOW_UP_TOPIC_MAX_WORDS]
        while len(rest) > 1 and rest[-1] in STOPWORDS:
            rest.pop()
        return " ".join(rest)
    head: List[str] = []
    for word in words:
        if head and word.lower() in STOPWORDS:
            break
        head.append(word)
    return " ".join(head[:FOLLOW_UP_TOPIC_MAX_WORDS])


def spawn_question(label: str, topic: str) -> str:
    label = label.strip().rstrip(".!?").lower()
    if topic:
        return f"How does {label} affect {topic}?"
    return f"What should I know about {label}?"


def synthesize_follow_up(
    normalized: NormalizedQuestion,
    question_type: QuestionType,
    near_duplicate_threshold: float = 0.9,
) -> str:
    """sub-intent / question_type 템플릿으로 다음 질문 생성 (결정적)."""
    topic = follow_up_topic(normalized.canonical_query)
    if not content_tokens(topic):
        topic = normalized.canonical_query
    if not content_tokens(topic):
        return DEGRADED_FOLLOW_UP

    template = FOLLOW_UP_BY_QUESTION_TYPE.get(question_type, DEFAULT_FOLLOW_UP)
    for tag, tag_template in FOLLOW_UP_TEMPLATES.items():
        if tag in normalized.sub_intents:
            template = tag_template
            break

    question = template.format(topic=topic)
    if is_near_duplicate(question, normalized.cleaned_question, near_duplicate_threshold):
        question = DEFAULT_FOLLOW_UP.format(topic=topic)
    return question


def critical_follow_up(category: YmylCategory) -> str:
    """critical YMYL 레코드의 고정 다음 질문."""
    return CRITICAL_FOLLOW_UPS.get(category, CRITICAL_FOLLOW_UPS[YmylCategory.OTHER])


def is_deeper_follow_up(question: str, cleaned_question: str, near_duplicate_threshold: float = 0.9) -> bool:
    """다음 질문 조건: '?'로 끝남, 원 질문과 near-duplicate 아님, 같은 주제(내용어 공유)."""
    if not question.endswith("?") or has_meta_reference(question, cleaned_question):
        return False
    if is_near_duplicate(question, cleaned_question, near_duplicate_threshold):
        return False
    topic_words = _content_set(cleaned_question)
    return not topic_words or bool(topic_words & _content_set(question))


def referral_sentence(decision: GateDecision) -> str:
    provider = PROVIDER_NAMES[decision.ymyl_category]
    if _is_emergency(decision):
        return f"If this is happening now or getting worse, contact emergency services right away, then follow up with a {provider}."
    return f"This is general information, not personal advice, so talk to a {provider} about your specific situation."


def referral_step(decision: GateDecision) -> str:
    provider = PROVIDER_NAMES[decision.ymyl_category]
    return f"Talk to a {provider} about your specific situation before acting on general information."


def _is_emergency(decision: GateDecision) -> bool:
    return decision.ymyl_risk_level == RiskLevel.CRITICAL and decision.ymyl_category in (
        YmylCategory.HEALTH,
        YmylCategory.OTHER,
    )


def _is_critical(decision: GateDecision) -> bool:
    return decision.ymyl_risk_level == RiskLevel.CRITICAL and decision.ymyl_category != YmylCategory.NONE


def _content_set(text: str) -> set:
    return {t.replace("'", "") for t in content_tokens(text)}


def _split_label(text: str) -> Tuple[str, str]:
    """'Label: reason' / 'Label - reason' 문자열 분리."""
    for sep in (":", " - "):
        if sep in text:
            label, reason = text.split(sep, 1)
            if label.strip() and len(tokenize(label)) <= 8:
                return label.strip(), reason.strip()
    return text.strip(), ""


def _dedupe(items) -> List[str]:
    out: List[str] = []
    seen = set()
    for item in items:
        key = item.strip().lower()
        if not key or key in seen or not key.strip("."):
            continue
        seen.add(key)
        out.append(item.strip())
    return out


__all__ = [
    "ContentComposer",
    "build_share_blocks",
    "follow_up_topic",
    "spawn_question",
    "synthesize_follow_up",
    "critical_follow_up",
    "is_deeper_follow_up",
    "referral_sentence",
    "referral_step",
]
