# SPDX-License-Identifier: MIT
"""Classifier pass 2 (post-composition refinement).

GateDecision + 구성된 콘텐츠로 score_10, grade_label, AI-era 필드를 확정한다.
flags / YMYL / clarification_required는 pass 1 값을 그대로 사용한다.
구성된 콘텐츠는 구조(owned_insight 유무, 비교 pros/cons 유무)로만 반영되고
문장 표현은 결과에 영향을 주지 않는다.

결정 테이블:
  score_10   base 9, flag별 감점, flag가 있으면 최대 7, clarification이면 최대 ceiling,
             off_topic이면 최대 2, 고유 인사이트가 있고 flag가 없으면 +1
  complexity question_type → complexity (severe YMYL은 expert_advisory)
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from inputcheck.models import (
    AiCitationPotential,
    AiDisplacementRisk,
    AiUsagePolicyHint,
    Classification,
    ContentCapsule,
    DecisionFrame,
    Flag,
    GateDecision,
    PublisherVulnerability,
    QueryComplexity,
    QuestionType,
    RiskLevel,
    YmylCategory,
)

SCORE_BASE = 9
FLAGGED_SCORE_CAP = 7
OFF_TOPIC_SCORE_CAP = 2

FLAG_PENALTIES: Dict[Flag, int] = {
    Flag.VAGUE_SCOPE: 3,
    Flag.STACKED_ASKS: 1,
    Flag.MISSING_CONTEXT: 2,
    Flag.OFF_TOPIC: 7,
    Flag.TRUNCATED_INPUT: 1,
}

RISK_PENALTIES: Dict[RiskLevel, int] = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}

# (하한 점수, 라벨) - 높은 점수부터
GRADE_BANDS: List[Tuple[int, str]] = [
    (9, "Strong answer"),
    (8, "Good"),
    (7, "Fair"),
    (5, "Needs context"),
    (3, "Needs more detail"),
    (0, "Not answerable"),
]

COMPLEXITY_BY_TYPE: Dict[QuestionType, QueryComplexity] = {
    QuestionType.FACT_LOOKUP: QueryComplexity.SIMPLE_INFORMATIONAL,
    QuestionType.UNKNOWN: QueryComplexity.SIMPLE_INFORMATIONAL,
    QuestionType.DIAGNOSTIC: QueryComplexity.DIAGNOSTIC,
    QuestionType.REPAIR_DECISION: QueryComplexity.COMPARATIVE_DECISION,
    QuestionType.COMPARISON: QueryComplexity.COMPARATIVE_DECISION,
    QuestionType.HOW_TO: QueryComplexity.MULTI_STEP_HOWTO,
    QuestionType.LIFESTYLE_CHOICE: QueryComplexity.COMPARATIVE_DECISION,
}


def refine(
    decision: GateDecision,
    capsule: ContentCapsule,
    frame: DecisionFrame,
    *,
    clarification_ceiling: int = 6,
) -> Classification:
    """Classifier pass 2.

    Args:
        decision: pass 1 결과
        capsule: 구성된 답변 캡슐
        frame: 구성된 decision frame
        clarification_ceiling: clarification_required일 때 score 상한

    Returns:
        Classification (final)
    """
    has_insight = bool(capsule.owned_insight.strip())
    complexity = query_complexity(decision)

    score = score_question(decision, has_insight, clarification_ceiling)

    return Classification(
        flags=decision.flags,
        score_10=score,
        grade_label=grade_label(score),
        clarification_required=decision.clarification_required,
        ymyl_category=decision.ymyl_category,
        ymyl_risk_level=decision.ymyl_risk_level,
        ai_displacement_risk=displacement_risk(decision, complexity, has_insight),
        query_complexity=complexity,
        publisher_vulnerability_profile=publisher_profile(decision, complexity, has_insight),
        ai_citation_potential=citation_potential(decision, capsule, frame),
        ai_usage_policy_hint=usage_policy(decision, has_insight),
    )


# ============================================================
# 점수
# ============================================================


def score_question(decision: GateDecision, has_insight: bool = False, clarification_ceiling: int = 6) -> int:
    score = SCORE_BASE
    for flag in decision.flags:
        score -= FLAG_PENALTIES.get(flag, 0)
    if decision.has(Flag.SAFETY_RISK):
        score -= RISK_PENALTIES[decision.ymyl_risk_level]

    if has_insight and not decision.flags:
        score += 1

    if any(f != Flag.TRUNCATED_INPUT for f in decision.flags):
        score = min(score, FLAGGED_SCORE_CAP)
    if decision.clarification_required:
        score = min(score, clarification_ceiling)
    if decision.has(Flag.OFF_TOPIC):
        score = min(score, OFF_TOPIC_SCORE_CAP)

    return max(0, min(10, score))


def grade_label(score: int) -> str:
    """점수 → 고정 라벨 (밴드 매핑)."""
    for floor, label in GRADE_BANDS:
        if score >= floor:
            return label
    return GRADE_BANDS[-1][1]


# ============================================================
# AI-era 필드
# ============================================================


def query_complexity(decision: GateDecision) -> QueryComplexity:
    if decision.ymyl_category != YmylCategory.NONE and decision.ymyl_risk_level.is_severe:
        return QueryComplexity.EXPERT_ADVISORY
    return COMPLEXITY_BY_TYPE.get(decision.question_type, QueryComplexity.EXPERT_ADVISORY)


def displacement_risk(decision: GateDecision, complexity: QueryComplexity, has_insight: bool) -> AiDisplacementRisk:
    """generic + 단순 정보형일수록 AI 답변으로 대체되기 쉽다."""
    severe = decision.ymyl_category != YmylCategory.NONE and decision.ymyl_risk_level.is_severe
    if severe or decision.contextual or decision.personal:
        return AiDisplacementRisk.LOW
    if (
        complexity == QueryComplexity.SIMPLE_INFORMATIONAL
        and decision.ymyl_category == YmylCategory.NONE
        and not has_insight
    ):
        return AiDisplacementRisk.HIGH
    return AiDisplacementRisk.MEDIUM


def publisher_profile(decision: GateDecision, complexity: QueryComplexity, has_insight: bool) -> PublisherVulnerability:
    severe = decision.ymyl_category != YmylCategory.NONE and decision.ymyl_risk_level.is_severe
    if severe or has_insight:
        return PublisherVulnerability.LICENSING_CANDIDATE
    if complexity == QueryComplexity.COMPARATIVE_DECISION or decision.question_type == QuestionType.BUSINESS_STRATEGY:
        return PublisherVulnerability.AFFILIATE_SENSITIVE
    if complexity in (QueryComplexity.DIAGNOSTIC, QueryComplexity.MULTI_STEP_HOWTO) or decision.contextual:
        return PublisherVulnerability.TOOL_FRIENDLY
    if complexity == QueryComplexity.SIMPLE_INFORMATIONAL:
        return PublisherVulnerability.AD_SENSITIVE
    return PublisherVulnerability.TOOL_FRIENDLY


def citation_potential(decision: GateDecision, capsule: ContentCapsule, frame: DecisionFrame) -> AiCitationPotential:
    if not capsule.answer_capsule_25w or decision.has(Flag.OFF_TOPIC) or decision.has(Flag.VAGUE_SCOPE):
        return AiCitationPotential.BASELINE
    if decision.ymyl_risk_level == RiskLevel.CRITICAL and decision.ymyl_category != YmylCategory.NONE:
        return AiCitationPotential.BASELINE
    if capsule.owned_insight.strip():
        return AiCitationPotential.STRUCTURED_CAPSULE_PLUS_DATA
    if frame.question_type == QuestionType.COMPARISON and frame.pros and frame.cons:
        return AiCitationPotential.STRUCTURED_CAPSULE_PLUS_DATA
    return AiCitationPotential.STRUCTURED_CAPSULE


def usage_policy(decision: GateDecision, has_insight: bool) -> AiUsagePolicyHint:
    if has_insight:
        return AiUsagePolicyHint.LICENSE_ONLY
    if decision.ymyl_category == YmylCategory.NONE:
        return AiUsagePolicyHint.OPEN_SHARE
    if decision.ymyl_risk_level.is_severe:
        return AiUsagePolicyHint.NO_TRAINING
    return AiUsagePolicyHint.LIMITED_SHARE


__all__ = [
    "refine",
    "score_question",
    "grade_label",
    "query_complexity",
    "displacement_risk",
    "publisher_profile",
    "citation_potential",
    "usage_policy",
    "GRADE_BANDS",
]
