# SPDX-License-Identifier: MIT
"""Record models.

질문 하나에 대한 정규화/분류/구성 결과 모델 정의.
Snapshots are frozen dataclasses; controlled vocabularies are str enums that
serialize to their plain string values.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

# ============================================================
# 통제 어휘 (closed vocabularies)
# ============================================================


class _Vocabulary(str, Enum):
    """Enum base with a lenient string parser."""

    @classmethod
    def from_str(cls, value: Any, default: "_Vocabulary") -> "_Vocabulary":
        if not isinstance(value, str):
            return default
        key = value.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return default

    @classmethod
    def values(cls) -> Tuple[str, ...]:
        return tuple(m.value for m in cls)


class Flag(_Vocabulary):
    VAGUE_SCOPE = "vague_scope"
    STACKED_ASKS = "stacked_asks"
    MISSING_CONTEXT = "missing_context"
    SAFETY_RISK = "safety_risk"
    OFF_TOPIC = "off_topic"
    TRUNCATED_INPUT = "truncated_input"


class YmylCategory(_Vocabulary):
    NONE = "none"
    HEALTH = "health"
    FINANCIAL = "financial"
    LEGAL = "legal"
    CAREER = "career"
    RELATIONSHIPS = "relationships"
    OTHER = "other"


class RiskLevel(_Vocabulary):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return ("low", "medium", "high", "critical").index(self.value)

    @property
    def is_severe(self) -> bool:
        return self in (RiskLevel.HIGH, RiskLevel.CRITICAL)


class AiDisplacementRisk(_Vocabulary):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class QueryComplexity(_Vocabulary):
    SIMPLE_INFORMATIONAL = "simple_informational"
    MULTI_STEP_HOWTO = "multi_step_howto"
    DIAGNOSTIC = "diagnostic"
    COMPARATIVE_DECISION = "comparative_decision"
    EXPERT_ADVISORY = "expert_advisory"


class PublisherVulnerability(_Vocabulary):
    AD_SENSITIVE = "ad_sensitive"
    AFFILIATE_SENSITIVE = "affiliate_sensitive"
    TOOL_FRIENDLY = "tool_friendly"
    LICENSING_CANDIDATE = "licensing_candidate"


class AiCitationPotential(_Vocabulary):
    BASELINE = "baseline"
    STRUCTURED_CAPSULE = "structured_capsule"
    STRUCTURED_CAPSULE_PLUS_DATA = "structured_capsule_plus_data"


class AiUsagePolicyHint(_Vocabulary):
    OPEN_SHARE = "open_share"
    LIMITED_SHARE = "limited_share"
    NO_TRAINING = "no_training"
    LICENSE_ONLY = "license_only"


class QuestionType(_Vocabulary):
    FACT_LOOKUP = "fact_lookup"
    DIAGNOSTIC = "diagnostic"
    REPAIR_DECISION = "repair_decision"
    HOW_TO = "how_to"
    COMPARISON = "comparison"
    BUSINESS_STRATEGY = "business_strategy"
    CAREER_STRATEGY = "career_strategy"
    FINANCIAL_PLANNING = "financial_planning"
    HEALTH_INFORMATION = "health_information"
    LEGAL_INFORMATION = "legal_information"
    RELATIONSHIP_ADVICE = "relationship_advice"
    LIFESTYLE_CHOICE = "lifestyle_choice"
    UNKNOWN = "unknown"


class ActionType(_Vocabulary):
    DIAGNOSTIC_STEPS = "diagnostic_steps"
    DECISION_CHECKLIST = "decision_checklist"
    TALK_TO_PRO = "talk_to_pro"
    SELF_EDUCATION = "self_education"
    COMPARISON = "comparison"
    CAREER_STRATEGY = "career_strategy"
    BUSINESS_STRATEGY = "business_strategy"


class Dimension(_Vocabulary):
    FINANCIAL = "financial"
    HEALTH = "health"
    TIME = "time"
    RELATIONSHIPS = "relationships"
    SKILLS_PROFILE = "skills_profile"
    GENERAL = "general"


class Vertical(_Vocabulary):
    JEEP_LEAKS = "jeep_leaks"
    SMP = "smp"
    WINDOW_TINT = "window_tint"
    AI_SYSTEMS = "ai_systems"
    GENERAL = "general"


class AnswerMode(str, Enum):
    """게이트가 Composer에 전달하는 응답 방식."""

    DIRECT = "direct"
    GENERAL_INFORMATION = "general_information"  # safety-deferring
    DEGRADED = "degraded"  # off-topic / no extractable question


# ============================================================
# 정규화 / 분류 스냅샷
# ============================================================


@dataclass(frozen=True)
class NormalizedQuestion:
    """Normalizer 출력."""

    cleaned_question: str
    canonical_query: str
    primary_intent: str
    sub_intents: Tuple[str, ...] = ()
    ask_count: int = 1  # distinguishable ask clauses seen in the raw text
    has_question: bool = True


@dataclass(frozen=True)
class GateDecision:
    """Classifier pass 1 결과 (text-only signals)."""

    flags: Tuple[Flag, ...]
    ymyl_category: YmylCategory
    ymyl_risk_level: RiskLevel
    clarification_required: bool
    answer_mode: AnswerMode
    question_type: QuestionType
    vertical: Vertical
    contextual: bool = False  # depends on local/physical/experiential context
    personal: bool = False

    def has(self, flag: Flag) -> bool:
        return flag in self.flags


@dataclass(frozen=True)
class Classification:
    """Classifier pass 2 결과 (final values)."""

    flags: Tuple[Flag, ...]
    score_10: int
    grade_label: str
    clarification_required: bool
    ymyl_category: YmylCategory
    ymyl_risk_level: RiskLevel
    ai_displacement_risk: AiDisplacementRisk
    query_complexity: QueryComplexity
    publisher_vulnerability_profile: PublisherVulnerability
    ai_citation_potential: AiCitationPotential
    ai_usage_policy_hint: AiUsagePolicyHint


# ============================================================
# 구성 결과
# ============================================================


@dataclass(frozen=True)
class VaultNode:
    slug: str
    vertical_guess: Vertical
    cmn_status: str = "draft"
    public_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "vertical_guess": self.vertical_guess.value,
            "cmn_status": self.cmn_status,
            "public_url": self.public_url,
        }


@dataclass(frozen=True)
class ContentCapsule:
    answer_capsule_25w: str
    mini_answer: str
    owned_insight: str = ""


@dataclass(frozen=True)
class ProCon:
    label: str
    reason: str
    tags: Tuple[str, ...] = ()
    spawn_question_slug: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "reason": self.reason,
            "tags": list(self.tags),
            "spawn_question_slug": self.spawn_question_slug,
        }


@dataclass(frozen=True)
class PersonalCheck:
    label: str
    prompt: str
    dimension: Dimension = Dimension.GENERAL

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "prompt": self.prompt, "dimension": self.dimension.value}


@dataclass(frozen=True)
class DecisionFrame:
    question_type: QuestionType
    pros: Tuple[ProCon, ...] = ()
    cons: Tuple[ProCon, ...] = ()
    personal_checks: Tuple[PersonalCheck, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_type": self.question_type.value,
            "pros": [p.to_dict() for p in self.pros],
            "cons": [c.to_dict() for c in self.cons],
            "personal_checks": [c.to_dict() for c in self.personal_checks],
        }


@dataclass(frozen=True)
class ActionProtocol:
    type: ActionType
    steps: Tuple[str, ...]
    estimated_effort: str
    recommended_tools: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "steps": list(self.steps),
            "estimated_effort": self.estimated_effort,
            "recommended_tools": list(self.recommended_tools),
        }


@dataclass(frozen=True)
class ShareBlocks:
    answer_only: str
    answer_with_link: str

    def to_dict(self) -> Dict[str, str]:
        return {"answer_only": self.answer_only, "answer_with_link": self.answer_with_link}


@dataclass(frozen=True)
class Composition:
    """Content Composer 출력 (분류 pass 2 이전)."""

    capsule: ContentCapsule
    decision_frame: DecisionFrame
    action_protocol: ActionProtocol
    next_best_question: str
    share_blocks: ShareBlocks
    vault_node: VaultNode


@dataclass(frozen=True)
class OutputRecord:
    """최종 레코드 (고정 외부 스키마)."""

    normalized: NormalizedQuestion
    classification: Classification
    composition: Composition
    engine_version: str

    def to_dict(self) -> Dict[str, Any]:
        c = self.classification
        comp = self.composition
        n = self.normalized
        return {
            "inputcheck": {
                "cleaned_question": n.cleaned_question,
                "canonical_query": n.canonical_query,
                "flags": [f.value for f in c.flags],
                "score_10": c.score_10,
                "grade_label": c.grade_label,
                "clarification_required": c.clarification_required,
                "next_best_question": comp.next_best_question,
                "engine_version": self.engine_version,
            },
            "mini_answer": comp.capsule.mini_answer,
            "vault_node": comp.vault_node.to_dict(),
            "share_blocks": comp.share_blocks.to_dict(),
            "decision_frame": comp.decision_frame.to_dict(),
            "intent_map": {
                "primary_intent": n.primary_intent,
                "sub_intents": list(n.sub_intents),
            },
            "action_protocol": comp.action_protocol.to_dict(),
            "answer_capsule_25w": comp.capsule.answer_capsule_25w,
            "owned_insight": comp.capsule.owned_insight,
            "ai_displacement_risk": c.ai_displacement_risk.value,
            "query_complexity": c.query_complexity.value,
            "publisher_vulnerability_profile": c.publisher_vulnerability_profile.value,
            "ai_citation_potential": c.ai_citation_potential.value,
            "ai_usage_policy_hint": c.ai_usage_policy_hint.value,
            "ymyl_category": c.ymyl_category.value,
            "ymyl_risk_level": c.ymyl_risk_level.value,
        }


OUTPUT_KEYS: Tuple[str, ...] = (
    "inputcheck",
    "mini_answer",
    "vault_node",
    "share_blocks",
    "decision_frame",
    "intent_map",
    "action_protocol",
    "answer_capsule_25w",
    "owned_insight",
    "ai_displacement_risk",
    "query_complexity",
    "publisher_vulnerability_profile",
    "ai_citation_potential",
    "ai_usage_policy_hint",
    "ymyl_category",
    "ymyl_risk_level",
)


@dataclass
class Violation:
    """스키마/불변식 위반."""

    kind: str  # schema | malformed_output | ymyl_flag | ... (see validate.invariants)
    detail: str
    severity: str = "error"  # error | warning

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "detail": self.detail, "severity": self.severity}


__all__ = [
    "Flag",
    "YmylCategory",
    "RiskLevel",
    "AiDisplacementRisk",
    "QueryComplexity",
    "PublisherVulnerability",
    "AiCitationPotential",
    "AiUsagePolicyHint",
    "QuestionType",
    "ActionType",
    "Dimension",
    "Vertical",
    "AnswerMode",
    "NormalizedQuestion",
    "GateDecision",
    "Classification",
    "VaultNode",
    "ContentCapsule",
    "ProCon",
    "PersonalCheck",
    "DecisionFrame",
    "ActionProtocol",
    "ShareBlocks",
    "Composition",
    "OutputRecord",
    "OUTPUT_KEYS",
    "Violation",
]
