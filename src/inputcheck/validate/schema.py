# SPDX-License-Identifier: MIT
"""Output record schema.

고정 외부 스키마 (pydantic v2 strict). 모든 레벨에서 extra="forbid":
키 추가/삭제/이름 변경, null 문자열, 닫힌 어휘 밖의 값, 리스트 길이 위반을 모두 거부한다.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from inputcheck.models import (
    ActionType,
    AiCitationPotential,
    AiDisplacementRisk,
    AiUsagePolicyHint,
    Dimension,
    Flag,
    PublisherVulnerability,
    QueryComplexity,
    QuestionType,
    RiskLevel,
    Vertical,
    Violation,
    YmylCategory,
)


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class InputCheckHeader(_Strict):
    cleaned_question: str
    canonical_query: str
    flags: list[Flag] = Field(max_length=len(Flag))
    score_10: int = Field(ge=0, le=10)
    grade_label: str = Field(min_length=1)
    clarification_required: bool
    next_best_question: str = Field(min_length=1)
    engine_version: str = Field(min_length=1)

    @field_validator("flags")
    @classmethod
    def validate_unique_flags(cls, v: list[Flag]) -> list[Flag]:
        if len(set(v)) != len(v):
            raise ValueError("flags must not repeat")
        return v


class VaultNodeSchema(_Strict):
    slug: str = Field(min_length=1)
    vertical_guess: Vertical
    cmn_status: Literal["draft"]
    public_url: None


class ShareBlocksSchema(_Strict):
    answer_only: str
    answer_with_link: str


class ProConSchema(_Strict):
    label: str
    reason: str
    tags: list[str]
    spawn_question_slug: str


class PersonalCheckSchema(_Strict):
    label: str
    prompt: str
    dimension: Dimension


class DecisionFrameSchema(_Strict):
    question_type: QuestionType
    pros: list[ProConSchema] = Field(max_length=3)
    cons: list[ProConSchema] = Field(max_length=3)
    personal_checks: list[PersonalCheckSchema] = Field(max_length=3)


class IntentMapSchema(_Strict):
    primary_intent: str
    sub_intents: list[str] = Field(max_length=5)


class ActionProtocolSchema(_Strict):
    type: ActionType
    steps: list[str] = Field(min_length=3, max_length=5)
    estimated_effort: str
    recommended_tools: list[str] = Field(max_length=5)


class OutputRecordSchema(_Strict):
    """최종 레코드 스키마 (정확히 16개 최상위 키)."""

    inputcheck: InputCheckHeader
    mini_answer: str
    vault_node: VaultNodeSchema
    share_blocks: ShareBlocksSchema
    decision_frame: DecisionFrameSchema
    intent_map: IntentMapSchema
    action_protocol: ActionProtocolSchema
    answer_capsule_25w: str
    owned_insight: str
    ai_displacement_risk: AiDisplacementRisk
    query_complexity: QueryComplexity
    publisher_vulnerability_profile: PublisherVulnerability
    ai_citation_potential: AiCitationPotential
    ai_usage_policy_hint: AiUsagePolicyHint
    ymyl_category: YmylCategory
    ymyl_risk_level: RiskLevel


def _location(loc: tuple) -> str:
    return ".".join(str(p) for p in loc) or "<root>"


def schema_violations(record: Dict[str, Any]) -> List[Violation]:
    """레코드 dict → 스키마 위반 목록.

    JSON 왕복 후 검증하므로 enum 값은 문자열로, 튜플은 리스트로 비교된다.
    """
    try:
        OutputRecordSchema.model_validate_json(json.dumps(record))
    except ValidationError as e:
        return [Violation(kind="schema", detail=f"{_location(err['loc'])}: {err['msg']}") for err in e.errors()]
    return []


__all__ = ["OutputRecordSchema", "schema_violations"]
