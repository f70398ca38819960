# SPDX-License-Identifier: MIT
"""레코드 불변식 / 콘텐츠 규칙 검증.

검증 전략:
  1) 스키마 (schema.schema_violations): 키 집합, 타입, 닫힌 어휘, 리스트 길이
  2) 레코드 간 일관성: YMYL → safety_risk, clarification → score 상한, share block prefix,
     slug = slugify(cleaned_question), capsule ≠ mini_answer 첫 문장, URL 금지
  3) 콘텐츠 규칙: 메타 언급, 고위험 건강 답변의 진단성 단정, capsule 길이, 다음 질문 깊이
     (critical YMYL / off_topic 레코드는 고정 다음 질문 허용)

스키마 위반이 있으면 나머지 검사는 건너뛴다 (레코드 형태를 신뢰할 수 없음).
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List

from inputcheck.classify.refine import grade_label
from inputcheck.compose.composer import DEGRADED_FOLLOW_UP, critical_follow_up, is_deeper_follow_up
from inputcheck.models import RiskLevel, Violation, YmylCategory
from inputcheck.utils.slug import DEFAULT_SLUG_MAX_LENGTH, vault_slug
from inputcheck.utils.text import (
    first_sentence,
    has_meta_reference,
    has_url,
    is_near_duplicate,
    split_sentences,
    word_count,
)
from inputcheck.validate.schema import schema_violations

# 조건문 속 "you have"는 단정이 아님
_CONDITIONAL_YOU = re.compile(r"(?i)\b(?:if|when|whether|unless|until) you(?:'re| are)? (?:have|having)\b")
_DIAGNOSTIC_CLAIM = re.compile(
    r"(?i)\b(?:"
    r"you(?:'re| are)? (?:definitely|probably|likely|clearly|certainly) (?:have|having|suffering)"
    r"|you have (?:a |an )?(?:heart attack|stroke|cancer|diabetes|depression|infection|an infection|a tumor)"
    r"|this is (?:definitely|certainly|probably|likely|just) (?:a |an )?(?:heart attack|stroke|cancer|anxiety|nothing serious|not serious)"
    r"|you(?:'re| are) (?:fine|okay|ok)"
    r"|nothing to worry about"
    r"|no need to see a doctor"
    r")\b"
)

_USER_FACING = ("answer_capsule_25w", "mini_answer", "owned_insight")


class RecordValidator:
    """레코드 검증기 (스키마 + 불변식 + 콘텐츠 규칙)."""

    def __init__(
        self,
        clarification_ceiling: int = 6,
        near_duplicate_threshold: float = 0.9,
        capsule_max_words: int = 25,
        mini_answer_max_sentences: int = 5,
        slug_max_length: int = DEFAULT_SLUG_MAX_LENGTH,
    ):
        self.clarification_ceiling = clarification_ceiling
        self.near_duplicate_threshold = near_duplicate_threshold
        self.capsule_max_words = capsule_max_words
        self.mini_answer_max_sentences = mini_answer_max_sentences
        self.slug_max_length = slug_max_length

        self.checks: List[Callable[[Dict[str, Any]], List[Violation]]] = [
            check_ymyl_flag,
            self.check_clarification_ceiling,
            check_share_blocks,
            self.check_slug,
            self.check_capsule_overlap,
            check_no_urls,
            check_required_text,
            check_grade_label,
            check_meta_references,
            check_diagnostic_claims,
            self.check_capsule_shape,
            self.check_mini_answer_length,
            self.check_next_best_question,
        ]

    def validate(self, record: Dict[str, Any]) -> List[Violation]:
        """레코드 검증.

        Args:
            record: OutputRecord.to_dict() 결과

        Returns:
            위반 목록 (빈 리스트면 통과)
        """
        violations = schema_violations(record)
        if violations:
            return violations

        for check in self.checks:
            violations.extend(check(record))
        return violations

    def has_errors(self, violations: List[Violation]) -> bool:
        return any(v.severity == "error" for v in violations)

    # ------------------------------------------------------------
    # 설정 의존 검사
    # ------------------------------------------------------------

    def check_clarification_ceiling(self, record: Dict[str, Any]) -> List[Violation]:
        header = record["inputcheck"]
        if header["clarification_required"] and header["score_10"] > self.clarification_ceiling:
            return [
                Violation(
                    kind="clarification_score",
                    detail=(
                        f"score_10 is {header['score_10']} but clarification_required caps it "
                        f"at {self.clarification_ceiling}."
                    ),
                )
            ]
        return []

    def check_slug(self, record: Dict[str, Any]) -> List[Violation]:
        expected = vault_slug(record["inputcheck"]["cleaned_question"], self.slug_max_length)
        slug = record["vault_node"]["slug"]
        if slug != expected:
            return [Violation(kind="slug", detail=f"vault_node.slug {slug!r} must be {expected!r}.")]
        return []

    def check_capsule_overlap(self, record: Dict[str, Any]) -> List[Violation]:
        capsule = record["answer_capsule_25w"]
        lead = first_sentence(record["mini_answer"])
        if capsule and lead and is_near_duplicate(lead, capsule, self.near_duplicate_threshold):
            return [
                Violation(
                    kind="capsule_duplicate",
                    detail="The first sentence of mini_answer repeats answer_capsule_25w.",
                )
            ]
        return []

    def check_capsule_shape(self, record: Dict[str, Any]) -> List[Violation]:
        capsule = record["answer_capsule_25w"]
        if not capsule:
            return []
        violations = []
        if word_count(capsule) > self.capsule_max_words:
            violations.append(
                Violation(
                    kind="capsule_length",
                    detail=f"answer_capsule_25w has {word_count(capsule)} words (max {self.capsule_max_words}).",
                )
            )
        if len(split_sentences(capsule)) != 1:
            violations.append(Violation(kind="capsule_sentences", detail="answer_capsule_25w must be one sentence."))
        return violations

    def check_mini_answer_length(self, record: Dict[str, Any]) -> List[Violation]:
        count = len(split_sentences(record["mini_answer"]))
        if count > self.mini_answer_max_sentences:
            return [
                Violation(
                    kind="mini_answer_length",
                    detail=f"mini_answer has {count} sentences (max {self.mini_answer_max_sentences}).",
                )
            ]
        return []

    def check_next_best_question(self, record: Dict[str, Any]) -> List[Violation]:
        header = record["inputcheck"]
        question = header["next_best_question"]
        if "off_topic" in header["flags"] and question == DEGRADED_FOLLOW_UP:
            return []
        if _is_critical_record(record) and question == critical_follow_up(YmylCategory(record["ymyl_category"])):
            return []
        if not is_deeper_follow_up(question, header["cleaned_question"], self.near_duplicate_threshold):
            return [
                Violation(
                    kind="next_best_question",
                    detail="next_best_question must be a new question on the same topic ending with '?'.",
                )
            ]
        return []


# ============================================================
# 설정 독립 검사
# ============================================================


def check_ymyl_flag(record: Dict[str, Any]) -> List[Violation]:
    if record["ymyl_category"] != YmylCategory.NONE.value and "safety_risk" not in record["inputcheck"]["flags"]:
        return [
            Violation(
                kind="ymyl_flag",
                detail=f"ymyl_category is {record['ymyl_category']!r} but flags lack 'safety_risk'.",
            )
        ]
    return []


def check_share_blocks(record: Dict[str, Any]) -> List[Violation]:
    blocks = record["share_blocks"]
    answer_only, with_link = blocks["answer_only"], blocks["answer_with_link"]
    if not (with_link.startswith(answer_only) and len(with_link) > len(answer_only)):
        return [
            Violation(
                kind="share_blocks",
                detail="share_blocks.answer_only must be a strict prefix of answer_with_link.",
            )
        ]
    return []


def check_no_urls(record: Dict[str, Any]) -> List[Violation]:
    return [
        Violation(kind="url_in_answer", detail=f"{key} must not contain a URL.")
        for key in ("answer_capsule_25w", "mini_answer")
        if has_url(record[key])
    ]


def check_required_text(record: Dict[str, Any]) -> List[Violation]:
    return [
        Violation(kind="empty_field", detail=f"{key} must not be empty.")
        for key in ("answer_capsule_25w", "mini_answer")
        if not record[key].strip()
    ]


def check_grade_label(record: Dict[str, Any]) -> List[Violation]:
    header = record["inputcheck"]
    expected = grade_label(header["score_10"])
    if header["grade_label"] != expected:
        return [
            Violation(
                kind="grade_label",
                detail=f"grade_label {header['grade_label']!r} does not match score {header['score_10']} ({expected!r}).",
            )
        ]
    return []


def check_meta_references(record: Dict[str, Any]) -> List[Violation]:
    texts = {key: record[key] for key in _USER_FACING}
    texts["next_best_question"] = record["inputcheck"]["next_best_question"]
    return [
        Violation(kind="meta_reference", detail=f"{key} mentions AI, JSON or prompts.")
        for key, text in texts.items()
        if has_meta_reference(text, record["inputcheck"]["cleaned_question"])
    ]


def check_diagnostic_claims(record: Dict[str, Any]) -> List[Violation]:
    """고위험 건강 질문에서 진단/안심 단정 금지."""
    if record["ymyl_category"] != YmylCategory.HEALTH.value:
        return []
    if not RiskLevel.from_str(record["ymyl_risk_level"], RiskLevel.LOW).is_severe:
        return []

    violations = []
    for key in _USER_FACING:
        text = _CONDITIONAL_YOU.sub(" ", record[key])
        match = _DIAGNOSTIC_CLAIM.search(text)
        if match:
            violations.append(
                Violation(
                    kind="diagnostic_claim",
                    detail=f"{key} makes a diagnostic claim ({match.group(0)!r}); give general information only.",
                )
            )
    return violations


def _is_critical_record(record: Dict[str, Any]) -> bool:
    return (
        record["ymyl_category"] != YmylCategory.NONE.value
        and RiskLevel.from_str(record["ymyl_risk_level"], RiskLevel.LOW) == RiskLevel.CRITICAL
    )


def validate_record(record: Dict[str, Any], clarification_ceiling: int = 6) -> List[Violation]:
    """레코드 검증 (편의 함수)."""
    return RecordValidator(clarification_ceiling=clarification_ceiling).validate(record)


__all__ = [
    "RecordValidator",
    "validate_record",
    "check_ymyl_flag",
    "check_share_blocks",
    "check_no_urls",
    "check_required_text",
    "check_grade_label",
    "check_meta_references",
    "check_diagnostic_claims",
]
