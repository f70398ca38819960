# SPDX-License-Identifier: MIT
"""Generator 응답 파싱.

Generator 응답(JSON 문자열, ```json 펜스 허용, 또는 dict) → GeneratorDraft.
파싱 실패는 예외가 아니라 malformed_output 위반으로 반환한다 (repair 대상).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from inputcheck.models import Violation

logger = logging.getLogger(__name__)

RE_FENCE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```\s*$", re.DOTALL | re.IGNORECASE)


def as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str) and value.strip():
        return [value]
    return []


def as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


@dataclass
class GeneratorDraft:
    """Generator가 작성한 콘텐츠 초안 (정규화 전)."""

    answer_capsule: str = ""
    mini_answer: str = ""
    owned_insight: str = ""
    next_best_question: str = ""
    pros: List[Any] = field(default_factory=list)
    cons: List[Any] = field(default_factory=list)
    personal_checks: List[Any] = field(default_factory=list)
    action_type: str = ""
    steps: List[Any] = field(default_factory=list)
    estimated_effort: str = ""
    recommended_tools: List[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratorDraft":
        """draft dict → GeneratorDraft.

        평평한 키와 전체 레코드 형태(inputcheck/decision_frame/action_protocol 중첩)를 모두 허용.
        """
        frame = as_dict(data.get("decision_frame"))
        protocol = as_dict(data.get("action_protocol"))
        header = as_dict(data.get("inputcheck"))

        return cls(
            answer_capsule=as_text(data.get("answer_capsule_25w", data.get("answer_capsule"))),
            mini_answer=as_text(data.get("mini_answer")),
            owned_insight=as_text(data.get("owned_insight")),
            next_best_question=as_text(data.get("next_best_question", header.get("next_best_question"))),
            pros=as_list(frame.get("pros", data.get("pros"))),
            cons=as_list(frame.get("cons", data.get("cons"))),
            personal_checks=as_list(frame.get("personal_checks", data.get("personal_checks"))),
            action_type=as_text(protocol.get("type", data.get("action_type"))),
            steps=as_list(protocol.get("steps", data.get("steps"))),
            estimated_effort=as_text(protocol.get("estimated_effort", data.get("estimated_effort"))),
            recommended_tools=as_list(protocol.get("recommended_tools", data.get("recommended_tools"))),
        )


def response_text(response: Union[str, Dict[str, Any], None]) -> str:
    """repair 대화에 다시 넣을 응답 텍스트."""
    if isinstance(response, dict):
        return json.dumps(response, ensure_ascii=False)
    return response or ""


def parse_draft(response: Union[str, Dict[str, Any], None]) -> Tuple[Optional[GeneratorDraft], List[Violation]]:
    """Generator 응답 파싱.

    Args:
        response: Generator 응답 (JSON 텍스트 또는 dict)

    Returns:
        (draft, violations) - 파싱 실패 시 (None, [malformed_output])
    """
    if isinstance(response, dict):
        return GeneratorDraft.from_dict(response), []

    if not isinstance(response, str) or not response.strip():
        return None, [Violation(kind="malformed_output", detail="Generator returned an empty response.")]

    text = response.strip()
    # JSON 추출 (```json ... ``` 형식 대응)
    fenced = RE_FENCE.match(text)
    if fenced:
        text = fenced.group(1).strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("draft JSON parse failed: %s", e)
        return None, [Violation(kind="malformed_output", detail=f"Response is not valid JSON: {e.msg}.")]

    if not isinstance(data, dict):
        return None, [
            Violation(kind="malformed_output", detail=f"Response must be a JSON object, got {type(data).__name__}.")
        ]

    return GeneratorDraft.from_dict(data), []


__all__ = ["GeneratorDraft", "parse_draft", "response_text", "as_text", "as_list", "as_dict"]
