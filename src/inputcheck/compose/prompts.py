# SPDX-License-Identifier: MIT
"""Generator 프롬프트 템플릿.

Generator는 콘텐츠 필드(capsule, mini_answer, frame, steps)만 작성한다.
정규화/분류/slug/share block 등 결정적 필드는 파이프라인이 직접 만든다.

핵심 원칙:
  - JSON 객체 하나만 출력
  - URL 금지 (capsule, mini_answer)
  - AI/JSON/프롬프트 언급 금지
  - answer_mode에 따른 응답 방식 준수
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from inputcheck.models import AnswerMode, GateDecision, NormalizedQuestion, Violation

# ============================================================
# 프롬프트 템플릿
# ============================================================

SYSTEM_PROMPT = """You are the answer-writing stage of a question-cleaning engine.
The question has already been cleaned and classified. You write the answer content only.

Rules (must follow):
1) Answer the cleaned_question you are given. Do not answer the raw input's side questions.
2) answer_capsule_25w: ONE sentence, at most 25 words, that directly answers the question. No URLs, no "click here".
3) mini_answer: 2-5 sentences in a neutral, factual tone. Its first sentence must NOT repeat the capsule;
   add new information instead. No URLs.
4) owned_insight: an optional short rule of thumb that goes beyond generic web answers, or "".
5) next_best_question: ONE follow-up question on the same topic that goes one step deeper. It must end with "?".
6) decision_frame: up to 3 pros, up to 3 cons (label + reason + tags), up to 3 personal_checks
   (label + prompt + dimension in financial, health, time, relationships, skills_profile, general).
7) action_protocol: 3-5 ordered, concrete steps, a short estimated_effort ("15-30 minutes", "a weekend"),
   and up to 5 generic recommended_tools (categories, not brands).
8) Never mention AI, JSON, prompts, engines or models in any user-facing string.
9) When in doubt, honor safety first.

Output format (JSON only, no other text):
{
  "answer_capsule_25w": "string",
  "mini_answer": "string",
  "owned_insight": "string",
  "next_best_question": "string",
  "decision_frame": {
    "pros": [{"label": "string", "reason": "string", "tags": ["string"]}],
    "cons": [{"label": "string", "reason": "string", "tags": ["string"]}],
    "personal_checks": [{"label": "string", "prompt": "string", "dimension": "general"}]
  },
  "action_protocol": {
    "type": "diagnostic_steps | decision_checklist | talk_to_pro | self_education | comparison | career_strategy | business_strategy",
    "steps": ["string"],
    "estimated_effort": "string",
    "recommended_tools": ["string"]
  }
}"""

ANSWER_MODE_RULES: Dict[AnswerMode, str] = {
    AnswerMode.DIRECT: (
        "Answer directly and concretely. Prefer entity-rich wording over vague pronouns."
    ),
    AnswerMode.GENERAL_INFORMATION: (
        "This is a high-stakes topic. Give general information only, never a diagnosis or personal verdict. "
        "Clearly say the answer is general information and point the reader to a licensed professional. "
        "For emergencies, tell the reader to contact emergency services first. "
        "action_protocol.type must be talk_to_pro."
    ),
    AnswerMode.DEGRADED: (
        "The input does not contain a clear question. Briefly explain what kind of question can be answered "
        "and give steps for rewriting it as one specific question."
    ),
}

USER_PROMPT_TEMPLATE = """<QUESTION>
{payload}
</QUESTION>

<ANSWER_MODE>
{mode_rule}
</ANSWER_MODE>

Write the answer content for the cleaned_question above. Output JSON only."""


# ============================================================
# 프롬프트 생성기
# ============================================================


class PromptBuilder:
    """Generator 메시지 생성기."""

    def __init__(self, max_input_chars: int = 2000):
        """
        Args:
            max_input_chars: 프롬프트에 포함할 원문 최대 문자 수
        """
        self.max_input_chars = max_input_chars

    def build_payload(
        self,
        normalized: NormalizedQuestion,
        decision: GateDecision,
        raw_text: str,
    ) -> Dict[str, Any]:
        return {
            "raw_input": raw_text[: self.max_input_chars],
            "cleaned_question": normalized.cleaned_question,
            "canonical_query": normalized.canonical_query,
            "primary_intent": normalized.primary_intent,
            "sub_intents": list(normalized.sub_intents),
            "question_type": decision.question_type.value,
            "ymyl_category": decision.ymyl_category.value,
            "ymyl_risk_level": decision.ymyl_risk_level.value,
            "flags": [f.value for f in decision.flags],
            "answer_mode": decision.answer_mode.value,
        }

    def build_messages(
        self,
        normalized: NormalizedQuestion,
        decision: GateDecision,
        raw_text: str,
        violations: Optional[Sequence[Violation]] = None,
        previous_response: Optional[str] = None,
    ) -> List[Dict[str, str]]:
        """OpenAI 호환 메시지 리스트 생성.

        Args:
            normalized: 정규화된 질문
            decision: Classifier pass 1 결과
            raw_text: (잘린) 원문
            violations: 직전 시도의 위반 목록 (repair 시)
            previous_response: 직전 Generator 응답 (repair 시)

        Returns:
            [{"role": "system", ...}, {"role": "user", ...}, ...]
        """
        payload = self.build_payload(normalized, decision, raw_text)
        user_content = USER_PROMPT_TEMPLATE.format(
            payload=json.dumps(payload, ensure_ascii=False, indent=2),
            mode_rule=ANSWER_MODE_RULES[decision.answer_mode],
        )

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ]

        if violations:
            if previous_response:
                messages.append({"role": "assistant", "content": previous_response})
            messages.append({"role": "user", "content": build_repair_prompt(violations)})

        return messages


def build_repair_prompt(violations: Sequence[Violation]) -> str:
    """repair 프롬프트 생성."""
    lines = [
        "The previous answer had these problems:",
    ]
    for v in violations:
        lines.append(f"- [{v.kind}] {v.detail}")

    lines.extend(
        [
            "",
            "Rewrite the whole JSON object and fix every problem:",
            "1. Keep the answer_capsule_25w to one sentence of at most 25 words.",
            "2. Do not start mini_answer with the capsule sentence.",
            "3. Give 3-5 concrete steps.",
            "4. Do not include URLs or mention AI, JSON or prompts.",
            "5. Output JSON only.",
        ]
    )

    return "\n".join(lines)


__all__ = ["SYSTEM_PROMPT", "ANSWER_MODE_RULES", "PromptBuilder", "build_repair_prompt"]
