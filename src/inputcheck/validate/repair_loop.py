# SPDX-License-Identifier: MIT
"""Validation / repair state machine.

상태 전이:
  COMPOSING  → VALIDATING            (항상)
  VALIDATING → ACCEPTED              (위반 없음)
  VALIDATING → REPAIRING             (위반 있음, repair 횟수 < max_repairs)
  VALIDATING → REJECTED              (위반 있음, repair 횟수 == max_repairs) → RecordRejected
  REPAIRING  → COMPOSING             (위반 목록을 Generator에 전달)

Generator 호출만 동기/비동기로 나뉘고, 상태 전이는 RepairSession 하나가 담당한다.
GeneratorUnavailable은 잡지 않는다 (호출자에게 그대로 전파).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from inputcheck.classify.refine import refine
from inputcheck.compose.composer import ContentComposer
from inputcheck.compose.draft import parse_draft, response_text
from inputcheck.compose.prompts import PromptBuilder
from inputcheck.config import ENGINE_VERSION
from inputcheck.errors import RecordRejected
from inputcheck.models import GateDecision, NormalizedQuestion, OutputRecord, Violation
from inputcheck.validate.invariants import RecordValidator

logger = logging.getLogger(__name__)

GeneratorResponse = Union[str, Dict[str, Any]]
LLMCall = Callable[[List[Dict[str, str]]], GeneratorResponse]
AsyncLLMCall = Callable[[List[Dict[str, str]]], Awaitable[GeneratorResponse]]


class LoopState(str, Enum):
    COMPOSING = "composing"
    VALIDATING = "validating"
    REPAIRING = "repairing"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class RepairLoopConfig:
    """repair 루프 설정."""

    max_repairs: int = 2
    clarification_ceiling: int = 6
    engine_version: str = ENGINE_VERSION


@dataclass
class RepairSession:
    """요청 하나의 repair 루프 상태.

    Attributes:
        state: 현재 상태
        repairs: 수행한 repair 횟수
        history: 상태 전이 기록
        violations: 마지막 검증의 위반 목록
    """

    normalized: NormalizedQuestion
    decision: GateDecision
    raw_text: str
    composer: ContentComposer
    validator: RecordValidator
    prompts: PromptBuilder
    config: RepairLoopConfig
    state: LoopState = LoopState.COMPOSING
    repairs: int = 0
    history: List[LoopState] = field(default_factory=lambda: [LoopState.COMPOSING])
    violations: List[Violation] = field(default_factory=list)
    last_response: Optional[str] = None

    def _transition(self, state: LoopState) -> None:
        self.state = state
        self.history.append(state)

    def next_messages(self) -> List[Dict[str, str]]:
        """COMPOSING 상태에서 Generator에 보낼 메시지."""
        if self.state != LoopState.COMPOSING:
            raise RuntimeError(f"cannot compose in state {self.state.value}")
        return self.prompts.build_messages(
            self.normalized,
            self.decision,
            self.raw_text,
            violations=self.violations or None,
            previous_response=self.last_response,
        )

    def submit(self, response: GeneratorResponse) -> Optional[OutputRecord]:
        """Generator 응답 처리.

        Args:
            response: Generator 응답

        Returns:
            ACCEPTED이면 OutputRecord, REPAIRING이면 None

        Raises:
            RecordRejected: repair 횟수 소진
        """
        self._transition(LoopState.VALIDATING)
        self.last_response = response_text(response)

        record, violations = self._build_and_validate(response)

        if not violations and record is not None:
            self._transition(LoopState.ACCEPTED)
            logger.debug("record accepted after %d repair(s)", self.repairs)
            return record

        self.violations = violations
        for v in violations:
            logger.warning("violation [%s] %s", v.kind, v.detail)

        if self.repairs >= self.config.max_repairs:
            self._transition(LoopState.REJECTED)
            logger.error("record rejected after %d repair(s)", self.repairs)
            raise RecordRejected(violations, self.repairs)

        self.repairs += 1
        self._transition(LoopState.REPAIRING)
        self._transition(LoopState.COMPOSING)
        return None

    def _build_and_validate(self, response: GeneratorResponse) -> Tuple[Optional[OutputRecord], List[Violation]]:
        draft, violations = parse_draft(response)
        if draft is None:
            return None, violations

        composition = self.composer.assemble(draft, self.normalized, self.decision)
        classification = refine(
            self.decision,
            composition.capsule,
            composition.decision_frame,
            clarification_ceiling=self.config.clarification_ceiling,
        )
        record = OutputRecord(
            normalized=self.normalized,
            classification=classification,
            composition=composition,
            engine_version=self.config.engine_version,
        )
        return record, self.validator.validate(record.to_dict())

    def run(self, llm_call: LLMCall) -> OutputRecord:
        """동기 Generator로 루프 실행."""
        while True:
            record = self.submit(llm_call(self.next_messages()))
            if record is not None:
                return record

    async def arun(self, llm_call: AsyncLLMCall) -> OutputRecord:
        """비동기 Generator로 루프 실행 (Generator 호출에서만 suspend)."""
        while True:
            record = self.submit(await llm_call(self.next_messages()))
            if record is not None:
                return record


class RepairLoop:
    """요청별 RepairSession 팩토리."""

    def __init__(
        self,
        composer: Optional[ContentComposer] = None,
        validator: Optional[RecordValidator] = None,
        prompts: Optional[PromptBuilder] = None,
        config: Optional[RepairLoopConfig] = None,
    ):
        self.config = config or RepairLoopConfig()
        self.composer = composer or ContentComposer()
        self.validator = validator or RecordValidator(clarification_ceiling=self.config.clarification_ceiling)
        self.prompts = prompts or PromptBuilder()

    def start(self, normalized: NormalizedQuestion, decision: GateDecision, raw_text: str) -> RepairSession:
        return RepairSession(
            normalized=normalized,
            decision=decision,
            raw_text=raw_text,
            composer=self.composer,
            validator=self.validator,
            prompts=self.prompts,
            config=self.config,
        )


__all__ = ["LoopState", "RepairLoop", "RepairLoopConfig", "RepairSession", "LLMCall", "AsyncLLMCall"]
