# SPDX-License-Identifier: MIT
"""InputCheck 파이프라인 (전체 흐름).

파이프라인 흐름:
  (1) 입력 자르기 (max_chars) → truncated_input flag
  (2) Normalizer → NormalizedQuestion
  (3) Classifier pass 1 (gate) → flags / YMYL / answer_mode
  (4) Content Composer → Generator 호출 → Composition
  (5) Classifier pass 2 (refine) → score / AI-era 필드
  (6) Validator → ACCEPTED 또는 REPAIRING (최대 max_repairs) → REJECTED

설계 원칙:
  - 요청 간 공유 가변 상태 없음 (캐시는 immutable 스냅샷만 보관)
  - 블로킹 지점은 Generator 호출뿐
  - GeneratorUnavailable / RecordRejected는 호출자에게 전파 (부분 레코드 금지)
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional, Tuple

from loguru import logger

from inputcheck.banking import PipelineResult, RunMeta, build_banking_hint, make_request_id
from inputcheck.cache import AnalysisCache
from inputcheck.classify.gate import gate
from inputcheck.classify.ymyl import YmylDetector
from inputcheck.compose.composer import ContentComposer
from inputcheck.compose.prompts import PromptBuilder
from inputcheck.config import InputCheckSettings, get_settings
from inputcheck.errors import GeneratorUnavailable, RecordRejected
from inputcheck.models import GateDecision, NormalizedQuestion, OutputRecord
from inputcheck.normalizer import Normalizer
from inputcheck.validate.invariants import RecordValidator
from inputcheck.validate.repair_loop import AsyncLLMCall, LLMCall, RepairLoop, RepairLoopConfig, RepairSession


class InputCheckPipeline:
    """질문 하나 → 검증된 OutputRecord."""

    def __init__(
        self,
        settings: Optional[InputCheckSettings] = None,
        *,
        cache: Optional[AnalysisCache] = None,
        detector: Optional[YmylDetector] = None,
    ):
        """
        Args:
            settings: 파이프라인 설정 (None이면 get_settings())
            cache: 분석 결과 캐시 (선택)
            detector: YMYL 탐지기 (None이면 기본 사전)
        """
        self.settings = settings or get_settings()
        self.cache = cache
        self.detector = detector or YmylDetector()

        s = self.settings
        comp = s.composition
        self.normalizer = Normalizer(max_sub_intents=comp.max_sub_intents)
        self.loop = RepairLoop(
            composer=ContentComposer(comp, near_duplicate_threshold=s.near_duplicate_threshold),
            validator=RecordValidator(
                clarification_ceiling=s.clarification_score_ceiling,
                near_duplicate_threshold=s.near_duplicate_threshold,
                capsule_max_words=comp.capsule_max_words,
                mini_answer_max_sentences=comp.mini_answer_max_sentences,
                slug_max_length=comp.slug_max_length,
            ),
            prompts=PromptBuilder(max_input_chars=s.max_chars),
            config=RepairLoopConfig(
                max_repairs=s.max_repairs,
                clarification_ceiling=s.clarification_score_ceiling,
                engine_version=s.engine_version,
            ),
        )

    # ------------------------------------------------------------
    # 분석 (Generator 이전, 결정적)
    # ------------------------------------------------------------

    def truncate(self, raw_input: str) -> Tuple[str, bool]:
        """max_chars로 입력 자르기.

        Returns:
            (잘린 텍스트, 잘림 여부)
        """
        if raw_input is None:
            raw_input = ""
        if not isinstance(raw_input, str):
            raise TypeError(f"raw_input must be str, got {type(raw_input).__name__}")
        if len(raw_input) > self.settings.max_chars:
            return raw_input[: self.settings.max_chars], True
        return raw_input, False

    def analyze(self, raw_input: str) -> Tuple[NormalizedQuestion, GateDecision, str, bool]:
        """정규화 + Classifier pass 1.

        Returns:
            (normalized, decision, 잘린 텍스트, 잘림 여부)
        """
        text, truncated = self.truncate(raw_input)

        def compute() -> Tuple[NormalizedQuestion, GateDecision]:
            normalized = self.normalizer.normalize(text)
            return normalized, gate(normalized, text, truncated=truncated, detector=self.detector)

        if self.cache is not None:
            normalized, decision = self.cache.get_or_compute(f"{int(truncated)}:{text}", compute)
        else:
            normalized, decision = compute()
        return normalized, decision, text, truncated

    def start(self, raw_input: str) -> Tuple[RepairSession, str, bool]:
        normalized, decision, text, truncated = self.analyze(raw_input)
        logger.debug(
            f"analyzed: type={decision.question_type.value} "
            f"ymyl={decision.ymyl_category.value}/{decision.ymyl_risk_level.value} "
            f"mode={decision.answer_mode.value} flags={[f.value for f in decision.flags]}"
        )
        return self.loop.start(normalized, decision, text), text, truncated

    # ------------------------------------------------------------
    # 실행
    # ------------------------------------------------------------

    def run(self, raw_input: str, llm_call: LLMCall) -> PipelineResult:
        """동기 실행.

        Args:
            raw_input: 사용자 원문 질문
            llm_call: Generator 호출 함수 (messages → JSON 텍스트 또는 dict)

        Returns:
            PipelineResult

        Raises:
            GeneratorUnavailable: Generator 전송/타임아웃 실패
            RecordRejected: repair 횟수 소진
        """
        request_id = make_request_id()
        started = time.monotonic()
        session, _, truncated = self.start(raw_input)

        try:
            record = session.run(llm_call)
        except (GeneratorUnavailable, RecordRejected) as e:
            logger.error(f"[{request_id}] input check failed: {e}")
            raise

        return self._finish(request_id, started, record, session, raw_input, truncated, llm_call)

    async def arun(self, raw_input: str, llm_call: AsyncLLMCall) -> PipelineResult:
        """비동기 실행 (Generator 호출에서만 suspend)."""
        request_id = make_request_id()
        started = time.monotonic()
        session, _, truncated = self.start(raw_input)

        try:
            record = await session.arun(llm_call)
        except (GeneratorUnavailable, RecordRejected) as e:
            logger.error(f"[{request_id}] input check failed: {e}")
            raise

        return self._finish(request_id, started, record, session, raw_input, truncated, llm_call)

    def _finish(
        self,
        request_id: str,
        started: float,
        record: OutputRecord,
        session: RepairSession,
        raw_input: str,
        truncated: bool,
        llm_call: Any,
    ) -> PipelineResult:
        payload = record.to_dict()
        meta = RunMeta(
            request_id=request_id,
            engine_version=self.settings.engine_version,
            model=getattr(llm_call, "model", None),
            processing_time_ms=int((time.monotonic() - started) * 1000),
            was_truncated=truncated,
            input_length_chars=len(raw_input or ""),
            repair_attempts=session.repairs,
        )
        header = payload["inputcheck"]
        logger.info(
            f"[{request_id}] accepted score={header['score_10']} flags={header['flags']} repairs={session.repairs}"
        )
        return PipelineResult(record=payload, banking_hint=build_banking_hint(payload), meta=meta)


def check_question(
    raw_input: str,
    llm_call: LLMCall,
    settings: Optional[InputCheckSettings] = None,
) -> Dict[str, Any]:
    """질문 하나 처리 (편의 함수). 검증된 레코드 dict만 반환."""
    return InputCheckPipeline(settings).run(raw_input, llm_call).record


__all__ = ["InputCheckPipeline", "check_question"]
