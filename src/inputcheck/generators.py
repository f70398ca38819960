# SPDX-License-Identifier: MIT
"""Generator adapters.

파이프라인은 `llm_call(messages) -> str | dict` 형태의 callable만 알면 된다.
여기서는 OpenAI chat-completions 기반 동기/비동기 어댑터를 제공한다.

전송/타임아웃/HTTP 상태 오류는 모두 GeneratorUnavailable로 변환한다.
응답 내용은 검증하지 않는다 (파이프라인이 검증).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import openai
from loguru import logger
from openai import AsyncOpenAI, OpenAI

from inputcheck.config import GeneratorSettings
from inputcheck.errors import GeneratorUnavailable


class _ChatCallBase:
    """공통 요청 생성 / 사용량 집계 / 오류 변환."""

    def __init__(self, settings: Optional[GeneratorSettings] = None):
        self.settings = settings or GeneratorSettings()
        self.last_usage: Optional[Dict[str, int]] = None

    @property
    def model(self) -> str:
        return self.settings.model

    @property
    def timeout_seconds(self) -> float:
        return self.settings.timeout_ms / 1000.0

    def request_kwargs(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            "model": self.settings.model,
            "messages": messages,
            "response_format": {"type": "json_object"},
            "temperature": self.settings.temperature,
            "top_p": self.settings.top_p,
            "max_tokens": self.settings.max_tokens,
        }

    def _merge_usage(self, resp: Any) -> None:
        usage = getattr(resp, "usage", None)
        if usage is None:
            return
        inc = {
            "prompt_tokens": getattr(usage, "prompt_tokens", 0) or 0,
            "completion_tokens": getattr(usage, "completion_tokens", 0) or 0,
            "total_tokens": getattr(usage, "total_tokens", 0) or 0,
        }
        if self.last_usage is None:
            self.last_usage = inc
            return
        for k, v in inc.items():
            self.last_usage[k] = self.last_usage.get(k, 0) + v

    def _content(self, resp: Any) -> str:
        choices = getattr(resp, "choices", None) or []
        if not choices:
            return ""
        return getattr(choices[0].message, "content", None) or ""

    def _unavailable(self, e: Exception) -> GeneratorUnavailable:
        if isinstance(e, openai.APITimeoutError):
            err = GeneratorUnavailable(f"generator timed out after {self.settings.timeout_ms} ms")
        elif isinstance(e, openai.APIStatusError):
            err = GeneratorUnavailable(f"generator HTTP {e.status_code}", status_code=e.status_code)
        else:
            err = GeneratorUnavailable(f"generator connection failed: {e}")
        logger.error(f"{err} (model={self.settings.model})")
        return err


class OpenAIChatCall(_ChatCallBase):
    """동기 OpenAI chat-completions 어댑터.

    사용 예::

        llm_call = OpenAIChatCall(settings.generator)
        result = pipeline.run("jeep wrangler a pillar water leak", llm_call)
    """

    def __init__(self, settings: Optional[GeneratorSettings] = None, client: Optional[OpenAI] = None):
        """
        Args:
            settings: Generator 설정 (모델, 타임아웃, 샘플링)
            client: 주입할 OpenAI 클라이언트 (None이면 환경변수 기반으로 생성)
        """
        super().__init__(settings)
        self.client = client or OpenAI(timeout=self.timeout_seconds, max_retries=0)

    def __call__(self, messages: List[Dict[str, str]]) -> str:
        try:
            resp = self.client.chat.completions.create(**self.request_kwargs(messages))
        except (openai.APIConnectionError, openai.APIStatusError) as e:
            raise self._unavailable(e) from e
        self._merge_usage(resp)
        return self._content(resp)


class AsyncOpenAIChatCall(_ChatCallBase):
    """비동기 OpenAI chat-completions 어댑터 (InputCheckPipeline.arun 용)."""

    def __init__(self, settings: Optional[GeneratorSettings] = None, client: Optional[AsyncOpenAI] = None):
        super().__init__(settings)
        self.client = client or AsyncOpenAI(timeout=self.timeout_seconds, max_retries=0)

    async def __call__(self, messages: List[Dict[str, str]]) -> str:
        try:
            resp = await self.client.chat.completions.create(**self.request_kwargs(messages))
        except (openai.APIConnectionError, openai.APIStatusError) as e:
            raise self._unavailable(e) from e
        self._merge_usage(resp)
        return self._content(resp)


__all__ = ["OpenAIChatCall", "AsyncOpenAIChatCall"]
