# SPDX-License-Identifier: MIT
"""Read-through analysis cache.

(NormalizedQuestion, GateDecision) 결과를 입력 텍스트 SHA-256 키로 캐싱한다.
키별 lock으로 같은 키는 한 번만 계산하고, 전체 크기는 LRU로 제한한다.
Generator 결과는 캐싱하지 않는다 (요청마다 검증).
"""

from __future__ import annotations

import hashlib
import logging
import threading
from collections import OrderedDict
from typing import Callable, Dict, Optional, Tuple

from inputcheck.models import GateDecision, NormalizedQuestion

logger = logging.getLogger(__name__)

Analysis = Tuple[NormalizedQuestion, GateDecision]

DEFAULT_MAX_ENTRIES = 1024


def cache_key(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class AnalysisCache:
    """thread-safe LRU 캐시 (값은 immutable 스냅샷)."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        # LRU 순서 (가장 오래된 것이 앞)
        self._entries: "OrderedDict[str, Analysis]" = OrderedDict()
        self._lock = threading.Lock()
        self._key_locks: Dict[str, threading.Lock] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def pending(self) -> int:
        """계산 중인 키 수."""
        with self._lock:
            return len(self._key_locks)

    def _lookup(self, key: str) -> Optional[Analysis]:
        value = self._entries.get(key)
        if value is not None:
            self._entries.move_to_end(key)
        return value

    def get(self, text: str) -> Optional[Analysis]:
        with self._lock:
            return self._lookup(cache_key(text))

    def get_or_compute(self, text: str, compute: Callable[[], Analysis]) -> Analysis:
        """캐시 조회, 없으면 계산 후 저장.

        compute가 예외를 던지면 아무것도 저장하지 않고 예외를 그대로 전파한다.

        Args:
            text: 캐시 키 텍스트 (잘린 입력 + 잘림 여부)
            compute: 분석 함수 (인자 없음) → (NormalizedQuestion, GateDecision)

        Returns:
            캐시된 또는 새로 계산한 분석 결과
        """
        key = cache_key(text)

        with self._lock:
            value = self._lookup(key)
            if value is not None:
                self.hits += 1
                return value
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        # 같은 키는 한 스레드만 계산
        with key_lock:
            with self._lock:
                value = self._lookup(key)
                if value is not None:
                    self.hits += 1
                    return value

            try:
                value = compute()
                with self._lock:
                    self.misses += 1
                    self._entries[key] = value
                    while len(self._entries) > self.max_entries:
                        evicted, _ = self._entries.popitem(last=False)
                        logger.debug("analysis cache evicted %s", evicted[:12])
            finally:
                with self._lock:
                    if self._key_locks.get(key) is key_lock:
                        del self._key_locks[key]

        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()
            self.hits = 0
            self.misses = 0


__all__ = ["AnalysisCache", "cache_key"]
