# SPDX-License-Identifier: MIT
"""Banking hint & run metadata.

호스팅 서비스용 응답 봉투: {record, banking_hint, meta}.
레코드 자체는 고정 스키마를 유지하고, 뱅킹/마이너 힌트와 실행 메타는 봉투에만 싣는다.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

HARD_FLAGS = frozenset({"safety_risk"})

QUEUE_MIN_SCORE = 8
AUTO_BANK_MIN_SCORE = 7
HIGH_BUCKET_MIN_SCORE = 8
MEDIUM_BUCKET_MIN_SCORE = 6

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(_BASE36[r])
    return "".join(reversed(digits))


def make_request_id() -> str:
    """로그 상관용 요청 ID ("ic_<ms base36>_<random>")."""
    return f"ic_{_base36(int(time.time() * 1000))}_{uuid.uuid4().hex[:6]}"


@dataclass(frozen=True)
class BankingHint:
    """Vault banking 권고 (advisory)."""

    recommended_status: str  # draft | queued
    confidence_bucket: str  # high | medium | low
    auto_bank_recommended: bool
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommended_status": self.recommended_status,
            "confidence_bucket": self.confidence_bucket,
            "auto_bank_recommended": self.auto_bank_recommended,
            "reason": self.reason,
        }


def build_banking_hint(record: Dict[str, Any]) -> BankingHint:
    """레코드의 inputcheck 헤더 → BankingHint.

    hard flag(safety_risk)가 있으면 queued/auto-bank 불가.
    """
    header = record.get("inputcheck", {})
    flags = list(header.get("flags", []))
    score = header.get("score_10", 0)
    hard_hit = any(f in HARD_FLAGS for f in flags)

    if score >= HIGH_BUCKET_MIN_SCORE:
        bucket = "high"
    elif score >= MEDIUM_BUCKET_MIN_SCORE:
        bucket = "medium"
    else:
        bucket = "low"

    if hard_hit:
        reason = "Hard flag present (e.g. safety_risk)."
    else:
        reason = f"Score {score}/10 with flags: {', '.join(flags) or 'none'}."

    return BankingHint(
        recommended_status="queued" if not hard_hit and score >= QUEUE_MIN_SCORE else "draft",
        confidence_bucket=bucket,
        auto_bank_recommended=not hard_hit and score >= AUTO_BANK_MIN_SCORE,
        reason=reason,
    )


@dataclass(frozen=True)
class RunMeta:
    """실행 메타데이터."""

    request_id: str
    engine_version: str
    model: Optional[str]
    processing_time_ms: int
    was_truncated: bool
    input_length_chars: int
    repair_attempts: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "engine_version": self.engine_version,
            "model": self.model,
            "processing_time_ms": self.processing_time_ms,
            "was_truncated": self.was_truncated,
            "input_length_chars": self.input_length_chars,
            "repair_attempts": self.repair_attempts,
        }


@dataclass(frozen=True)
class PipelineResult:
    """파이프라인 응답 봉투."""

    record: Dict[str, Any]
    banking_hint: BankingHint
    meta: RunMeta

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record": self.record,
            "banking_hint": self.banking_hint.to_dict(),
            "meta": self.meta.to_dict(),
        }


__all__ = ["BankingHint", "RunMeta", "PipelineResult", "build_banking_hint", "make_request_id"]
