# SPDX-License-Identifier: MIT
"""InputCheck exceptions."""

from __future__ import annotations

from typing import List, Optional

from inputcheck.models import Violation


class InputCheckError(Exception):
    """Base error for the pipeline."""


class ConfigError(InputCheckError):
    """Invalid settings file or override."""


class GeneratorUnavailable(InputCheckError):
    """Transport/timeout failure from the external generator (retryable)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
        # client errors (4xx other than 429) will not succeed on retry
        self.retryable = status_code is None or status_code == 429 or status_code >= 500


class RecordRejected(InputCheckError):
    """Repair budget exhausted; no record may be emitted."""

    def __init__(self, violations: List[Violation], attempts: int):
        kinds = ", ".join(sorted({v.kind for v in violations})) or "unknown"
        super().__init__(f"record rejected after {attempts} repair attempt(s): {kinds}")
        self.violations = violations
        self.attempts = attempts


__all__ = ["InputCheckError", "ConfigError", "GeneratorUnavailable", "RecordRejected"]
