# SPDX-License-Identifier: MIT
"""YMYL 카테고리/위험 레벨 탐지."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from inputcheck.lexicon import YmylLexicon
from inputcheck.models import RiskLevel, YmylCategory
from inputcheck.utils.text import find_terms


@dataclass(frozen=True)
class YmylAssessment:
    """YMYL 판정 결과"""

    category: YmylCategory
    risk_level: RiskLevel
    matched_terms: Tuple[str, ...] = ()

    @property
    def is_ymyl(self) -> bool:
        return self.category != YmylCategory.NONE

    @property
    def is_severe(self) -> bool:
        return self.is_ymyl and self.risk_level.is_severe


NOT_YMYL = YmylAssessment(category=YmylCategory.NONE, risk_level=RiskLevel.LOW)


class YmylDetector:
    """키워드 기반 YMYL 탐지기.

    가장 높은 위험 레벨의 카테고리를 선택하고, 동점이면 사전의 카테고리 순서를 따른다.
    """

    def __init__(self, lexicon: Optional[YmylLexicon] = None):
        self.lexicon = lexicon or YmylLexicon()

    def assess(self, text: str) -> YmylAssessment:
        best: Optional[YmylAssessment] = None

        for category in self.lexicon.categories():
            for level, terms in self.lexicon.terms_for(category).items():
                hits = find_terms(text, terms)
                if not hits:
                    continue
                if best is None or level.rank > best.risk_level.rank:
                    best = YmylAssessment(category=category, risk_level=level, matched_terms=tuple(hits))

        return best or NOT_YMYL


__all__ = ["YmylAssessment", "YmylDetector", "NOT_YMYL"]
