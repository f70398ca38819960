"""Two-pass question classifier.

pass 1 (gate): 텍스트 신호만으로 flags / YMYL / answer_mode 결정
pass 2 (refine): 구성된 콘텐츠를 반영해 score / AI-era 필드 확정
"""

from inputcheck.classify.gate import gate, guess_vertical, infer_question_type
from inputcheck.classify.refine import grade_label, refine, score_question
from inputcheck.classify.ymyl import YmylAssessment, YmylDetector

__all__ = [
    "gate",
    "refine",
    "grade_label",
    "score_question",
    "guess_vertical",
    "infer_question_type",
    "YmylAssessment",
    "YmylDetector",
]
