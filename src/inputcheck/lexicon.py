# SPDX-License-Identifier: MIT
"""InputCheck 키워드 사전

YMYL 카테고리별 위험 용어, 버티컬 키워드, sub-intent 태그, 질문 유형 단서.
All matching is done on lowercased text with word boundaries (see utils.text.contains_term).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from inputcheck.models import QuestionType, RiskLevel, Vertical, YmylCategory


@dataclass
class YmylLexicon:
    """YMYL 용어 사전

    카테고리 → 위험 레벨 → 용어 목록. 카테고리 순서가 동점 처리 우선순위.
    """

    TERMS: Dict[YmylCategory, Dict[RiskLevel, List[str]]] = field(
        default_factory=lambda: {
            YmylCategory.HEALTH: {
                RiskLevel.CRITICAL: [
                    "chest pain",
                    "shortness of breath",
                    "short of breath",
                    "can't breathe",
                    "cant breathe",
                    "trouble breathing",
                    "heart attack",
                    "stroke",
                    "seizure",
                    "overdose",
                    "overdosed",
                    "suicide",
                    "suicidal",
                    "kill myself",
                    "self harm",
                    "self-harm",
                    "hurt myself",
                    "unconscious",
                    "severe bleeding",
                    "poisoned",
                    "anaphylaxis",
                ],
                RiskLevel.HIGH: [
                    "medication",
                    "medications",
                    "meds",
                    "dosage",
                    "dose",
                    "stop taking",
                    "surgery",
                    "diagnosis",
                    "diagnosed",
                    "cancer",
                    "tumor",
                    "pregnant",
                    "pregnancy",
                    "miscarriage",
                    "depression",
                    "antidepressant",
                    "antidepressants",
                    "insulin",
                    "chemotherapy",
                    "blood pressure",
                    "infection",
                ],
                RiskLevel.MEDIUM: [
                    "symptom",
                    "symptoms",
                    "pain",
                    "headache",
                    "anxiety",
                    "diet",
                    "vitamin",
                    "supplement",
                    "sleep",
                    "doctor",
                    "health",
                    "fertility",
                    "babies",
                    "baby",
                    "weight loss",
                    "rash",
                ],
            },
            YmylCategory.FINANCIAL: {
                RiskLevel.CRITICAL: [
                    "life savings",
                    "can't pay rent",
                    "cant pay rent",
                    "payday loan",
                ],
                RiskLevel.HIGH: [
                    "bankruptcy",
                    "foreclosure",
                    "mortgage",
                    "debt",
                    "loan",
                    "loans",
                    "retirement",
                    "401k",
                    "ira",
                    "crypto",
                    "cryptocurrency",
                    "margin trading",
                    "second mortgage",
                ],
                RiskLevel.MEDIUM: [
                    "make money",
                    "invest",
                    "investing",
                    "investment",
                    "stocks",
                    "stock market",
                    "budget",
                    "tax",
                    "taxes",
                    "credit score",
                    "credit card",
                    "side hustle",
                    "savings",
                    "income",
                    "passive income",
                    "insurance",
                ],
            },
            YmylCategory.LEGAL: {
                RiskLevel.CRITICAL: [
                    "arrested",
                    "warrant",
                    "facing charges",
                ],
                RiskLevel.HIGH: [
                    "lawsuit",
                    "sue",
                    "sued",
                    "custody",
                    "immigration",
                    "visa",
                    "deported",
                    "dui",
                    "criminal",
                    "eviction",
                    "evicted",
                ],
                RiskLevel.MEDIUM: [
                    "lease",
                    "contract",
                    "copyright",
                    "trademark",
                    "legal",
                    "lawyer",
                    "attorney",
                    "tenant",
                    "landlord",
                    "will and testament",
                ],
            },
            YmylCategory.CAREER: {
                RiskLevel.HIGH: [
                    "quit my job",
                    "quitting my job",
                    "got fired",
                    "been fired",
                    "laid off",
                    "layoff",
                    "switch careers",
                    "career change",
                    "change careers",
                ],
                RiskLevel.MEDIUM: [
                    "career",
                    "careers",
                    "job",
                    "jobs",
                    "resume",
                    "interview",
                    "salary",
                    "promotion",
                    "hiring",
                ],
            },
            YmylCategory.RELATIONSHIPS: {
                RiskLevel.CRITICAL: [
                    "abuse",
                    "abusive",
                    "domestic violence",
                    "threatened me",
                ],
                RiskLevel.HIGH: [
                    "divorce",
                    "cheating",
                    "cheated",
                    "affair",
                    "separation",
                ],
                RiskLevel.MEDIUM: [
                    "relationship",
                    "boyfriend",
                    "girlfriend",
                    "husband",
                    "wife",
                    "partner",
                    "dating",
                    "marriage",
                ],
            },
            YmylCategory.OTHER: {
                RiskLevel.CRITICAL: [
                    "gas leak",
                    "carbon monoxide",
                ],
                RiskLevel.HIGH: [
                    "electrical panel",
                    "breaker panel",
                    "live wire",
                    "wiring",
                    "firearm",
                    "gun",
                    "asbestos",
                ],
            },
        }
    )

    def categories(self) -> List[YmylCategory]:
        """카테고리 목록 (동점 처리 우선순위 순)"""
        return list(self.TERMS.keys())

    def terms_for(self, category: YmylCategory) -> Dict[RiskLevel, List[str]]:
        return self.TERMS.get(category, {})


# ============================================================
# 버티컬 라우팅
# ============================================================

# (vertical, 필수 키워드 그룹들): 모든 그룹에서 하나 이상 매칭되어야 함
VERTICAL_RULES: List[Tuple[Vertical, List[List[str]]]] = [
    (
        Vertical.JEEP_LEAKS,
        [
            ["jeep", "wrangler", "gladiator", "jl", "jk", "jlu", "jku"],
            ["leak", "leaks", "leaking", "water", "drip", "dripping", "wet", "seal", "soaked"],
        ],
    ),
    (
        Vertical.SMP,
        [["smp", "scalp micropigmentation", "micropigmentation", "hairline tattoo", "scalp tattoo"]],
    ),
    (
        Vertical.WINDOW_TINT,
        [["tint", "tinted", "tinting", "window film", "ceramic film", "vlt"]],
    ),
    (
        Vertical.AI_SYSTEMS,
        [["ai", "chatgpt", "llm", "llms", "machine learning", "openai", "gpt", "prompt engineering", "ai agent"]],
    ),
]


# ============================================================
# 질문 유형 단서 (순서 = 우선순위)
# ============================================================

PROBLEM_TERMS: List[str] = [
    "leak",
    "leaks",
    "leaking",
    "noise",
    "squeak",
    "squeaking",
    "rattle",
    "rattling",
    "error",
    "broken",
    "not working",
    "won't start",
    "wont start",
    "doesn't work",
    "doesnt work",
    "stopped working",
    "crack",
    "cracked",
    "smell",
    "overheating",
    "stuck",
    "fails",
    "failing",
    "crash",
    "crashing",
    "peeling",
    "bubbling",
    "fading",
    "drip",
    "dripping",
]

REPAIR_DECISION_TERMS: List[str] = ["worth fixing", "repair or replace", "fix or replace", "worth repairing"]

COMPARISON_TERMS: List[str] = ["vs", "versus", "compared to", "better than", "difference between", "which is better"]

BUSINESS_TERMS: List[str] = [
    "dropshipping",
    "business",
    "startup",
    "side hustle",
    "make money",
    "passive income",
    "ecommerce",
    "e-commerce",
    "marketing",
    "customers",
    "suppliers",
    "revenue",
    "profit",
]

LIFESTYLE_TERMS: List[str] = ["should i move", "live in", "lifestyle", "hobby", "habit", "routine"]

QUESTION_TYPE_BY_YMYL: Dict[YmylCategory, QuestionType] = {
    YmylCategory.HEALTH: QuestionType.HEALTH_INFORMATION,
    YmylCategory.FINANCIAL: QuestionType.FINANCIAL_PLANNING,
    YmylCategory.LEGAL: QuestionType.LEGAL_INFORMATION,
    YmylCategory.CAREER: QuestionType.CAREER_STRATEGY,
    YmylCategory.RELATIONSHIPS: QuestionType.RELATIONSHIP_ADVICE,
}


# ============================================================
# sub-intent 태그
# ============================================================

SUB_INTENT_TAGS: List[Tuple[str, List[str]]] = [
    ("find_suppliers", ["supplier", "suppliers", "vendor", "vendors", "wholesaler", "manufacturer"]),
    ("learn_basics", ["where to start", "how to start", "get started", "beginner", "basics", "new to"]),
    ("compare_costs", ["cost", "costs", "price", "prices", "how much", "expensive", "cheap", "fees"]),
    ("compare_options", ["vs", "versus", "compare", "which is better", "alternatives", "options"]),
    ("avoid_risk", ["risk", "risks", "safe", "scam", "dangerous", "mistakes"]),
    ("find_professional_help", ["doctor", "lawyer", "attorney", "therapist", "professional", "mechanic", "shop"]),
    ("save_money", ["save money", "cheaper", "budget", "diy", "myself"]),
    ("find_timeline", ["how long", "when", "timeline", "how soon"]),
    ("diagnose_cause", ["why", "cause", "causes", "what causes"]),
]

# sub-intent → 다음 질문 템플릿 ({topic} 치환)
FOLLOW_UP_TEMPLATES: Dict[str, str] = {
    "find_suppliers": "How do I find reliable {topic} suppliers and what do they typically cost?",
    "learn_basics": "What are the first three steps to get started with {topic} on a small budget?",
    "compare_costs": "What does {topic} typically cost and which factors change the price most?",
    "compare_options": "Which {topic} option fits best for a specific budget and use case?",
    "avoid_risk": "What are the most common {topic} mistakes and how can they be avoided?",
    "find_professional_help": "What qualifications should I look for in a professional who handles {topic}?",
    "save_money": "Which parts of {topic} can be done safely without paying a professional?",
    "find_timeline": "How long does {topic} usually take from start to finish?",
    "diagnose_cause": "What is the most common cause of {topic} and how is it confirmed?",
}

FOLLOW_UP_BY_QUESTION_TYPE: Dict[QuestionType, str] = {
    QuestionType.DIAGNOSTIC: "How do I pinpoint the exact source of a {topic} before paying for repairs?",
    QuestionType.REPAIR_DECISION: "What does a {topic} repair usually cost compared to a replacement?",
    QuestionType.HEALTH_INFORMATION: "Which {topic} warning signs mean I should see a doctor right away?",
    QuestionType.FINANCIAL_PLANNING: "How much money should I set aside before committing to {topic}?",
    QuestionType.BUSINESS_STRATEGY: "What are the real startup costs and margins for {topic}?",
    QuestionType.CAREER_STRATEGY: "Which skills make {topic} a safer long-term choice?",
    QuestionType.LEGAL_INFORMATION: "What documents should I gather before talking to a lawyer about {topic}?",
    QuestionType.RELATIONSHIP_ADVICE: "What is a good first conversation to have about {topic}?",
    QuestionType.COMPARISON: "Which factors matter most when choosing between {topic} options?",
    QuestionType.HOW_TO: "What tools and preparation does {topic} require before starting?",
}

DEFAULT_FOLLOW_UP = "What is the most important detail to understand about {topic} before deciding?"

# critical YMYL: 사용자 문구를 끼워 넣지 않는 고정 다음 질문
CRITICAL_FOLLOW_UPS: Dict[YmylCategory, str] = {
    YmylCategory.HEALTH: "Which warning signs mean I should call emergency services or a crisis line right away?",
    YmylCategory.FINANCIAL: "What should I do first to protect my accounts while I get help from a licensed financial advisor?",
    YmylCategory.LEGAL: "What should I do first to protect my rights while I get help from a licensed attorney?",
    YmylCategory.RELATIONSHIPS: "Where can I find immediate support if I do not feel safe right now?",
    YmylCategory.OTHER: "Which warning signs mean I should contact emergency services right away?",
}

# follow-up {topic} 앞에서 건너뛰는 평가어/의지 표현 ("legal to record ..." → "record ...")
TOPIC_LEAD_WORDS = frozenset(
    {
        "worth", "good", "bad", "safe", "viable", "better", "best", "possible", "legal", "illegal",
        "normal", "ok", "okay", "smart", "wise", "necessary", "want", "wanting", "need", "needing",
        "try", "trying", "able",
    }
)  # fmt: skip


# ============================================================
# 문맥 의존성 / 개인화 / 범위 단서
# ============================================================

# local / physical / experiential context
CONTEXTUAL_TERMS: List[str] = [
    "near me",
    "in my area",
    "my car",
    "my truck",
    "my jeep",
    "my house",
    "my home",
    "my roof",
    "install",
    "installed",
    "leak",
    "leaking",
    "noise",
    "smell",
    "feel",
    "feels",
    "jeep",
    "wrangler",
    "tint",
    "scalp",
    "symptoms",
    "pain",
    "local",
    "shop",
]

PERSONAL_DECISION_MARKERS: List[str] = [
    "should i",
    "can i",
    "do i need",
    "am i",
    "is it worth it for me",
    "can i afford",
    "what should i do",
    "is it safe for me",
]

BROAD_PATTERNS: List[str] = [
    r"^(?:what are )?(?:the )?best (?:jobs|careers|things|ways)\b",
    r"\bhow (?:to|do i|can i) (?:be|become) (?:successful|happy|rich)\b",
    r"\bwhat should i do with my life\b",
    r"^(?:any )?(?:tips|advice|ideas)\b",
    r"\bjobs ai can(?:'t|not| not)? replace\b",
]

SPAM_PATTERNS: List[str] = [
    r"\bbuy now\b",
    r"\bclick here\b",
    r"\bfree money\b",
    r"\bcasino\b",
    r"\bviagra\b",
    r"(.)\1{7,}",
    r"^\W*(?:https?://|www\.)\S+\W*$",
]

# 전문가 연결 도구 카테고리
PROVIDER_TOOLS: Dict[YmylCategory, str] = {
    YmylCategory.HEALTH: "licensed_healthcare_provider",
    YmylCategory.FINANCIAL: "licensed_financial_advisor",
    YmylCategory.LEGAL: "licensed_attorney",
    YmylCategory.CAREER: "career_counselor",
    YmylCategory.RELATIONSHIPS: "licensed_therapist",
    YmylCategory.OTHER: "licensed_professional",
    YmylCategory.NONE: "licensed_professional",
}

PROVIDER_NAMES: Dict[YmylCategory, str] = {
    YmylCategory.HEALTH: "licensed healthcare provider",
    YmylCategory.FINANCIAL: "licensed financial advisor",
    YmylCategory.LEGAL: "licensed attorney",
    YmylCategory.CAREER: "qualified career counselor",
    YmylCategory.RELATIONSHIPS: "licensed therapist or counselor",
    YmylCategory.OTHER: "licensed professional",
    YmylCategory.NONE: "qualified professional",
}

EMERGENCY_TOOL = "emergency_services"

REFERRAL_TERMS: List[str] = [
    "licensed",
    "professional",
    "doctor",
    "physician",
    "emergency",
    "911",
    "attorney",
    "lawyer",
    "advisor",
    "counselor",
    "therapist",
    "healthcare provider",
]


__all__ = [
    "YmylLexicon",
    "VERTICAL_RULES",
    "PROBLEM_TERMS",
    "REPAIR_DECISION_TERMS",
    "COMPARISON_TERMS",
    "BUSINESS_TERMS",
    "LIFESTYLE_TERMS",
    "QUESTION_TYPE_BY_YMYL",
    "SUB_INTENT_TAGS",
    "FOLLOW_UP_TEMPLATES",
    "FOLLOW_UP_BY_QUESTION_TYPE",
    "DEFAULT_FOLLOW_UP",
    "CRITICAL_FOLLOW_UPS",
    "TOPIC_LEAD_WORDS",
    "CONTEXTUAL_TERMS",
    "PERSONAL_DECISION_MARKERS",
    "BROAD_PATTERNS",
    "SPAM_PATTERNS",
    "PROVIDER_TOOLS",
    "PROVIDER_NAMES",
    "EMERGENCY_TOOL",
    "REFERRAL_TERMS",
]
