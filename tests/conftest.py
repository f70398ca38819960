"""Shared fixtures: fake generators and canned drafts."""

import copy

import pytest
from inputcheck.config import InputCheckSettings
from inputcheck.pipeline import InputCheckPipeline

DROPSHIPPING = (
    "is dropshipping a good way to make money i dont know where to start and also how do i find suppliers"
)
CHEST_PAIN = "I have chest pain and shortness of breath, what should I do?"
JEEP = "jeep wrangler a pillar water leak"

GOOD_DRAFT = {
    "answer_capsule_25w": "Start by confirming the most likely cause, then compare the cost of each fix before committing to one.",
    "mini_answer": (
        "Most problems like this have two or three common causes that can be checked in order. "
        "Write down what you observe and when it happens. "
        "A short checklist keeps the decision grounded in facts."
    ),
    "owned_insight": "The cheapest check is usually the one people skip.",
    "next_best_question": "What should I check first?",
    "decision_frame": {
        "pros": [
            {"label": "Low cost", "reason": "Most checks need no special tools.", "tags": ["low cost"]},
            "Fast feedback: each check takes minutes",
        ],
        "cons": [{"label": "Takes patience", "reason": "Some causes only show up intermittently.", "tags": []}],
        "personal_checks": [
            {"label": "Budget", "prompt": "How much are you willing to spend?", "dimension": "financial"},
        ],
    },
    "action_protocol": {
        "type": "diagnostic_steps",
        "steps": [
            "Write down when the problem happens.",
            "Check the simplest cause first.",
            "Compare repair quotes before deciding.",
        ],
        "estimated_effort": "30-60 minutes",
        "recommended_tools": ["Notebook", "flashlight"],
    },
}

JEEP_DRAFT = {
    "answer_capsule_25w": "Most A-pillar leaks on a Jeep Wrangler come from a worn windshield frame seal or a misaligned door seal.",
    "mini_answer": (
        "Water usually follows the top of the door seal and drips down inside the pillar trim. "
        "A hose test with a helper inside the cab shows the entry point quickly. "
        "Seal kits are inexpensive and can be fitted in an afternoon."
    ),
    "owned_insight": "",
    "next_best_question": "How do I water-test the door and windshield seals on a Jeep Wrangler?",
    "decision_frame": {
        "pros": [{"label": "DIY friendly", "reason": "Most seal fixes need basic hand tools.", "tags": ["diy"]}],
        "cons": [{"label": "Hard to trace", "reason": "Water can travel before it drips.", "tags": ["diagnosis"]}],
        "personal_checks": [{"label": "Time", "prompt": "Do you have an afternoon free?", "dimension": "time"}],
    },
    "action_protocol": {
        "type": "diagnostic_steps",
        "steps": [
            "Dry the cab and pillar trim completely.",
            "Run a hose over the windshield frame while a helper watches inside.",
            "Repeat along the door seal to isolate the entry point.",
            "Replace or reseat the leaking seal.",
        ],
        "estimated_effort": "1-2 hours",
        "recommended_tools": ["garden hose", "trim removal tool", "seal adhesive"],
    },
}


def make_draft(base=None, **overrides):
    """Deep-copied draft dict with top-level overrides."""
    draft = copy.deepcopy(base or GOOD_DRAFT)
    draft.update(overrides)
    return draft


class FakeGenerator:
    """Sync generator returning canned responses in order (the last one repeats)."""

    model = "fake-model"

    def __init__(self, *responses):
        self.responses = list(responses) or [make_draft()]
        self.calls = []

    def __call__(self, messages):
        self.calls.append(messages)
        return self.responses[min(len(self.calls) - 1, len(self.responses) - 1)]


class AsyncFakeGenerator(FakeGenerator):
    async def __call__(self, messages):
        return FakeGenerator.__call__(self, messages)


class FailingGenerator:
    def __init__(self, exc):
        self.exc = exc
        self.calls = 0

    def __call__(self, messages):
        self.calls += 1
        raise self.exc


@pytest.fixture
def settings():
    return InputCheckSettings()


@pytest.fixture
def pipeline(settings):
    return InputCheckPipeline(settings)


@pytest.fixture
def good_generator():
    return FakeGenerator(make_draft())
