"""Content composer tests (draft parsing, prompts, structural rules)."""

import json

import pytest
from conftest import CHEST_PAIN, DROPSHIPPING, JEEP, make_draft
from inputcheck.classify import gate
from inputcheck.compose import (
    ContentComposer,
    GeneratorDraft,
    PromptBuilder,
    build_repair_prompt,
    build_share_blocks,
    parse_draft,
    synthesize_follow_up,
)
from inputcheck.compose.composer import DEGRADED_FOLLOW_UP, EMERGENCY_STEP, follow_up_topic, is_deeper_follow_up
from inputcheck.config import CompositionSettings
from inputcheck.lexicon import CRITICAL_FOLLOW_UPS
from inputcheck.models import ActionType, Dimension, QuestionType, Violation, YmylCategory
from inputcheck.normalizer import Normalizer
from inputcheck.utils.slug import slugify


def _analyze(text):
    normalized = Normalizer().normalize(text)
    return normalized, gate(normalized, text)


def _compose(text, **overrides):
    normalized, decision = _analyze(text)
    draft = GeneratorDraft.from_dict(make_draft(**overrides))
    return ContentComposer().assemble(draft, normalized, decision)


class TestParseDraft:
    """Test parse_draft()."""

    def test_plain_json(self):
        draft, violations = parse_draft(json.dumps(make_draft()))

        assert violations == []
        assert draft.answer_capsule.startswith("Start by confirming")
        assert len(draft.steps) == 3

    def test_fenced_json(self):
        draft, violations = parse_draft("```json\n" + json.dumps(make_draft()) + "\n```")

        assert violations == []
        assert draft is not None

    def test_dict_passes_through(self):
        draft, violations = parse_draft(make_draft())

        assert violations == []
        assert draft.action_type == "diagnostic_steps"

    @pytest.mark.parametrize("response", ["", "   ", None, "not json at all", "[1, 2, 3]", '"just a string"'])
    def test_malformed(self, response):
        draft, violations = parse_draft(response)

        assert draft is None
        assert [v.kind for v in violations] == ["malformed_output"]

    def test_flat_keys(self):
        draft = GeneratorDraft.from_dict(
            {
                "answer_capsule": "Flat capsule.",
                "steps": ["One.", "Two.", "Three."],
                "action_type": "comparison",
                "pros": "Single pro",
            }
        )

        assert draft.answer_capsule == "Flat capsule."
        assert draft.action_type == "comparison"
        assert draft.pros == ["Single pro"]

    def test_non_string_values_are_dropped(self):
        draft = GeneratorDraft.from_dict({"mini_answer": None, "owned_insight": {"x": 1}, "steps": 5})

        assert draft.mini_answer == ""
        assert draft.owned_insight == ""
        assert draft.steps == []


class TestPromptBuilder:
    @pytest.fixture
    def builder(self):
        return PromptBuilder()

    def test_messages(self, builder):
        normalized, decision = _analyze(CHEST_PAIN)
        messages = builder.build_messages(normalized, decision, CHEST_PAIN)

        assert [m["role"] for m in messages] == ["system", "user"]
        assert "general_information" in messages[1]["content"]
        assert normalized.cleaned_question in messages[1]["content"]

    def test_payload(self, builder):
        normalized, decision = _analyze(DROPSHIPPING)
        payload = builder.build_payload(normalized, decision, DROPSHIPPING)

        assert payload["answer_mode"] == "direct"
        assert payload["flags"] == ["stacked_asks", "safety_risk"]
        assert payload["sub_intents"] == ["learn_basics", "find_suppliers"]

    def test_raw_input_is_capped(self):
        normalized, decision = _analyze(JEEP)
        payload = PromptBuilder(max_input_chars=10).build_payload(normalized, decision, JEEP)

        assert payload["raw_input"] == JEEP[:10]

    def test_repair_messages(self, builder):
        normalized, decision = _analyze(JEEP)
        violations = [Violation(kind="schema", detail="action_protocol.steps: too short")]
        messages = builder.build_messages(normalized, decision, JEEP, violations=violations, previous_response="{}")

        assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
        assert messages[2]["content"] == "{}"
        assert "- [schema] action_protocol.steps: too short" in messages[3]["content"]

    def test_repair_prompt_lists_every_violation(self):
        prompt = build_repair_prompt(
            [Violation(kind="slug", detail="bad slug"), Violation(kind="url_in_answer", detail="no urls")]
        )

        assert "- [slug] bad slug" in prompt
        assert "- [url_in_answer] no urls" in prompt


class TestContentComposer:
    """Test ContentComposer.assemble()."""

    def test_capsule_is_one_bounded_sentence(self):
        long_capsule = " ".join(["word"] * 40) + ". Second sentence here."
        composition = _compose(JEEP, answer_capsule_25w=long_capsule)
        capsule = composition.capsule.answer_capsule_25w

        assert len(capsule.split()) == 25
        assert capsule.endswith(".")
        assert "Second" not in capsule

    def test_urls_are_removed(self):
        composition = _compose(
            JEEP,
            answer_capsule_25w="Check the seal, see https://example.com/seals for details.",
            mini_answer="Most seals fail with age. Read more at www.example.com today. Click here: for parts.",
        )

        assert "http" not in composition.capsule.answer_capsule_25w
        assert "example.com" not in composition.capsule.mini_answer
        assert "Click here" not in composition.capsule.mini_answer

    def test_meta_sentences_are_dropped(self):
        composition = _compose(
            JEEP,
            mini_answer="As an AI, I cannot inspect your vehicle. Seals shrink with age. Heat makes it worse.",
        )

        assert composition.capsule.mini_answer == "Seals shrink with age. Heat makes it worse."

    def test_duplicate_lead_sentence_is_dropped(self):
        capsule = "Start by confirming the most likely cause, then compare the cost of each fix before committing to one."
        composition = _compose(
            JEEP,
            answer_capsule_25w=capsule,
            mini_answer=f"{capsule} Second sentence adds detail. Third sentence adds more.",
        )

        assert composition.capsule.mini_answer == "Second sentence adds detail. Third sentence adds more."

    @pytest.mark.parametrize("placeholder", ["N/A", "none", "-", "TBD."])
    def test_placeholder_insight_becomes_empty(self, placeholder):
        assert _compose(JEEP, owned_insight=placeholder).capsule.owned_insight == ""

    def test_pros_cons_normalization(self):
        composition = _compose(DROPSHIPPING)
        frame = composition.decision_frame
        fast = frame.pros[1]

        assert frame.question_type == QuestionType.BUSINESS_STRATEGY
        assert fast.label == "Fast feedback"
        assert fast.reason == "each check takes minutes"
        assert fast.tags == ("fast_feedback",)
        assert fast.spawn_question_slug == slugify("How does fast feedback affect dropshipping?")
        assert frame.pros[0].tags == ("low_cost",)

    def test_frame_lists_are_capped(self):
        items = [f"Item {i}: reason {i}" for i in range(6)]
        checks = [{"label": f"Check {i}", "prompt": f"Prompt {i}?", "dimension": "time"} for i in range(6)]
        composition = _compose(
            JEEP,
            decision_frame={"pros": items, "cons": items, "personal_checks": checks},
        )
        frame = composition.decision_frame

        assert len(frame.pros) == 3
        assert len(frame.cons) == 3
        assert len(frame.personal_checks) == 3

    def test_dimension_is_coerced(self):
        checks = [
            {"label": "Money", "prompt": "Can you afford it?", "dimension": "money"},
            {"label": "Budget", "prompt": "What is your budget?", "dimension": "Financial"},
            "Do you have the time?",
        ]
        composition = _compose(JEEP, decision_frame={"personal_checks": checks})
        dims = [c.dimension for c in composition.decision_frame.personal_checks]

        assert dims == [Dimension.GENERAL, Dimension.FINANCIAL, Dimension.GENERAL]
        assert composition.decision_frame.personal_checks[2].prompt == "Do you have the time?"

    def test_steps_are_deduplicated_and_capped(self):
        steps = ["Check seals", "check seals.", "Run a hose test", "Dry the cab", "Replace the seal", "Test again", "Done"]
        composition = _compose(
            JEEP,
            action_protocol={"type": "diagnostic_steps", "steps": steps, "recommended_tools": ["Garden Hose"]},
        )
        protocol = composition.action_protocol

        assert protocol.steps[:2] == ("Check seals.", "Run a hose test.")
        assert len(protocol.steps) == 5
        assert protocol.recommended_tools == ("garden_hose",)

    def test_unknown_action_type_uses_question_type_default(self):
        composition = _compose(JEEP, action_protocol={"type": "fix_it", "steps": ["A.", "B.", "C."]})

        assert composition.action_protocol.type == ActionType.DIAGNOSTIC_STEPS
        assert composition.action_protocol.estimated_effort == "30-60 minutes"

    def test_safety_gate(self):
        composition = _compose(
            CHEST_PAIN,
            mini_answer="Chest symptoms have many causes. Some are harmless and some are not. Rest while you wait.",
            action_protocol={
                "type": "self_education",
                "steps": ["Note when the symptoms started.", "Write down other symptoms.", "Avoid strenuous activity."],
                "recommended_tools": ["notebook"],
            },
        )
        protocol = composition.action_protocol

        assert protocol.type == ActionType.TALK_TO_PRO
        assert protocol.recommended_tools[:2] == ("licensed_healthcare_provider", "emergency_services")
        assert "notebook" in protocol.recommended_tools
        assert protocol.steps[0] == EMERGENCY_STEP
        assert 3 <= len(protocol.steps) <= 5
        assert any("healthcare provider" in s for s in protocol.steps)
        assert "emergency services" in composition.capsule.mini_answer

    def test_safety_gate_keeps_existing_referral(self):
        composition = _compose(
            CHEST_PAIN,
            mini_answer="Chest symptoms have many causes. A doctor should assess them promptly.",
        )

        assert composition.capsule.mini_answer == "Chest symptoms have many causes. A doctor should assess them promptly."

    def test_share_blocks(self):
        composition = _compose(JEEP)
        blocks = composition.share_blocks

        assert blocks.answer_only == "What causes jeep wrangler a pillar water leak?\n\n" + composition.capsule.mini_answer
        assert blocks.answer_with_link.startswith(blocks.answer_only)
        assert blocks.answer_with_link.endswith(CompositionSettings().share_link_line)

    def test_vault_node(self):
        composition = _compose(JEEP)

        assert composition.vault_node.slug == "what-causes-jeep-wrangler-a-pillar-water-leak"
        assert composition.vault_node.vertical_guess.value == "jeep_leaks"
        assert composition.vault_node.to_dict()["cmn_status"] == "draft"
        assert composition.vault_node.to_dict()["public_url"] is None

    def test_deeper_next_question_is_kept(self):
        composition = _compose(JEEP, next_best_question="how do I water-test the seals on a jeep wrangler?")

        assert composition.next_best_question == "How do I water-test the seals on a jeep wrangler?"

    def test_restated_question_is_replaced(self):
        composition = _compose(DROPSHIPPING, next_best_question="Is dropshipping a viable way to make money?")

        assert composition.next_best_question == (
            "How do I find reliable dropshipping suppliers and what do they typically cost?"
        )


class TestFollowUps:
    def test_supplier_follow_up(self):
        normalized, decision = _analyze(DROPSHIPPING)

        assert synthesize_follow_up(normalized, decision.question_type) == (
            "How do I find reliable dropshipping suppliers and what do they typically cost?"
        )

    def test_question_type_template(self):
        normalized, decision = _analyze(CHEST_PAIN)

        assert synthesize_follow_up(normalized, decision.question_type) == (
            "Which chest pain and shortness of breath warning signs mean I should see a doctor right away?"
        )

    def test_degraded_follow_up(self):
        normalized, decision = _analyze("")

        assert synthesize_follow_up(normalized, decision.question_type).endswith("?")

    def test_lead_words_do_not_become_the_topic(self):
        normalized, decision = _analyze("Is it legal to record a phone call in California?")

        assert decision.question_type == QuestionType.LEGAL_INFORMATION
        assert synthesize_follow_up(normalized, decision.question_type) == (
            "What documents should I gather before talking to a lawyer about record a phone call in california?"
        )

    def test_critical_record_gets_fixed_follow_up(self):
        composition = _compose("I want to kill myself")

        assert composition.next_best_question == CRITICAL_FOLLOW_UPS[YmylCategory.HEALTH]
        assert "kill" not in composition.next_best_question

    def test_off_topic_record_gets_degraded_follow_up(self):
        composition = _compose("asdfghjkl qwrtyp")

        assert composition.next_best_question == DEGRADED_FOLLOW_UP

    def test_follow_up_topic(self):
        assert follow_up_topic("jeep wrangler a pillar water leak") == "jeep wrangler a pillar water leak"
        assert follow_up_topic("dropshipping a viable way to make money") == "dropshipping"
        assert follow_up_topic("legal to record a phone call in california") == "record a phone call in california"
        assert follow_up_topic("want to learn python") == "learn python"

    @pytest.mark.parametrize(
        "question,expected",
        [
            ("How do I validate JSON schemas in Python?", True),
            ("How do I parse JSON in Python?", False),
            ("How do I validate schemas in Python", False),
            ("What is the weather like today?", False),
        ],
    )
    def test_is_deeper_follow_up(self, question, expected):
        assert is_deeper_follow_up(question, "How do I parse JSON in Python?") is expected

    def test_share_blocks_helper(self):
        blocks = build_share_blocks("Q?", "A.", "Link line")

        assert blocks.answer_only == "Q?\n\nA."
        assert blocks.answer_with_link == "Q?\n\nA.\n\nLink line"
