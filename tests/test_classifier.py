"""Classifier tests (YMYL detector, pass 1 gate, pass 2 refine)."""

import pytest
from conftest import CHEST_PAIN, DROPSHIPPING, JEEP
from inputcheck.classify import YmylDetector, gate, grade_label, guess_vertical, refine, score_question
from inputcheck.classify.gate import looks_like_word
from inputcheck.models import (
    AiCitationPotential,
    AiDisplacementRisk,
    AiUsagePolicyHint,
    AnswerMode,
    ContentCapsule,
    DecisionFrame,
    Flag,
    GateDecision,
    ProCon,
    PublisherVulnerability,
    QueryComplexity,
    QuestionType,
    RiskLevel,
    Vertical,
    YmylCategory,
)
from inputcheck.normalizer import Normalizer


def _gate(text, **kwargs):
    return gate(Normalizer().normalize(text), text, **kwargs)


def _decision(**overrides):
    values = dict(
        flags=(),
        ymyl_category=YmylCategory.NONE,
        ymyl_risk_level=RiskLevel.LOW,
        clarification_required=False,
        answer_mode=AnswerMode.DIRECT,
        question_type=QuestionType.FACT_LOOKUP,
        vertical=Vertical.GENERAL,
    )
    values.update(overrides)
    return GateDecision(**values)


CAPSULE = ContentCapsule(answer_capsule_25w="Short direct answer.", mini_answer="More detail here. And more.")
FRAME = DecisionFrame(question_type=QuestionType.FACT_LOOKUP)


class TestYmylDetector:
    """Test YmylDetector.assess()."""

    @pytest.fixture
    def detector(self):
        return YmylDetector()

    def test_critical_health(self, detector):
        result = detector.assess("I have chest pain")

        assert result.category == YmylCategory.HEALTH
        assert result.risk_level == RiskLevel.CRITICAL
        assert result.matched_terms == ("chest pain",)
        assert result.is_severe

    def test_not_ymyl(self, detector):
        result = detector.assess("how do I fix a squeaky door")

        assert result.category == YmylCategory.NONE
        assert not result.is_ymyl
        assert not result.is_severe

    def test_highest_risk_wins(self, detector):
        result = detector.assess("my divorce is eating my life savings")

        assert result.category == YmylCategory.FINANCIAL
        assert result.risk_level == RiskLevel.CRITICAL

    def test_ties_follow_category_order(self, detector):
        result = detector.assess("a lawsuit over my mortgage")

        assert result.category == YmylCategory.FINANCIAL
        assert result.risk_level == RiskLevel.HIGH

    def test_word_boundaries(self, detector):
        # "sue" must not match inside "issue"
        assert detector.assess("there is an issue with my tint").category == YmylCategory.NONE


class TestGate:
    """Test classifier pass 1."""

    def test_dropshipping(self):
        decision = _gate(DROPSHIPPING)

        assert decision.flags == (Flag.STACKED_ASKS, Flag.SAFETY_RISK)
        assert decision.ymyl_category == YmylCategory.FINANCIAL
        assert decision.ymyl_risk_level == RiskLevel.MEDIUM
        assert decision.clarification_required is False
        assert decision.answer_mode == AnswerMode.DIRECT
        assert decision.question_type == QuestionType.BUSINESS_STRATEGY

    def test_chest_pain(self):
        decision = _gate(CHEST_PAIN)

        assert decision.flags == (Flag.MISSING_CONTEXT, Flag.SAFETY_RISK)
        assert decision.ymyl_category == YmylCategory.HEALTH
        assert decision.ymyl_risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL)
        assert decision.clarification_required is True
        assert decision.answer_mode == AnswerMode.GENERAL_INFORMATION
        assert decision.question_type == QuestionType.HEALTH_INFORMATION

    def test_jeep(self):
        decision = _gate(JEEP)

        assert decision.flags == ()
        assert decision.vertical == Vertical.JEEP_LEAKS
        assert decision.question_type == QuestionType.DIAGNOSTIC
        assert decision.contextual is True
        assert decision.answer_mode == AnswerMode.DIRECT

    def test_empty_input_is_off_topic(self):
        decision = _gate("")

        assert decision.flags == (Flag.OFF_TOPIC,)
        assert decision.answer_mode == AnswerMode.DEGRADED
        assert decision.question_type == QuestionType.UNKNOWN

    @pytest.mark.parametrize(
        "text", ["buy now free money casino", "asdfghjkl qwrtzpsdf", "asdfghjkl qwrtyp", "asdfghjkl banana"]
    )
    def test_spam_and_gibberish_are_off_topic(self, text):
        decision = _gate(text)

        assert Flag.OFF_TOPIC in decision.flags
        assert Flag.VAGUE_SCOPE not in decision.flags
        assert decision.answer_mode == AnswerMode.DEGRADED

    def test_question_with_one_unknown_word_stays_on_topic(self):
        decision = _gate("How do I fix asdfghjkl?")

        assert Flag.OFF_TOPIC not in decision.flags

    def test_non_latin_question_is_on_topic(self):
        decision = _gate("如何修理漏水的吉普车？")

        assert Flag.OFF_TOPIC not in decision.flags
        assert decision.answer_mode != AnswerMode.DEGRADED

    @pytest.mark.parametrize(
        "word,expected",
        [
            ("jeep", True),
            ("gym", True),
            ("myth", True),
            ("cómo", True),
            ("吉普车", True),
            ("qwrtyp", False),
            ("asdfghjkl", False),
            ("a" * 21, False),
        ],
    )
    def test_looks_like_word(self, word, expected):
        assert looks_like_word(word) is expected

    def test_broad_question_is_vague(self):
        decision = _gate("what are the best jobs")

        assert Flag.VAGUE_SCOPE in decision.flags
        assert Flag.SAFETY_RISK in decision.flags

    def test_personal_decision_without_detail_needs_context(self):
        decision = _gate("Should I consolidate my debt?")

        assert Flag.MISSING_CONTEXT in decision.flags
        assert decision.clarification_required is True

    def test_numbers_count_as_detail(self):
        decision = _gate("Should I consolidate my 20000 dollar debt?")

        assert Flag.MISSING_CONTEXT not in decision.flags
        # high risk still requires clarification
        assert decision.clarification_required is True

    def test_truncated_flag_is_last(self):
        decision = _gate(JEEP, truncated=True)

        assert decision.flags[-1] == Flag.TRUNCATED_INPUT

    def test_safety_risk_follows_ymyl(self):
        for text in (DROPSHIPPING, CHEST_PAIN, JEEP, "what are the best jobs", "How do I install a ceiling fan?"):
            decision = _gate(text)
            assert (decision.ymyl_category != YmylCategory.NONE) == (Flag.SAFETY_RISK in decision.flags)

    def test_comparison(self):
        assert _gate("Is a heat pump better than a furnace?").question_type == QuestionType.COMPARISON

    def test_how_to(self):
        assert _gate("How do I install a ceiling fan?").question_type == QuestionType.HOW_TO

    @pytest.mark.parametrize(
        "text,vertical",
        [
            ("ceramic window tint cost", Vertical.WINDOW_TINT),
            ("scalp micropigmentation healing time", Vertical.SMP),
            ("my jeep is dirty", Vertical.GENERAL),
            ("jk rear window dripping water", Vertical.JEEP_LEAKS),
            ("best llm for writing code", Vertical.AI_SYSTEMS),
        ],
    )
    def test_guess_vertical(self, text, vertical):
        assert guess_vertical(text) == vertical

    def test_deterministic(self):
        assert _gate(CHEST_PAIN) == _gate(CHEST_PAIN)


class TestRefine:
    """Test classifier pass 2."""

    @pytest.mark.parametrize(
        "score,label",
        [
            (0, "Not answerable"),
            (2, "Not answerable"),
            (3, "Needs more detail"),
            (4, "Needs more detail"),
            (5, "Needs context"),
            (6, "Needs context"),
            (7, "Fair"),
            (8, "Good"),
            (9, "Strong answer"),
            (10, "Strong answer"),
        ],
    )
    def test_grade_bands(self, score, label):
        assert grade_label(score) == label

    def test_clean_question_scores_high(self):
        assert score_question(_decision()) == 9
        assert score_question(_decision(), has_insight=True) == 10

    def test_any_flag_caps_at_seven(self):
        assert score_question(_decision(flags=(Flag.STACKED_ASKS,)), has_insight=True) <= 7

    def test_truncation_alone_does_not_cap(self):
        assert score_question(_decision(flags=(Flag.TRUNCATED_INPUT,))) == 8

    def test_clarification_ceiling(self):
        decision = _decision(clarification_required=True)

        assert score_question(decision, clarification_ceiling=6) == 6
        assert score_question(decision, clarification_ceiling=4) == 4

    def test_off_topic_cap(self):
        decision = _decision(flags=(Flag.OFF_TOPIC,), answer_mode=AnswerMode.DEGRADED)

        assert score_question(decision) <= 2

    def test_score_is_clamped(self):
        decision = _decision(
            flags=(Flag.VAGUE_SCOPE, Flag.STACKED_ASKS, Flag.MISSING_CONTEXT, Flag.SAFETY_RISK, Flag.OFF_TOPIC),
            ymyl_category=YmylCategory.HEALTH,
            ymyl_risk_level=RiskLevel.CRITICAL,
        )

        assert score_question(decision) == 0

    def test_refine_keeps_pass_one_values(self):
        decision = _decision(
            flags=(Flag.MISSING_CONTEXT, Flag.SAFETY_RISK),
            ymyl_category=YmylCategory.HEALTH,
            ymyl_risk_level=RiskLevel.CRITICAL,
            clarification_required=True,
            answer_mode=AnswerMode.GENERAL_INFORMATION,
            question_type=QuestionType.HEALTH_INFORMATION,
        )
        result = refine(decision, CAPSULE, FRAME)

        assert result.flags == decision.flags
        assert result.clarification_required is True
        assert result.score_10 == 4
        assert result.grade_label == "Needs more detail"
        assert result.query_complexity == QueryComplexity.EXPERT_ADVISORY
        assert result.ai_displacement_risk == AiDisplacementRisk.LOW
        assert result.publisher_vulnerability_profile == PublisherVulnerability.LICENSING_CANDIDATE
        assert result.ai_citation_potential == AiCitationPotential.BASELINE
        assert result.ai_usage_policy_hint == AiUsagePolicyHint.NO_TRAINING

    def test_generic_fact_lookup_is_displaceable(self):
        result = refine(_decision(), CAPSULE, FRAME)

        assert result.query_complexity == QueryComplexity.SIMPLE_INFORMATIONAL
        assert result.ai_displacement_risk == AiDisplacementRisk.HIGH
        assert result.publisher_vulnerability_profile == PublisherVulnerability.AD_SENSITIVE
        assert result.ai_citation_potential == AiCitationPotential.STRUCTURED_CAPSULE
        assert result.ai_usage_policy_hint == AiUsagePolicyHint.OPEN_SHARE

    def test_owned_insight_changes_economics(self):
        capsule = ContentCapsule(
            answer_capsule_25w="Short direct answer.",
            mini_answer="More detail here. And more.",
            owned_insight="Most leaks start at the windshield frame.",
        )
        result = refine(_decision(), capsule, FRAME)

        assert result.score_10 == 10
        assert result.ai_displacement_risk == AiDisplacementRisk.MEDIUM
        assert result.publisher_vulnerability_profile == PublisherVulnerability.LICENSING_CANDIDATE
        assert result.ai_citation_potential == AiCitationPotential.STRUCTURED_CAPSULE_PLUS_DATA
        assert result.ai_usage_policy_hint == AiUsagePolicyHint.LICENSE_ONLY

    def test_comparison_frame_with_pros_and_cons_adds_data(self):
        frame = DecisionFrame(
            question_type=QuestionType.COMPARISON,
            pros=(ProCon(label="Cheaper", reason="Lower upfront cost."),),
            cons=(ProCon(label="Noisier", reason="Louder outdoor unit."),),
        )
        result = refine(_decision(question_type=QuestionType.COMPARISON), CAPSULE, frame)

        assert result.query_complexity == QueryComplexity.COMPARATIVE_DECISION
        assert result.publisher_vulnerability_profile == PublisherVulnerability.AFFILIATE_SENSITIVE
        assert result.ai_citation_potential == AiCitationPotential.STRUCTURED_CAPSULE_PLUS_DATA

    def test_contextual_question_has_low_displacement(self):
        decision = _decision(question_type=QuestionType.DIAGNOSTIC, contextual=True)
        result = refine(decision, CAPSULE, FRAME)

        assert result.ai_displacement_risk == AiDisplacementRisk.LOW
        assert result.publisher_vulnerability_profile == PublisherVulnerability.TOOL_FRIENDLY

    def test_medium_ymyl_is_limited_share(self):
        decision = _decision(
            flags=(Flag.SAFETY_RISK,),
            ymyl_category=YmylCategory.FINANCIAL,
            ymyl_risk_level=RiskLevel.MEDIUM,
        )

        assert refine(decision, CAPSULE, FRAME).ai_usage_policy_hint == AiUsagePolicyHint.LIMITED_SHARE

    def test_pure(self):
        decision = _decision(flags=(Flag.STACKED_ASKS,))

        assert refine(decision, CAPSULE, FRAME) == refine(decision, CAPSULE, FRAME)

    def test_capsule_wording_does_not_change_classification(self):
        plain = refine(_decision(), CAPSULE, FRAME)
        with_numbers = refine(
            _decision(),
            ContentCapsule(answer_capsule_25w="Replace 2 seals in 30 minutes.", mini_answer="Costs about 40 dollars."),
            FRAME,
        )

        assert with_numbers == plain
        assert with_numbers.ai_citation_potential == AiCitationPotential.STRUCTURED_CAPSULE
