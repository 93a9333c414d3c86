"""Tests for the deterministic fallback generator."""

import re

import pytest

from memora.services.fallback_generator import (
    COMMUNICATION_TECHNIQUES,
    DEFAULT_ANSWER,
    MEDICAL_DISCLAIMER,
    SCENARIO_EXAMPLE_ANSWER,
    SCENARIO_STRATEGY_ANSWER,
    TOPIC_ANSWERS,
    fallback,
)

DOSAGE = re.compile(r"\d+\s*(mg|milligram|ml|mcg|tablets?|pills?)\b", re.IGNORECASE)


class TestReferenceScenario:
    def test_strategy_question_lists_all_three(self, nighttime_case):
        answer = fallback("What approach should I take with nighttime confusion about work?", nighttime_case)
        assert answer == SCENARIO_STRATEGY_ANSWER
        assert "Validation and Redirection (Recommended)" in answer
        assert "Environmental Cues (Recommended)" in answer
        assert "Reality Orientation (Not recommended)" in answer
        assert "distress" in answer

    def test_reality_orientation_listed_last(self, nighttime_case):
        answer = fallback("Which strategy works for her confusion at night?", nighttime_case)
        assert answer.index("Reality Orientation") > answer.index("Environmental Cues")

    def test_other_questions_get_worked_example(self, nighttime_case):
        answer = fallback(
            "What should I say when my mother wakes up at night confused about going to work?",
            nighttime_case,
        )
        assert answer == SCENARIO_EXAMPLE_ANSWER
        assert "Let's have some tea and rest until morning." in answer

    def test_requires_case_context(self):
        answer = fallback("What approach should I take with nighttime confusion about work?")
        assert answer == DEFAULT_ANSWER

    def test_other_narratives_do_not_trigger(self):
        context = "My father has dementia and gets up at night thinking he has to go to work."
        answer = fallback("What approach should I take with nighttime confusion about work?", context)
        assert answer not in (SCENARIO_STRATEGY_ANSWER, SCENARIO_EXAMPLE_ANSWER)

    def test_unrelated_question_with_scenario_context(self, nighttime_case):
        answer = fallback("How can I communicate better with Pam?", nighttime_case)
        assert answer.startswith("Communication techniques")


class TestMedicationSafety:
    @pytest.mark.parametrize(
        "question",
        [
            "Which medication should she take?",
            "Is her medication safe at night?",
            "What medication helps with confusion about work?",
            "Can I crush her medication into food?",
        ],
    )
    @pytest.mark.parametrize(
        "context_fixture_or_text",
        ["nighttime", "My dad has dementia.", "Mother was diagnosed with Alzheimer's last year."],
    )
    def test_disclaimer_and_no_dosage(self, question, context_fixture_or_text, nighttime_case):
        context = nighttime_case if context_fixture_or_text == "nighttime" else context_fixture_or_text
        answer = fallback(question, context)
        assert "not medical advice" in answer
        assert MEDICAL_DISCLAIMER in answer
        assert not DOSAGE.search(answer)

    def test_states_missing_prescription_details(self):
        answer = fallback("How should we manage her medication?", "She has Alzheimer's.")
        assert "don't have the specific prescription details" in answer

    def test_domain_in_question_is_enough(self):
        answer = fallback("Is this dementia medication safe?", "She lives with her son.")
        assert "prescription details" in answer


class TestCommunication:
    def test_ten_item_list(self):
        answer = fallback("How should I communicate with my husband?", "He has early-stage dementia.")
        numbered = [line for line in answer.splitlines() if re.match(r"^\d+\. ", line)]
        assert len(numbered) == 10
        assert numbered[0].startswith("1. ")
        assert numbered[-1].startswith("10. ")
        assert len(COMMUNICATION_TECHNIQUES) == 10

    def test_needs_domain(self):
        answer = fallback("How should I talk to my neighbour?", "He just moved in.")
        assert "Communication techniques" not in answer


class TestTopicsAndDefault:
    def test_memory_topic(self):
        assert fallback("Why does she forget my name?") == TOPIC_ANSWERS["memory"]

    def test_medication_topic_without_context_has_disclaimer(self):
        answer = fallback("When should she take her pills?")
        assert answer == TOPIC_ANSWERS["medication"]
        assert MEDICAL_DISCLAIMER in answer

    def test_medication_beats_memory_topic(self):
        answer = fallback("Is this memory medication safe?", "Lives alone with her husband.")
        assert answer == TOPIC_ANSWERS["medication"]
        assert MEDICAL_DISCLAIMER in answer

    def test_family_topic(self):
        assert fallback("Would family photos help?") == TOPIC_ANSWERS["family"]

    def test_default(self):
        assert fallback("Hello there") == DEFAULT_ANSWER

    @pytest.mark.parametrize("question,context", [("", None), (None, None), ("", ""), ("   ", "   ")])
    def test_empty_input_gets_default(self, question, context):
        assert fallback(question, context) == DEFAULT_ANSWER

    def test_deterministic(self, nighttime_case):
        question = "What should I do about her medication?"
        assert fallback(question, nighttime_case) == fallback(question, nighttime_case)

    def test_never_empty(self, nighttime_case):
        for question in ["", "?", "night", "work", "dementia", "talk", "routine"]:
            for context in [None, "", nighttime_case, "dementia"]:
                assert fallback(question, context).strip()
