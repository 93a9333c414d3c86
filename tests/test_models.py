"""Tests for subject, turn and request models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from memora.models.models import (
    AssistantRequest,
    CareStage,
    ConversationTurn,
    MessageRole,
    SubjectProfile,
    coerce_stage,
)


class TestStageCoercion:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("early", CareStage.EARLY),
            ("Moderate", CareStage.MODERATE),
            (" ADVANCED ", CareStage.ADVANCED),
            (CareStage.EARLY, CareStage.EARLY),
        ],
    )
    def test_known_values(self, value, expected):
        assert coerce_stage(value) == expected

    @pytest.mark.parametrize("value", ["severe", "", "mild", None, 3, 2.5, ["early"], {"stage": "early"}])
    def test_unknown_values_become_moderate(self, value):
        assert coerce_stage(value) == CareStage.MODERATE

    def test_profile_never_rejects_stage(self):
        profile = SubjectProfile(subject_id="s", name="Ann", stage="end-stage")
        assert profile.stage == CareStage.MODERATE

    def test_profile_none_stage(self):
        profile = SubjectProfile(subject_id="s", name="Ann", stage=None)
        assert profile.stage == CareStage.MODERATE


class TestSubjectProfile:
    def test_blank_narrative_is_none(self):
        profile = SubjectProfile(subject_id="s", name="Ann", case_narrative="   ")
        assert profile.case_narrative is None

    def test_declared_age_wins(self):
        profile = SubjectProfile(subject_id="s", name="Ann", age=70)
        assert profile.effective_age() == 70

    def test_unknown_age(self):
        assert SubjectProfile(subject_id="s", name="Ann").effective_age() is None

    def test_negative_age_rejected(self):
        with pytest.raises(ValidationError):
            SubjectProfile(subject_id="s", name="Ann", age=-1)


class TestConversationTurn:
    def test_content_stripped(self):
        turn = ConversationTurn(role=MessageRole.USER, content="  hi  ")
        assert turn.content == "hi"

    def test_blank_content_rejected(self):
        with pytest.raises(ValidationError):
            ConversationTurn(role=MessageRole.USER, content="   ")

    def test_immutable(self):
        turn = ConversationTurn(role=MessageRole.USER, content="hi")
        with pytest.raises(ValidationError):
            turn.content = "changed"

    def test_system_role_rejected(self):
        with pytest.raises(ValidationError):
            ConversationTurn(role="system", content="hi")

    def test_naive_timestamp_treated_as_utc(self):
        turn = ConversationTurn(role="user", content="hi", created_at=datetime(2024, 1, 1, 12, 0))
        assert turn.created_at.tzinfo == timezone.utc


class TestAssistantRequest:
    def test_whitespace_question_accepted(self):
        request = AssistantRequest(question="   ")
        assert request.is_blank

    def test_question_kept_verbatim(self):
        request = AssistantRequest(question="  Where is my car?  ")
        assert request.question == "  Where is my car?  "
        assert not request.is_blank

    def test_out_of_order_history_rejected(self):
        now = datetime.now(timezone.utc)
        history = [
            ConversationTurn(role="user", content="second", created_at=now),
            ConversationTurn(role="assistant", content="first", created_at=now - timedelta(minutes=1)),
        ]
        with pytest.raises(ValidationError):
            AssistantRequest(question="Hello", history=history)
