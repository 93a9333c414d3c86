"""Shared fixtures for the assistant tests."""

from datetime import datetime, timedelta, timezone

import pytest

from memora.config.config import Settings
from memora.models.models import CareStage, ConversationTurn, MessageRole, SubjectProfile
from memora.scripts.chat_session import NIGHTTIME_CONFUSION_CASE


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, llm_api_key="", history_window=6)


@pytest.fixture
def nighttime_case() -> str:
    return NIGHTTIME_CONFUSION_CASE


@pytest.fixture
def pam(nighttime_case) -> SubjectProfile:
    return SubjectProfile(
        subject_id="p-1",
        name="Pam",
        age=73,
        diagnosis="Alzheimer's disease",
        stage=CareStage.MODERATE,
        case_narrative=nighttime_case,
    )


def make_turns(count: int) -> list[ConversationTurn]:
    """Alternating user/assistant turns one minute apart: 'turn 0', 'turn 1', ..."""
    start = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
    return [
        ConversationTurn(
            role=MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT,
            content=f"turn {i}",
            created_at=start + timedelta(minutes=i),
        )
        for i in range(count)
    ]


@pytest.fixture
def ten_turns() -> list[ConversationTurn]:
    return make_turns(10)
