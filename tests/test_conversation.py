"""Tests for the conversation log and its recent window."""

from datetime import timedelta

import pytest

from memora.models.models import ConversationTurn, MessageRole
from memora.services.conversation import DEFAULT_HISTORY_WINDOW, ConversationLog

from tests.conftest import make_turns


class TestConversationLog:
    def test_default_window_is_six(self):
        assert DEFAULT_HISTORY_WINDOW == 6

    def test_recent_is_chronological_suffix(self, ten_turns):
        log = ConversationLog(ten_turns)
        assert [t.content for t in log.recent()] == [f"turn {i}" for i in range(4, 10)]

    def test_recent_shorter_than_window(self):
        log = ConversationLog(make_turns(3))
        assert len(log.recent(6)) == 3

    def test_zero_window(self, ten_turns):
        assert ConversationLog(ten_turns).recent(0) == ()

    def test_rejects_older_turn(self, ten_turns):
        log = ConversationLog(ten_turns)
        stale = ConversationTurn(
            role=MessageRole.USER,
            content="late arrival",
            created_at=ten_turns[0].created_at - timedelta(seconds=1),
        )
        with pytest.raises(ValueError):
            log.append(stale)
        assert len(log) == 10

    def test_record_exchange_appends_user_then_assistant(self):
        log = ConversationLog()
        log.record_exchange("How is she?", "She is resting.")
        assert [t.role for t in log.turns] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert log.turns[1].created_at >= log.turns[0].created_at

    def test_recent_is_snapshot(self, ten_turns):
        log = ConversationLog(ten_turns)
        window = log.recent()
        log.record_exchange("new question", "new answer")
        assert [t.content for t in window][-1] == "turn 9"

    def test_turns_is_read_only_view(self, ten_turns):
        log = ConversationLog(ten_turns)
        assert isinstance(log.turns, tuple)
