"""
Conversation state for a single session or subject.

The log is append-only and strictly chronological. Prompt composition
only ever sees a chronological suffix of it (the recent window), taken
as a snapshot at submission time.
"""

from collections.abc import Iterable

from memora.config.logging_config import get_logger
from memora.models.models import ConversationTurn, MessageRole

logger = get_logger(__name__)

DEFAULT_HISTORY_WINDOW = 6


class ConversationLog:
    """
    Ordered, append-only sequence of conversation turns.

    The owning caller appends turns; nothing here persists them.
    """

    def __init__(self, turns: Iterable[ConversationTurn] = ()):
        self._turns: list[ConversationTurn] = []
        for turn in turns:
            self.append(turn)

    def __len__(self) -> int:
        return len(self._turns)

    @property
    def turns(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    def append(self, turn: ConversationTurn) -> ConversationTurn:
        """
        Append a turn.

        Raises:
            ValueError: If the turn is older than the last recorded turn.
        """
        if self._turns and turn.created_at < self._turns[-1].created_at:
            logger.warning("Rejected out-of-order turn", role=turn.role.value, turns=len(self._turns))
            raise ValueError(
                "Turns must be appended in chronological order "
                f"({turn.created_at.isoformat()} < {self._turns[-1].created_at.isoformat()})"
            )
        self._turns.append(turn)
        return turn

    def add(self, role: MessageRole, content: str) -> ConversationTurn:
        """Create a turn stamped now and append it."""
        return self.append(ConversationTurn(role=role, content=content))

    def record_exchange(self, question: str, answer: str) -> None:
        """Append the user's question and then the assistant's answer."""
        self.add(MessageRole.USER, question)
        self.add(MessageRole.ASSISTANT, answer)

    def recent(self, window: int = DEFAULT_HISTORY_WINDOW) -> tuple[ConversationTurn, ...]:
        """
        The last ``window`` turns in chronological order.

        A window of zero (or less) replays nothing.
        """
        if window <= 0:
            return ()
        return tuple(self._turns[-window:])
