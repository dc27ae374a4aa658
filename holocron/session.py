from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from holocron.config.settings import global_settings


class LearningMode(str, Enum):
    """
    What a learning session is about: a topic to explore, or a link to analyze.
    """

    deep_dive = "deep_dive"
    link = "link"

    def label(self) -> str:
        return {LearningMode.deep_dive: "Deep Dive", LearningMode.link: "Link Analysis"}[self]


@dataclass(frozen=True)
class Exchange:
    user_message: str
    assistant_response: str


def truncate_for_context(text: str, max_len: int) -> str:
    """
    Hard cutoff at `max_len` characters, with `...` appended if anything was cut.
    """
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


@dataclass
class ConversationSession:
    """
    One learning conversation, held in memory for the life of the process.
    Exchanges are append-only and in chronological order.
    """

    mode: LearningMode
    subject: str
    category: Optional[str] = None
    exchanges: List[Exchange] = field(default_factory=list)
    session_id: Optional[str] = None
    """Continuation token reported by the first turn, used to resume later turns."""

    @classmethod
    def create(
        cls, mode: LearningMode, subject: str, category: Optional[str] = None
    ) -> "ConversationSession":
        return cls(mode=mode, subject=subject, category=category)

    @property
    def topic(self) -> str:
        return self.subject

    @property
    def description(self) -> str:
        return f"{self.mode.label()}: {self.subject}"

    def record_exchange(self, user_message: str, assistant_response: str) -> None:
        self.exchanges.append(Exchange(user_message, assistant_response))

    def set_session_id(self, session_id: str) -> None:
        self.session_id = session_id

    def build_context(self, max_response_len: Optional[int] = None) -> str:
        """
        Deterministic summary of the session for TIL and note generation.
        """
        if max_response_len is None:
            max_response_len = global_settings().context_truncate_len

        parts = [f"Learning Session: {self.description}\n\n"]
        if self.category:
            parts.append(f"Category: {self.category}\n\n")
        parts.append("Conversation Summary:\n")
        for i, exchange in enumerate(self.exchanges, start=1):
            parts.append(f"\n--- Exchange {i} ---\n")
            parts.append(f"User: {exchange.user_message}\n")
            parts.append(
                f"Assistant: {truncate_for_context(exchange.assistant_response, max_response_len)}\n"
            )
        return "".join(parts)

    def __str__(self) -> str:
        return f"{self.description} ({len(self.exchanges)} exchanges)"


## Tests


def test_session_basics():
    session = ConversationSession.create(LearningMode.deep_dive, "Rust ownership", "rust")
    assert session.topic == "Rust ownership"
    assert session.description == "Deep Dive: Rust ownership"
    assert session.category == "rust"
    assert session.exchanges == []
    assert session.session_id is None

    session.record_exchange("Hello", "Hi there")
    session.record_exchange("Second", "Reply")
    assert [e.user_message for e in session.exchanges] == ["Hello", "Second"]

    session.set_session_id("abc123")
    assert session.session_id == "abc123"

    link = ConversationSession.create(LearningMode.link, "https://example.com")
    assert link.description == "Link Analysis: https://example.com"
    assert link.topic == "https://example.com"
    assert LearningMode.link.label() == "Link Analysis"
    assert LearningMode.deep_dive.label() == "Deep Dive"


def test_build_context():
    session = ConversationSession.create(LearningMode.deep_dive, "Git", "git")
    session.record_exchange("How does rebase work?", "Rebase replays commits...")
    session.record_exchange("And --onto?", "x" * 600)

    context = session.build_context(max_response_len=500)
    assert context.startswith("Learning Session: Deep Dive: Git\n\nCategory: git\n\n")
    assert "\n--- Exchange 1 ---\nUser: How does rebase work?\n" in context
    assert "Assistant: Rebase replays commits...\n" in context
    assert "\n--- Exchange 2 ---\n" in context
    assert "Assistant: " + "x" * 500 + "...\n" in context
    assert "x" * 501 not in context

    no_category = ConversationSession.create(LearningMode.link, "https://example.com")
    context = no_category.build_context()
    assert "Link Analysis: https://example.com" in context
    assert "Category:" not in context
    assert context.endswith("Conversation Summary:\n")


def test_truncate_for_context():
    assert truncate_for_context("short", 100) == "short"
    result = truncate_for_context("a" * 600, 500)
    assert len(result) == 503
    assert result.endswith("...")
