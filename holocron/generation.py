"""
Prompts and conversation turns for learning sessions, and generation of TILs and
notes from a finished conversation.
"""

from textwrap import dedent
from typing import List, Optional, Tuple

from holocron.claude.process_driver import OnText, ProcessDriver
from holocron.config.logger import get_logger
from holocron.session import ConversationSession, LearningMode

log = get_logger(__name__)


def build_deep_dive_prompt(topic: str) -> str:
    return dedent(
        """
        I want to learn about: {topic}

        Please explain this topic in technical detail. Cover:
        1. Core concepts and how they work
        2. Practical examples with code where applicable
        3. Common use cases and best practices
        4. Common pitfalls to avoid

        Be thorough but focused. I'll ask follow-up questions to go deeper on specific aspects.
        """
    ).strip().format(topic=topic)


def build_link_prompt(url: str) -> str:
    return dedent(
        """
        Please analyze this article/resource: {url}

        Provide:
        1. A brief summary of the main points
        2. Key technical concepts explained
        3. Practical takeaways or code examples if applicable
        4. Your assessment of what's most valuable to learn from this

        Use WebFetch to access the content, then explain it thoroughly. I'll ask follow-up questions about specific parts.
        """
    ).strip().format(url=url)


def build_initial_prompt(session: ConversationSession) -> str:
    if session.mode == LearningMode.link:
        return build_link_prompt(session.subject)
    return build_deep_dive_prompt(session.subject)


def build_til_prompt(session: ConversationSession) -> str:
    return dedent(
        """
        Based on our learning session, generate a TIL (Today I Learned) entry.

        {context}

        Use /til to generate the markdown content. The TIL should capture the most important, actionable learning from this session, something someone could quickly reference later.

        Focus on the practical "how to" aspect with working code examples.
        """
    ).strip().format(context=session.build_context())


def build_note_prompt(session: ConversationSession) -> str:
    return dedent(
        """
        Based on our learning session, generate a comprehensive knowledge base note.

        {context}

        Use /note to generate the markdown content. The note should be thorough and detailed, since this is for a personal knowledge base, not a quick reference.

        Include:
        - YAML frontmatter with title, date, tags, and aliases
        - Detailed explanations of concepts
        - Code examples with annotations
        - Key insights from our Q&A
        - Related topics as wiki-links
        """
    ).strip().format(context=session.build_context())


def send_message(
    session: ConversationSession, driver: ProcessDriver, message: str, on_text: OnText
) -> str:
    """
    One conversation turn. The first turn starts a new conversation and records its
    session id; later turns resume it. The exchange is recorded only on success.
    """
    if session.session_id:
        response = driver.resume(session.session_id, message, on_text)
    else:
        response, session_id = driver.start(message, on_text)
        if session_id:
            log.info("Conversation session id: %s", session_id)
            session.set_session_id(session_id)
        else:
            log.warning("No session id reported, next turn will start a new conversation")

    session.record_exchange(message, response)
    return response


def _generate(session: ConversationSession, driver: ProcessDriver, prompt: str, on_text: OnText):
    # Resuming keeps the full conversation in context; the prompt also carries a summary.
    if session.session_id:
        return driver.resume(session.session_id, prompt, on_text)
    response, _ = driver.start(prompt, on_text)
    return response


def generate_til(session: ConversationSession, driver: ProcessDriver, on_text: OnText) -> str:
    return _generate(session, driver, build_til_prompt(session), on_text)


def generate_note(session: ConversationSession, driver: ProcessDriver, on_text: OnText) -> str:
    return _generate(session, driver, build_note_prompt(session), on_text)


## Tests


class FakeDriver:
    """
    In-memory ProcessDriver that replays canned responses and records calls.
    """

    def __init__(self, responses: List[str], session_id: Optional[str] = "sess-1"):
        self.responses = list(responses)
        self.session_id = session_id
        self.calls: List[Tuple[str, Optional[str], str]] = []

    def _respond(self, on_text: OnText) -> str:
        response = self.responses.pop(0)
        for word in response.split(" "):
            on_text(word)
        return response

    def start(self, message: str, on_text: OnText) -> Tuple[str, Optional[str]]:
        self.calls.append(("start", None, message))
        return self._respond(on_text), self.session_id

    def resume(self, session_id: str, message: str, on_text: OnText) -> str:
        self.calls.append(("resume", session_id, message))
        return self._respond(on_text)


def test_prompts():
    prompt = build_deep_dive_prompt("Rust ownership")
    assert prompt.startswith("I want to learn about: Rust ownership")
    assert "Common pitfalls" in prompt

    prompt = build_link_prompt("https://example.com/article")
    assert "https://example.com/article" in prompt
    assert "WebFetch" in prompt

    session = ConversationSession.create(LearningMode.link, "https://example.com", "web")
    assert build_initial_prompt(session) == build_link_prompt("https://example.com")


def test_conversation_turns():
    driver = FakeDriver(["First answer", "Second answer"])
    session = ConversationSession.create(LearningMode.deep_dive, "Git", "git")
    fragments: List[str] = []

    send_message(session, driver, "How does rebase work?", fragments.append)
    send_message(session, driver, "And --onto?", fragments.append)

    assert driver.calls == [
        ("start", None, "How does rebase work?"),
        ("resume", "sess-1", "And --onto?"),
    ]
    assert session.session_id == "sess-1"
    assert [e.assistant_response for e in session.exchanges] == ["First answer", "Second answer"]
    assert fragments == ["First", "answer", "Second", "answer"]


def test_failed_turn_not_recorded():
    import pytest

    from holocron.errors import ProcessFailed

    class FailingDriver(FakeDriver):
        def start(self, message: str, on_text: OnText) -> Tuple[str, Optional[str]]:
            raise ProcessFailed(["claude"], 1)

    session = ConversationSession.create(LearningMode.deep_dive, "Git")
    with pytest.raises(ProcessFailed):
        send_message(session, FailingDriver([]), "hello", lambda _text: None)
    assert session.exchanges == []
    assert session.session_id is None


def test_generate_til_and_note():
    driver = FakeDriver(["Answer", "# Rebase Onto\n\nUse it.", "---\ntitle: Rebase\n---\n"])
    session = ConversationSession.create(LearningMode.deep_dive, "Git", "git")
    send_message(session, driver, "Explain rebase", lambda _text: None)

    til = generate_til(session, driver, lambda _text: None)
    note = generate_note(session, driver, lambda _text: None)

    assert til == "# Rebase Onto\n\nUse it."
    assert note.startswith("---\ntitle: Rebase")
    kind, session_id, prompt = driver.calls[1]
    assert (kind, session_id) == ("resume", "sess-1")
    assert "generate a TIL" in prompt
    assert "User: Explain rebase" in prompt
    assert "knowledge base note" in driver.calls[2][2]
    # Generation doesn't add exchanges.
    assert len(session.exchanges) == 1


def test_generate_without_session_id():
    driver = FakeDriver(["# Title"], session_id=None)
    session = ConversationSession.create(LearningMode.deep_dive, "Git")
    assert generate_til(session, driver, lambda _text: None) == "# Title"
    assert driver.calls[0][0] == "start"
