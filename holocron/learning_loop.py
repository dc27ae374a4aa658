"""
The interactive learning loop: hold a conversation, then save what was learned as
a TIL entry or a note.
"""

from typing import Optional, Tuple

from holocron.claude.process_driver import ProcessDriver
from holocron.config.logger import get_logger
from holocron.config.text_styles import COLOR_COMMAND, PROMPT_MAIN
from holocron.config.user_config import HolocronConfig
from holocron.errors import InvalidState, MissingInput
from holocron.file_storage.entry_writer import CATALOG_FILENAME, write_entry, write_note
from holocron.file_storage.filenames import extract_title, title_to_filename
from holocron.generation import (
    build_initial_prompt,
    generate_note,
    generate_til,
    send_message,
)
from holocron.session import ConversationSession, LearningMode
from holocron.shell_tools.exception_printing import wrap_with_exception_printing
from holocron.shell_ui.prompt_input import prompt_choice, prompt_confirm, prompt_simple_string
from holocron.shell_ui.shell_output import (
    cprint,
    print_banner,
    print_hint,
    print_rule,
    print_status,
    print_success,
    streaming_output,
)

log = get_logger(__name__)


DEFAULT_TIL_TITLE = "Untitled TIL"

DEFAULT_NOTE_TITLE = "Untitled Note"

SUGGESTED_CATEGORIES = ["git", "rust", "sql", "postgres", "python", "javascript"]

CHOICE_OTHER = "Other (type custom)"

CHOICE_SKIP = "Skip (decide later)"

EXIT_COMMANDS = ("/exit", "/quit")

FAREWELL = "May the Force be with you."


def parse_slash_command(text: str) -> Optional[Tuple[str, str]]:
    """
    Split "/learn some topic" into ("learn", "some topic"). Returns None for plain
    conversation text.
    """
    text = text.strip()
    if not text.startswith("/"):
        return None
    name, _, arg = text[1:].partition(" ")
    return name.lower(), arg.strip()


def prompt_for_category() -> Optional[str]:
    choice = prompt_choice(
        "Category for TIL", SUGGESTED_CATEGORIES + [CHOICE_OTHER, CHOICE_SKIP], default="git"
    )
    if choice == CHOICE_SKIP:
        return None
    if choice == CHOICE_OTHER:
        return (prompt_simple_string("Enter category") or "").strip().lower() or None
    return choice


def prompt_category_input() -> str:
    while True:
        category = prompt_simple_string("Enter category for this TIL")
        if category is None:
            raise MissingInput("No category given, TIL not saved")
        category = category.strip().lower()
        if category:
            return category


def read_input() -> Optional[str]:
    """
    Next non-empty line from the user, or None on an exit command or end of input.
    """
    while True:
        text = prompt_simple_string("holocron", PROMPT_MAIN)
        if text is None:
            return None
        text = text.strip()
        if text.lower() in EXIT_COMMANDS:
            return None
        if text:
            return text


@wrap_with_exception_printing("Sending message")
def send_and_display(session: ConversationSession, driver: ProcessDriver, message: str) -> str:
    with streaming_output("Consulting the archives...") as printer:
        return send_message(session, driver, message, printer)


@wrap_with_exception_printing("Saving TIL")
def generate_and_save_til(
    session: ConversationSession, config: HolocronConfig, driver: ProcessDriver
) -> None:
    cprint()
    with streaming_output("Generating TIL...", heading="Generated TIL:") as printer:
        content = generate_til(session, driver, printer)
    print_rule()

    title = extract_title(content) or DEFAULT_TIL_TITLE
    category = session.category or prompt_category_input()
    filename = title_to_filename(title)

    if prompt_confirm(f"Save as {category}/{filename}?"):
        path = write_entry(
            config.til_path, config.archive_dir, category, filename, content, title
        )
        cprint()
        print_success("TIL saved to: %s", path)
        print_hint("  %s updated", CATALOG_FILENAME)
    else:
        print_status("TIL discarded.")


@wrap_with_exception_printing("Saving note")
def generate_and_save_note(
    session: ConversationSession, config: HolocronConfig, driver: ProcessDriver
) -> None:
    if not config.notes_path:
        raise InvalidState("Notes path not configured. Run: holocron config --notes-path <path>")

    cprint()
    with streaming_output("Generating note...", heading="Generated Note:") as printer:
        content = generate_note(session, driver, printer)
    print_rule()

    title = extract_title(content) or DEFAULT_NOTE_TITLE
    filename = title_to_filename(title)

    if prompt_confirm(f"Save as {filename}?"):
        path = write_note(config.notes_path, filename, content)
        cprint()
        print_success("Note saved to: %s", path)
    else:
        print_status("Note discarded.")


def start_session(
    mode: LearningMode, subject: str, category: Optional[str], driver: ProcessDriver
) -> ConversationSession:
    session = ConversationSession.create(mode, subject, category)
    log.info("Starting session: %s", session)
    send_and_display(session, driver, build_initial_prompt(session))
    return session


def _commands_hint():
    cprint(
        f"Commands: [{COLOR_COMMAND}]/til[/{COLOR_COMMAND}] | "
        f"[{COLOR_COMMAND}]/note[/{COLOR_COMMAND}] | [{COLOR_COMMAND}]/exit[/{COLOR_COMMAND}]"
    )
    cprint()


def run_learning_session(
    session: ConversationSession, config: HolocronConfig, driver: ProcessDriver
) -> None:
    """
    Run a session that was started from the command line, until the user exits.
    """
    print_banner(f"Learning: {session.topic}")
    send_and_display(session, driver, build_initial_prompt(session))
    _commands_hint()

    while True:
        text = read_input()
        if text is None:
            print_status(FAREWELL)
            break
        if text.lower() == "/til":
            generate_and_save_til(session, config, driver)
        elif text.lower() == "/note":
            generate_and_save_note(session, config, driver)
        else:
            send_and_display(session, driver, text)


def print_welcome_banner():
    print_banner("HOLOCRON - Your Learning Assistant")
    cprint("Commands:")
    for command, description in [
        ("/learn <topic>", "Start a deep dive on a topic"),
        ("/link <url>", "Analyze an article from URL"),
        ("/til", "Generate TIL from session"),
        ("/note", "Generate detailed note"),
        ("/exit", "Exit holocron"),
    ]:
        cprint(f"  [{COLOR_COMMAND}]{command:<15}[/{COLOR_COMMAND}] - {description}")
    cprint()
    cprint("Or just type to continue the conversation.")
    cprint()


def run_interactive_mode(config: HolocronConfig, driver: ProcessDriver) -> None:
    print_welcome_banner()

    session: Optional[ConversationSession] = None

    while True:
        text = read_input()
        if text is None:
            print_status(FAREWELL)
            break

        command = parse_slash_command(text)
        if command is None:
            if session:
                send_and_display(session, driver, text)
            else:
                print_status("Start a session with /learn <topic> or /link <url>")
            continue

        name, arg = command
        if name in ("learn", "link"):
            if not arg:
                print_status("Please provide a topic." if name == "learn" else "Please provide a URL.")
                continue
            mode = LearningMode.deep_dive if name == "learn" else LearningMode.link
            session = start_session(mode, arg, prompt_for_category(), driver)
        elif name in ("til", "note"):
            if not session:
                print_status("No active session. Start with /learn or /link first.")
            elif name == "til":
                generate_and_save_til(session, config, driver)
            else:
                generate_and_save_note(session, config, driver)
        elif session:
            send_and_display(session, driver, text)
        else:
            print_status("Unknown command: %s", text)


## Tests


def test_parse_slash_command():
    assert parse_slash_command("/learn Rust ownership") == ("learn", "Rust ownership")
    assert parse_slash_command("  /LINK   https://example.com ") == ("link", "https://example.com")
    assert parse_slash_command("/til") == ("til", "")
    assert parse_slash_command("how does it work?") is None


def test_save_til_flow(tmp_path, monkeypatch):
    from pathlib import Path

    from holocron.file_storage.repo_init import init_til_repo
    from holocron.generation import FakeDriver

    init_til_repo(tmp_path)
    config = HolocronConfig.new(Path(tmp_path))
    driver = FakeDriver(["Rebase replays commits.", "# Rebase Onto\n\nUse `git rebase --onto`."])
    monkeypatch.setattr(f"{__name__}.prompt_confirm", lambda _text, default=True: True)

    session = start_session(LearningMode.deep_dive, "git rebase", "git", driver)
    assert session.session_id == "sess-1"
    generate_and_save_til(session, config, driver)

    entry = tmp_path / "archive" / "git" / "rebase_onto.md"
    assert entry.read_text() == "# Rebase Onto\n\nUse `git rebase --onto`.\n"
    readme = (tmp_path / "README.md").read_text()
    assert "- [Rebase Onto](archive/git/rebase_onto.md)" in readme
    assert "1 TILs & Counting" in readme


def test_save_note_requires_notes_path(tmp_path):
    from pathlib import Path

    from holocron.generation import FakeDriver

    config = HolocronConfig.new(Path(tmp_path))
    driver = FakeDriver([])
    session = ConversationSession.create(LearningMode.deep_dive, "git")

    # Reported, not raised, and nothing is generated.
    assert generate_and_save_note(session, config, driver) is None
    assert driver.calls == []


def test_end_of_input_exits(monkeypatch, tmp_path):
    import pytest

    from holocron.generation import FakeDriver

    calls = []

    def closed_input(*args):
        calls.append(args)
        return None

    monkeypatch.setattr(f"{__name__}.prompt_simple_string", closed_input)
    driver = FakeDriver([])

    run_interactive_mode(HolocronConfig.new(tmp_path), driver)
    assert len(calls) == 1
    assert driver.calls == []

    with pytest.raises(MissingInput):
        prompt_category_input()


def test_read_input_skips_blanks(monkeypatch):
    lines = iter(["", "   ", "/learn git", "/QUIT"])
    monkeypatch.setattr(f"{__name__}.prompt_simple_string", lambda *args: next(lines))

    assert read_input() == "/learn git"
    assert read_input() is None
