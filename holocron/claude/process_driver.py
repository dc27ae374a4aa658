"""
Drive the `claude` CLI as a subprocess, streaming its structured output.

Each call is one conversation turn: spawn the process, read its stdout line by
line, hand each text fragment to a callback as it arrives, and collect the full
response plus the session id needed to resume the conversation later.
"""

import subprocess
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from strif import abbreviate_str

from holocron.claude.stream_events import AssistantEvent, parse_stream_line, ResultEvent
from holocron.config.logger import get_logger
from holocron.config.settings import global_settings
from holocron.errors import ProcessFailed, SetupError

log = get_logger(__name__)


OnText = Callable[[str], None]
"""Callback invoked once per incremental text fragment."""

STREAM_ARGS = ["--print", "--output-format", "stream-json", "--verbose"]

RESUME_FLAG = "--resume"


def start_args(message: str) -> List[str]:
    return STREAM_ARGS + [message]


def resume_args(session_id: str, message: str) -> List[str]:
    return STREAM_ARGS + [RESUME_FLAG, session_id, message]


def consume_stream(lines: Iterable[str], on_text: OnText) -> Tuple[str, Optional[str]]:
    """
    Consume stream lines, returning the full response text and the last session id
    seen (if any). Lines that don't parse as a known event are skipped.
    """
    chunks: List[str] = []
    session_id: Optional[str] = None

    for line in lines:
        if not line.strip():
            continue
        event = parse_stream_line(line)
        if event is None:
            log.debug("Skipping unparseable stream line: %s", abbreviate_str(line.strip(), 80))
        elif isinstance(event, AssistantEvent):
            for text in event.texts():
                on_text(text)
                chunks.append(text)
        elif isinstance(event, ResultEvent):
            session_id = event.session_id

    return "".join(chunks), session_id


def run_with_args(
    args: Sequence[str], on_text: OnText, command: Optional[str] = None
) -> Tuple[str, Optional[str]]:
    """
    Run the command with the given args and stream its output. Blocks until the
    process exits. A missing executable or non-zero exit is an error; there are
    no retries.
    """
    command = command or global_settings().claude_command
    full_command = [command, *args]
    log.info("Running: %s", abbreviate_str(" ".join(full_command), 200))

    try:
        proc = subprocess.Popen(
            full_command,
            stdout=subprocess.PIPE,
            stderr=None,
            text=True,
            encoding="utf-8",
            bufsize=1,
        )
    except FileNotFoundError as e:
        raise SetupError(f"Could not find `{command}`. Is it installed and on your PATH?") from e

    with proc:
        assert proc.stdout
        response, session_id = consume_stream(proc.stdout, on_text)
        returncode = proc.wait()

    log.info(
        "Process exited: status %s, %s chars, session %s", returncode, len(response), session_id
    )
    if returncode != 0:
        raise ProcessFailed(full_command, returncode)

    return response, session_id


class ProcessDriver(Protocol):
    """
    The narrow interface the rest of the app uses to talk to the model, so that
    tests can inject a fake.
    """

    def start(self, message: str, on_text: OnText) -> Tuple[str, Optional[str]]: ...

    def resume(self, session_id: str, message: str, on_text: OnText) -> str: ...


class ClaudeProcess:
    """
    ProcessDriver backed by the real `claude` executable.
    """

    def __init__(self, command: Optional[str] = None):
        self.command = command

    def start(self, message: str, on_text: OnText) -> Tuple[str, Optional[str]]:
        """
        Start a new conversation. Returns the response and the session id, if one
        was reported.
        """
        return run_with_args(start_args(message), on_text, command=self.command)

    def resume(self, session_id: str, message: str, on_text: OnText) -> str:
        """
        Continue an existing conversation. Only the response is returned: the session
        id is treated as fixed for the life of a conversation.
        """
        response, _ = run_with_args(resume_args(session_id, message), on_text, command=self.command)
        return response


## Tests


def _python_command(script: str) -> Tuple[str, List[str]]:
    import sys

    return sys.executable, ["-c", script]


def test_consume_stream_skips_garbage():
    lines = [
        '{"type":"system","subtype":"init"}\n',
        "\n",
        '{"type":"assistant","message":{"content":[{"type":"text","text":"Rebase "},'
        '{"type":"text","text":"replays commits."}]}}\n',
        "this line is garbage\n",
        '{"type":"stream_event","delta":{}}\n',
        '{"type":"result","result":"Rebase replays commits.","session_id":"sess-1"}\n',
    ]
    fragments: List[str] = []
    response, session_id = consume_stream(lines, fragments.append)

    assert response == "Rebase replays commits."
    assert fragments == ["Rebase ", "replays commits."]
    assert session_id == "sess-1"


def test_consume_stream_last_session_wins():
    lines = [
        '{"type":"result","session_id":"first"}',
        '{"type":"result","session_id":"second"}',
    ]
    response, session_id = consume_stream(lines, lambda _text: None)
    assert response == ""
    assert session_id == "second"


def test_args():
    assert start_args("hi") == ["--print", "--output-format", "stream-json", "--verbose", "hi"]
    assert resume_args("abc", "more")[-3:] == ["--resume", "abc", "more"]


def test_run_with_args_subprocess():
    script = (
        "import json\n"
        "print(json.dumps({'type': 'assistant', 'message': {'content': [{'type': 'text', 'text': 'ok'}]}}))\n"
        "print('garbage')\n"
        "print(json.dumps({'type': 'result', 'result': 'ok', 'session_id': 's1'}))\n"
    )
    command, args = _python_command(script)
    fragments: List[str] = []
    response, session_id = run_with_args(args, fragments.append, command=command)

    assert response == "ok"
    assert fragments == ["ok"]
    assert session_id == "s1"


def test_run_with_args_failures():
    import pytest

    command, args = _python_command("import sys; print('partial'); sys.exit(3)")
    with pytest.raises(ProcessFailed) as exc_info:
        run_with_args(args, lambda _text: None, command=command)
    assert exc_info.value.returncode == 3

    with pytest.raises(SetupError):
        run_with_args(["--print"], lambda _text: None, command="holocron-no-such-executable")
