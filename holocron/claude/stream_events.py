"""
Events in the newline-delimited JSON stream printed by `claude --print
--output-format stream-json --verbose`.

Every union that receives external data has a catch-all arm, so event or block
types added upstream are parsed as no-ops rather than rejected.
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Discriminator, Tag, TypeAdapter, ValidationError


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class OtherBlock(BaseModel):
    """
    Any non-text content block (tool use, thinking, etc.).
    """

    type: str = "other"


def _block_tag(value: Any) -> str:
    block_type = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return "text" if block_type == "text" else "other"


ContentBlock = Annotated[
    Union[Annotated[TextBlock, Tag("text")], Annotated[OtherBlock, Tag("other")]],
    Discriminator(_block_tag),
]


class AssistantMessage(BaseModel):
    content: List[ContentBlock] = []


class SystemEvent(BaseModel):
    """
    Initialization info. Ignored.
    """

    type: Literal["system"] = "system"


class AssistantEvent(BaseModel):
    """
    Incremental model output.
    """

    type: Literal["assistant"] = "assistant"
    message: AssistantMessage

    def texts(self) -> List[str]:
        return [block.text for block in self.message.content if isinstance(block, TextBlock)]


class ResultEvent(BaseModel):
    """
    Terminal event for a turn, carrying the session id used to resume the conversation.
    """

    type: Literal["result"] = "result"
    session_id: str
    result: Optional[str] = None


class UnknownEvent(BaseModel):
    type: str = "unknown"


_EVENT_TAGS = ("system", "assistant", "result")


def _event_tag(value: Any) -> str:
    event_type = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return event_type if event_type in _EVENT_TAGS else "unknown"


StreamEvent = Annotated[
    Union[
        Annotated[SystemEvent, Tag("system")],
        Annotated[AssistantEvent, Tag("assistant")],
        Annotated[ResultEvent, Tag("result")],
        Annotated[UnknownEvent, Tag("unknown")],
    ],
    Discriminator(_event_tag),
]
"""
The annotated union type for all stream events.
"""

_event_adapter = TypeAdapter(StreamEvent)


def parse_stream_line(line: str) -> Optional[StreamEvent]:
    """
    Parse one line of the stream. Returns None for blank lines and for lines that
    aren't a well-formed event (non-JSON, or a known type with the wrong shape).
    """
    line = line.strip()
    if not line:
        return None
    try:
        return _event_adapter.validate_json(line)
    except ValidationError:
        return None


## Tests


def test_parse_events():
    event = parse_stream_line(
        '{"type":"assistant","message":{"content":['
        '{"type":"text","text":"Hello, "},'
        '{"type":"tool_use","id":"t1","name":"WebFetch","input":{}},'
        '{"type":"text","text":"world"}]}}'
    )
    assert isinstance(event, AssistantEvent)
    assert event.texts() == ["Hello, ", "world"]
    assert isinstance(event.message.content[1], OtherBlock)

    event = parse_stream_line('{"type":"result","subtype":"success","result":"x","session_id":"abc"}')
    assert isinstance(event, ResultEvent)
    assert event.session_id == "abc"

    assert isinstance(parse_stream_line('{"type":"system","subtype":"init","tools":[]}'), SystemEvent)
    assert isinstance(parse_stream_line('{"type":"user","message":{}}'), UnknownEvent)
    assert isinstance(parse_stream_line('{"no_type": true}'), UnknownEvent)


def test_parse_bad_lines():
    assert parse_stream_line("") is None
    assert parse_stream_line("   ") is None
    assert parse_stream_line("not json at all") is None
    assert parse_stream_line("[1, 2, 3]") is None
    # Known type but missing required fields.
    assert parse_stream_line('{"type":"result"}') is None
    assert parse_stream_line('{"type":"assistant"}') is None
