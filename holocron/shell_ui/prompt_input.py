from typing import List, Optional

from InquirerPy.prompts.confirm import ConfirmPrompt
from InquirerPy.prompts.input import InputPrompt
from InquirerPy.prompts.list import ListPrompt
from InquirerPy.utils import InquirerPyStyle

from holocron.config.text_styles import PROMPT_FORM

custom_style = InquirerPyStyle(
    {
        "questionmark": "#6dbd6d",
        "answermark": "#bababa",
        "answer": "#7fcfe8",
        "input": "#7fcfe8",
        "question": "#6dbd6d bold",
        "answered_question": "#bababa",
        "instruction": "#bababa",
        "pointer": "#7fcfe8",
        "validator": "",
    }
)


def prompt_simple_string(
    prompt_text: str = "", prompt_symbol: str = f"{PROMPT_FORM}"
) -> Optional[str]:
    """
    Simple prompt from the user for a simple string. Returns None at end of input.
    """
    prompt_text = prompt_text.strip()
    sep = "\n" if len(prompt_text) > 40 else " "
    prompt_message = f"{prompt_text}{sep}{prompt_symbol}"
    try:
        response = InputPrompt(message=prompt_message, style=custom_style).execute()
    except EOFError:
        return None
    return response


def prompt_choice(prompt_text: str, choices: List[str], default: Optional[str] = None) -> str:
    """
    Pick one of a list of choices.
    """
    return ListPrompt(
        message=prompt_text, choices=choices, default=default, style=custom_style
    ).execute()


def prompt_confirm(prompt_text: str, default: bool = True) -> bool:
    try:
        return bool(ConfirmPrompt(message=prompt_text, default=default, style=custom_style).execute())
    except EOFError:
        return False


## Tests


def test_prompt_end_of_input(monkeypatch):
    class ClosedInput:
        def __init__(self, **kwargs):
            pass

        def execute(self):
            raise EOFError

    monkeypatch.setattr(f"{__name__}.InputPrompt", ClosedInput)
    monkeypatch.setattr(f"{__name__}.ConfirmPrompt", ClosedInput)

    assert prompt_simple_string("Path to your TIL repository") is None
    assert prompt_confirm("Save?") is False
