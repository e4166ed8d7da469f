"""Routing tokens carried in postback data between conversation turns.

Three encodings exist, all separated on the first ``_``:

- ``<register>_<originalText>``: the user picked a register.
- ``change_<originalText>``: the user wants to pick another register.
- ``next_message``: the user wants to start over with a new message.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from polite_relay.models import Register

DELIMITER = "_"
CHANGE_PREFIX = f"change{DELIMITER}"
NEXT_MESSAGE = "next_message"
POSTBACK_DATA_LIMIT = 300

_WHITESPACE_RUN = re.compile(r"\s+")
_LABEL_TO_REGISTER = {register.label: register for register in Register}


@dataclass(frozen=True)
class RegisterSelection:
    register: Register
    original_text: str


def normalize_text(text: str) -> str:
    """Collapse whitespace and newline runs to single spaces and trim."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def _fit_token(prefix: str, original_text: str) -> str:
    # LINE rejects postback data longer than POSTBACK_DATA_LIMIT characters.
    return prefix + original_text[: POSTBACK_DATA_LIMIT - len(prefix)]


def selection_token(register: Register, original_text: str) -> str:
    return _fit_token(f"{register.value}{DELIMITER}", original_text)


def change_token(original_text: str) -> str:
    return _fit_token(CHANGE_PREFIX, original_text)


def strip_change_prefix(data: str) -> str:
    return data.removeprefix(CHANGE_PREFIX)


def parse_selection(data: str) -> RegisterSelection | None:
    """Parse ``<register>_<originalText>``.

    Returns None when the register is empty or unknown, or the text is empty.
    """
    register_value, sep, original_text = data.partition(DELIMITER)
    if not sep or not register_value or not original_text:
        return None
    try:
        register = Register(register_value)
    except ValueError:
        return None
    return RegisterSelection(register=register, original_text=original_text)


def register_for_label(text: str) -> Register | None:
    """Return the register whose display label equals the trimmed text."""
    return _LABEL_TO_REGISTER.get(text.strip())
