"""Conversation flow for the politeness relay.

This package provides:
- The register prompt table
- Routing-token encoding and parsing
- Outbound message builders
- Event classification and dispatch
"""

from polite_relay.conversation.dispatcher import EventDispatcher, Route, classify
from polite_relay.conversation.messages import build_picker_message, build_result_message
from polite_relay.conversation.prompts import DEFAULT_PROMPTS, PromptTable, RegisterPrompt
from polite_relay.conversation.routing import (
    RegisterSelection,
    normalize_text,
    parse_selection,
    register_for_label,
)

__all__ = [
    # Components
    "EventDispatcher",
    "Route",
    "classify",
    # Builders
    "build_picker_message",
    "build_result_message",
    # Prompts
    "DEFAULT_PROMPTS",
    "PromptTable",
    "RegisterPrompt",
    # Routing
    "RegisterSelection",
    "normalize_text",
    "parse_selection",
    "register_for_label",
]
