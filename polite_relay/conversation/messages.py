"""Builders for the outbound LINE messages."""

from __future__ import annotations

from polite_relay.conversation.routing import NEXT_MESSAGE, change_token, selection_token
from polite_relay.models import (
    ButtonsTemplate,
    ClipboardAction,
    PostbackAction,
    Register,
    TemplateMessage,
    TextMessage,
)

PICKER_ALT_TEXT = "変換シーンを選択してください"
PICKER_PROMPT = "このメッセージをどのように丁寧にしますか？"
RESULT_ALT_TEXT = "変換されたテキストです"
NEXT_MESSAGE_PROMPT = "次のメッセージを入力してください。"
ERROR_PREFIX = "エラーが発生しました: "
MISSING_TEXT_ERROR = f"{ERROR_PREFIX}Gemini APIからの応答にテキストが含まれていません。"

# LINE rejects buttons templates whose text exceeds this length.
BUTTONS_TEXT_LIMIT = 160
# Longer clipboard text is rejected as well.
CLIPBOARD_TEXT_LIMIT = 1000


def build_picker_message(original_text: str) -> TemplateMessage:
    """Offer the four registers for ``original_text``."""
    return TemplateMessage(
        alt_text=PICKER_ALT_TEXT,
        template=ButtonsTemplate(
            text=PICKER_PROMPT,
            actions=tuple(
                PostbackAction(
                    label=register.label,
                    data=selection_token(register, original_text),
                )
                for register in Register
            ),
        ),
    )


def build_result_message(polite_text: str, original_text: str) -> TemplateMessage:
    """Follow-up controls shown under a rewritten message: copy, retry and next."""
    text = polite_text
    if len(text) > BUTTONS_TEXT_LIMIT:
        text = text[: BUTTONS_TEXT_LIMIT - 1] + "…"
    return TemplateMessage(
        alt_text=RESULT_ALT_TEXT,
        template=ButtonsTemplate(
            text=text,
            actions=(
                ClipboardAction(
                    label="コピー", clipboard_text=polite_text[:CLIPBOARD_TEXT_LIMIT],
                ),
                PostbackAction(label="他のシーンで変換", data=change_token(original_text)),
                PostbackAction(
                    label="次のメッセージ", data=NEXT_MESSAGE, input_option="openKeyboard",
                ),
            ),
        ),
    )


def next_message_prompt() -> TextMessage:
    return TextMessage(text=NEXT_MESSAGE_PROMPT)


def missing_text_error() -> TextMessage:
    return TextMessage(text=MISSING_TEXT_ERROR)


def format_error(error: BaseException) -> TextMessage:
    description = str(error) or type(error).__name__
    return TextMessage(text=f"{ERROR_PREFIX}{description}")
