"""Tests for the register prompt table."""

from __future__ import annotations

import pytest

from polite_relay.conversation.prompts import DEFAULT_PROMPTS
from polite_relay.models import Register


def test_every_register_has_a_prompt() -> None:
    assert set(DEFAULT_PROMPTS) == set(Register)


def test_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        DEFAULT_PROMPTS[Register.CLUB] = DEFAULT_PROMPTS[Register.ADULT]  # type: ignore[index]


def test_render_appends_original_text() -> None:
    rendered = DEFAULT_PROMPTS[Register.CLUB].render("明日休みます")
    assert rendered == (
        "以下のテキストを、部活の場面に適した丁寧な言葉遣いに変換してください。\n\n明日休みます"
    )


def test_render_keeps_braces_literal() -> None:
    rendered = DEFAULT_PROMPTS[Register.ADULT].render("{text} {0}")
    assert rendered.endswith("\n\n{text} {0}")


@pytest.mark.parametrize(("register", "audience"), [
    (Register.CLUB, "部活の先輩"),
    (Register.CIRCLE, "サークルのメンバー"),
    (Register.JOB_HUNTING, "採用担当者"),
    (Register.ADULT, "目上の大人"),
])
def test_system_instruction_names_audience(register: Register, audience: str) -> None:
    instruction = DEFAULT_PROMPTS[register].system_instruction
    assert f"{audience}に対して失礼のないようにしてください。" in instruction
    assert instruction.endswith("返答は変換後のテキストのみを返してください。")
