"""Prompt table: the instructions sent to the completion API per register."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from polite_relay.models import Register


@dataclass(frozen=True)
class RegisterPrompt:
    """System instruction and user-prompt template for one register."""

    system_instruction: str
    template: str

    def render(self, original_text: str) -> str:
        return self.template.format(text=original_text)


PromptTable = Mapping[Register, RegisterPrompt]


def _instruction(scene: str, audience: str) -> str:
    return (
        f"あなたは与えられたテキストを、{scene}言葉遣いに変換するAIです。\n"
        f"変換後のテキストは、元のテキストの意図を正確に伝えつつ、{audience}に対して"
        "失礼のないようにしてください。\n"
        "返答は変換後のテキストのみを返してください。"
    )


def _template(scene: str) -> str:
    return f"以下のテキストを、{scene}に適した丁寧な言葉遣いに変換してください。\n\n{{text}}"


DEFAULT_PROMPTS: PromptTable = MappingProxyType({
    Register.CLUB: RegisterPrompt(
        system_instruction=_instruction(
            "部活の先輩に送るメッセージとして適切な、丁寧な", "部活の先輩",
        ),
        template=_template("部活の場面"),
    ),
    Register.CIRCLE: RegisterPrompt(
        system_instruction=_instruction(
            "サークルのメンバーに送るメッセージとして適切な、少し丁寧でカジュアルな",
            "サークルのメンバー",
        ),
        template=_template("サークルの場面"),
    ),
    Register.JOB_HUNTING: RegisterPrompt(
        system_instruction=_instruction(
            "就職活動の場面で使うような最も硬く丁寧な", "採用担当者",
        ),
        template=_template("就職活動の場面"),
    ),
    Register.ADULT: RegisterPrompt(
        system_instruction=_instruction(
            "目上の大人に送るメッセージとして適切な、丁寧な", "目上の大人",
        ),
        template=_template("目上の大人"),
    ),
})
