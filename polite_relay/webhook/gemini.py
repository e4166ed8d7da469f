"""Gemini ``generateContent`` client."""

from __future__ import annotations

from typing import Any

import httpx

from polite_relay.config import DEFAULT_GEMINI_MODEL
from polite_relay.models import CompletionResult

_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class CompletionAPIError(Exception):
    """Raised when the completion API answers with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Gemini API request failed: {status_code} {body}")


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        timeout: float | None = None,
    ) -> None:
        self._api_key = api_key
        self._url = f"{_GEMINI_API_BASE}/{model}:generateContent"
        self._timeout = timeout

    @staticmethod
    def build_request(system_instruction: str, prompt: str) -> dict[str, Any]:
        """Pair the register instruction with the rendered prompt as two user turns."""
        return {
            "contents": [
                {"role": "user", "parts": [{"text": system_instruction}]},
                {"role": "user", "parts": [{"text": prompt}]},
            ],
        }

    async def generate(self, system_instruction: str, prompt: str) -> CompletionResult:
        """Request a completion.

        Raises:
            CompletionAPIError: On a non-2xx response.
            httpx.HTTPError: On transport failure.
        """
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key,
        }
        async with httpx.AsyncClient(verify=True, timeout=self._timeout) as client:
            resp = await client.post(
                self._url, json=self.build_request(system_instruction, prompt), headers=headers,
            )

        if not resp.is_success:
            raise CompletionAPIError(resp.status_code, resp.text)

        data = resp.json()
        return CompletionResult(text=extract_text(data), raw=data if isinstance(data, dict) else {})


def extract_text(data: Any) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` or None when absent."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text:
        return None
    return text
