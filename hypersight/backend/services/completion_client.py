from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

import requests

from config import settings


FailureReason = Literal["config", "http", "transport", "invalid_response"]


@dataclass
class CompletionError(Exception):
    message: str
    model: str
    reason: FailureReason | str
    http_status: int | None = None
    response_snippet: str | None = None

    def __str__(self) -> str:  # pragma: no cover
        base = f"{self.reason} model={self.model}: {self.message}"
        if self.http_status:
            base += f" (HTTP {self.http_status})"
        return base


@dataclass(frozen=True)
class CompletionResult:
    text: str
    model_used: str
    prompt_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None


class CompletionClient:
    """
    Single wrapper for chat-completion calls.
    - one POST per call, no retry and no fallback model
    - any transport failure or non-2xx response raises CompletionError
    - returns the first choice's text verbatim
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        endpoint: str | None = None,
        model: str | None = None,
    ) -> None:
        self.api_key = settings.openai_api_key if api_key is None else api_key
        self.endpoint = endpoint or settings.completion_endpoint
        self.model = model or settings.completion_model

    def complete(
        self,
        *,
        system: str,
        user: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout_s: int | None = None,
    ) -> CompletionResult:
        if not self.api_key:
            raise CompletionError("OPENAI_API_KEY not configured", model=self.model, reason="config")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": float(settings.completion_temperature if temperature is None else temperature),
            "max_tokens": int(settings.completion_max_tokens if max_tokens is None else max_tokens),
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        to_s = settings.completion_timeout_s if timeout_s is None else timeout_s

        try:
            resp = requests.post(self.endpoint, headers=headers, json=payload, timeout=to_s)
        except requests.RequestException as e:
            raise CompletionError(f"{type(e).__name__}: {e}", model=self.model, reason="transport") from e

        if resp.status_code >= 400:
            raise CompletionError(
                "Completion service error",
                model=self.model,
                reason="http",
                http_status=resp.status_code,
                response_snippet=(resp.text or "")[:500],
            )

        try:
            data = resp.json()
            text = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise CompletionError(
                "Unexpected completion payload",
                model=self.model,
                reason="invalid_response",
                http_status=resp.status_code,
                response_snippet=(resp.text or "")[:500],
            ) from e

        usage = data.get("usage") or {}
        return CompletionResult(
            text=text or "",
            model_used=data.get("model") or self.model,
            prompt_tokens=usage.get("prompt_tokens"),
            output_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        )
