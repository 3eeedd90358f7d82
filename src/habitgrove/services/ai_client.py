"""Thin httpx client for an OpenAI-compatible chat-completions gateway."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from ..errors import CollaboratorUnavailable
from ..logging_config import get_logger

logger = get_logger("ai_client")


class ChatCompletionsClient:
    """Posts chat requests and returns the first choice's text content."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        model: str,
        timeout: float = 8.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.model = model
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def complete(self, messages: list[dict[str, str]], *, max_tokens: int) -> str:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        try:
            response = self._client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise CollaboratorUnavailable("AI gateway timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise CollaboratorUnavailable(
                f"AI gateway returned HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise CollaboratorUnavailable(f"AI gateway request failed: {exc}") from exc

        try:
            return str(data["choices"][0]["message"]["content"] or "")
        except (KeyError, IndexError, TypeError) as exc:
            raise CollaboratorUnavailable("AI gateway response had no message content") from exc

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ChatCompletionsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["ChatCompletionsClient"]
