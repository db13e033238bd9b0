from typing import Any

import httpx
import openai

from po_processor.structuring.client_base import BaseStructuringClient
from po_processor.structuring.exceptions import StructuringError, StructuringNetworkError
from po_processor.structuring.models import ChatCompletion, TokenUsage


class OpenAIClientAdapter(BaseStructuringClient):
    """Structuring client built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> ChatCompletion:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise StructuringNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise StructuringNetworkError(f"AI provider API error: {exc}") from exc

        usage = _token_usage(getattr(response, "usage", None))
        if not response.choices:
            raise StructuringError("AI returned no choices", token_usage=usage)
        content = response.choices[0].message.content
        return ChatCompletion(content=content or "", token_usage=usage)


def _token_usage(usage: Any) -> TokenUsage | None:
    if usage is None:
        return None
    return TokenUsage(
        prompt_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
        completion_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
        total_tokens=int(getattr(usage, "total_tokens", 0) or 0),
    )
