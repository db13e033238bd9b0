"""Model-backed structuring of purchase-order text."""

import json
import re
from pathlib import Path

from po_processor.logging.logger import Log
from po_processor.structuring.base import BaseStructurer
from po_processor.structuring.client_base import BaseStructuringClient
from po_processor.structuring.exceptions import StructuringError
from po_processor.structuring.models import StructuringResult, TokenUsage
from po_processor.structuring.prompt_loader import (
    load_json_schema,
    load_prompt_template,
    load_system_prompt,
)

_INLINE_WHITESPACE_RE = re.compile(r"[ \t\f\v]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


class LLMStructurer(BaseStructurer):
    """Structures purchase-order text into a candidate record via a chat model.

    Makes exactly one model call per ``structure`` call; retrying is left to
    the caller.
    """

    def __init__(
        self,
        *,
        client: BaseStructuringClient,
        model: str,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(1.0, temperature))
        self._max_tokens = max_tokens
        self._prompt_template = load_prompt_template(prompt_template_path)
        self._json_schema = load_json_schema(json_schema_path)
        self._system_prompt = load_system_prompt(system_prompt_path)

    def structure(self, text: str) -> StructuringResult:
        prompt = self._build_prompt(text)
        Log.debug(f"Structuring prompt:\n{prompt}")

        completion = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
        )
        Log.debug(f"AI raw response:\n{completion.content}")

        candidate = self._parse_json(completion.content, completion.token_usage)
        if completion.token_usage is not None:
            Log.info(f"Structuring used {completion.token_usage.total_tokens} tokens")
        return StructuringResult(
            candidate=candidate,
            token_usage=completion.token_usage,
            raw_response=completion.content,
        )

    def _build_prompt(self, text: str) -> str:
        return self._prompt_template.format(
            document_text=self._preprocess(text),
            json_schema=self._json_schema,
        )

    @staticmethod
    def _preprocess(text: str) -> str:
        cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
        cleaned = "\n".join(
            _INLINE_WHITESPACE_RE.sub(" ", line).strip() for line in cleaned.split("\n")
        )
        return _BLANK_LINES_RE.sub("\n\n", cleaned).strip()

    @staticmethod
    def _parse_json(raw: str, usage: TokenUsage | None) -> dict[str, object]:
        cleaned = raw.strip()
        if not cleaned:
            raise StructuringError("AI returned empty response", response=raw, token_usage=usage)
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise StructuringError(
                f"Invalid JSON response: {exc}", response=raw, token_usage=usage
            ) from exc

        if not isinstance(parsed, dict):
            raise StructuringError(
                "JSON response must be an object", response=raw, token_usage=usage
            )
        return parsed
