from typing import TYPE_CHECKING, ClassVar

from po_processor.structuring.base import BaseStructurer
from po_processor.structuring.example_client_adapter import ExampleClientAdapter
from po_processor.structuring.llm_structurer import LLMStructurer
from po_processor.structuring.openai_client_adapter import OpenAIClientAdapter

if TYPE_CHECKING:
    from po_processor.config.settings import Settings


class StructurerFactory:
    """Creates the model-backed structurer for the configured provider."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: "Settings") -> BaseStructurer:
        provider = settings.structuring_provider.lower()
        if provider == "example":
            return LLMStructurer(client=ExampleClientAdapter(), model="example", temperature=0.0)
        base_url = cls._resolve_base_url(provider, settings)
        if provider in ("openai", "openai_compatible") and not settings.structuring_api_key:
            raise ValueError(f"structuring_api_key is required for structuring_provider={provider}")
        if not settings.structuring_model_name:
            raise ValueError("structuring_model_name must be set")
        client = OpenAIClientAdapter(
            api_key=settings.structuring_api_key or "unused",
            timeout_seconds=settings.structuring_timeout_seconds,
            base_url=base_url,
        )
        return LLMStructurer(
            client=client,
            model=settings.structuring_model_name,
            temperature=settings.structuring_temperature,
            max_tokens=settings.structuring_max_tokens,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: "Settings") -> str | None:
        override = (settings.structuring_base_url or "").strip()
        if provider == "openai":
            return override or None
        if provider == "openai_compatible":
            if not override:
                raise ValueError(
                    "structuring_base_url is required for "
                    "structuring_provider=openai_compatible"
                )
            return override
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return override or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown structuring provider '{provider}'. Choose from: {supported}"
        )
