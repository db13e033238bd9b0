from abc import ABC, abstractmethod

from po_processor.structuring.models import ChatCompletion


class BaseStructuringClient(ABC):
    """Contract for provider-specific chat clients used by LLMStructurer."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> ChatCompletion:
        """Return the provider response text and token usage."""
