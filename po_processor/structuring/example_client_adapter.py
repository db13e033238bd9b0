"""Example structuring client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseStructuringClient and register the provider in StructurerFactory.
"""

import json
from typing import ClassVar

from po_processor.structuring.client_base import BaseStructuringClient
from po_processor.structuring.models import ChatCompletion, TokenUsage


class ExampleClientAdapter(BaseStructuringClient):
    """Example adapter that returns a fixed, valid purchase-order record.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "header": {
            "poNumber": "1000001",
            "orderDate": "2025-01-15",
            "buyerInfo": {
                "firstName": "Example",
                "lastName": "Buyer",
                "email": "buyer@example.com",
            },
            "syscoLocation": {"name": "Example Distribution Center"},
            "deliveryInfo": {"date": "2025-01-22", "instructions": "Dock 4"},
        },
        "products": [
            {
                "supc": "1234567",
                "description": "Example product",
                "quantity": 2,
                "fobCost": 10.5,
                "total": 21.0,
            }
        ],
        "weights": {"grossWeight": 20.0, "netWeight": 18.0},
        "totalCost": 21.0,
    }

    def __init__(self, response: dict[str, object] | None = None) -> None:
        self._response = response if response is not None else self.DEFAULT_RESPONSE

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> ChatCompletion:
        _ = model, temperature, max_tokens, system_prompt
        content = json.dumps(self._response)
        return ChatCompletion(
            content=content,
            token_usage=TokenUsage(
                prompt_tokens=len(user_prompt.split()),
                completion_tokens=len(content.split()),
                total_tokens=len(user_prompt.split()) + len(content.split()),
            ),
        )
