"""LLMCallPort - LLM invocation interface.

Used by the language-model classifier stage only.
Day-1 implementation: Fake returning fixed JSON (tests).
Real implementation: LiteLLM (LiteLLMGatewayAdapter).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class LLMResponse:
    """Response from LLM invocation."""

    text: str
    tokens_used: dict[str, int] = field(default_factory=dict)  # {input, output}
    model_id: str = ""
    finish_reason: str = "stop"  # "stop" | "length" | "error"


class LLMCallPort(ABC):
    """Port: LLM invocation operations."""

    @abstractmethod
    async def call(
        self,
        prompt: str,
        model_id: str,
        parameters: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Invoke an LLM with a prompt.

        Args:
            prompt: User prompt text.
            model_id: Target model identifier ("" = adapter default).
            parameters: Optional model parameters (temperature, max_tokens,
                system_prompt, response_format).

        Returns:
            LLMResponse with generated text and metadata.
        """
