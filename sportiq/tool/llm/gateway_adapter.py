"""LLMCallPort real implementation via LiteLLM.

- OpenAI, Anthropic, DeepSeek and OpenAI-compatible endpoints through one
  interface
- JSON response mode and system prompt passed through ``parameters``
- Provider failures surface as PortUnavailableError
"""

from __future__ import annotations

import logging
import os
from collections.abc import Awaitable, Callable
from typing import Any

import litellm

from sportiq.ports.llm_call_port import LLMCallPort, LLMResponse
from sportiq.shared.errors import PortUnavailableError

logger = logging.getLogger(__name__)

AcompletionFn = Callable[..., Awaitable[Any]]


class LiteLLMGatewayAdapter(LLMCallPort):
    """LiteLLM-backed implementation of LLMCallPort.

    ``acompletion_fn`` defaults to ``litellm.acompletion`` and is injectable
    so tests never reach the network.
    """

    def __init__(
        self,
        *,
        default_model: str = "",
        timeout_s: float = 30,
        max_retries: int = 2,
        api_key: str | None = None,
        base_url: str | None = None,
        acompletion_fn: AcompletionFn | None = None,
    ) -> None:
        self._default_model = default_model or os.environ.get("LLM_MODEL", "gpt-4o-mini")
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._api_key = api_key
        self._base_url = base_url
        self._acompletion = acompletion_fn or litellm.acompletion

        litellm.drop_params = True

    def _resolve_model(self, model_id: str) -> str:
        model = model_id or self._default_model
        # OpenAI-compatible endpoints need an explicit provider prefix
        if self._base_url and "/" not in model:
            return f"openai/{model}"
        return model

    async def call(
        self,
        prompt: str,
        model_id: str,
        parameters: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Invoke LLM via LiteLLM."""
        model = self._resolve_model(model_id)
        params = parameters or {}

        messages = self._build_messages(prompt, params.get("system_prompt"))

        optional_params: dict[str, Any] = {}
        if self._api_key:
            optional_params["api_key"] = self._api_key
        if self._base_url:
            optional_params["api_base"] = self._base_url
        if params.get("response_format"):
            optional_params["response_format"] = params["response_format"]

        try:
            response = await self._acompletion(
                model=model,
                messages=messages,
                timeout=self._timeout_s,
                num_retries=self._max_retries,
                temperature=params.get("temperature", 0.7),
                max_tokens=params.get("max_tokens"),
                **optional_params,
            )
        except Exception as exc:
            logger.warning("LLM call failed for model=%s: %s", model, type(exc).__name__)
            raise PortUnavailableError("LLMCallPort", f"LLM call failed: {exc}") from exc

        text = response.choices[0].message.content or ""
        usage = response.usage
        tokens_used = {
            "input": usage.prompt_tokens if usage else 0,
            "output": usage.completion_tokens if usage else 0,
        }
        finish_reason = response.choices[0].finish_reason or "stop"

        return LLMResponse(
            text=text,
            tokens_used=tokens_used,
            model_id=response.model or model,
            finish_reason=finish_reason,
        )

    @staticmethod
    def _build_messages(prompt: str, system_prompt: str | None) -> list[dict[str, Any]]:
        """Build LiteLLM chat messages."""
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages
