"""Port schema assertion tests.

Verifies Port interfaces maintain expected method signatures and that
every adapter (real or fake) satisfies them.
"""

from __future__ import annotations

import inspect

import pytest

from sportiq.infra.cache.memory import InMemoryStorageAdapter
from sportiq.infra.cache.redis import RedisStorageAdapter
from sportiq.ports.llm_call_port import LLMCallPort
from sportiq.ports.storage_port import StoragePort
from sportiq.tool.llm.gateway_adapter import LiteLLMGatewayAdapter
from tests.fakes import BrokenStorage, FakeLLM


@pytest.mark.unit
class TestLLMCallPortContract:
    """LLMCallPort must expose required methods."""

    def test_has_call(self) -> None:
        assert hasattr(LLMCallPort, "call")
        sig = inspect.signature(LLMCallPort.call)
        params = list(sig.parameters.keys())
        assert "prompt" in params
        assert "model_id" in params
        assert "parameters" in params

    def test_call_is_async(self) -> None:
        assert inspect.iscoroutinefunction(LLMCallPort.call)

    @pytest.mark.parametrize("impl", [LiteLLMGatewayAdapter, FakeLLM])
    def test_implementations(self, impl: type) -> None:
        assert issubclass(impl, LLMCallPort)


@pytest.mark.unit
class TestStoragePortContract:
    """StoragePort must expose required methods."""

    def test_has_put(self) -> None:
        assert hasattr(StoragePort, "put")
        sig = inspect.signature(StoragePort.put)
        params = list(sig.parameters.keys())
        assert "key" in params
        assert "value" in params
        assert "ttl" in params

    def test_has_get(self) -> None:
        assert hasattr(StoragePort, "get")

    def test_has_delete(self) -> None:
        assert hasattr(StoragePort, "delete")

    def test_has_list_keys(self) -> None:
        assert hasattr(StoragePort, "list_keys")

    @pytest.mark.parametrize(
        "impl", [InMemoryStorageAdapter, RedisStorageAdapter, BrokenStorage]
    )
    def test_implementations(self, impl: type) -> None:
        assert issubclass(impl, StoragePort)
        assert not inspect.isabstract(impl)
