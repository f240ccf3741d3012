"""Shared Fake adapters for testing without unittest.mock.

All Fake implementations follow the Port DI adapter pattern:
real Python classes with preset return values, no AsyncMock/MagicMock.
"""

from tests.fakes.llm import FakeLLM
from tests.fakes.storage import BrokenStorage, ManualClock

__all__ = [
    "BrokenStorage",
    "FakeLLM",
    "ManualClock",
]
