from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from screenguess.content import registry as registry_module  # noqa: E402
from screenguess.services import cache as cache_module  # noqa: E402


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instead of waiting."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_singletons() -> None:
    original_cache = cache_module._cache
    original_registry = registry_module._registry
    cache_module._cache = None
    registry_module._registry = None
    try:
        yield
    finally:
        cache_module._cache = original_cache
        registry_module._registry = original_registry
