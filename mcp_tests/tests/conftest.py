import pytest

from core.errors import StorageError
from storage.memory_store import MemoryStore


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool registration."""

    def __init__(self) -> None:
        self.tools = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator


class FailingStore(MemoryStore):
    """KeyValueStore whose writes always fail."""

    def set(self, key: str, value: str) -> None:
        raise StorageError("disk full")

    def remove(self, key: str) -> None:
        raise StorageError("disk full")


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def failing_store():
    return FailingStore()
