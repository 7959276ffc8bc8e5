import pytest

from core.context import ToolContext
from fakes import FakeAPIClient, FakeConfigProvider


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool registration."""

    def __init__(self) -> None:
        self.tools = {}
        self.descriptions = {}

    def tool(self, *, name: str, description: str = None):
        def _decorator(fn):
            self.tools[name] = fn
            self.descriptions[name] = description
            return fn
        return _decorator


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def make_context():
    """Build (ToolContext, FakeAPIClient) from a route table."""
    def _make(routes=None):
        client = FakeAPIClient(routes)
        return ToolContext(config_provider=FakeConfigProvider(), client=client), client
    return _make
