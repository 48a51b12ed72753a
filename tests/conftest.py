"""
Shared test configuration and fixtures.
"""

import sys
from pathlib import Path
from typing import Callable, List

import httpx
import pytest
from dotenv import load_dotenv

# Add src to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

# Load environment from project root .env file
project_env_file = project_root / ".env"
if project_env_file.exists():
    load_dotenv(project_env_file)

from promptwire.config import Settings  # noqa: E402
from promptwire.transport import OpenAITransport, RetryPolicy  # noqa: E402


def pytest_collection_modifyitems(items):
    """Add integration marker to tests in integration directory."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


class RecordingHandler:
    """MockTransport handler that replays response factories and records requests.

    The last factory is reused once the others are consumed.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response(request)

    @property
    def calls(self) -> int:
        return len(self.requests)


def respond(status_code: int, **kwargs):
    """Factory producing a fresh response for every request."""
    return lambda request: httpx.Response(status_code, **kwargs)


async def chunked(*chunks: bytes):
    """Async byte stream delivering the given chunks one by one."""
    for chunk in chunks:
        yield chunk


@pytest.fixture
def settings():
    """Settings with test credentials."""
    return Settings(
        OPENAI_API_KEY="test-key",
        OPENAI_ORGANIZATION_ID="org-test",
        OPENAI_BASE_URL="https://api.test",
    )


@pytest.fixture
def make_transport() -> Callable[..., OpenAITransport]:
    """Build a transport backed by httpx.MockTransport without retry delays."""

    def factory(handler, **kwargs):
        kwargs.setdefault("retry_policy", RetryPolicy(interval=0, randomness=0))
        return OpenAITransport(
            api_key="test-key",
            organization_id="org-test",
            base_url="https://api.test",
            http_transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return factory
