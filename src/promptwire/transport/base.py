"""Base transport class and retry policy."""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional, Tuple

import httpx

from .. import __version__
from ..config import OPENAI_API_URL
from ..events import EventBus, NullEventBus
from ..models.operations import Operation
from ..utils import classify_error


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with jitter for rate limited requests."""

    max_retries: int = 3
    interval: float = 0.05
    backoff_factor: float = 2
    randomness: float = 0.5
    retry_statuses: Tuple[int, ...] = (429,)

    def should_retry(self, status_code: int, attempt: int) -> bool:
        return status_code in self.retry_statuses and attempt < self.max_retries

    def delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (zero based)."""
        base = self.interval * (self.backoff_factor ** attempt)
        jitter = random.uniform(-self.randomness, self.randomness)
        return max(0.0, base * (1 + jitter))


class BaseTransport(ABC):
    """Abstract base class for API transports."""

    def __init__(
        self,
        api_key: Optional[str],
        organization_id: Optional[str] = None,
        base_url: str = OPENAI_API_URL,
        timeout: float = 60,
        connect_timeout: float = 10,
        retry_policy: Optional[RetryPolicy] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """Initialize transport with API credentials."""
        self.api_key = api_key
        self.organization_id = organization_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.event_bus = event_bus or NullEventBus()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    @abstractmethod
    async def aclose(self) -> None:
        """Release open connections."""

    @abstractmethod
    async def get(self, path: str) -> httpx.Response:
        """Perform a GET request against the API."""

    @abstractmethod
    async def send(self, operation: Operation) -> httpx.Response:
        """Send an operation and return the complete response."""

    @abstractmethod
    def stream(self, operation: Operation) -> AsyncIterator[str]:
        """Send an operation with streaming enabled and yield text fragments."""

    @abstractmethod
    async def upload(self, content: Any, filename: str, purpose: str = "fine-tune") -> httpx.Response:
        """Upload a file with a multipart request."""

    def get_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout, connect=self.connect_timeout)

    def get_headers(self, json_body: bool = True) -> Dict[str, str]:
        """Get HTTP headers for API requests."""
        headers = {"User-Agent": f"promptwire/{__version__}"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if self.organization_id:
            headers["OpenAI-Organization"] = self.organization_id
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def classify_error(self, error_message: str, status_code: Optional[int] = None) -> str:
        """Classify error message for better log output."""
        return classify_error(error_message, status_code)
