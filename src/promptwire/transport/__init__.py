"""HTTP transports for the API."""

from .base import BaseTransport, RetryPolicy
from .openai import OpenAITransport

__all__ = ["BaseTransport", "OpenAITransport", "RetryPolicy"]
