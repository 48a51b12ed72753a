"""Utility functions for promptwire."""

import logging
import sys
import uuid
from typing import Any, Dict


def setup_logging(log_level: str = "INFO") -> None:
    """Setup library logging for scripts and host applications."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def generate_stream_id() -> str:
    """Generate a unique stream correlation ID."""
    return uuid.uuid4().hex


def redact_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of headers that is safe to log."""
    redacted = dict(headers)
    for key in list(redacted):
        if key.lower() == "authorization":
            redacted[key] = "Bearer ***"
    return redacted


def classify_error(error_message: str, status_code: int = None) -> str:
    """Classify and format error messages."""
    error_lower = error_message.lower()

    if status_code == 401:
        return "Invalid API key. Please check your credentials."
    elif status_code == 429:
        return "Rate limit exceeded. Please try again later."
    elif status_code == 400:
        return "Bad request. Please check your input parameters."
    elif status_code is not None and status_code >= 500:
        return "Internal server error. Please try again later."
    elif "timeout" in error_lower:
        return "Request timeout. Please try again."
    elif "connection" in error_lower:
        return "Connection error. Please check your network."
    else:
        return f"API Error: {error_message}"
