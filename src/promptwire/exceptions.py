"""Exception hierarchy for promptwire."""

from typing import Any, Optional


class PromptwireError(Exception):
    """Base class for all library errors."""


# Validation errors: raised locally, before anything is sent.

class OperationValidationError(PromptwireError):
    """An operation could not be built from the given options."""


class UnknownOperationKind(OperationValidationError):
    def __init__(self, kind: Any):
        self.kind = kind
        super().__init__(f"Invalid operation: {kind!r}")


class MissingRequiredField(OperationValidationError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required field: {field}")


class TypeMismatch(OperationValidationError):
    def __init__(self, field: str, expected: str):
        self.field = field
        self.expected = expected
        super().__init__(f"Field {field!r} has the wrong type: {expected}")


class UnexpectedField(OperationValidationError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Field {field!r} is not accepted by this operation")


class MessagesError(OperationValidationError):
    """Chat messages input could not be turned into a conversation."""


class InsufficientMessagesError(MessagesError):
    def __init__(self, count: int):
        self.count = count
        super().__init__(f"At least 2 messages are required, got {count}")


class MalformedMessagesError(MessagesError):
    pass


class TokenLimitExceeded(PromptwireError):
    def __init__(self, model_name: str, token_count: int, max_tokens: int):
        self.model_name = model_name
        self.token_count = token_count
        self.max_tokens = max_tokens
        super().__init__(
            f"Token limit for model {model_name} exceeded: "
            f"{token_count} is more than {max_tokens}"
        )


# Transport and remote errors.

class TransportError(PromptwireError):
    """Connection level failure (DNS, TCP, TLS, timeout)."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.message = message
        self.url = url
        super().__init__(message)


class ApiError(PromptwireError):
    """The API answered with a non-2xx status; carries the ErrorResponse."""

    def __init__(self, response: Any):
        self.response = response
        self.status = response.status
        self.message = response.message
        super().__init__(f"[{self.status}] {self.message}")


class StreamingError(ApiError):
    """The API refused to open a stream."""


class EmbeddingCreationError(PromptwireError):
    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)
