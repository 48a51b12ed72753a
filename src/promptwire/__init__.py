"""promptwire: typed async client for the OpenAI HTTP API."""

__version__ = "0.1.0"

from .client import OpenAIClient
from .config import ModelCatalog, Settings, get_settings
from .events import CollectingEventBus, EventBus, NullEventBus, StreamEvent
from .exceptions import (
    ApiError,
    EmbeddingCreationError,
    InsufficientMessagesError,
    MalformedMessagesError,
    MissingRequiredField,
    OperationValidationError,
    PromptwireError,
    StreamingError,
    TokenLimitExceeded,
    TransportError,
    TypeMismatch,
    UnexpectedField,
    UnknownOperationKind,
)
from .models import (
    ChatMessage,
    ChatResponse,
    Choice,
    CompletionResponse,
    Embedding,
    EmbeddingResponse,
    ErrorResponse,
    ImageResponse,
    OperationKind,
    build_operation,
)
from .streaming import StreamDecoder
from .transport import OpenAITransport, RetryPolicy

__all__ = [
    "ApiError",
    "ChatMessage",
    "ChatResponse",
    "Choice",
    "CollectingEventBus",
    "CompletionResponse",
    "Embedding",
    "EmbeddingCreationError",
    "EmbeddingResponse",
    "ErrorResponse",
    "EventBus",
    "ImageResponse",
    "InsufficientMessagesError",
    "MalformedMessagesError",
    "MissingRequiredField",
    "ModelCatalog",
    "NullEventBus",
    "OpenAIClient",
    "OpenAITransport",
    "OperationKind",
    "OperationValidationError",
    "PromptwireError",
    "RetryPolicy",
    "Settings",
    "StreamDecoder",
    "StreamEvent",
    "StreamingError",
    "TokenLimitExceeded",
    "TransportError",
    "TypeMismatch",
    "UnexpectedField",
    "UnknownOperationKind",
    "build_operation",
    "get_settings",
    "__version__",
]
