"""Typed models for operations, messages and responses."""

from .messages import ChatMessage, ChatMessageBuilder, ensure_chat_messages
from .operations import (
    OPERATION_CLASSES,
    ChatOperation,
    CompletionOperation,
    EmbeddingOperation,
    ImageEditOperation,
    ImageOperation,
    ImageVariationOperation,
    Operation,
    OperationKind,
    UploadOperation,
    build_operation,
)
from .responses import (
    ApiResponse,
    ApiUsage,
    ChatResponse,
    Choice,
    CompletionResponse,
    EditResponse,
    Embedding,
    EmbeddingResponse,
    ErrorResponse,
    FileObject,
    Image,
    ImageResponse,
    ModelInfo,
    TextApiResponse,
)

__all__ = [
    "ApiResponse",
    "ApiUsage",
    "ChatMessage",
    "ChatMessageBuilder",
    "ChatOperation",
    "ChatResponse",
    "Choice",
    "CompletionOperation",
    "CompletionResponse",
    "EditResponse",
    "Embedding",
    "EmbeddingOperation",
    "EmbeddingResponse",
    "ErrorResponse",
    "FileObject",
    "Image",
    "ImageEditOperation",
    "ImageOperation",
    "ImageResponse",
    "ImageVariationOperation",
    "ModelInfo",
    "OPERATION_CLASSES",
    "Operation",
    "OperationKind",
    "TextApiResponse",
    "UploadOperation",
    "build_operation",
    "ensure_chat_messages",
]
