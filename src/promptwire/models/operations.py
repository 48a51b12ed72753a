"""Operation models: validated, wire-ready descriptions of API calls."""

from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import (
    MissingRequiredField,
    OperationValidationError,
    TypeMismatch,
    UnexpectedField,
    UnknownOperationKind,
)
from ..utils import generate_stream_id
from .messages import ChatMessage, ensure_chat_messages

StringOrArray = Union[str, List[str], List[int], List[List[int]]]
StringOrObject = Union[str, Dict[str, Any]]


class OperationKind(str, Enum):
    CHAT = "chat"
    COMPLETION = "completion"
    EMBEDDING = "embedding"
    IMAGE = "image"
    IMAGE_EDIT = "image_edit"
    IMAGE_VARIATION = "image_variation"
    UPLOAD = "upload"


class Operation(BaseModel):
    """Base class for all operations.

    ``path`` is the fixed endpoint of the variant and never part of the body.
    Fields listed in ``excluded_keys`` only steer the transport.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    kind: ClassVar[OperationKind]
    path: ClassVar[str]
    excluded_keys: ClassVar[FrozenSet[str]] = frozenset()

    def body(self) -> Dict[str, Any]:
        return self.model_dump(exclude=set(self.excluded_keys), exclude_none=True)

    @property
    def streaming(self) -> bool:
        return bool(getattr(self, "stream", False))

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "Operation":
        try:
            return cls(**dict(options))
        except ValidationError as e:
            raise _translate_validation_error(e) from e


class ChatOperation(Operation):
    """Chat completion over an ordered conversation."""

    kind: ClassVar[OperationKind] = OperationKind.CHAT
    path: ClassVar[str] = "/v1/chat/completions"
    excluded_keys: ClassVar[FrozenSet[str]] = frozenset({"instrumentation", "stream_events", "stream_id"})

    model: str
    messages: List[ChatMessage]
    functions: Optional[List[Dict[str, Any]]] = None
    function_call: Optional[StringOrObject] = None
    temperature: float = 1.0
    top_p: float = 1.0
    n: int = 1
    stream: bool = False
    stop: Optional[Union[str, List[str]]] = None
    max_tokens: Optional[int] = None
    presence_penalty: float = 0
    frequency_penalty: float = 0
    user: Optional[str] = None

    instrumentation: bool = False
    stream_events: bool = False
    stream_id: str = Field(default_factory=generate_stream_id)

    @field_validator("messages", mode="before")
    @classmethod
    def _build_messages(cls, value: Any) -> List[ChatMessage]:
        return ensure_chat_messages(value)


class CompletionOperation(Operation):
    """Text completion for a prompt."""

    kind: ClassVar[OperationKind] = OperationKind.COMPLETION
    path: ClassVar[str] = "/v1/completions"

    model: str
    prompt: StringOrArray
    suffix: Optional[str] = None
    max_tokens: int = 16
    temperature: float = 1.0
    top_p: float = 1.0
    n: int = 1
    stream: bool = False
    logprobs: Optional[int] = None
    echo: bool = False
    stop: Optional[Union[str, List[str]]] = None
    presence_penalty: float = 0
    frequency_penalty: float = 0
    best_of: int = 1
    user: Optional[str] = None


class EmbeddingOperation(Operation):
    """Vector representation of the input."""

    kind: ClassVar[OperationKind] = OperationKind.EMBEDDING
    path: ClassVar[str] = "/v1/embeddings"

    model: str
    input: StringOrArray
    user: Optional[str] = None


class ImageOperation(Operation):
    kind: ClassVar[OperationKind] = OperationKind.IMAGE
    path: ClassVar[str] = "/v1/images/generations"

    prompt: str
    n: int = 1
    size: str = "1024x1024"
    response_format: str = "url"
    user: Optional[str] = None


class ImageEditOperation(Operation):
    kind: ClassVar[OperationKind] = OperationKind.IMAGE_EDIT
    path: ClassVar[str] = "/v1/images/edits"

    image: str
    mask: Optional[str] = None
    prompt: str
    n: int = 1
    size: str = "1024x1024"
    response_format: str = "url"
    user: Optional[str] = None


class ImageVariationOperation(Operation):
    kind: ClassVar[OperationKind] = OperationKind.IMAGE_VARIATION
    path: ClassVar[str] = "/v1/images/variations"

    image: str
    n: int = 1
    size: str = "1024x1024"
    response_format: str = "url"
    user: Optional[str] = None


class UploadOperation(Operation):
    """Multipart file upload; the body holds the form fields."""

    kind: ClassVar[OperationKind] = OperationKind.UPLOAD
    path: ClassVar[str] = "/v1/files"

    filename: str
    purpose: str = "fine-tune"


OPERATION_CLASSES: Dict[OperationKind, Type[Operation]] = {
    OperationKind.CHAT: ChatOperation,
    OperationKind.COMPLETION: CompletionOperation,
    OperationKind.EMBEDDING: EmbeddingOperation,
    OperationKind.IMAGE: ImageOperation,
    OperationKind.IMAGE_EDIT: ImageEditOperation,
    OperationKind.IMAGE_VARIATION: ImageVariationOperation,
    OperationKind.UPLOAD: UploadOperation,
}


def build_operation(kind: Union[OperationKind, str], options: Mapping[str, Any]) -> Operation:
    """Build a validated operation of the given kind from loose options."""
    try:
        operation_kind = OperationKind(kind)
    except (ValueError, TypeError):
        raise UnknownOperationKind(kind) from None
    return OPERATION_CLASSES[operation_kind].from_options(options)


def _translate_validation_error(error: ValidationError) -> OperationValidationError:
    """Map the first pydantic error onto the library's validation errors."""
    details = error.errors()[0]
    field = ".".join(str(part) for part in details["loc"][:1]) or "<root>"
    error_type = details["type"]

    if error_type == "missing":
        return MissingRequiredField(field)
    if error_type == "extra_forbidden":
        return UnexpectedField(field)
    return TypeMismatch(field, details["msg"])
