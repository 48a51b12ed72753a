"""Typed response wrappers and response body models."""

import json
import logging
from functools import cached_property
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import EmbeddingCreationError

logger = logging.getLogger(__name__)


class ApiUsage(BaseModel):
    """Token usage statistics."""
    prompt_tokens: int
    completion_tokens: Optional[int] = None
    total_tokens: int


class ChoiceMessage(BaseModel):
    role: str
    content: Optional[str] = None
    function_call: Optional[Dict[str, Any]] = None


class Choice(BaseModel):
    """One candidate output: free text or a message."""
    text: Optional[str] = None
    message: Optional[ChoiceMessage] = None
    index: int
    logprobs: Optional[Dict[str, Any]] = None
    finish_reason: Optional[str] = None

    def to_text(self) -> Optional[str]:
        if self.message is not None and self.message.content is not None:
            return self.message.content
        return self.text

    def __str__(self) -> str:
        return self.to_text() or ""


class ApiResponseBody(BaseModel):
    """Shared body of chat, completion and edit responses."""
    id: Optional[str] = None
    object: str
    created: int
    model: Optional[str] = None
    usage: Optional[ApiUsage] = None
    choices: List[Choice] = Field(default_factory=list)


class Image(BaseModel):
    url: Optional[str] = None
    b64_json: Optional[str] = None
    revised_prompt: Optional[str] = None


class ImageResponseBody(BaseModel):
    created: int
    data: List[Image] = Field(default_factory=list)


class EmbeddingData(BaseModel):
    object: str = "embedding"
    embedding: List[float]
    index: int


class EmbeddingResponseBody(BaseModel):
    object: str
    data: List[EmbeddingData]
    model: str
    usage: ApiUsage


class ApiErrorDetail(BaseModel):
    message: str
    type: Optional[str] = None
    param: Optional[str] = None
    code: Optional[str] = None


class ErrorBody(BaseModel):
    error: ApiErrorDetail


class Embedding(BaseModel):
    """An embedding vector."""

    model_config = ConfigDict(frozen=True)

    embedding: List[float]

    @property
    def vector(self) -> List[float]:
        return self.embedding

    @property
    def length(self) -> int:
        return len(self.embedding)

    def __len__(self) -> int:
        return len(self.embedding)


class FileObject(BaseModel):
    """A file stored with the API."""
    id: str
    object: str = "file"
    bytes: int
    created_at: int
    filename: str
    purpose: str
    status: Optional[str] = None
    status_details: Optional[str] = None


class ModelInfo(BaseModel):
    """A model listed by the API, with locally known capabilities."""
    id: str
    object: str = "model"
    created: int
    owned_by: Optional[str] = None
    chattable: bool = False
    completionable: bool = False
    editable: bool = False
    embeddable: bool = False
    max_tokens: Optional[int] = None

    @property
    def name(self) -> str:
        return self.id


class ApiResponse:
    """Wraps a raw HTTP response; the body is parsed once, on first access."""

    def __init__(self, response: httpx.Response):
        self._response = response

    @property
    def raw(self) -> httpx.Response:
        return self._response

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def success(self) -> bool:
        return self._response.is_success

    def is_success(self) -> bool:
        return self.success

    def json(self) -> Any:
        return self._response.json()

    @cached_property
    def body(self) -> Any:
        raise NotImplementedError("Subclasses must implement this method.")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} status={self.status}>"


class TextApiResponse(ApiResponse):
    @cached_property
    def body(self) -> ApiResponseBody:
        return ApiResponseBody.model_validate(self.json())

    @property
    def usage(self) -> Optional[ApiUsage]:
        return self.body.usage

    @property
    def choices(self) -> List[Choice]:
        return self.body.choices

    @property
    def response(self) -> Optional[Choice]:
        return self.choices[0] if self.choices else None


class ChatResponse(TextApiResponse):
    def __str__(self) -> str:
        return str(self.response) if self.response else ""


class CompletionResponse(TextApiResponse):
    @property
    def responses(self) -> List[Choice]:
        return self.choices


class EditResponse(TextApiResponse):
    @property
    def responses(self) -> List[Choice]:
        return self.choices


class ImageResponse(ApiResponse):
    @cached_property
    def body(self) -> ImageResponseBody:
        return ImageResponseBody.model_validate(self.json())

    @property
    def images(self) -> List[Image]:
        return self.body.data


class EmbeddingResponse(ApiResponse):
    @cached_property
    def body(self):
        if self.status == 200:
            return EmbeddingResponseBody.model_validate(self.json())
        return _parse_error_body(self._response)

    def embedding(self) -> Embedding:
        if self.status != 200:
            raise EmbeddingCreationError(self.body.error.message, status=self.status)
        if not self.body.data:
            raise EmbeddingCreationError("No embedding returned", status=self.status)
        return Embedding(embedding=self.body.data[0].embedding)

    def embeddings(self) -> List[Embedding]:
        if self.status != 200:
            raise EmbeddingCreationError(self.body.error.message, status=self.status)
        return [Embedding(embedding=item.embedding) for item in self.body.data]


class ErrorResponse(ApiResponse):
    """A non-2xx API response."""

    @cached_property
    def body(self) -> ErrorBody:
        return _parse_error_body(self._response)

    @property
    def message(self) -> str:
        return self.body.error.message

    @property
    def error_type(self) -> Optional[str]:
        return self.body.error.type

    @property
    def code(self) -> Optional[str]:
        return self.body.error.code


def _parse_error_body(response: httpx.Response) -> ErrorBody:
    """Parse an error body, falling back to the raw text for non-JSON errors."""
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning(f"Non-JSON error body with status {response.status_code}")
        payload = None

    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        error = dict(payload["error"])
        error["message"] = error.get("message") or ""
        if error.get("code") is not None:
            error["code"] = str(error["code"])
        return ErrorBody.model_validate({"error": error})

    message = response.text or response.reason_phrase or f"HTTP {response.status_code}"
    return ErrorBody(error=ApiErrorDetail(message=message, type="upstream_error"))
