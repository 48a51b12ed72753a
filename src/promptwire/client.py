"""High level client for the OpenAI API."""

import logging
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence, Union

import httpx

from .config import ModelCatalog, Settings, get_settings
from .events import EventBus
from .exceptions import ApiError, TokenLimitExceeded, UnexpectedField
from .models.messages import ChatMessage, ensure_chat_messages
from .models.operations import ChatOperation, Operation, OperationKind, build_operation
from .models.responses import (
    ChatResponse,
    CompletionResponse,
    Embedding,
    EmbeddingResponse,
    ErrorResponse,
    FileObject,
    ImageResponse,
    ModelInfo,
)
from .tokenizer import Tokenizer
from .transport.base import BaseTransport, RetryPolicy
from .transport.openai import OpenAITransport

logger = logging.getLogger(__name__)

ModelRef = Union[str, ModelInfo]


class OpenAIClient:
    """Builds operations, sends them and wraps the results.

    Remote failures of operations come back as :class:`ErrorResponse` values,
    except for :meth:`embedding` which raises :class:`EmbeddingCreationError`.
    Catalogue calls raise :class:`ApiError` instead.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[BaseTransport] = None,
        tokenizer: Optional[Tokenizer] = None,
        catalog: Optional[ModelCatalog] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport or OpenAITransport(
            api_key=self.settings.api_key,
            organization_id=self.settings.organization_id,
            base_url=self.settings.base_url,
            timeout=self.settings.request_timeout,
            connect_timeout=self.settings.connect_timeout,
            retry_policy=RetryPolicy(max_retries=self.settings.max_retries),
            event_bus=event_bus,
        )
        if transport is not None and event_bus is not None:
            self.transport.event_bus = event_bus
        self.tokenizer = tokenizer
        self.catalog = catalog or ModelCatalog()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    # Catalogue

    async def models(self) -> List[ModelInfo]:
        """Return the available models from the API."""
        response = await self.transport.get("/v1/models")
        _raise_for_error(response)
        return [self._model_info(model) for model in response.json().get("data", [])]

    async def files(self) -> List[FileObject]:
        response = await self.transport.get("/v1/files")
        _raise_for_error(response)
        return [FileObject.model_validate(item) for item in response.json().get("data", [])]

    async def get_file(self, file_id: str) -> FileObject:
        response = await self.transport.get(f"/v1/files/{file_id}")
        _raise_for_error(response)
        return FileObject.model_validate(response.json())

    async def get_file_content(self, file_id: str) -> bytes:
        response = await self.transport.get(f"/v1/files/{file_id}/content")
        _raise_for_error(response)
        return response.content

    async def upload(
        self, content: Any, filename: str, purpose: str = "fine-tune"
    ) -> Union[FileObject, ErrorResponse]:
        """Upload a file; failures come back as an ErrorResponse."""
        response = await self.transport.upload(content, filename, purpose)
        if response.is_success:
            return FileObject.model_validate(response.json())
        error = ErrorResponse(response)
        logger.error(f"Upload of {filename} failed with {error.status}: {error.message}")
        return error

    # Operations

    def build(self, kind: Union[OperationKind, str], options: Mapping[str, Any]) -> Operation:
        return build_operation(kind, options)

    async def call(self, kind: Union[OperationKind, str], options: Mapping[str, Any]):
        """Build and send an operation, returning the raw HTTP response."""
        return await self.transport.send(self.build(kind, options))

    async def chat(
        self, model: ModelRef, messages: Sequence[Any], **options
    ) -> Union[ChatResponse, ErrorResponse]:
        """Create a chat completion.

        Args:
            model: Model name or a model from :meth:`models`
            messages: ChatMessage values or role/content mappings
            **options: Any other chat field, e.g. ``temperature`` or ``max_tokens``

        Raises:
            TokenLimitExceeded: the conversation does not fit the model
            UnexpectedField: ``stream=True`` was passed, use :meth:`stream_chat`
        """
        operation = self._chat_operation(model, messages, options)
        _reject_streaming(operation)
        response = await self.transport.send(operation)
        if not response.is_success:
            return ErrorResponse(response)
        return ChatResponse(response)

    async def stream_chat(self, model: ModelRef, messages: Sequence[Any], **options) -> AsyncIterator[str]:
        """Stream a chat completion as text fragments."""
        operation = self._chat_operation(model, messages, {**options, "stream": True})
        async for fragment in self.transport.stream(operation):
            yield fragment

    async def completion(
        self, model: ModelRef, prompt: Any, **options
    ) -> Union[CompletionResponse, ErrorResponse]:
        operation = build_operation(OperationKind.COMPLETION, {**options, "model": _name(model), "prompt": prompt})
        _reject_streaming(operation)
        response = await self.transport.send(operation)
        if not response.is_success:
            return ErrorResponse(response)
        return CompletionResponse(response)

    async def stream_completion(self, model: ModelRef, prompt: Any, **options) -> AsyncIterator[str]:
        operation = build_operation(
            OperationKind.COMPLETION,
            {**options, "model": _name(model), "prompt": prompt, "stream": True},
        )
        async for fragment in self.transport.stream(operation):
            yield fragment

    async def embed(self, model: ModelRef, input: Any, **options) -> EmbeddingResponse:
        operation = build_operation(OperationKind.EMBEDDING, {**options, "model": _name(model), "input": input})
        return EmbeddingResponse(await self.transport.send(operation))

    async def embedding(self, model: ModelRef, input: Any, **options) -> Embedding:
        """Return the embedding vector of the input.

        Raises:
            EmbeddingCreationError: the API refused the request
        """
        response = await self.embed(model, input, **options)
        return response.embedding()

    async def image(self, prompt: str, **options) -> Union[ImageResponse, ErrorResponse]:
        return await self._image(OperationKind.IMAGE, {**options, "prompt": prompt})

    async def image_edit(self, image: str, prompt: str, **options) -> Union[ImageResponse, ErrorResponse]:
        return await self._image(OperationKind.IMAGE_EDIT, {**options, "image": image, "prompt": prompt})

    async def image_variation(self, image: str, **options) -> Union[ImageResponse, ErrorResponse]:
        return await self._image(OperationKind.IMAGE_VARIATION, {**options, "image": image})

    async def _image(self, kind: OperationKind, options: Dict[str, Any]) -> Union[ImageResponse, ErrorResponse]:
        response = await self.transport.send(build_operation(kind, options))
        if not response.is_success:
            return ErrorResponse(response)
        return ImageResponse(response)

    def _chat_operation(self, model: ModelRef, messages: Sequence[Any], options: Dict[str, Any]) -> ChatOperation:
        model_name = _name(model)
        chat_messages = ensure_chat_messages(messages)
        self.check_token_limit(model_name, chat_messages)
        return build_operation(
            OperationKind.CHAT,
            {**options, "model": model_name, "messages": chat_messages},
        )

    def check_token_limit(self, model_name: str, messages: Sequence[ChatMessage]) -> int:
        """Count conversation tokens and enforce the model's budget."""
        if self.tokenizer is None:
            logger.debug(f"No tokenizer configured, skipping token check for {model_name}")
            return 0

        token_count = self.tokenizer.count_tokens("\n".join(message.text() for message in messages))
        max_tokens = self.catalog.max_tokens(model_name)
        if token_count > max_tokens:
            raise TokenLimitExceeded(model_name, token_count, max_tokens)
        return token_count

    def _model_info(self, data: Dict[str, Any]) -> ModelInfo:
        name = data["id"]
        return ModelInfo.model_validate({
            **data,
            "chattable": self.catalog.chattable(name),
            "completionable": self.catalog.completionable(name),
            "editable": self.catalog.editable(name),
            "embeddable": self.catalog.embeddable(name),
            "max_tokens": self.catalog.max_tokens(name),
        })


def _name(model: ModelRef) -> str:
    return model.name if isinstance(model, ModelInfo) else model


def _raise_for_error(response: httpx.Response) -> None:
    if not response.is_success:
        error = ErrorResponse(response)
        logger.error(f"{response.request.url.path} failed with {error.status}: {error.message}")
        raise ApiError(error)


def _reject_streaming(operation: Operation) -> None:
    if operation.streaming:
        # SSE bodies cannot be parsed as a single response
        raise UnexpectedField("stream")
