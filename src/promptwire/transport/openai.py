"""OpenAI HTTP transport implementation."""

import asyncio
import logging
import time
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from ..events import StreamEvent, publish_safely
from ..exceptions import StreamingError, TransportError
from ..models.operations import Operation, UploadOperation
from ..models.responses import ErrorResponse
from ..streaming import StreamDecoder
from ..utils import redact_headers

from .base import BaseTransport

logger = logging.getLogger(__name__)


class OpenAITransport(BaseTransport):
    """Transport for the OpenAI REST API.

    Holds two lazily created connections: one for JSON requests and one
    for multipart uploads. Both are safe to share between concurrent calls.
    """

    def __init__(
        self,
        *args,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        client: Optional[httpx.AsyncClient] = None,
        multipart_client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self._http_transport = http_transport
        self._client = client
        self._multipart_client = multipart_client

    @property
    def client(self) -> httpx.AsyncClient:
        """Connection for JSON requests."""
        if self._client is None:
            self._client = self._create_client(self.get_headers(json_body=True))
        return self._client

    @property
    def multipart_client(self) -> httpx.AsyncClient:
        """Connection for multipart uploads; httpx sets the boundary header."""
        if self._multipart_client is None:
            self._multipart_client = self._create_client(self.get_headers(json_body=False))
        return self._multipart_client

    def _create_client(self, headers: Dict[str, str]) -> httpx.AsyncClient:
        logger.debug(f"Creating connection to {self.base_url} with headers {redact_headers(headers)}")
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.get_timeout(),
            transport=self._http_transport,
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
        )

    async def aclose(self) -> None:
        for client in (self._client, self._multipart_client):
            if client is not None:
                await client.aclose()
        self._client = None
        self._multipart_client = None

    async def get(self, path: str) -> httpx.Response:
        logger.debug(f"GET {path}")
        return await self._request(self.client, "GET", path)

    async def send(self, operation: Operation) -> httpx.Response:
        """Complete a non-streaming request."""
        if isinstance(operation, UploadOperation):
            raise TypeError("Upload operations need file content, use upload()")

        logger.debug(f"POST {operation.path} body={operation.body()}")
        started = time.monotonic()
        response = await self._request(self.client, "POST", operation.path, json=operation.body())

        self._log_timing(operation, response.status_code, started)
        return response

    async def upload(self, content: Any, filename: str, purpose: str = "fine-tune") -> httpx.Response:
        operation = UploadOperation(filename=filename, purpose=purpose)
        logger.debug(f"Uploading {operation.filename} for {operation.purpose}")
        return await self._request(
            self.multipart_client,
            "POST",
            operation.path,
            retry=False,
            data={"purpose": operation.purpose},
            files={"file": (operation.filename, content)},
        )

    async def stream_raw(self, operation: Operation) -> AsyncIterator[str]:
        """Yield raw text chunks of a streaming call as they arrive."""
        body = operation.body()
        body["stream"] = True
        request = self.client.build_request("POST", operation.path, json=body)

        started = time.monotonic()
        response = await self._open_stream(request)
        try:
            async for chunk in response.aiter_text():
                logger.debug(f"Streaming chunk received: {chunk!r}")
                yield chunk
        except httpx.RequestError as e:
            raise self._transport_error(e) from e
        finally:
            await response.aclose()
            self._log_timing(operation, response.status_code, started)

    async def stream(self, operation: Operation) -> AsyncIterator[str]:
        """Yield decoded text fragments of a streaming call."""
        decoder = StreamDecoder()
        publish = getattr(operation, "stream_events", False)
        stream_id = getattr(operation, "stream_id", None)

        chunks = self.stream_raw(operation)
        try:
            async for chunk in chunks:
                frames = decoder.read_frames(chunk)
                for fragment in self._decode(decoder, frames, publish, stream_id):
                    yield fragment
                if decoder.done:
                    break
            else:
                frames = decoder.flush()
                for fragment in self._decode(decoder, frames, publish, stream_id):
                    yield fragment
        finally:
            await chunks.aclose()

    def _log_timing(self, operation: Operation, status_code: int, started: float) -> None:
        if getattr(operation, "instrumentation", False):
            logger.info(
                f"{operation.path} finished with status {status_code} "
                f"in {time.monotonic() - started:.3f}s"
            )

    def _decode(self, decoder: StreamDecoder, frames, publish: bool, stream_id: Optional[str]):
        if publish:
            for frame in frames:
                publish_safely(self.event_bus, StreamEvent(body=frame, stream_id=stream_id))
        return decoder.fragments(frames)

    async def _open_stream(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            try:
                response = await self.client.send(request, stream=True)
            except httpx.RequestError as e:
                raise self._transport_error(e) from e

            if response.is_success:
                logger.debug(f"Streaming HTTP response status: {response.status_code}")
                return response

            if self.retry_policy.should_retry(response.status_code, attempt):
                await response.aclose()
                await self._backoff(request, response.status_code, attempt)
                attempt += 1
                continue

            await response.aread()
            await response.aclose()
            error = ErrorResponse(response)
            logger.error(
                f"Stream to {request.url.path} refused with {response.status_code}: "
                f"{self.classify_error(error.message, response.status_code)}"
            )
            raise StreamingError(error)

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        retry: bool = True,
        **kwargs,
    ) -> httpx.Response:
        attempt = 0
        while True:
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.RequestError as e:
                raise self._transport_error(e) from e

            logger.debug(f"HTTP response received: {response.status_code}")
            if not (retry and self.retry_policy.should_retry(response.status_code, attempt)):
                if not response.is_success:
                    logger.debug(f"{method} {path} failed with {response.status_code}: {response.text}")
                return response

            await self._backoff(response.request, response.status_code, attempt)
            attempt += 1

    async def _backoff(self, request: httpx.Request, status_code: int, attempt: int) -> None:
        delay = self.retry_policy.delay(attempt)
        logger.warning(
            f"{request.method} {request.url.path} returned {status_code}, "
            f"retry {attempt + 1}/{self.retry_policy.max_retries} in {delay:.3f}s"
        )
        await asyncio.sleep(delay)

    def _transport_error(self, error: httpx.RequestError) -> TransportError:
        try:
            url = str(error.request.url)
        except RuntimeError:
            url = None
        message = f"{type(error).__name__}: {error}"
        logger.error(f"Transport failure for {url}: {error!r}")
        return TransportError(message, url=url)
