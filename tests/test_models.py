"""Tests for message and response models."""

import httpx
import pytest
from pydantic import ValidationError

from promptwire.exceptions import EmbeddingCreationError, InsufficientMessagesError, MalformedMessagesError
from promptwire.models.messages import ChatMessage, ChatMessageBuilder, ensure_chat_messages
from promptwire.models.responses import (
    ChatResponse,
    Choice,
    CompletionResponse,
    EmbeddingResponse,
    ErrorResponse,
    ImageResponse,
)


@pytest.fixture
def chat_body():
    """Sample chat completion body."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1690000000,
        "model": "gpt-3.5-turbo",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": "Hello! How can I help you?"},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 8, "total_tokens": 18},
    }


def test_chat_message_creation():
    message = ChatMessage.user("Hello")
    assert message.role == "user"
    assert message.content == "Hello"
    assert message.to_dict() == {"role": "user", "content": "Hello"}

    vision = ChatMessage(
        role="user",
        content=[
            {"type": "text", "text": "What is this?"},
            {"type": "image_url", "image_url": {"url": "https://example.com/cat.png"}},
        ],
    )
    assert vision.text() == "What is this?"

    with pytest.raises(ValidationError):
        ChatMessage(role="robot", content="beep")


def test_builder_with_roles():
    messages = ChatMessageBuilder([
        {"role": "system", "content": "Be brief"},
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": "Hello"},
    ]).build()
    assert [m.role for m in messages] == ["system", "user", "assistant"]


def test_builder_legacy_role_inference():
    messages = ChatMessageBuilder([{"content": c} for c in "ABCDE"]).build()
    assert [m.role for m in messages] == ["system", "user", "assistant", "user", "assistant"]


def test_builder_without_inference_requires_roles():
    with pytest.raises(MalformedMessagesError):
        ChatMessageBuilder([{"content": "A"}, {"content": "B"}], infer_roles=False).build()


def test_builder_validation():
    with pytest.raises(MalformedMessagesError):
        ChatMessageBuilder("Hello").build()
    with pytest.raises(InsufficientMessagesError):
        ChatMessageBuilder([]).build()
    with pytest.raises(InsufficientMessagesError):
        ChatMessageBuilder([{"role": "system", "content": "Only one"}]).build()
    with pytest.raises(MalformedMessagesError):
        ChatMessageBuilder([{"role": "user", "content": "A"}, "B"]).build()
    with pytest.raises(MalformedMessagesError):
        ChatMessageBuilder([{"role": "robot", "content": "A"}, {"role": "user", "content": "B"}]).build()


def test_ensure_chat_messages_keeps_typed_messages():
    typed = [ChatMessage.user("Hi")]
    assert ensure_chat_messages(typed) == typed


def test_choice_to_text():
    assert Choice(index=0, text="plain").to_text() == "plain"
    assert Choice(index=0, text="plain", message={"role": "assistant", "content": "msg"}).to_text() == "msg"
    assert Choice(index=0).to_text() is None


def test_chat_response(chat_body):
    response = ChatResponse(httpx.Response(200, json=chat_body))

    assert response.success is True
    assert response.is_success() is True
    assert response.status == 200
    assert response.body is response.body
    assert response.usage.total_tokens == 18
    assert response.response.finish_reason == "stop"
    assert str(response) == "Hello! How can I help you?"


def test_completion_response():
    body = {
        "id": "cmpl-1",
        "object": "text_completion",
        "created": 1690000000,
        "model": "text-davinci-003",
        "choices": [
            {"index": 0, "text": "first", "finish_reason": "length"},
            {"index": 1, "text": "second", "finish_reason": "stop"},
        ],
        "usage": {"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7},
    }
    response = CompletionResponse(httpx.Response(200, json=body))

    assert [choice.to_text() for choice in response.responses] == ["first", "second"]
    assert response.response.index == 0


def test_image_response():
    body = {"created": 1690000000, "data": [{"url": "https://img/1.png"}, {"url": "https://img/2.png"}]}
    response = ImageResponse(httpx.Response(200, json=body))
    assert [image.url for image in response.images] == ["https://img/1.png", "https://img/2.png"]


def test_embedding_response_success():
    body = {
        "object": "list",
        "data": [{"object": "embedding", "embedding": [0.1, -0.2, 0.3], "index": 0}],
        "model": "text-embedding-ada-002",
        "usage": {"prompt_tokens": 2, "total_tokens": 2},
    }
    embedding = EmbeddingResponse(httpx.Response(200, json=body)).embedding()

    assert embedding.length == 3
    assert len(embedding) == 3
    assert embedding.vector == [0.1, -0.2, 0.3]


def test_embedding_response_error():
    body = {"error": {"message": "This model's maximum context length is 8191 tokens", "type": "invalid_request_error"}}
    response = EmbeddingResponse(httpx.Response(400, json=body))

    assert response.success is False
    with pytest.raises(EmbeddingCreationError) as exc_info:
        response.embedding()
    assert exc_info.value.message == "This model's maximum context length is 8191 tokens"
    assert exc_info.value.status == 400


def test_embedding_response_without_data():
    body = {"object": "list", "data": [], "model": "text-embedding-ada-002", "usage": {"prompt_tokens": 0, "total_tokens": 0}}
    response = EmbeddingResponse(httpx.Response(200, json=body))

    with pytest.raises(EmbeddingCreationError) as exc_info:
        response.embedding()
    assert exc_info.value.message == "No embedding returned"
    assert exc_info.value.status == 200
    assert response.embeddings() == []


def test_error_response():
    body = {"error": {"message": "Invalid API key", "type": "invalid_request_error", "code": "invalid_api_key"}}
    response = ErrorResponse(httpx.Response(401, json=body))

    assert response.success is False
    assert response.status == 401
    assert response.message == "Invalid API key"
    assert response.code == "invalid_api_key"
    assert response.error_type == "invalid_request_error"


def test_error_response_with_non_json_body():
    response = ErrorResponse(httpx.Response(502, text="Bad Gateway"))
    assert response.message == "Bad Gateway"
    assert response.error_type == "upstream_error"
