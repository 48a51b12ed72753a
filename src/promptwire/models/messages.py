"""Chat message models and the message builder."""

import logging
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import InsufficientMessagesError, MalformedMessagesError

logger = logging.getLogger(__name__)

Role = Literal["system", "user", "assistant"]


class ChatMessage(BaseModel):
    """A single conversation turn."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    role: Role = Field(..., description="Message role: system, user, assistant")
    content: Optional[Union[str, List[Dict[str, Any]]]] = Field(
        default=None, description="Text, or content parts for vision models"
    )
    name: Optional[str] = Field(default=None)
    function_call: Optional[Dict[str, Any]] = Field(default=None)

    @classmethod
    def system(cls, content: Any) -> "ChatMessage":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: Any) -> "ChatMessage":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: Any = None, function_call: Optional[Dict[str, Any]] = None) -> "ChatMessage":
        return cls(role="assistant", content=content, function_call=function_call)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def text(self) -> str:
        """Plain text of the message, used for token counting."""
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.content, list):
            return "".join(
                part.get("text", "") for part in self.content
                if isinstance(part, dict) and part.get("type") == "text"
            )
        return ""


class ChatMessageBuilder:
    """Turns raw role/content mappings into typed chat messages.

    When every mapping carries a ``role`` the roles are used as given.
    Otherwise the legacy role inference applies: the first entry becomes the
    system message and the rest alternate user/assistant. Pass
    ``infer_roles=False`` to reject role-less input instead.
    """

    def __init__(self, messages: Any, infer_roles: bool = True):
        self.messages = messages
        self.infer_roles = infer_roles

    def build(self) -> List[ChatMessage]:
        self.validate()
        if all("role" in message for message in self.messages):
            return [self._build_message(m["role"], m.get("content"), m) for m in self.messages]

        if not self.infer_roles:
            raise MalformedMessagesError("Every message needs a role when role inference is disabled")
        logger.warning("Messages without roles, inferring system/user/assistant order")
        return self._build_messages_without_roles()

    def validate(self) -> None:
        if not isinstance(self.messages, (list, tuple)):
            raise MalformedMessagesError(
                f"Messages must be a list, got {type(self.messages).__name__}"
            )
        if len(self.messages) < 2:
            raise InsufficientMessagesError(len(self.messages))
        if not all(isinstance(message, Mapping) for message in self.messages):
            raise MalformedMessagesError("Every message must be a mapping")

    def _build_message(self, role: str, content: Any, source: Mapping = None) -> ChatMessage:
        extra = {}
        if source is not None:
            for key in ("name", "function_call"):
                if source.get(key) is not None:
                    extra[key] = source[key]
        try:
            return ChatMessage(role=role, content=content, **extra)
        except ValueError as e:
            raise MalformedMessagesError(f"Invalid message with role {role!r}: {e}") from e

    def _build_messages_without_roles(self) -> List[ChatMessage]:
        messages = [self._build_message("system", self.messages[0].get("content"))]
        for index, message in enumerate(self.messages[1:]):
            role = "user" if index % 2 == 0 else "assistant"
            messages.append(self._build_message(role, message.get("content")))
        return messages


def ensure_chat_messages(messages: Sequence[Any], infer_roles: bool = True) -> List[ChatMessage]:
    """Return typed messages, building them from raw mappings if needed."""
    if isinstance(messages, (list, tuple)) and messages and all(
        isinstance(message, ChatMessage) for message in messages
    ):
        return list(messages)
    return ChatMessageBuilder(messages, infer_roles=infer_roles).build()
