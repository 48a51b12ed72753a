"""Server-Sent Events (SSE) decoding for streaming responses."""

import codecs
import json
import logging
from typing import Any, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


class StreamDecoder:
    """Turns raw SSE chunks into text fragments.

    Chunks may split frames, lines or multibyte characters at any point;
    incomplete lines are buffered until their terminator arrives. One
    decoder serves exactly one stream.
    """

    def __init__(self):
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.done = False

    def feed(self, chunk: Union[bytes, str]) -> List[str]:
        """Decode a chunk into at most one fragment.

        All content deltas completed by this chunk are joined together.
        """
        return self.fragments(self.read_frames(chunk))

    def read_frames(self, chunk: Union[bytes, str]) -> List[str]:
        """Return the data payloads of all frames completed by this chunk."""
        if self.done:
            return []

        if isinstance(chunk, bytes):
            chunk = self._utf8.decode(chunk)
        self._buffer += chunk

        frames = []
        while True:
            newline = self._buffer.find("\n")
            if newline == -1:
                break
            line = self._buffer[:newline].rstrip("\r")
            self._buffer = self._buffer[newline + 1:]

            data = self._parse_line(line)
            if data is None:
                continue
            if data.strip() == DONE_SENTINEL:
                logger.debug("Streaming completed with [DONE] signal.")
                self.done = True
                self._buffer = ""
                break
            frames.append(data)
        return frames

    def fragments(self, frames: Iterable[str]) -> List[str]:
        """Extract content deltas from frame payloads and join them."""
        parts = []
        for data in frames:
            content = self._extract_content(data)
            if content:
                parts.append(content)
        return ["".join(parts)] if parts else []

    def flush(self) -> List[str]:
        """Return the payload of a final line that arrived without a terminator."""
        if self.done:
            return []
        tail = self._utf8.decode(b"", final=True)
        if self._buffer or tail:
            return self.read_frames(tail + "\n")
        return []

    @staticmethod
    def _parse_line(line: str) -> Optional[str]:
        if not line or line.startswith(":"):
            return None
        if not line.startswith("data:"):
            # event:, id: and retry: fields carry nothing we use
            return None
        data = line[5:]
        if data.startswith(" "):
            data = data[1:]
        return data

    @staticmethod
    def _extract_content(data: str) -> Optional[str]:
        try:
            chunk = json.loads(data)
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping malformed stream frame: {e}")
            return None

        choice = _first_choice(chunk)
        if choice is None:
            return None

        delta = choice.get("delta")
        if isinstance(delta, dict):
            content = delta.get("content")
        else:
            content = choice.get("text")
        return content if isinstance(content, str) else None


def _first_choice(chunk: Any) -> Optional[dict]:
    if not isinstance(chunk, dict):
        return None
    choices = chunk.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    choice = choices[0]
    return choice if isinstance(choice, dict) else None
