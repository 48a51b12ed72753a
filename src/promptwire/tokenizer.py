"""Tokenizer interface used for token budget checks."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Tokenizer(Protocol):
    def count_tokens(self, text: str) -> int:
        ...
