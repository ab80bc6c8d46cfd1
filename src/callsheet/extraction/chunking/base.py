"""Chunk record, chunker interface and the name-keyed chunker registry.

Chunks carry character offsets back into the submitted document so failures
can be reported against a concrete region of the call sheet.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Rough token count used for chunk budgeting (about four characters per token)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


@dataclass(frozen=True)
class Chunk:
    """One model request's worth of document text, with its offsets."""
    text: str
    index: int
    start_char: int = 0
    end_char: int = 0

    @property
    def estimated_tokens(self) -> int:
        return estimate_tokens(self.text)


class Chunker(ABC):
    """Splits a document into model-sized pieces that keep document order."""

    name: ClassVar[str]

    @abstractmethod
    def chunk(self, text: str, max_tokens: int | None = None) -> list[Chunk]:
        """Return the chunks for *text*; whitespace-only text yields none."""


_REGISTRY: dict[str, type[Chunker]] = {}


def register_chunker(cls: type[Chunker]) -> type[Chunker]:
    _REGISTRY[cls.name] = cls
    return cls


def get_chunker(name: str) -> Chunker:
    try:
        chunker_cls = _REGISTRY[name]
    except KeyError:
        raise ValueError(
            f"Unknown chunker: {name!r}. Registered: {', '.join(sorted(_REGISTRY))}"
        ) from None
    return chunker_cls()


def list_chunkers() -> list[str]:
    return sorted(_REGISTRY)
