"""Token-budget chunker.

Greedily packs whole lines into chunks under the token budget. A line that
is too long on its own is split at the last space before the budget, and
only falls back to a hard cut when there is no space at all.
"""

from __future__ import annotations

from .base import CHARS_PER_TOKEN, Chunk, Chunker, register_chunker

DEFAULT_MAX_TOKENS = 2000


def _split_long_line(line: str, start: int, max_chars: int) -> list[tuple[str, int]]:
    pieces: list[tuple[str, int]] = []
    offset = 0
    while len(line) - offset > max_chars:
        window = line[offset:offset + max_chars]
        cut = window.rfind(" ")
        if cut <= 0:
            cut = max_chars
        else:
            cut += 1
        pieces.append((line[offset:offset + cut], start + offset))
        offset += cut
    if offset < len(line):
        pieces.append((line[offset:], start + offset))
    return pieces


@register_chunker
class TokenChunker(Chunker):
    """Packs lines into chunks of at most ``max_tokens`` estimated tokens."""

    name = "token"

    def __init__(self, max_tokens: int = DEFAULT_MAX_TOKENS) -> None:
        self.max_tokens = max_tokens

    def chunk(self, text: str, max_tokens: int | None = None) -> list[Chunk]:
        budget = max_tokens or self.max_tokens
        max_chars = max(1, budget * CHARS_PER_TOKEN)

        # Units are (text, start offset); each fits the budget on its own.
        units: list[tuple[str, int]] = []
        position = 0
        for line in text.splitlines(keepends=True):
            if len(line) > max_chars:
                units.extend(_split_long_line(line, position, max_chars))
            else:
                units.append((line, position))
            position += len(line)

        chunks: list[Chunk] = []
        buffer: list[str] = []
        buffer_start = 0
        buffer_len = 0

        def emit() -> None:
            body = "".join(buffer)
            if body.strip():
                chunks.append(Chunk(
                    text=body,
                    index=len(chunks),
                    start_char=buffer_start,
                    end_char=buffer_start + len(body),
                ))

        for unit, start in units:
            if buffer and buffer_len + len(unit) > max_chars:
                emit()
                buffer, buffer_len = [], 0
            if not buffer:
                buffer_start = start
            buffer.append(unit)
            buffer_len += len(unit)
        if buffer:
            emit()
        return chunks
