"""Single-request chunker for documents under the large-document threshold."""

from .base import Chunk, Chunker, register_chunker


@register_chunker
class WholeChunker(Chunker):
    name = "whole"

    def chunk(self, text: str, max_tokens: int | None = None) -> list[Chunk]:
        if not text.strip():
            return []
        return [Chunk(text=text, index=0, start_char=0, end_char=len(text))]
