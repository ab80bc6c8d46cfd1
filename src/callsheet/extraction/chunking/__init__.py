from .base import Chunk, Chunker, estimate_tokens, get_chunker, list_chunkers, register_chunker
from .whole import WholeChunker
from .token_budget import TokenChunker

__all__ = [
    "Chunk",
    "Chunker",
    "WholeChunker",
    "TokenChunker",
    "estimate_tokens",
    "get_chunker",
    "list_chunkers",
    "register_chunker",
]
