"""Byte-to-text decoders.

Binary formats (PDF, Office, images) are decoded by external collaborators
that plug into a :class:`DecoderRegistry`. A decoder marked optional may
raise :class:`OptionalDecoderUnavailable` when its backing tool is missing;
the registry then tries the next one. When nothing can decode a MIME type
the call fails with :class:`NoDecoderAvailable`.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from .errors import NoDecoderAvailable, OptionalDecoderUnavailable

logger = logging.getLogger(__name__)


@runtime_checkable
class Decoder(Protocol):
    name: str
    mime_types: tuple[str, ...]

    def decode(self, data: bytes) -> str:
        ...


class PlainTextDecoder:
    name = "plain-text"
    mime_types = ("text/plain", "text/csv", "text/markdown", "text/tab-separated-values")

    def decode(self, data: bytes) -> str:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError:
            text = data.decode("latin-1")
        return text.replace("\r\n", "\n").replace("\r", "\n")


def _base_type(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()


class DecoderRegistry:
    def __init__(self) -> None:
        self._decoders: dict[str, list[Decoder]] = {}

    def register(self, decoder: Decoder) -> Decoder:
        for mime_type in decoder.mime_types:
            self._decoders.setdefault(mime_type.lower(), []).append(decoder)
        return decoder

    def supported_types(self) -> list[str]:
        return sorted(self._decoders)

    def decoders_for(self, mime_type: str) -> list[Decoder]:
        return list(self._decoders.get(_base_type(mime_type), []))

    def decode(self, data: bytes, mime_type: str) -> str:
        """Decode *data* with the first decoder that can handle *mime_type*.

        Raises:
            NoDecoderAvailable: No registered decoder could produce text.
        """
        unavailable: list[str] = []
        for decoder in self.decoders_for(mime_type):
            try:
                text = decoder.decode(data)
            except OptionalDecoderUnavailable as e:
                logger.warning("Decoder %s unavailable for %s: %s", decoder.name, mime_type, e)
                unavailable.append(decoder.name)
                continue
            logger.debug("Decoded %d bytes of %s with %s", len(data), mime_type, decoder.name)
            return text

        if unavailable:
            raise NoDecoderAvailable(
                f"No usable decoder for {mime_type}; unavailable: {', '.join(unavailable)}"
            )
        raise NoDecoderAvailable(
            f"No decoder registered for {mime_type}. Supported: {self.supported_types()}"
        )


def default_registry() -> DecoderRegistry:
    registry = DecoderRegistry()
    registry.register(PlainTextDecoder())
    return registry
