"""Tests for byte-to-text decoding."""
import pytest

from callsheet.extraction.decoders import Decoder, DecoderRegistry, PlainTextDecoder, default_registry
from callsheet.extraction.errors import NoDecoderAvailable, OptionalDecoderUnavailable


class OcrDecoder:
    """Stands in for an image decoder whose backing tool is not installed."""
    name = "ocr"
    mime_types = ("image/png",)

    def decode(self, data):
        raise OptionalDecoderUnavailable("tesseract is not installed")


class StaticDecoder:
    name = "static"
    mime_types = ("image/png",)

    def decode(self, data):
        return "Ann Lee / (212) 555-0101"


class TestPlainTextDecoder:
    def test_utf8_with_bom_and_crlf(self):
        data = "\ufeffAnn Lee\r\nBo Park\rCy Wu".encode("utf-8")
        assert PlainTextDecoder().decode(data) == "Ann Lee\nBo Park\nCy Wu"

    def test_latin1_fallback(self):
        assert PlainTextDecoder().decode("José Álvarez".encode("latin-1")) == "José Álvarez"

    def test_satisfies_protocol(self):
        assert isinstance(PlainTextDecoder(), Decoder)


class TestRegistry:
    def test_mime_parameters_and_case_are_ignored(self):
        registry = default_registry()
        assert registry.decode(b"Ann Lee", "TEXT/CSV; charset=utf-8") == "Ann Lee"

    def test_supported_types(self):
        assert "text/plain" in default_registry().supported_types()

    def test_unregistered_type(self):
        with pytest.raises(NoDecoderAvailable) as exc_info:
            default_registry().decode(b"%PDF-1.4", "application/pdf")
        assert "No decoder registered for application/pdf" in str(exc_info.value)

    def test_optional_decoder_is_skipped(self):
        registry = DecoderRegistry()
        registry.register(OcrDecoder())
        registry.register(StaticDecoder())
        assert registry.decode(b"\x89PNG", "image/png") == "Ann Lee / (212) 555-0101"

    def test_only_unavailable_decoders(self):
        registry = DecoderRegistry()
        registry.register(OcrDecoder())
        with pytest.raises(NoDecoderAvailable) as exc_info:
            registry.decode(b"\x89PNG", "image/png")
        assert "unavailable: ocr" in str(exc_info.value)
