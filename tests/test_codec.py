"""Tests for the base64 transport codec."""
import pytest

from fhe_core.codec import decode_text, encode_bytes
from fhe_core.errors import TransportError


class TestCodec:
    @pytest.mark.parametrize("data", [b"", b"\x00", b"BFV1\xff\xfe", bytes(range(256))])
    def test_round_trip(self, data):
        assert decode_text(encode_bytes(data)) == data

    def test_uses_standard_alphabet(self):
        assert encode_bytes(b"\xfb\xff") == "+/8="

    def test_none_and_empty_decode_to_empty_bytes(self):
        assert decode_text(None) == b""
        assert decode_text("") == b""

    @pytest.mark.parametrize("text", ["not base64!", "abc", "é"])
    def test_invalid_text_raises(self, text):
        with pytest.raises(TransportError):
            decode_text(text)

    def test_non_string_raises(self):
        with pytest.raises(TransportError):
            decode_text(123)
