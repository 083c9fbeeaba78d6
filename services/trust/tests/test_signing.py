import base64
import json

import pytest

from services.trust.core.signing import (
    b64url_decode,
    b64url_encode,
    constant_time_equals,
    constant_time_hex_equals,
    decode_json_segment,
    encode_json_segment,
    hmac_sha256,
)


def test_hmac_sha256_matches_rfc4231_vector():
    digest = hmac_sha256("Jefe", "what do ya want for nothing?")

    assert digest.hex() == "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"


def test_hmac_sha256_accepts_bytes_and_str_alike():
    assert hmac_sha256(b"key", b"message") == hmac_sha256("key", "message")


def test_b64url_encode_strips_padding_and_uses_url_alphabet():
    data = b"\xfb\xff\xfe"  # encodes to characters outside the standard alphabet
    encoded = b64url_encode(data)

    assert "=" not in encoded
    assert "+" not in encoded and "/" not in encoded
    assert encoded == base64.urlsafe_b64encode(data).decode().rstrip("=")
    assert b64url_decode(encoded) == data


@pytest.mark.parametrize("length", [1, 2, 3, 4, 5])
def test_b64url_decode_restores_padding(length):
    data = bytes(range(length))
    assert b64url_decode(b64url_encode(data)) == data


def test_encode_json_segment_is_compact_and_keeps_order():
    segment = encode_json_segment({"b": 1, "a": "ção"})
    raw = b64url_decode(segment).decode("utf-8")

    assert raw == '{"b":1,"a":"ção"}'


def test_encode_json_segment_rejects_nan():
    with pytest.raises(ValueError):
        encode_json_segment({"value": float("nan")})


@pytest.mark.parametrize(
    "segment",
    [
        "%%%",
        "a",  # impossible base64 length
        b64url_encode(b"not json"),
        b64url_encode(b"\xff\xfe"),  # not UTF-8
        b64url_encode(b'{"v": NaN}'),
    ],
)
def test_decode_json_segment_returns_none_on_garbage(segment):
    assert decode_json_segment(segment) is None


def test_decode_json_segment_returns_any_json_value():
    assert decode_json_segment(b64url_encode(json.dumps([1, 2]).encode())) == [1, 2]


class TestConstantTimeEquals:
    def test_equal_values(self):
        assert constant_time_equals("abc", "abc") is True
        assert constant_time_equals(b"abc", "abc") is True

    def test_different_values_same_length(self):
        assert constant_time_equals("abc", "abd") is False

    def test_different_lengths(self):
        assert constant_time_equals("abc", "abcd") is False
        assert constant_time_equals("", "a") is False

    def test_non_string_input_never_matches(self):
        assert constant_time_equals(None, "abc") is False
        assert constant_time_equals("abc", 123) is False

    def test_non_ascii_input_is_compared_as_utf8(self):
        assert constant_time_equals("é", "é") is True
        assert constant_time_equals("é", "e") is False


class TestConstantTimeHexEquals:
    def test_case_insensitive_match(self):
        assert constant_time_hex_equals("ABCDEF", "abcdef") is True

    def test_mismatch(self):
        assert constant_time_hex_equals("abcdef", "abcdee") is False

    def test_invalid_hex(self):
        assert constant_time_hex_equals("abcdef", "zzzzzz") is False
        assert constant_time_hex_equals("abc", "abc") is False  # odd length

    def test_length_mismatch(self):
        assert constant_time_hex_equals("abcdef", "abcd") is False
