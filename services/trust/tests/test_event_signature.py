import hashlib
import hmac
import re

import pytest

from services.trust.core.event_signature import sign_event_payload, verify_event_signature
from services.trust.core.exceptions import ConfigurationError

SECRET = "secret"
TIMESTAMP = 1700000000
NONCE = "nonce-1234567890"
BODY = '{"runId":"abc"}'


def test_generates_deterministic_signatures_for_the_same_input():
    first = sign_event_payload(SECRET, TIMESTAMP, NONCE, BODY)
    second = sign_event_payload(SECRET, TIMESTAMP, NONCE, BODY)

    assert first == second
    assert re.fullmatch(r"[a-f0-9]{64}", first)


def test_signature_is_hmac_over_dotted_input():
    expected = hmac.new(
        b"secret", b'1700000000.nonce-1234567890.{"runId":"abc"}', hashlib.sha256
    ).hexdigest()

    assert sign_event_payload(SECRET, TIMESTAMP, NONCE, BODY) == expected


def test_changes_signature_when_payload_changes():
    assert sign_event_payload(SECRET, TIMESTAMP, NONCE, BODY) != sign_event_payload(
        SECRET, TIMESTAMP, NONCE, '{"runId":"xyz"}'
    )


@pytest.mark.parametrize(
    "args",
    [
        ("other-secret", TIMESTAMP, NONCE, BODY),
        (SECRET, TIMESTAMP + 1, NONCE, BODY),
        (SECRET, TIMESTAMP, "nonce-1234567891", BODY),
        (SECRET, TIMESTAMP, NONCE, '{"runId": "abc"}'),
    ],
)
def test_every_input_is_bound(args):
    assert sign_event_payload(*args) != sign_event_payload(SECRET, TIMESTAMP, NONCE, BODY)


def test_bytes_body_signs_like_its_utf8_text():
    body = '{"name":"ção"}'

    assert sign_event_payload(SECRET, TIMESTAMP, NONCE, body.encode("utf-8")) == (
        sign_event_payload(SECRET, TIMESTAMP, NONCE, body)
    )


@pytest.mark.parametrize("bad_secret", ["", None, b"secret"])
def test_signing_without_a_secret_fails_fast(bad_secret):
    with pytest.raises(ConfigurationError):
        sign_event_payload(bad_secret, TIMESTAMP, NONCE, BODY)


@pytest.mark.parametrize("timestamp", [1700000000.5, 1700000000.0, True, "1700000000", None])
def test_non_integer_timestamp_is_rejected(timestamp):
    with pytest.raises(ConfigurationError):
        sign_event_payload(SECRET, timestamp, NONCE, BODY)


class TestVerifyEventSignature:
    def test_accepts_matching_signature(self):
        signature = sign_event_payload(SECRET, TIMESTAMP, NONCE, BODY)

        assert verify_event_signature(SECRET, TIMESTAMP, NONCE, BODY, signature) is True

    def test_accepts_uppercase_and_padded_hex(self):
        signature = sign_event_payload(SECRET, TIMESTAMP, NONCE, BODY)

        assert verify_event_signature(SECRET, TIMESTAMP, NONCE, BODY, f" {signature.upper()} ")

    def test_rejects_wrong_body(self):
        signature = sign_event_payload(SECRET, TIMESTAMP, NONCE, BODY)

        assert verify_event_signature(SECRET, TIMESTAMP, NONCE, '{"runId":"xyz"}', signature) is False

    @pytest.mark.parametrize("signature", ["", "abc", "zz" * 32, "00" * 32, "00" * 33, None])
    def test_rejects_malformed_signatures(self, signature):
        assert verify_event_signature(SECRET, TIMESTAMP, NONCE, BODY, signature) is False

    def test_rejects_empty_secret(self):
        signature = sign_event_payload(SECRET, TIMESTAMP, NONCE, BODY)

        assert verify_event_signature("", TIMESTAMP, NONCE, BODY, signature) is False
        assert verify_event_signature(None, TIMESTAMP, NONCE, BODY, signature) is False
