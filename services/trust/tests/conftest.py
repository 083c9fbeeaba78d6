import pytest

# PyJWT interop checks use a key long enough for any HMAC key-length policy.
INTEROP_SECRET = "test-secret-key-must-be-at-least-32-chars"


@pytest.fixture
def secret() -> str:
    return "unit-test-signing-secret"


@pytest.fixture
def interop_secret() -> str:
    return INTEROP_SECRET
