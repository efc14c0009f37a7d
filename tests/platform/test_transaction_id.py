import base64
import hashlib

import pytest
from twitter_openapi_python.tid import PairClientTransaction
from twitter_proxy.platform.transaction_id import (
    UnseededClientTransaction,
    client_transaction_from_seed,
    generate_transaction_id,
)
from x_client_transaction.constants import ADDITIONAL_RANDOM_NUMBER, DEFAULT_KEYWORD

VERIFICATION = base64.b64encode(bytes(range(48))).decode("ascii")
ANIMATION_KEY = "a1b2c3"


def _decode(token: str) -> bytes:
    return base64.b64decode(token + "=" * (-len(token) % 4))


@pytest.fixture
def fixed_mask(mocker) -> int:
    mask = 0x5A
    mocker.patch("x_client_transaction.transaction.random.randint", return_value=mask)
    return mask


@pytest.mark.parametrize(
    "verification, animation_key",
    [(None, ANIMATION_KEY), (VERIFICATION, None), ("", ANIMATION_KEY), (VERIFICATION, "")],
)
def test_incomplete_seed_returns_none(verification, animation_key):
    assert generate_transaction_id("GET", "/i/api/graphql/x/UserByScreenName", verification, animation_key) is None


@pytest.mark.parametrize("verification, animation_key", [(None, ANIMATION_KEY), (VERIFICATION, "")])
def test_incomplete_seed_builds_unseeded_transaction(verification, animation_key):
    transaction = client_transaction_from_seed(verification, animation_key)

    assert isinstance(transaction, UnseededClientTransaction)
    assert transaction.generate_transaction_id("GET", "/graphql/abc/UserByScreenName") == ""


def test_complete_seed_builds_pair_transaction():
    transaction = client_transaction_from_seed(VERIFICATION, ANIMATION_KEY)

    assert isinstance(transaction, PairClientTransaction)
    assert transaction.key_bytes == list(range(48))
    assert transaction.animation_key == ANIMATION_KEY


def test_token_layout(fixed_mask):
    """The token is a random mask byte followed by key, time, hash prefix and a constant, all masked."""
    path = "/i/api/graphql/x/UserByScreenName"
    time_now = 0x01020304

    token = generate_transaction_id("get", path, VERIFICATION, ANIMATION_KEY, time_now=time_now)

    assert token is not None
    assert not token.endswith("=")
    raw = _decode(token)
    assert raw[0] == fixed_mask
    unmasked = bytes(b ^ fixed_mask for b in raw[1:])

    key_bytes = base64.b64decode(VERIFICATION)
    expected_hash = hashlib.sha256(f"GET!{path}!{time_now}{DEFAULT_KEYWORD}{ANIMATION_KEY}".encode()).digest()
    assert unmasked[: len(key_bytes)] == key_bytes
    assert unmasked[len(key_bytes) : len(key_bytes) + 4] == bytes([0x04, 0x03, 0x02, 0x01])
    assert unmasked[len(key_bytes) + 4 : len(key_bytes) + 20] == expected_hash[:16]
    assert unmasked[-1] == ADDITIONAL_RANDOM_NUMBER
    assert len(unmasked) == len(key_bytes) + 4 + 16 + 1


def test_token_is_deterministic_for_fixed_inputs(fixed_mask):
    args = ("POST", "/1.1/friendships/create.json", VERIFICATION, ANIMATION_KEY)

    assert generate_transaction_id(*args, time_now=1000) == generate_transaction_id(*args, time_now=1000)


def test_token_depends_on_path(fixed_mask):
    common = dict(verification=VERIFICATION, animation_key=ANIMATION_KEY, time_now=1000)

    assert generate_transaction_id(method="GET", path="/a", **common) != generate_transaction_id(
        method="GET", path="/b", **common
    )


def test_unpadded_verification_key_is_accepted(fixed_mask):
    unpadded = base64.b64encode(b"abcd").decode("ascii").rstrip("=")

    token = generate_transaction_id("GET", "/x", unpadded, ANIMATION_KEY, time_now=1)

    assert bytes(b ^ fixed_mask for b in _decode(token)[1:5]) == b"abcd"
