import time

import jwt
import pytest

from services.owner_token import InvalidOwnerToken, create_owner_token, decode_owner_token

SECRET = "test-secret"


def test_round_trip_returns_owner_id() -> None:
    token = create_owner_token(SECRET, "owner-1")
    assert decode_owner_token(SECRET, token) == "owner-1"


def test_token_sets_iat_in_past_and_expiry() -> None:
    token = create_owner_token(SECRET, "owner-1", expiration_seconds=120)
    payload = jwt.decode(token, SECRET, algorithms=["HS256"])
    now = int(time.time())
    assert payload["sub"] == "owner-1"
    assert payload["iat"] <= now - 59
    assert payload["exp"] - now <= 120


def test_wrong_secret_is_rejected() -> None:
    token = create_owner_token(SECRET, "owner-1")
    with pytest.raises(InvalidOwnerToken):
        decode_owner_token("other-secret", token)


def test_expired_token_is_rejected() -> None:
    token = jwt.encode({"sub": "owner-1", "exp": int(time.time()) - 10}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidOwnerToken):
        decode_owner_token(SECRET, token)


def test_token_without_subject_is_rejected() -> None:
    token = jwt.encode({"user_id": "owner-1"}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidOwnerToken):
        decode_owner_token(SECRET, token)
