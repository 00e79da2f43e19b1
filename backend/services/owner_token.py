"""HS256 bearer tokens that identify the owner of uploaded videos."""

import time

import jwt

ALGORITHM = "HS256"


class InvalidOwnerToken(Exception):
    pass


def create_owner_token(
    secret: str,
    owner_id: str,
    expiration_seconds: int = 3600,
) -> str:
    """Create a token whose `sub` claim is the owner id.
    Sets iat 60s in the past to tolerate small clock skew between issuer and API.
    """
    now = int(time.time())
    payload = {
        "sub": owner_id,
        "iat": now - 60,
        "exp": now + expiration_seconds,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_owner_token(secret: str, token: str) -> str:
    """Return the owner id carried by `token`; raise InvalidOwnerToken otherwise."""
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError as exc:
        raise InvalidOwnerToken(str(exc)) from exc
    owner_id = str(payload.get("sub") or "").strip()
    if not owner_id:
        raise InvalidOwnerToken("Token has no subject")
    return owner_id
