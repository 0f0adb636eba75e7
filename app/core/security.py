from typing import Optional
from fastapi import Header

from app.models.booking import Session


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_session(authorization: Optional[str] = Header(None)) -> Optional[Session]:
    """
    Builds the caller's session from the Authorization header.
    Returns None when there is no usable bearer token; the booking layer
    then refuses to call the backend.
    """
    token = parse_bearer(authorization)
    if token is None:
        return None
    return Session(token=token)
