from typing import Optional

from fastapi import Header, HTTPException


def get_current_user(authorization: Optional[str] = Header(default=None)) -> str:
    """Resolve the caller from a bearer token.

    Tokens are issued and verified by the authentication gateway in front of
    this service; by the time a request gets here the token is the user id.
    """
    prefix = "Bearer "
    if not authorization or not authorization.startswith(prefix):
        raise HTTPException(status_code=401, detail="Invalid token")
    user_id = authorization[len(prefix) :].strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id
