import secrets

from fastapi import Header, HTTPException, status

from api.core.config import settings


def verify_bearer_token(authorization: str | None = Header(default=None)) -> None:
    """
    Bearer check for the OCR routes.

    If `API_BEARER_TOKEN` is empty, auth is disabled for local/dev use.
    """
    configured_token = settings.api_bearer_token
    if not configured_token:
        return

    scheme, _, token = (authorization or "").partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not secrets.compare_digest(token.strip(), configured_token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
