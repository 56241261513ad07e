import secrets

from fastapi import Header, HTTPException

from docgen.config import settings


async def require_service_token(authorization: str | None = Header(None)):
    """Bearer check for the document routes; open when no token is configured."""
    if not settings.service_token:
        return None
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    token = authorization[7:]
    if not secrets.compare_digest(token, settings.service_token):
        raise HTTPException(status_code=401, detail="Invalid service token")
    return token
