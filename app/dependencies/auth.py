from typing import Optional

import httpx
from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from structlog import get_logger

from app.config import settings
from app.utils.retry import retry_api

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


@retry_api(tries=3, delay=0.5, backoff=2, retry_on=(httpx.TransportError,))
async def verify_token(token: str) -> httpx.Response:
    async with httpx.AsyncClient(timeout=settings.AUTH_TIMEOUT_SECONDS) as client:
        return await client.get(
            f"{settings.USER_MANAGEMENT_URL}/auth/verify",
            headers={"Authorization": f"Bearer {token}"},
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> dict:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    try:
        response = await verify_token(credentials.credentials)
    except httpx.TransportError as e:
        logger.error("User management service unreachable", error=str(e))
        raise HTTPException(status_code=503, detail="Authentication service unavailable")
    if response.status_code != 200:
        logger.error("Token verification failed", status_code=response.status_code)
        raise HTTPException(status_code=401, detail="Invalid token")
    return response.json()
