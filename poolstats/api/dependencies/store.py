from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from poolstats.core.config import Settings, get_settings
from poolstats.db.database import Store


def get_store(request: Request) -> Store:
    """Store created by the application lifespan"""
    return request.app.state.store


async def verify_cron_secret(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Require ``Bearer <CRON_SECRET>`` when a secret is configured"""
    if not settings.CRON_SECRET:
        return
    if authorization != f"Bearer {settings.CRON_SECRET}":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
