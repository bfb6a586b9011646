"""Supabase JWT validation dependency for FastAPI."""

import asyncio
import logging

from fastapi import Header
from supabase import create_client

from careerai.config import settings
from careerai.jobs.errors import UnauthorizedError

logger = logging.getLogger(__name__)


async def verify_jwt(authorization: str = Header(None)) -> str:
    """Validate the Supabase JWT from the Authorization header.

    Returns the authenticated user's id.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Authentication required")

    token = authorization.replace("Bearer ", "", 1)
    try:
        client = create_client(settings.supabase_url, settings.supabase_anon_key)
        loop = asyncio.get_running_loop()
        user_response = await loop.run_in_executor(None, client.auth.get_user, token)
    except Exception as e:
        logger.info("Token validation failed: %s", e)
        raise UnauthorizedError("Invalid token") from e

    user = getattr(user_response, "user", None)
    if user is None:
        raise UnauthorizedError("Invalid token")
    return user.id
