"""Service-role Supabase client factory and query execution helper."""

import asyncio

from supabase import create_client, Client

from careerai.config import Settings
from careerai.jobs.errors import StorageError


def create_supabase(settings: Settings) -> Client:
    """Create a Supabase client using the service role key."""
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set"
        )
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
    )


async def execute(query):
    """Run a blocking PostgREST request in the default executor.

    Any client-side failure surfaces as StorageError.
    """
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, query.execute)
    except Exception as e:
        raise StorageError(f"{type(e).__name__}: {e}") from e
