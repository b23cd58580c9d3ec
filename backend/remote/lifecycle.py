"""Construction and injection of the remote backend client."""

import logging

from fastapi import Request

from backend.config import settings
from backend.remote.base import RemoteBackend
from backend.remote.supabase import SupabaseBackend

logger = logging.getLogger(__name__)


def create_remote() -> SupabaseBackend:
    """Build the backend client for the configured project."""
    if not settings.supabase_anon_key:
        logger.warning("ARTROOM_SUPABASE_ANON_KEY is not set; remote calls will be rejected")
    return SupabaseBackend(settings.supabase_url, settings.supabase_anon_key)


async def close_remote(remote: SupabaseBackend) -> None:
    await remote.aclose()


def get_remote(request: Request) -> RemoteBackend:
    """FastAPI dependency: the client constructed at startup."""
    remote = getattr(request.app.state, "remote", None)
    if remote is None:
        raise RuntimeError("Remote backend not initialized. Is the app lifespan running?")
    return remote
