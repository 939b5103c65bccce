"""Supabase client wrapper with async context manager support."""

import asyncio
import os
from typing import Any, Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.errors import (
    ConfigurationError,
    DuplicateTaskError,
    PersistenceError,
    TransientLookupError,
)
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", url=url)

    return _client


async def close_supabase_client() -> None:
    """Drop the cached client so the next call re-initializes it."""
    global _client
    if _client:
        _client = None
        logger.info("Supabase client closed")


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                error=str(exc_val),
                type=exc_type.__name__
            )
        return False


def _is_duplicate_key(error: Exception) -> bool:
    message = str(error).lower()
    return "duplicate key" in message or "23505" in message


async def execute_read(
    query: Any,
    operation: str,
    timeout_seconds: float = 10.0,
    max_attempts: int = 3,
    backoff_seconds: float = 0.5,
) -> Any:
    """
    Execute a read query with a per-attempt timeout and exponential backoff.

    The supabase client is synchronous, so each attempt runs in a worker thread
    to let the timeout fire. Raises TransientLookupError once attempts run out.
    """
    last_error = ""
    for attempt in range(1, max_attempts + 1):
        try:
            return await asyncio.wait_for(asyncio.to_thread(query.execute), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            last_error = f"timed out after {timeout_seconds}s"
        except Exception as e:
            last_error = str(e) or type(e).__name__

        logger.warning(
            "Supabase read attempt failed",
            operation=operation,
            attempt=attempt,
            max_attempts=max_attempts,
            error=last_error
        )
        if attempt < max_attempts and backoff_seconds > 0:
            await asyncio.sleep(backoff_seconds * 2 ** (attempt - 1))

    raise TransientLookupError(f"{operation} failed after {max_attempts} attempts: {last_error}")


async def execute_write(query: Any, operation: str) -> Any:
    """Execute a write query once; writes are not retried within a pass."""
    try:
        return await asyncio.to_thread(query.execute)
    except Exception as e:
        if _is_duplicate_key(e):
            raise DuplicateTaskError(f"{operation}: {e}") from e
        raise PersistenceError(f"Failed to {operation}: {e}") from e
