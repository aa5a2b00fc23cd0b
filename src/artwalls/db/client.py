"""
Artwalls - Supabase Client.

Low-level database access. Stores receive a client through their
constructor; these helpers build the process-wide defaults.
"""

from supabase import Client, create_client

from artwalls.config import settings

# Singleton client instances
_client: Client | None = None
_service_client: Client | None = None


def get_client() -> Client:
    """
    Get the Supabase client (anon key, row-level security applies).

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client


def get_service_client() -> Client:
    """Get the service-role client for trusted server-side writes."""
    global _service_client

    if _service_client is None:
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client
