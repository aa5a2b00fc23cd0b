"""
Artwalls - Database access.

Supabase client plus the adapter protocol the stores are written against.
"""

from artwalls.db.adapter import DatabaseAdapter
from artwalls.db.client import get_client, get_service_client

__all__ = [
    "DatabaseAdapter",
    "get_client",
    "get_service_client",
]
