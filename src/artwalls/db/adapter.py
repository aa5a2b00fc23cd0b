"""
Database Adapter Protocol.

The stores in onboarding.store and the analytics sink talk to a thin wrapper
matching the Supabase/PostgREST query builder: table() returns a builder
supporting .select(), .insert(), .upsert(), .update(), .eq(), .limit(),
.execute(). A supabase.Client satisfies this protocol as-is; tests pass a
fake.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DatabaseAdapter(Protocol):
    """Row-store access used by the persistence boundary."""

    def table(self, name: str) -> Any:
        """
        Return a query builder for the given table.

        .execute() on the built query yields an object with .data (list of
        rows) and .count (when select(count="exact") was requested).
        """
        ...
