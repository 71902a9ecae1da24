# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# Typed wrapper for Supabase (PostgREST) database operations.
# One client instance is shared across the process, and all table access
# from the service layer goes through the generic helpers below:
# - fetch_record / fetch_by_field for single rows
# - insert_record / update_record / delete_record for writes
# - list_records for paginated, filtered listings
# - ping for health checks
#
# Every helper observes its duration into db_query_duration_seconds.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   user = SupabaseClient.fetch_by_field("users", "email", "a@b.com")
# =============================================================================

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.metrics import get_metrics_collector
from lib.utils import normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code for "no rows returned" on .single()
NOT_FOUND_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a short code and, where possible, a suggestion on how to fix it.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


@contextmanager
def _timed(query_type: str) -> Iterator[None]:
    """Observe the duration of a query, successful or not."""
    start = time.perf_counter()
    try:
        yield
    finally:
        get_metrics_collector().record_db_query(query_type, time.perf_counter() - start)


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        issuer = SupabaseClient.fetch_record("issuers", issuer_id)
        rows, total = SupabaseClient.list_records(
            "certificates", page=1, page_size=20,
            filters={"issuer_id": issuer_id},
        )
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses the service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                ) from e
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (used by tests)."""
        cls._instance = None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_record(cls, table: str, record_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a single row by primary key.

        Returns:
            Row dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        return cls.fetch_by_field(table, "id", normalize_uuid(record_id))

    @classmethod
    def fetch_by_field(cls, table: str, field: str, value: Any) -> dict[str, Any] | None:
        """
        Fetch a single row where `field` equals `value`.

        Used for unique lookups (users.email, issuers.public_key,
        certificates.certificate_id).

        Returns:
            Row dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            with _timed("select"):
                response = (
                    client.table(table)
                    .select("*")
                    .eq(field, value)
                    .single()
                    .execute()
                )
            return response.data

        except Exception as e:
            if NOT_FOUND_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                suggestion=f"Check that the {table} table exists and is accessible",
                details={"table": table, "field": field},
            ) from e

    @classmethod
    def list_records(
        cls,
        table: str,
        page: int = 1,
        page_size: int = 20,
        filters: dict[str, Any] | None = None,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List rows with equality filters and offset pagination.

        Filters whose value is None are skipped.

        Returns:
            Tuple of (rows for the page, total matching rows)

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        offset = (page - 1) * page_size

        try:
            query = client.table(table).select("*", count="exact")
            for field, value in (filters or {}).items():
                if value is None:
                    continue
                query = query.eq(field, normalize_uuid(value))

            with _timed("select"):
                response = (
                    query
                    .order(order_by, desc=descending)
                    .range(offset, offset + page_size - 1)
                    .execute()
                )

            rows = response.data or []
            total = response.count if response.count is not None else len(rows)
            logger.debug(f"Listed {len(rows)}/{total} rows from {table}")
            return rows, total

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list {table}: {e}",
                code="LIST_FAILED",
                details={"table": table, "page": page, "page_size": page_size},
            ) from e

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @classmethod
    def insert_record(cls, table: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a row and return it with generated columns (id, created_at).

        Raises:
            SupabaseClientError: If insert fails or returns nothing
        """
        client = cls.get_client()

        try:
            with _timed("insert"):
                response = client.table(table).insert(data).execute()

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"table": table},
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                details={"table": table},
            ) from e

    @classmethod
    def update_record(
        cls,
        table: str,
        record_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a row by primary key.

        Returns:
            Updated row, or None if no row matched

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()
        record_id_str = normalize_uuid(record_id)

        try:
            with _timed("update"):
                response = (
                    client.table(table)
                    .update(data)
                    .eq("id", record_id_str)
                    .execute()
                )
            return response.data[0] if response.data else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update {table}: {e}",
                code="UPDATE_FAILED",
                details={"table": table, "id": record_id_str},
            ) from e

    @classmethod
    def delete_record(cls, table: str, record_id: str | UUID) -> bool:
        """
        Delete a row by primary key.

        Returns:
            True if a row was deleted

        Raises:
            SupabaseClientError: If delete fails
        """
        client = cls.get_client()
        record_id_str = normalize_uuid(record_id)

        try:
            with _timed("delete"):
                response = (
                    client.table(table)
                    .delete()
                    .eq("id", record_id_str)
                    .execute()
                )
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete from {table}: {e}",
                code="DELETE_FAILED",
                details={"table": table, "id": record_id_str},
            ) from e

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    @classmethod
    def ping(cls) -> bool:
        """
        Cheap select against the users table.

        Raises:
            SupabaseClientError: If the database can't be reached
        """
        client = cls.get_client()

        try:
            with _timed("ping"):
                client.table("users").select("id").limit(1).execute()
            return True
        except Exception as e:
            raise SupabaseClientError(
                message=f"Database ping failed: {e}",
                code="PING_FAILED",
                suggestion="Check SUPABASE_URL and that the database is reachable",
            ) from e
