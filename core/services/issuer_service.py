# =============================================================================
# core/services/issuer_service.py - Issuer Business Logic
# =============================================================================
# Issuer CRUD. Public keys must be valid Stellar ed25519 keys and unique
# across issuers.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from fastapi.concurrency import run_in_threadpool

from app.exceptions import (
    ConflictException,
    ErrorCode,
    NotFoundException,
    StellarException,
)
from core.services.stellar_service import StellarService
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "issuers"


class IssuerService:
    """Service for issuer management operations."""

    @staticmethod
    def _check_public_key(public_key: str, exclude_id: str | None = None) -> None:
        """
        Validate format and uniqueness of an issuer public key.

        Raises:
            StellarException: INVALID_STELLAR_ADDRESS
            ConflictException: If another issuer already uses the key
        """
        if not StellarService.is_valid_public_key(public_key):
            raise StellarException(
                ErrorCode.INVALID_STELLAR_ADDRESS,
                details={"public_key": public_key},
            )

        existing = SupabaseClient.fetch_by_field(TABLE, "public_key", public_key)
        if existing and str(existing["id"]) != exclude_id:
            raise ConflictException(
                "An issuer with this public key already exists",
                details={"public_key": public_key},
            )

    @staticmethod
    def create_issuer(data: dict[str, Any]) -> dict[str, Any]:
        """
        Create an issuer.

        Raises:
            StellarException: If the public key is invalid
            ConflictException: If the public key is taken
        """
        IssuerService._check_public_key(data["public_key"])

        issuer = SupabaseClient.insert_record(TABLE, data)
        logger.info(f"Created issuer: {issuer['id']} ({issuer.get('name')})")
        return issuer

    @staticmethod
    def get_issuer(issuer_id: str | UUID) -> dict[str, Any]:
        """
        Get an issuer by ID.

        Raises:
            NotFoundException: If the issuer doesn't exist
        """
        issuer = SupabaseClient.fetch_record(TABLE, issuer_id)
        if not issuer:
            raise NotFoundException(f"Issuer {issuer_id} not found")
        return issuer

    @staticmethod
    def list_issuers(
        page: int = 1,
        limit: int = 20,
        is_active: bool | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """List issuers, newest first. Returns (rows, total)."""
        return SupabaseClient.list_records(
            TABLE,
            page=page,
            page_size=limit,
            filters={"is_active": is_active},
        )

    @staticmethod
    def update_issuer(issuer_id: str | UUID, changes: dict[str, Any]) -> dict[str, Any]:
        """
        Apply a partial update. None values are ignored.

        Raises:
            NotFoundException: If the issuer doesn't exist
            StellarException: If a new public key is invalid
            ConflictException: If a new public key is taken
        """
        issuer = IssuerService.get_issuer(issuer_id)
        data = {key: value for key, value in changes.items() if value is not None}

        new_key = data.get("public_key")
        if new_key and new_key != issuer["public_key"]:
            IssuerService._check_public_key(new_key, exclude_id=str(issuer["id"]))

        if not data:
            return issuer

        data["updated_at"] = utc_now_iso()
        updated = SupabaseClient.update_record(TABLE, issuer_id, data)
        if not updated:
            raise NotFoundException(f"Issuer {issuer_id} not found")

        logger.info(f"Updated issuer {issuer_id}")
        return updated

    @staticmethod
    def delete_issuer(issuer_id: str | UUID) -> None:
        """
        Delete an issuer.

        Raises:
            NotFoundException: If the issuer doesn't exist
        """
        if not SupabaseClient.delete_record(TABLE, issuer_id):
            raise NotFoundException(f"Issuer {issuer_id} not found")
        logger.info(f"Deleted issuer: {issuer_id}")

    @staticmethod
    async def verify_account(issuer_id: str | UUID, stellar: StellarService) -> dict[str, Any]:
        """
        Check that the issuer's public key exists on the Stellar network.

        Raises:
            NotFoundException: If the issuer doesn't exist
        """
        issuer = await run_in_threadpool(IssuerService.get_issuer, issuer_id)
        exists = await stellar.verify_account(issuer["public_key"])
        return {
            "issuer_id": issuer["id"],
            "public_key": issuer["public_key"],
            "network": stellar.network,
            "exists": exists,
        }
