# =============================================================================
# core/services/certificate_service.py - Certificate Business Logic
# =============================================================================
# Issuing, editing, revoking and verifying certificates.
#
# Status is derived on read, in this order:
#   revoked  -> is_revoked is set
#   expired  -> expires_at is in the past
#   pending  -> issued_at is null
#   active   -> otherwise
#
# Recipient notifications are queued after the database write. A queue
# outage is logged but never fails the request.
# =============================================================================

import logging
import secrets
from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi.concurrency import run_in_threadpool

from app.exceptions import (
    CertificateException,
    ErrorCode,
    NotFoundException,
    StellarException,
)
from core.constants import CertificateStatus
from core.models.email import SendCertificateIssuedRequest, SendRevocationNoticeRequest
from core.services.email_queue_service import EmailQueueService
from core.services.stellar_service import StellarService
from lib.metrics import get_metrics_collector
from lib.supabase_client import SupabaseClient
from lib.utils import parse_timestamp, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "certificates"


def generate_certificate_id() -> str:
    """Human-facing ID: CERT- followed by 12 uppercase hex characters."""
    return f"CERT-{secrets.token_hex(6).upper()}"


def derive_status(certificate: dict[str, Any], now: datetime | None = None) -> CertificateStatus:
    now = now or utc_now()
    if certificate.get("is_revoked"):
        return CertificateStatus.REVOKED
    expires_at = parse_timestamp(certificate.get("expires_at"))
    if expires_at and expires_at < now:
        return CertificateStatus.EXPIRED
    if not certificate.get("issued_at"):
        return CertificateStatus.PENDING
    return CertificateStatus.ACTIVE


def with_status(certificate: dict[str, Any]) -> dict[str, Any]:
    return {**certificate, "status": derive_status(certificate).value}


def _validate_stellar_fields(data: dict[str, Any]) -> None:
    """
    Check optional Stellar references on a create/update payload.

    Raises:
        StellarException: INVALID_TRANSACTION or INVALID_STELLAR_ADDRESS
    """
    tx_hash = data.get("blockchain_tx_hash")
    if tx_hash is not None and not StellarService.is_transaction_hash(tx_hash):
        raise StellarException(
            ErrorCode.INVALID_TRANSACTION,
            "Invalid blockchain transaction hash",
            details={"blockchain_tx_hash": tx_hash},
        )

    public_key = data.get("recipient_public_key")
    if public_key is not None and not StellarService.is_valid_public_key(public_key):
        raise StellarException(
            ErrorCode.INVALID_STELLAR_ADDRESS,
            details={"recipient_public_key": public_key},
        )


class CertificateService:
    """
    Service for certificate operations.

    Every method that returns a certificate includes its derived `status`.
    """

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @staticmethod
    def _fetch(certificate_id: str | UUID) -> dict[str, Any]:
        certificate = SupabaseClient.fetch_record(TABLE, certificate_id)
        if not certificate:
            raise CertificateException(
                ErrorCode.CERTIFICATE_NOT_FOUND,
                details={"id": str(certificate_id)},
            )
        return certificate

    @staticmethod
    def get_certificate(certificate_id: str | UUID) -> dict[str, Any]:
        """
        Get a certificate by its UUID.

        Raises:
            CertificateException: CERTIFICATE_NOT_FOUND
        """
        return with_status(CertificateService._fetch(certificate_id))

    @staticmethod
    def list_certificates(
        page: int = 1,
        limit: int = 20,
        recipient_email: str | None = None,
        issuer_id: str | UUID | None = None,
        is_revoked: bool | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """List certificates, newest first. Returns (rows, total)."""
        rows, total = SupabaseClient.list_records(
            TABLE,
            page=page,
            page_size=limit,
            filters={
                "recipient_email": recipient_email.lower() if recipient_email else None,
                "issuer_id": issuer_id,
                "is_revoked": is_revoked,
            },
        )
        return [with_status(row) for row in rows], total

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @staticmethod
    def create_certificate(data: dict[str, Any]) -> dict[str, Any]:
        """
        Issue a certificate.

        Fills in certificate_id and issued_at when they are missing.

        Raises:
            StellarException: If the tx hash or recipient key is malformed
            NotFoundException: If issuer_id doesn't reference an issuer
            CertificateException: CERTIFICATE_ALREADY_EXISTS
        """
        _validate_stellar_fields(data)

        record = {key: value for key, value in data.items() if value is not None}
        record["recipient_email"] = record["recipient_email"].lower()
        record.setdefault("certificate_id", generate_certificate_id())
        record.setdefault("issued_at", utc_now_iso())
        record["is_revoked"] = False

        issuer_id = record.get("issuer_id")
        if issuer_id and not SupabaseClient.fetch_record("issuers", issuer_id):
            raise NotFoundException(f"Issuer {issuer_id} not found")

        if SupabaseClient.fetch_by_field(TABLE, "certificate_id", record["certificate_id"]):
            raise CertificateException(
                ErrorCode.CERTIFICATE_ALREADY_EXISTS,
                details={"certificate_id": record["certificate_id"]},
            )

        certificate = SupabaseClient.insert_record(TABLE, record)
        logger.info(f"Issued certificate {certificate['certificate_id']} to {certificate['recipient_email']}")
        get_metrics_collector().record_certificate_issued(
            str(issuer_id) if issuer_id else None
        )

        CertificateService._notify_issued(certificate)
        return with_status(certificate)

    @staticmethod
    def update_certificate(certificate_id: str | UUID, changes: dict[str, Any]) -> dict[str, Any]:
        """
        Apply a partial update. None values are ignored.

        Raises:
            CertificateException: CERTIFICATE_NOT_FOUND or CERTIFICATE_REVOKED
            StellarException: If the tx hash or recipient key is malformed
        """
        certificate = CertificateService._fetch(certificate_id)
        if certificate.get("is_revoked"):
            raise CertificateException(
                ErrorCode.CERTIFICATE_REVOKED,
                "Revoked certificates cannot be modified",
            )

        data = {key: value for key, value in changes.items() if value is not None}
        _validate_stellar_fields(data)
        if not data:
            return with_status(certificate)

        data["updated_at"] = utc_now_iso()
        updated = SupabaseClient.update_record(TABLE, certificate_id, data)
        if not updated:
            raise CertificateException(ErrorCode.CERTIFICATE_NOT_FOUND)

        logger.info(f"Updated certificate {certificate['certificate_id']}")
        return with_status(updated)

    @staticmethod
    def revoke_certificate(certificate_id: str | UUID, reason: str) -> dict[str, Any]:
        """
        Revoke a certificate and queue the revocation notice.

        Raises:
            CertificateException: CERTIFICATE_NOT_FOUND or CERTIFICATE_REVOKED
        """
        certificate = CertificateService._fetch(certificate_id)
        if certificate.get("is_revoked"):
            raise CertificateException(
                ErrorCode.CERTIFICATE_REVOKED,
                "Certificate is already revoked",
            )

        now = utc_now_iso()
        updated = SupabaseClient.update_record(TABLE, certificate_id, {
            "is_revoked": True,
            "revocation_reason": reason,
            "revoked_at": now,
            "updated_at": now,
        })
        if not updated:
            raise CertificateException(ErrorCode.CERTIFICATE_NOT_FOUND)

        logger.info(f"Revoked certificate {updated['certificate_id']}: {reason}")
        CertificateService._notify_revoked(updated)
        return with_status(updated)

    @staticmethod
    def delete_certificate(certificate_id: str | UUID) -> None:
        """
        Delete a certificate.

        Raises:
            CertificateException: CERTIFICATE_NOT_FOUND
        """
        if not SupabaseClient.delete_record(TABLE, certificate_id):
            raise CertificateException(
                ErrorCode.CERTIFICATE_NOT_FOUND,
                details={"id": str(certificate_id)},
            )
        logger.info(f"Deleted certificate {certificate_id}")

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    @staticmethod
    async def verify_certificate(identifier: str, stellar: StellarService) -> dict[str, Any]:
        """
        Public verification by UUID or human-facing certificate_id.

        blockchain_verified is None when no transaction hash is stored.

        Raises:
            CertificateException: CERTIFICATE_NOT_FOUND
        """
        try:
            record_id = str(UUID(identifier))
        except ValueError:
            certificate = await run_in_threadpool(
                SupabaseClient.fetch_by_field, TABLE, "certificate_id", identifier
            )
        else:
            certificate = await run_in_threadpool(SupabaseClient.fetch_record, TABLE, record_id)

        if not certificate:
            raise CertificateException(
                ErrorCode.CERTIFICATE_NOT_FOUND,
                details={"id": identifier},
            )

        status = derive_status(certificate)
        blockchain_verified = None
        if certificate.get("blockchain_tx_hash"):
            blockchain_verified = await stellar.verify_transaction(certificate["blockchain_tx_hash"])

        is_valid = status == CertificateStatus.ACTIVE and blockchain_verified is not False

        get_metrics_collector().record_certificate_verified(
            str(certificate["issuer_id"]) if certificate.get("issuer_id") else None
        )
        logger.info(f"Verified certificate {certificate['certificate_id']}: {status.value}")

        return {
            "certificate_id": certificate["certificate_id"],
            "status": status,
            "is_valid": is_valid,
            "is_revoked": status == CertificateStatus.REVOKED,
            "is_expired": status == CertificateStatus.EXPIRED,
            "blockchain_verified": blockchain_verified,
            "verified_at": utc_now(),
        }

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    @staticmethod
    def _notify_issued(certificate: dict[str, Any]) -> None:
        try:
            EmailQueueService.queue_certificate_issued(SendCertificateIssuedRequest(
                to=certificate["recipient_email"],
                certificate_id=certificate["certificate_id"],
                recipient_name=certificate.get("recipient_name") or certificate["recipient_email"],
                certificate_name=certificate["title"],
                issuer_name=certificate["issuer_name"],
            ))
        except Exception as e:
            logger.error(f"Could not queue issue notice for {certificate['certificate_id']}: {e}")

    @staticmethod
    def _notify_revoked(certificate: dict[str, Any]) -> None:
        try:
            EmailQueueService.queue_revocation_notice(SendRevocationNoticeRequest(
                to=certificate["recipient_email"],
                recipient_name=certificate.get("recipient_name") or certificate["recipient_email"],
                certificate_id=certificate["certificate_id"],
                certificate_name=certificate["title"],
                reason=certificate.get("revocation_reason") or "Not specified",
                revocation_date=parse_timestamp(certificate.get("revoked_at")) or utc_now(),
            ))
        except Exception as e:
            logger.error(f"Could not queue revocation notice for {certificate['certificate_id']}: {e}")
