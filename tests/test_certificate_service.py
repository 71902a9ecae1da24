# =============================================================================
# tests/test_certificate_service.py - Certificate Service Tests
# =============================================================================
# This module contains tests for:
# - Status derivation and certificate ID generation
# - Issuing, editing, revoking and deleting
# - Public verification against the Stellar network
# =============================================================================

import asyncio
import re
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from app.exceptions import (
    CertificateException,
    ErrorCode,
    NotFoundException,
    StellarException,
)
from core.constants import CertificateStatus
from core.services.certificate_service import (
    CertificateService,
    derive_status,
    generate_certificate_id,
)
from tests.conftest import CERTIFICATE_UUID, ISSUER_ID, VALID_TX_HASH

NOW = datetime(2025, 1, 5, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_db():
    with patch("core.services.certificate_service.SupabaseClient") as db:
        yield db


@pytest.fixture
def mock_queue():
    with patch("core.services.certificate_service.EmailQueueService") as queue:
        yield queue


def _create_payload(**overrides):
    payload = {
        "title": "Blockchain Fundamentals",
        "issuer_name": "Stellar University",
        "issuer_id": ISSUER_ID,
        "recipient_email": "Ada@Example.com",
        "recipient_name": "Ada Lovelace",
    }
    payload.update(overrides)
    return payload


# =============================================================================
# Status Tests
# =============================================================================

class TestDeriveStatus:
    """Status precedence: revoked, expired, pending, active."""

    def test_active(self, sample_certificate_row):
        assert derive_status(sample_certificate_row, NOW) == CertificateStatus.ACTIVE

    def test_pending_without_issue_date(self, sample_certificate_row):
        row = {**sample_certificate_row, "issued_at": None}
        assert derive_status(row, NOW) == CertificateStatus.PENDING

    def test_expired(self, sample_certificate_row):
        row = {**sample_certificate_row, "expires_at": "2024-12-31T00:00:00Z"}
        assert derive_status(row, NOW) == CertificateStatus.EXPIRED

    def test_future_expiry_is_active(self, sample_certificate_row):
        row = {**sample_certificate_row, "expires_at": (NOW + timedelta(days=1)).isoformat()}
        assert derive_status(row, NOW) == CertificateStatus.ACTIVE

    def test_revoked_wins_over_expired(self, sample_certificate_row):
        row = {**sample_certificate_row, "is_revoked": True, "expires_at": "2024-12-31T00:00:00Z"}
        assert derive_status(row, NOW) == CertificateStatus.REVOKED

    def test_expired_wins_over_pending(self, sample_certificate_row):
        row = {**sample_certificate_row, "issued_at": None, "expires_at": "2024-12-31T00:00:00Z"}
        assert derive_status(row, NOW) == CertificateStatus.EXPIRED


class TestGenerateCertificateId:

    def test_format(self):
        assert re.fullmatch(r"CERT-[0-9A-F]{12}", generate_certificate_id())

    def test_unique(self):
        assert len({generate_certificate_id() for _ in range(50)}) == 50


# =============================================================================
# Create Tests
# =============================================================================

class TestCreateCertificate:
    """Test issuing certificates."""

    def test_create_fills_defaults(self, mock_db, mock_queue, sample_certificate_row, sample_issuer_row, metrics):
        mock_db.fetch_record.return_value = sample_issuer_row
        mock_db.fetch_by_field.return_value = None
        mock_db.insert_record.return_value = sample_certificate_row

        certificate = CertificateService.create_certificate(_create_payload())

        table, record = mock_db.insert_record.call_args.args
        assert table == "certificates"
        assert record["recipient_email"] == "ada@example.com"
        assert re.fullmatch(r"CERT-[0-9A-F]{12}", record["certificate_id"])
        assert record["issued_at"]
        assert record["is_revoked"] is False
        assert certificate["status"] == "active"

        issued = metrics.registry.get_sample_value("certificate_issued_total", {"issuer_id": ISSUER_ID})
        assert issued == 1.0

    def test_create_queues_notice(self, mock_db, mock_queue, sample_certificate_row, sample_issuer_row):
        mock_db.fetch_record.return_value = sample_issuer_row
        mock_db.fetch_by_field.return_value = None
        mock_db.insert_record.return_value = sample_certificate_row

        CertificateService.create_certificate(_create_payload())

        request = mock_queue.queue_certificate_issued.call_args.args[0]
        assert request.to == "ada@example.com"
        assert request.certificate_id == "CERT-1A2B3C4D5E6F"
        assert request.certificate_name == "Blockchain Fundamentals"

    def test_queue_failure_does_not_fail_create(self, mock_db, mock_queue, sample_certificate_row, sample_issuer_row):
        mock_db.fetch_record.return_value = sample_issuer_row
        mock_db.fetch_by_field.return_value = None
        mock_db.insert_record.return_value = sample_certificate_row
        mock_queue.queue_certificate_issued.side_effect = ConnectionError("redis down")

        certificate = CertificateService.create_certificate(_create_payload())

        assert certificate["id"] == CERTIFICATE_UUID

    def test_duplicate_certificate_id(self, mock_db, mock_queue, sample_certificate_row, sample_issuer_row):
        mock_db.fetch_record.return_value = sample_issuer_row
        mock_db.fetch_by_field.return_value = sample_certificate_row

        with pytest.raises(CertificateException) as exc_info:
            CertificateService.create_certificate(_create_payload(certificate_id="CERT-1A2B3C4D5E6F"))

        assert exc_info.value.error_code == ErrorCode.CERTIFICATE_ALREADY_EXISTS
        assert exc_info.value.status_code == 409
        mock_db.insert_record.assert_not_called()

    def test_unknown_issuer(self, mock_db, mock_queue):
        mock_db.fetch_record.return_value = None

        with pytest.raises(NotFoundException):
            CertificateService.create_certificate(_create_payload())

    def test_malformed_tx_hash(self, mock_db, mock_queue):
        with pytest.raises(StellarException) as exc_info:
            CertificateService.create_certificate(_create_payload(blockchain_tx_hash="XYZ"))

        assert exc_info.value.error_code == ErrorCode.INVALID_TRANSACTION
        mock_db.insert_record.assert_not_called()

    def test_malformed_recipient_key(self, mock_db, mock_queue):
        with pytest.raises(StellarException) as exc_info:
            CertificateService.create_certificate(_create_payload(recipient_public_key="GBAD"))

        assert exc_info.value.error_code == ErrorCode.INVALID_STELLAR_ADDRESS


# =============================================================================
# Update / Revoke / Delete Tests
# =============================================================================

class TestUpdateCertificate:

    def test_update(self, mock_db, sample_certificate_row):
        mock_db.fetch_record.return_value = sample_certificate_row
        mock_db.update_record.return_value = {**sample_certificate_row, "title": "Advanced"}

        certificate = CertificateService.update_certificate(CERTIFICATE_UUID, {"title": "Advanced", "content": None})

        _, _, data = mock_db.update_record.call_args.args
        assert data["title"] == "Advanced"
        assert "content" not in data
        assert certificate["title"] == "Advanced"

    def test_revoked_cannot_be_edited(self, mock_db, sample_certificate_row):
        mock_db.fetch_record.return_value = {**sample_certificate_row, "is_revoked": True}

        with pytest.raises(CertificateException) as exc_info:
            CertificateService.update_certificate(CERTIFICATE_UUID, {"title": "Advanced"})

        assert exc_info.value.error_code == ErrorCode.CERTIFICATE_REVOKED
        mock_db.update_record.assert_not_called()

    def test_not_found(self, mock_db):
        mock_db.fetch_record.return_value = None

        with pytest.raises(CertificateException) as exc_info:
            CertificateService.update_certificate(CERTIFICATE_UUID, {"title": "Advanced"})

        assert exc_info.value.status_code == 404


class TestRevokeCertificate:

    def test_revoke(self, mock_db, mock_queue, sample_certificate_row):
        revoked = {
            **sample_certificate_row,
            "is_revoked": True,
            "revocation_reason": "Issued in error",
            "revoked_at": "2025-01-05T12:00:00Z",
        }
        mock_db.fetch_record.return_value = sample_certificate_row
        mock_db.update_record.return_value = revoked

        certificate = CertificateService.revoke_certificate(CERTIFICATE_UUID, "Issued in error")

        _, _, data = mock_db.update_record.call_args.args
        assert data["is_revoked"] is True
        assert data["revocation_reason"] == "Issued in error"
        assert data["revoked_at"] == data["updated_at"]
        assert certificate["status"] == "revoked"

        notice = mock_queue.queue_revocation_notice.call_args.args[0]
        assert notice.reason == "Issued in error"
        assert notice.revocation_date == datetime(2025, 1, 5, 12, 0, tzinfo=timezone.utc)

    def test_already_revoked(self, mock_db, mock_queue, sample_certificate_row):
        mock_db.fetch_record.return_value = {**sample_certificate_row, "is_revoked": True}

        with pytest.raises(CertificateException) as exc_info:
            CertificateService.revoke_certificate(CERTIFICATE_UUID, "Again")

        assert exc_info.value.message == "Certificate is already revoked"
        mock_queue.queue_revocation_notice.assert_not_called()


class TestDeleteCertificate:

    def test_delete_missing(self, mock_db):
        mock_db.delete_record.return_value = False

        with pytest.raises(CertificateException) as exc_info:
            CertificateService.delete_certificate(CERTIFICATE_UUID)

        assert exc_info.value.error_code == ErrorCode.CERTIFICATE_NOT_FOUND


# =============================================================================
# Verification Tests
# =============================================================================

class TestVerifyCertificate:
    """Test public verification."""

    def test_lookup_by_uuid(self, mock_db, sample_certificate_row, stellar_service):
        mock_db.fetch_record.return_value = sample_certificate_row

        result = asyncio.run(CertificateService.verify_certificate(CERTIFICATE_UUID, stellar_service))

        mock_db.fetch_record.assert_called_once_with("certificates", CERTIFICATE_UUID)
        assert result["is_valid"] is True
        assert result["blockchain_verified"] is None
        stellar_service.verify_transaction.assert_not_awaited()

    def test_lookup_by_certificate_id(self, mock_db, sample_certificate_row, stellar_service, metrics):
        mock_db.fetch_by_field.return_value = sample_certificate_row

        result = asyncio.run(CertificateService.verify_certificate("CERT-1A2B3C4D5E6F", stellar_service))

        mock_db.fetch_by_field.assert_called_once_with("certificates", "certificate_id", "CERT-1A2B3C4D5E6F")
        assert result["certificate_id"] == "CERT-1A2B3C4D5E6F"
        verified = metrics.registry.get_sample_value("certificate_verified_total", {"issuer_id": ISSUER_ID})
        assert verified == 1.0

    def test_transaction_checked_on_ledger(self, mock_db, sample_certificate_row, stellar_service):
        mock_db.fetch_by_field.return_value = {**sample_certificate_row, "blockchain_tx_hash": VALID_TX_HASH}
        stellar_service.verify_transaction.return_value = False

        result = asyncio.run(CertificateService.verify_certificate("CERT-1A2B3C4D5E6F", stellar_service))

        stellar_service.verify_transaction.assert_awaited_once_with(VALID_TX_HASH)
        assert result["blockchain_verified"] is False
        assert result["status"] == CertificateStatus.ACTIVE
        assert result["is_valid"] is False

    def test_revoked(self, mock_db, sample_certificate_row, stellar_service):
        mock_db.fetch_by_field.return_value = {**sample_certificate_row, "is_revoked": True}

        result = asyncio.run(CertificateService.verify_certificate("CERT-1A2B3C4D5E6F", stellar_service))

        assert result["is_revoked"] is True
        assert result["is_expired"] is False
        assert result["is_valid"] is False

    def test_not_found(self, mock_db, stellar_service):
        mock_db.fetch_by_field.return_value = None

        with pytest.raises(CertificateException) as exc_info:
            asyncio.run(CertificateService.verify_certificate("CERT-000000000000", stellar_service))

        assert exc_info.value.error_code == ErrorCode.CERTIFICATE_NOT_FOUND
