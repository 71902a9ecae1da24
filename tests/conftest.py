# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides sample database rows, auth headers and an API client
# - Isolates the metrics registry per test
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-with-enough-length")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("APP_URL", "https://stellarcert.test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from unittest.mock import AsyncMock, MagicMock

import pytest
from stellar_sdk import Keypair

from core.constants import UserRole

USER_ID = "550e8400-e29b-41d4-a716-446655440000"
ADMIN_ID = "660e8400-e29b-41d4-a716-446655440001"
ISSUER_USER_ID = "770e8400-e29b-41d4-a716-446655440002"
ISSUER_ID = "880e8400-e29b-41d4-a716-446655440003"
CERTIFICATE_UUID = "990e8400-e29b-41d4-a716-446655440004"

VALID_PUBLIC_KEY = Keypair.from_raw_ed25519_seed(bytes(range(32))).public_key
VALID_TX_HASH = "3389e9f0f1a65f19736cacf544c2e825313e8447f569233bb8db39aa607c8889"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def metrics():
    """Fresh metrics collector for every test."""
    import lib.metrics
    from lib.metrics import MetricsCollector

    collector = MetricsCollector()
    previous = lib.metrics._collector
    lib.metrics._collector = collector
    yield collector
    lib.metrics._collector = previous


@pytest.fixture
def sample_user_row():
    """users row as stored, password hash included."""
    return {
        "id": USER_ID,
        "email": "ada@example.com",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "phone": None,
        "password": "$2b$12$abcdefghijklmnopqrstuuC1mH1nBqXg7aC2kz1ZkO4s0Zr7m1G6e",
        "role": "user",
        "is_active": True,
        "created_at": "2024-01-15T10:00:00Z",
        "updated_at": "2024-01-15T10:00:00Z",
    }


@pytest.fixture
def sample_issuer_row():
    return {
        "id": ISSUER_ID,
        "name": "Stellar University",
        "public_key": VALID_PUBLIC_KEY,
        "description": "Accredited blockchain courses",
        "website": "https://stellar.university",
        "contact_email": "registrar@stellar.university",
        "is_active": True,
        "created_at": "2024-01-15T10:00:00Z",
        "updated_at": "2024-01-15T10:00:00Z",
    }


@pytest.fixture
def sample_certificate_row():
    return {
        "id": CERTIFICATE_UUID,
        "certificate_id": "CERT-1A2B3C4D5E6F",
        "title": "Blockchain Fundamentals",
        "description": "Completed the fundamentals course",
        "content": None,
        "issuer_name": "Stellar University",
        "issuer_id": ISSUER_ID,
        "recipient_email": "ada@example.com",
        "recipient_name": "Ada Lovelace",
        "recipient_public_key": None,
        "issued_at": "2024-01-15T10:30:00Z",
        "expires_at": None,
        "is_revoked": False,
        "revocation_reason": None,
        "revoked_at": None,
        "blockchain_tx_hash": None,
        "created_at": "2024-01-15T10:30:00Z",
        "updated_at": "2024-01-15T10:30:00Z",
    }


def make_token(user_id: str = USER_ID, role: UserRole = UserRole.USER, email: str = "ada@example.com") -> str:
    from app.auth.tokens import create_access_token

    return create_access_token({"id": user_id, "email": email, "role": role.value})


def auth_header(user_id: str = USER_ID, role: UserRole = UserRole.USER, email: str = "ada@example.com") -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, role, email)}"}


@pytest.fixture
def user_headers():
    return auth_header()


@pytest.fixture
def admin_headers():
    return auth_header(ADMIN_ID, UserRole.ADMIN, "admin@example.com")


@pytest.fixture
def issuer_headers():
    return auth_header(ISSUER_USER_ID, UserRole.ISSUER, "registrar@stellar.university")


@pytest.fixture
def auditor_headers():
    return auth_header(ADMIN_ID, UserRole.AUDITOR, "auditor@example.com")


@pytest.fixture
def stellar_service():
    """StellarService stand-in with async lookups."""
    service = MagicMock()
    service.network = "testnet"
    service.verify_transaction = AsyncMock(return_value=True)
    service.verify_account = AsyncMock(return_value=True)
    service.check_network_health = AsyncMock(return_value=True)
    service.get_network_info.return_value = {
        "network": "testnet",
        "horizon_url": "https://horizon-testnet.stellar.org",
        "passphrase": "Test SDF Network ; September 2015",
    }
    return service


@pytest.fixture
def client(stellar_service):
    """API client with the Stellar dependency replaced."""
    from fastapi.testclient import TestClient

    from app.main import app
    from core.services.stellar_service import get_stellar_service

    app.dependency_overrides[get_stellar_service] = lambda: stellar_service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
