# =============================================================================
# tests/test_stellar_service.py - Horizon Client Tests
# =============================================================================
# Horizon is replaced with httpx.MockTransport.
# =============================================================================

import asyncio

import httpx
import pytest
from stellar_sdk import Keypair

from core.services.stellar_service import StellarService
from tests.conftest import VALID_PUBLIC_KEY, VALID_TX_HASH

VALID_SECRET_KEY = Keypair.random().secret


def _service(handler) -> StellarService:
    client = httpx.AsyncClient(
        base_url="https://horizon.test",
        transport=httpx.MockTransport(handler),
    )
    return StellarService(horizon_url="https://horizon.test", network="testnet", client=client)


class TestHorizonLookups:
    """Test existence checks against Horizon."""

    def test_transaction_found(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json={"hash": VALID_TX_HASH})

        service = _service(handler)

        assert asyncio.run(service.verify_transaction(VALID_TX_HASH)) is True
        assert seen == [f"/transactions/{VALID_TX_HASH}"]

    def test_transaction_not_found(self):
        service = _service(lambda request: httpx.Response(404, json={"status": 404}))

        assert asyncio.run(service.verify_transaction(VALID_TX_HASH)) is False

    def test_account_server_error(self):
        service = _service(lambda request: httpx.Response(500))

        assert asyncio.run(service.verify_account(VALID_PUBLIC_KEY)) is False

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = _service(handler)

        assert asyncio.run(service.verify_account(VALID_PUBLIC_KEY)) is False
        assert asyncio.run(service.check_network_health()) is False

    def test_network_health(self):
        service = _service(lambda request: httpx.Response(200, json={"horizon_version": "2.0"}))

        assert asyncio.run(service.check_network_health()) is True

    def test_network_info(self):
        service = _service(lambda request: httpx.Response(200))

        info = service.get_network_info()

        assert info["network"] == "testnet"
        assert info["horizon_url"] == "https://horizon.test"
        assert info["passphrase"] == "Test SDF Network ; September 2015"


class TestKeyHelpers:

    def test_valid_public_key(self):
        assert StellarService.is_valid_public_key(VALID_PUBLIC_KEY) is True

    @pytest.mark.parametrize("key", [
        None,
        "",
        VALID_PUBLIC_KEY[:-1] + ("B" if VALID_PUBLIC_KEY.endswith("A") else "A"),
        "not-a-key",
        VALID_SECRET_KEY,
    ])
    def test_invalid_public_keys(self, key):
        assert StellarService.is_valid_public_key(key) is False

    def test_secret_key(self):
        assert StellarService.is_valid_secret_key(VALID_SECRET_KEY) is True
        assert StellarService.is_valid_secret_key(VALID_PUBLIC_KEY) is False

    def test_public_key_from_secret(self):
        keypair = Keypair.random()

        assert StellarService.get_public_key_from_secret(keypair.secret) == keypair.public_key

    def test_address_format(self):
        assert StellarService.is_stellar_address(VALID_PUBLIC_KEY) is True
        assert StellarService.is_stellar_address("GABC") is False
        assert StellarService.is_stellar_address(None) is False

    def test_transaction_hash_format(self):
        assert StellarService.is_transaction_hash(VALID_TX_HASH) is True
        assert StellarService.is_transaction_hash(VALID_TX_HASH.upper()) is False
        assert StellarService.is_transaction_hash("abc") is False
