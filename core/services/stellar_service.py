# =============================================================================
# core/services/stellar_service.py - Stellar Network Verification
# =============================================================================
# Read-only access to the Stellar network through Horizon:
# - verify_transaction: does a transaction hash exist on the ledger?
# - verify_account: does an account exist?
# - check_network_health: is Horizon reachable?
#
# Key validation uses stellar_sdk's StrKey/Keypair. Nothing here signs or
# submits transactions.
#
# Usage:
#   from core.services.stellar_service import get_stellar_service
#   exists = await get_stellar_service().verify_account("GABC...")
# =============================================================================

import logging
from typing import Any

import httpx
from stellar_sdk import Keypair, StrKey

from app.config import settings
from core.constants import STELLAR_ADDRESS_REGEX, STELLAR_TRANSACTION_HASH_REGEX

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class StellarService:
    """
    Thin async client for Horizon.

    Lookups never raise: a 404, an unexpected status or a transport error
    is logged and reported as False.
    """

    def __init__(
        self,
        horizon_url: str | None = None,
        network: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.horizon_url = (horizon_url or settings.STELLAR_HORIZON_URL).rstrip("/")
        self.network = network or settings.STELLAR_NETWORK
        self._client = client or httpx.AsyncClient(
            base_url=self.horizon_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # Horizon lookups
    # -------------------------------------------------------------------------

    async def _exists(self, path: str, what: str) -> bool:
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as e:
            logger.error(f"{what} verification failed: {e!r}")
            return False

        if response.status_code == 200:
            return True
        if response.status_code == 404:
            logger.info(f"{what} not found on {self.network}")
        else:
            logger.error(f"{what} verification failed: Horizon returned {response.status_code}")
        return False

    async def verify_transaction(self, tx_hash: str) -> bool:
        """True if the transaction exists on the ledger."""
        return await self._exists(f"/transactions/{tx_hash}", f"Transaction {tx_hash}")

    async def verify_account(self, account_id: str) -> bool:
        """True if the account exists on the network."""
        return await self._exists(f"/accounts/{account_id}", f"Account {account_id}")

    async def check_network_health(self) -> bool:
        """True if the Horizon root answers 200."""
        try:
            response = await self._client.get("/")
        except httpx.HTTPError as e:
            logger.error(f"Stellar network health check failed: {e!r}")
            return False
        return response.status_code == 200

    def get_network_info(self) -> dict[str, Any]:
        return {
            "network": self.network,
            "horizon_url": self.horizon_url,
            "passphrase": settings.stellar_network_passphrase,
        }

    # -------------------------------------------------------------------------
    # Key helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def is_valid_public_key(public_key: str | None) -> bool:
        """Full StrKey check (version byte and checksum)."""
        if not public_key:
            return False
        return StrKey.is_valid_ed25519_public_key(public_key)

    @staticmethod
    def is_valid_secret_key(secret_key: str | None) -> bool:
        if not secret_key:
            return False
        return StrKey.is_valid_ed25519_secret_seed(secret_key)

    @staticmethod
    def get_public_key_from_secret(secret_key: str) -> str:
        """
        Derive the public key for a secret seed.

        Raises:
            ValueError: If the seed is invalid
        """
        return Keypair.from_secret(secret_key).public_key

    @staticmethod
    def is_stellar_address(address: str | None) -> bool:
        """Format-only check: G followed by 55 base32 characters."""
        return bool(address) and STELLAR_ADDRESS_REGEX.match(address) is not None

    @staticmethod
    def is_transaction_hash(tx_hash: str | None) -> bool:
        """Format-only check: 64 lowercase hex characters."""
        return bool(tx_hash) and STELLAR_TRANSACTION_HASH_REGEX.match(tx_hash) is not None


_service: StellarService | None = None


def get_stellar_service() -> StellarService:
    """Process-wide Stellar service, created on first use."""
    global _service
    if _service is None:
        _service = StellarService()
        logger.info(f"Stellar service using {_service.network} via {_service.horizon_url}")
    return _service


async def close_stellar_service() -> None:
    """Close the shared HTTP client (called on shutdown)."""
    global _service
    if _service is not None:
        await _service.close()
        _service = None
