# =============================================================================
# app/routers/stellar.py - Stellar Verification Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel

from app.auth import AuthUser, get_current_user
from app.exceptions import ErrorCode, StellarException
from core.services.stellar_service import StellarService, get_stellar_service

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class TransactionVerification(BaseModel):
    tx_hash: str
    network: str
    exists: bool


class AccountVerification(BaseModel):
    account_id: str
    network: str
    exists: bool


class NetworkInfo(BaseModel):
    network: str
    horizon_url: str
    passphrase: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/transactions/{tx_hash}/verify", response_model=TransactionVerification)
async def verify_transaction(
    tx_hash: Annotated[str, Path(description="64-character hex transaction hash")],
    user: AuthUser = Depends(get_current_user),
    stellar: StellarService = Depends(get_stellar_service),
):
    """
    Check whether a transaction exists on the ledger.

    Raises:
        400: INVALID_TRANSACTION for a malformed hash
    """
    if not StellarService.is_transaction_hash(tx_hash):
        raise StellarException(ErrorCode.INVALID_TRANSACTION, details={"tx_hash": tx_hash})

    exists = await stellar.verify_transaction(tx_hash)
    return TransactionVerification(tx_hash=tx_hash, network=stellar.network, exists=exists)


@router.get("/accounts/{account_id}/verify", response_model=AccountVerification)
async def verify_account(
    account_id: Annotated[str, Path(description="Stellar public key (G...)")],
    user: AuthUser = Depends(get_current_user),
    stellar: StellarService = Depends(get_stellar_service),
):
    """
    Check whether an account exists on the network.

    Raises:
        400: INVALID_STELLAR_ADDRESS for a malformed key
    """
    if not StellarService.is_stellar_address(account_id):
        raise StellarException(ErrorCode.INVALID_STELLAR_ADDRESS, details={"account_id": account_id})

    exists = await stellar.verify_account(account_id)
    return AccountVerification(account_id=account_id, network=stellar.network, exists=exists)


@router.get("/network", response_model=NetworkInfo)
async def get_network(
    user: AuthUser = Depends(get_current_user),
    stellar: StellarService = Depends(get_stellar_service),
):
    """Which Stellar network this deployment talks to."""
    return stellar.get_network_info()
