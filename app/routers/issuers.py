# =============================================================================
# app/routers/issuers.py - Issuer Endpoints
# =============================================================================
# Any authenticated user can read issuers; only admins can change them.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from app.auth import AuthUser, get_current_user, require_roles
from core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, UserRole
from core.models.common import DeleteResponse
from core.models.issuer import (
    IssuerAccountVerification,
    IssuerCreate,
    IssuerList,
    IssuerResponse,
    IssuerUpdate,
)
from core.services.issuer_service import IssuerService
from core.services.stellar_service import StellarService, get_stellar_service
from lib.utils import build_pagination

router = APIRouter()

IssuerId = Annotated[UUID, Path(description="Issuer UUID")]


@router.post("", response_model=IssuerResponse, status_code=status.HTTP_201_CREATED)
def create_issuer(
    request: IssuerCreate,
    user: AuthUser = Depends(require_roles(UserRole.ADMIN)),
):
    """
    Register an issuer.

    Raises:
        400: INVALID_STELLAR_ADDRESS
        409: If the public key is already registered
    """
    return IssuerService.create_issuer(request.model_dump(mode="json"))


@router.get("", response_model=IssuerList)
def list_issuers(
    user: AuthUser = Depends(get_current_user),
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE, description="Items per page")] = DEFAULT_PAGE_SIZE,
    is_active: Annotated[bool | None, Query(description="Filter by active flag")] = None,
):
    """List issuers, newest first."""
    rows, total = IssuerService.list_issuers(page=page, limit=limit, is_active=is_active)
    return {"data": rows, "pagination": build_pagination(page, limit, total)}


@router.get("/{issuer_id}", response_model=IssuerResponse)
def get_issuer(
    issuer_id: IssuerId,
    user: AuthUser = Depends(get_current_user),
):
    return IssuerService.get_issuer(issuer_id)


@router.put("/{issuer_id}", response_model=IssuerResponse)
def update_issuer(
    issuer_id: IssuerId,
    request: IssuerUpdate,
    user: AuthUser = Depends(require_roles(UserRole.ADMIN)),
):
    """Update an issuer (admin only)."""
    return IssuerService.update_issuer(issuer_id, request.model_dump(mode="json", exclude_unset=True))


@router.delete("/{issuer_id}", response_model=DeleteResponse)
def delete_issuer(
    issuer_id: IssuerId,
    user: AuthUser = Depends(require_roles(UserRole.ADMIN)),
):
    """Delete an issuer (admin only)."""
    IssuerService.delete_issuer(issuer_id)
    return DeleteResponse(id=str(issuer_id), message="Issuer deleted successfully")


@router.get("/{issuer_id}/verify-account", response_model=IssuerAccountVerification)
async def verify_issuer_account(
    issuer_id: IssuerId,
    user: AuthUser = Depends(get_current_user),
    stellar: StellarService = Depends(get_stellar_service),
):
    """Check that the issuer's public key exists on the Stellar network."""
    return await IssuerService.verify_account(issuer_id, stellar)
