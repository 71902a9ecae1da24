# =============================================================================
# app/routers/certificates.py - Certificate Endpoints
# =============================================================================
# Issuers create, edit and revoke certificates; admins delete them.
# Plain users only ever see certificates addressed to their own email.
# Verification is public.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from app.auth import AuthUser, get_current_user, require_roles
from app.exceptions import CertificateException, ErrorCode
from core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, UserRole
from core.models.certificate import (
    CertificateCreate,
    CertificateList,
    CertificateResponse,
    CertificateRevokeRequest,
    CertificateUpdate,
    CertificateVerification,
)
from core.models.common import DeleteResponse
from core.services.certificate_service import CertificateService
from core.services.stellar_service import StellarService, get_stellar_service
from lib.utils import build_pagination

router = APIRouter()

CertificateId = Annotated[UUID, Path(description="Certificate UUID")]


def _is_plain_user(user: AuthUser) -> bool:
    return user.role == UserRole.USER


@router.post("", response_model=CertificateResponse, status_code=status.HTTP_201_CREATED)
def create_certificate(
    request: CertificateCreate,
    user: AuthUser = Depends(require_roles(UserRole.ISSUER)),
):
    """
    Issue a certificate.

    certificate_id is generated (CERT-XXXXXXXXXXXX) and issued_at set to
    now when omitted. The recipient is notified by email.

    Raises:
        400: INVALID_TRANSACTION or INVALID_STELLAR_ADDRESS
        409: CERTIFICATE_ALREADY_EXISTS
    """
    return CertificateService.create_certificate(request.model_dump(mode="json"))


@router.get("", response_model=CertificateList)
def list_certificates(
    user: AuthUser = Depends(get_current_user),
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE, description="Items per page")] = DEFAULT_PAGE_SIZE,
    recipient_email: Annotated[str | None, Query(description="Filter by recipient email")] = None,
    issuer_id: Annotated[UUID | None, Query(description="Filter by issuer")] = None,
    is_revoked: Annotated[bool | None, Query(description="Filter by revocation")] = None,
):
    """
    List certificates, newest first.

    For users with the plain `user` role the recipient filter is forced to
    their own email.
    """
    if _is_plain_user(user):
        recipient_email = user.email

    rows, total = CertificateService.list_certificates(
        page=page,
        limit=limit,
        recipient_email=recipient_email,
        issuer_id=issuer_id,
        is_revoked=is_revoked,
    )
    return {"data": rows, "pagination": build_pagination(page, limit, total)}


@router.get("/{certificate_id}", response_model=CertificateResponse)
def get_certificate(
    certificate_id: CertificateId,
    user: AuthUser = Depends(get_current_user),
):
    """
    Get a certificate.

    Raises:
        404: CERTIFICATE_NOT_FOUND (also for other people's certificates
            when the caller has the plain `user` role)
    """
    certificate = CertificateService.get_certificate(certificate_id)

    if _is_plain_user(user) and certificate["recipient_email"] != (user.email or "").lower():
        raise CertificateException(ErrorCode.CERTIFICATE_NOT_FOUND)

    return certificate


@router.put("/{certificate_id}", response_model=CertificateResponse)
def update_certificate(
    certificate_id: CertificateId,
    request: CertificateUpdate,
    user: AuthUser = Depends(require_roles(UserRole.ISSUER)),
):
    """
    Edit a certificate.

    Raises:
        400: CERTIFICATE_REVOKED
        404: CERTIFICATE_NOT_FOUND
    """
    return CertificateService.update_certificate(
        certificate_id,
        request.model_dump(mode="json", exclude_unset=True),
    )


@router.post("/{certificate_id}/revoke", response_model=CertificateResponse)
def revoke_certificate(
    certificate_id: CertificateId,
    request: CertificateRevokeRequest,
    user: AuthUser = Depends(require_roles(UserRole.ISSUER)),
):
    """
    Revoke a certificate and notify the recipient.

    Raises:
        400: CERTIFICATE_REVOKED if already revoked
        404: CERTIFICATE_NOT_FOUND
    """
    return CertificateService.revoke_certificate(certificate_id, request.reason)


@router.delete("/{certificate_id}", response_model=DeleteResponse)
def delete_certificate(
    certificate_id: CertificateId,
    user: AuthUser = Depends(require_roles(UserRole.ADMIN)),
):
    """Delete a certificate (admin only)."""
    CertificateService.delete_certificate(certificate_id)
    return DeleteResponse(id=str(certificate_id), message="Certificate deleted successfully")


@router.get("/{certificate_id}/verify", response_model=CertificateVerification)
async def verify_certificate(
    certificate_id: Annotated[str, Path(description="Certificate UUID or CERT-... ID")],
    stellar: StellarService = Depends(get_stellar_service),
):
    """
    Publicly verify a certificate.

    No authentication required. Checks revocation and expiry, and the
    blockchain transaction when one is recorded.
    """
    return await CertificateService.verify_certificate(certificate_id, stellar)
