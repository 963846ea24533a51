"""
API v1 routes.

Defines REST endpoints for the waitlist: public join/status/verify and
role-gated administration. Domain errors propagate to the handlers in
src.api.errors.
"""

from fastapi import APIRouter, Depends, Query, status
from pydantic import EmailStr

from src.api.dependencies import get_admin_actor, get_administration, get_waitlist_service
from src.api.models import (
    ApproveRequest,
    BulkApproveRequest,
    BulkApproveResponse,
    EntryResponse,
    ErrorResponse,
    JoinRequest,
    JoinResponse,
    ListResponse,
    RejectRequest,
    StatsResponse,
    StatusResponse,
    VerifyInviteRequest,
    VerifyInviteResponse,
)
from src.domain.admin import Actor, WaitlistAdministration
from src.domain.ports import SortDirection, SortField, WaitlistStatus
from src.domain.waitlist import WaitlistService

router = APIRouter(prefix="/waitlist", tags=["v1"])

_admin_errors = {
    403: {"model": ErrorResponse, "description": "Caller is not an administrator"},
}


@router.post(
    "/join",
    response_model=JoinResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Already on the waitlist, or waitlist full"},
        422: {"description": "Validation error"},
    },
    summary="Join the waitlist",
)
def join(
    request_data: JoinRequest,
    service: WaitlistService = Depends(get_waitlist_service),
) -> JoinResponse:
    """
    Add an email to the waitlist.

    - **email**: Email address to queue
    - **referred_by**: Optional referral identifier
    - **metadata**: Optional free-form object stored verbatim
    """
    entry = service.join(
        request_data.email,
        referred_by=request_data.referred_by,
        metadata=request_data.metadata,
    )
    return JoinResponse(
        id=entry.id,
        email=entry.email,
        status=entry.status,
        position=entry.position,
        created_at=entry.created_at,
    )


@router.get(
    "/status",
    response_model=StatusResponse,
    responses={404: {"model": ErrorResponse, "description": "Email not on the waitlist"}},
    summary="Check waitlist status",
)
def get_status(
    email: EmailStr = Query(...),
    service: WaitlistService = Depends(get_waitlist_service),
) -> StatusResponse:
    entry = service.get_status(email)
    return StatusResponse(status=entry.status, position=entry.position)


@router.post(
    "/verify-invite",
    response_model=VerifyInviteResponse,
    summary="Verify an invite code",
    description="Never fails for unknown or expired codes; returns valid=false instead.",
)
def verify_invite(
    request_data: VerifyInviteRequest,
    service: WaitlistService = Depends(get_waitlist_service),
) -> VerifyInviteResponse:
    result = service.verify_invite(request_data.invite_code)
    return VerifyInviteResponse(valid=result.valid, email=result.email)


@router.post(
    "/approve",
    response_model=EntryResponse,
    responses={
        **_admin_errors,
        400: {"model": ErrorResponse, "description": "Entry already registered"},
        404: {"model": ErrorResponse, "description": "Entry not found"},
    },
    summary="Approve a waitlist entry",
)
def approve(
    request_data: ApproveRequest,
    actor: Actor = Depends(get_admin_actor),
    admin: WaitlistAdministration = Depends(get_administration),
) -> EntryResponse:
    return EntryResponse.model_validate(admin.approve(actor, request_data.email))


@router.post(
    "/reject",
    response_model=EntryResponse,
    responses={
        **_admin_errors,
        400: {"model": ErrorResponse, "description": "Entry already registered"},
        404: {"model": ErrorResponse, "description": "Entry not found"},
    },
    summary="Reject a waitlist entry",
)
def reject(
    request_data: RejectRequest,
    actor: Actor = Depends(get_admin_actor),
    admin: WaitlistAdministration = Depends(get_administration),
) -> EntryResponse:
    entry = admin.reject(actor, request_data.email, request_data.reason)
    return EntryResponse.model_validate(entry)


@router.post(
    "/bulk-approve",
    response_model=BulkApproveResponse,
    responses=_admin_errors,
    summary="Bulk approve waitlist entries",
    description="Approve the listed pending emails, or the `count` oldest pending entries.",
)
def bulk_approve(
    request_data: BulkApproveRequest,
    actor: Actor = Depends(get_admin_actor),
    admin: WaitlistAdministration = Depends(get_administration),
) -> BulkApproveResponse:
    emails = [str(e) for e in request_data.emails] if request_data.emails else None
    result = admin.bulk_approve(actor, emails=emails, count=request_data.count)
    return BulkApproveResponse(
        approved=result.approved,
        entries=[EntryResponse.model_validate(e) for e in result.entries],
    )


@router.get(
    "/list",
    response_model=ListResponse,
    responses=_admin_errors,
    summary="List waitlist entries",
)
def list_entries(
    status_filter: WaitlistStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: SortField = Query(SortField.CREATED_AT),
    sort_direction: SortDirection = Query(SortDirection.DESC),
    actor: Actor = Depends(get_admin_actor),
    admin: WaitlistAdministration = Depends(get_administration),
) -> ListResponse:
    result = admin.list_entries(
        actor,
        status=status_filter,
        page=page,
        limit=limit,
        sort_by=sort_by,
        direction=sort_direction,
    )
    return ListResponse(
        entries=[EntryResponse.model_validate(e) for e in result.entries],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses=_admin_errors,
    summary="Waitlist statistics",
)
def stats(
    actor: Actor = Depends(get_admin_actor),
    admin: WaitlistAdministration = Depends(get_administration),
) -> StatsResponse:
    result = admin.stats(actor)
    return StatsResponse(
        total=result.total,
        pending=result.pending,
        approved=result.approved,
        rejected=result.rejected,
        registered=result.registered,
    )
