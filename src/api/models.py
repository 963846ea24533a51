"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PositiveInt, model_validator

from src.domain.ports import WaitlistStatus


class JoinRequest(BaseModel):
    """Request model for joining the waitlist."""

    email: EmailStr
    referred_by: str | None = Field(None, max_length=255, description="Referral identifier")
    metadata: dict[str, Any] | None = Field(None, description="Arbitrary key/value payload")


class JoinResponse(BaseModel):
    """Response model for a successful join."""

    id: str
    email: str
    status: WaitlistStatus
    position: int | None
    created_at: datetime


class StatusResponse(BaseModel):
    status: WaitlistStatus
    position: int | None


class VerifyInviteRequest(BaseModel):
    invite_code: str = Field(..., min_length=1)


class VerifyInviteResponse(BaseModel):
    valid: bool
    email: str | None


class ApproveRequest(BaseModel):
    email: EmailStr


class RejectRequest(BaseModel):
    email: EmailStr
    reason: str | None = Field(None, max_length=500)


class BulkApproveRequest(BaseModel):
    """Approve an explicit list of emails, or the N oldest pending entries."""

    emails: list[EmailStr] | None = None
    count: PositiveInt | None = None

    @model_validator(mode="after")
    def _one_selector(self) -> "BulkApproveRequest":
        if not self.emails and self.count is None:
            raise ValueError("Provide either emails or count")
        return self


class EntryResponse(BaseModel):
    """Full waitlist entry as shown to administrators."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    status: WaitlistStatus
    invite_code: str | None
    invite_expires_at: datetime | None
    position: int | None
    referred_by: str | None
    metadata: str | None
    approved_at: datetime | None
    rejected_at: datetime | None
    registered_at: datetime | None
    created_at: datetime
    updated_at: datetime


class BulkApproveResponse(BaseModel):
    approved: int
    entries: list[EntryResponse]


class ListResponse(BaseModel):
    entries: list[EntryResponse]
    total: int
    page: int
    total_pages: int


class StatsResponse(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    registered: int


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
    code: str
