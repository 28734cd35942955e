"""Request and response shapes for the companion and attendee operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tripshare.models.permissions import AttendeeLevel, CompanionLevel, ItemType


class CompanionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    companion_user_id: UUID
    permission_level: CompanionLevel
    created_at: datetime
    updated_at: datetime | None = None
    # What the other user granted back on their own edge.
    reverse_permission_level: CompanionLevel | None = None


class AttendeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    item_type: ItemType
    item_id: UUID
    permission_level: AttendeeLevel
    added_by: UUID
    created_at: datetime
    updated_at: datetime | None = None


class AddCompanionRequest(BaseModel):
    companion: str = Field(..., min_length=1, max_length=255, description="Email, phone or user id")
    permission_level: CompanionLevel = CompanionLevel.VIEW


class UpdateCompanionRequest(BaseModel):
    companion_user_id: UUID
    permission_level: CompanionLevel


class AddAttendeeRequest(BaseModel):
    user: str = Field(..., min_length=1, max_length=255, description="Email, phone or user id")
    item_type: ItemType
    item_id: UUID
    permission_level: AttendeeLevel | None = None


class UpdateAttendeeRequest(BaseModel):
    permission_level: AttendeeLevel


class CascadeSummary(BaseModel):
    """Counts of attendee rows touched by one cascade."""

    operation: str
    trip_id: UUID | None = None
    created: int = 0
    updated: int = 0
    removed: int = 0
    skipped: int = 0
