"""Track, sale and audit log response schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from .base import BaseSchema


class TrackResponse(BaseSchema):
    """Stored track metadata."""

    id: UUID = Field(..., description="Track identifier")
    artist_id: UUID = Field(..., description="Owning artist account")
    title: str = Field(..., description="Track title")
    release_type: str = Field(..., description="Release type")
    genre: str = Field(..., description="Genre label")
    created_at: datetime = Field(..., description="Upload timestamp")


class UploadResponse(BaseSchema):
    success: bool = Field(True, description="Whether the upload succeeded")
    track: TrackResponse = Field(..., description="Created track")


class ArtistSaleResponse(BaseSchema):
    """One sale of an artist's track."""

    id: UUID = Field(..., description="Sale identifier")
    track_id: UUID = Field(..., description="Sold track")
    title: str = Field(..., description="Track title")
    release_type: str = Field(..., description="Release type of the track")
    fan_id: UUID = Field(..., description="Acquiring account")
    fan_name: str = Field(..., description="Acquiring account username")
    amount: int = Field(..., description="Amount charged")
    timestamp: datetime = Field(..., description="Sale timestamp")


class AuditLogResponse(BaseSchema):
    """One audit trail entry."""

    id: UUID = Field(..., description="Entry identifier")
    account_id: Optional[UUID] = Field(None, description="Acting account")
    username: Optional[str] = Field(None, description="Acting account username")
    action: str = Field(..., description="Action description")
    origin_address: Optional[str] = Field(None, description="Origin address")
    timestamp: datetime = Field(..., description="Entry timestamp")
