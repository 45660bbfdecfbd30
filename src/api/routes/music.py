"""Track upload and download endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import FileResponse

from src.api.dependencies.common import get_origin_address, get_track_service
from src.middleware.auth import get_current_session
from src.models.track import ReleaseType
from src.schemas.music import TrackResponse, UploadResponse
from src.services.errors import InvalidUploadError
from src.services.session_issuer import SessionContext
from src.services.track_service import TrackService

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload_track(
    request: Request,
    title: str = Form(..., max_length=100, description="Track title"),
    release_type: ReleaseType = Form(..., alias="priceType", description="Single, Mixtape or Album"),
    genre: str = Form(..., max_length=100, description="Genre label"),
    file: UploadFile = File(..., description="Audio or booklet file"),
    session: Optional[SessionContext] = Depends(get_current_session),
    service: TrackService = Depends(get_track_service),
):
    """Upload a track (Artist only)."""
    title = title.strip()
    genre = genre.strip()
    if not title:
        raise InvalidUploadError("Title is required")
    if not genre:
        raise InvalidUploadError("Genre is required")

    data = await file.read()
    track = await service.upload_track(
        session,
        title=title,
        release_type=release_type,
        genre=genre,
        filename=file.filename,
        data=data,
        origin_address=get_origin_address(request),
    )
    return UploadResponse(track=TrackResponse.model_validate(track))


@router.get("/download/{track_id}")
async def download_track(
    track_id: UUID,
    request: Request,
    session: Optional[SessionContext] = Depends(get_current_session),
    service: TrackService = Depends(get_track_service),
):
    """
    Download a track's file.

    Downloading is the acquisition: the first download by an account records
    the sale, later ones are free re-deliveries. ``X-Sale-Recorded`` tells
    the two apart.
    """
    delivery = await service.acquire_content(session, track_id, get_origin_address(request))
    return FileResponse(
        delivery.path,
        filename=delivery.download_name,
        headers={
            "X-Sale-Amount": str(delivery.amount),
            "X-Sale-Recorded": "true" if delivery.newly_acquired else "false",
        },
    )
