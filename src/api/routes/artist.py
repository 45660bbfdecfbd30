"""Artist performance endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from src.api.dependencies.common import get_track_service
from src.middleware.auth import get_current_session
from src.schemas.music import ArtistSaleResponse
from src.services.session_issuer import SessionContext
from src.services.track_service import TrackService

router = APIRouter()


@router.get("/performance", response_model=List[ArtistSaleResponse])
async def artist_performance(
    session: Optional[SessionContext] = Depends(get_current_session),
    service: TrackService = Depends(get_track_service),
):
    """Sales of the calling artist's tracks, newest first."""
    rows = await service.artist_sales(session)
    return [
        ArtistSaleResponse(
            id=row.SaleRecord.id,
            track_id=row.SaleRecord.track_id,
            title=row.title,
            release_type=row.release_type,
            fan_id=row.SaleRecord.fan_id,
            fan_name=row.fan_name,
            amount=row.SaleRecord.amount,
            timestamp=row.SaleRecord.created_at,
        )
        for row in rows
    ]
