"""Purchase ledger: records each (track, fan) acquisition exactly once."""

import logging
import uuid
from dataclasses import dataclass
from typing import Dict

from src.models.track import ReleaseType, Track
from src.services.credential_store import CredentialStore
from src.services.errors import NotFoundError

logger = logging.getLogger(__name__)

PRICE_TABLE: Dict[str, int] = {
    ReleaseType.SINGLE.value: 20,
    ReleaseType.MIXTAPE.value: 40,
    ReleaseType.ALBUM.value: 50,
}


def price_for(release_type: str) -> int:
    """Unit price for a release type; unknown types are free rather than blocked."""
    return PRICE_TABLE.get(release_type, 0)


@dataclass(frozen=True)
class AcquisitionResult:
    track: Track
    recorded: bool
    amount: int


class PurchaseLedger:
    """
    Idempotent acquisition recording.

    The insert relies on the ``uq_sales_track_fan`` constraint instead of a
    read-then-write check, so any number of concurrent requests for the same
    pair produce one sale and every caller sees the same amount.
    """

    def __init__(self, store: CredentialStore):
        self.store = store

    async def record_acquisition(self, track_id: uuid.UUID, fan_id: uuid.UUID) -> AcquisitionResult:
        track = await self.store.get_track(track_id)
        if track is None:
            raise NotFoundError()

        sale, recorded = await self.store.insert_sale_if_absent(
            track_id=track.id,
            fan_id=fan_id,
            amount=price_for(track.release_type),
        )
        if recorded:
            logger.info(f"Recorded sale of track {track.id} to account {fan_id} for {sale.amount}")
        else:
            logger.debug(f"Track {track.id} already acquired by account {fan_id}")

        return AcquisitionResult(track=track, recorded=recorded, amount=sale.amount)
