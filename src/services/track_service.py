"""Track service: artist uploads, content delivery and artist sales."""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from src.models.account import Role
from src.models.track import ReleaseType, Track
from src.services.audit_logger import AuditAction, AuditLogger
from src.services.authorization import authorize
from src.services.content_storage import LocalContentStorage
from src.services.credential_store import CredentialStore
from src.services.errors import ContentMissingError, InvalidUploadError
from src.services.purchase_ledger import PurchaseLedger
from src.services.session_issuer import SessionContext
from src.utils.validators import UploadFileValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentDelivery:
    """What a successful download hands back to the request layer."""

    track: Track
    path: Path
    amount: int
    newly_acquired: bool

    @property
    def download_name(self) -> str:
        return f"{self.track.title}{self.path.suffix}"


class TrackService:
    """Operations on tracks that go through the authorization gate."""

    def __init__(
        self,
        store: CredentialStore,
        ledger: PurchaseLedger,
        storage: LocalContentStorage,
        audit: AuditLogger,
        allowed_extensions: List[str],
        max_file_size: int,
    ):
        self.store = store
        self.ledger = ledger
        self.storage = storage
        self.audit = audit
        self.allowed_extensions = allowed_extensions
        self.max_file_size = max_file_size

    async def upload_track(
        self,
        session: Optional[SessionContext],
        title: str,
        release_type: ReleaseType,
        genre: str,
        filename: str,
        data: bytes,
        origin_address: Optional[str] = None,
    ) -> Track:
        """Store an artist's file and register the track."""
        session = authorize(session, Role.ARTIST)

        errors = UploadFileValidator.validate(
            filename, len(data), self.allowed_extensions, self.max_file_size
        )
        if errors:
            raise InvalidUploadError(errors[0].message)

        content_ref = await self.storage.store(data, filename)
        track = await self.store.create_track(
            artist_id=session.account_id,
            title=title,
            release_type=release_type.value,
            genre=genre,
            content_ref=content_ref,
        )

        await self.audit.record(session.account_id, AuditAction.uploaded_track(title), origin_address)
        logger.info(f"Artist {session.account_id} uploaded track {track.id}")
        return track

    async def acquire_content(
        self,
        session: Optional[SessionContext],
        track_id: uuid.UUID,
        origin_address: Optional[str] = None,
    ) -> ContentDelivery:
        """
        Deliver a track's content, recording the acquisition first.

        Any authenticated role may acquire. The sale is recorded even when the
        stored file turns out to be missing.

        Raises:
            UnauthenticatedError: No active session
            NotFoundError: Unknown track
            ContentMissingError: Track exists but its file does not
        """
        session = authorize(session)

        result = await self.ledger.record_acquisition(track_id, session.account_id)
        track = result.track

        if not self.storage.exists(track.content_ref):
            logger.error(f"Stored content {track.content_ref} missing for track {track.id}")
            raise ContentMissingError()

        await self.audit.record(session.account_id, AuditAction.downloaded_track(track.title), origin_address)
        return ContentDelivery(
            track=track,
            path=self.storage.path_for(track.content_ref),
            amount=result.amount,
            newly_acquired=result.recorded,
        )

    async def artist_sales(self, session: Optional[SessionContext]) -> List[Any]:
        """Sales of the calling artist's tracks, newest first."""
        session = authorize(session, Role.ARTIST)
        return await self.store.list_artist_sales(session.account_id)
