"""Track model for artist-uploaded content."""

from enum import Enum

from sqlalchemy import Column, ForeignKey, Index, String, UUID

from .base import BaseModel


class ReleaseType(str, Enum):
    """Release formats offered at upload time."""

    SINGLE = "Single"
    MIXTAPE = "Mixtape"
    ALBUM = "Album"


class Track(BaseModel):
    """
    Artist-owned content unit.

    ``release_type`` is stored as free text: uploads only offer the
    ``ReleaseType`` values, but rows written by other tools are tolerated
    and priced at zero by the purchase ledger.
    """

    __tablename__ = "tracks"

    artist_id = Column(
        UUID(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning artist account"
    )

    title = Column(
        String(100),
        nullable=False,
        comment="Track title"
    )

    release_type = Column(
        String(20),
        nullable=False,
        comment="Release type that determines the price"
    )

    genre = Column(
        String(100),
        nullable=False,
        default="Other",
        comment="Free-form genre label"
    )

    content_ref = Column(
        String(255),
        nullable=False,
        comment="Stable identifier returned by content storage"
    )

    __table_args__ = (
        Index("idx_tracks_artist", "artist_id"),
    )

    def __repr__(self) -> str:
        return f"<Track(id={self.id}, title='{self.title}', release_type='{self.release_type}')>"
