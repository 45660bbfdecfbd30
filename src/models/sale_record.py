"""Sale record model for the purchase ledger."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, UniqueConstraint, UUID

from .base import BaseModel


class SaleRecord(BaseModel):
    """
    A fan's acquisition of a track.

    At most one row exists per (track_id, fan_id); the unique constraint is
    what makes concurrent acquisitions of the same track idempotent.
    """

    __tablename__ = "sales"

    track_id = Column(
        UUID(as_uuid=True),
        ForeignKey("tracks.id", ondelete="CASCADE"),
        nullable=False,
        comment="Acquired track"
    )

    fan_id = Column(
        UUID(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        comment="Acquiring account"
    )

    amount = Column(
        Integer,
        nullable=False,
        comment="Price charged, derived from the track release type"
    )

    __table_args__ = (
        UniqueConstraint("track_id", "fan_id", name="uq_sales_track_fan"),
        CheckConstraint("amount >= 0", name="ck_sales_amount"),
        Index("idx_sales_fan", "fan_id"),
    )

    def __repr__(self) -> str:
        return f"<SaleRecord(track_id={self.track_id}, fan_id={self.fan_id}, amount={self.amount})>"
