"""
Ballot record model.

One row per (user, voting). The unique constraint is the authoritative guard
against double voting; application checks are only an early exit.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.types import UTCDateTime, utcnow


class UserVote(Base):
    __tablename__ = "user_votes"

    __table_args__ = (
        UniqueConstraint("user_id", "voting_id", name="uq_user_votes_user_voting"),
        Index("ix_user_votes_user_voted_at", "user_id", "voted_at"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
    )
    voting_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("votings.id", ondelete="CASCADE"),
        index=True,
    )
    option_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("voting_options.id", ondelete="CASCADE"),
    )

    voted_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
