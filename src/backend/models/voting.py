"""
Voting models.

A voting is a time-boxed poll over a fixed set of 2-5 projects. Running
vote counts live on the options; individual ballots are ``UserVote`` rows.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlalchemy import ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base
from db.types import UTCDateTime, as_utc, utcnow

if TYPE_CHECKING:
    from models.project import Project


class VotingStatus(str, Enum):
    """Voting lifecycle status. Order of declaration is the lifecycle order."""

    UPCOMING = "upcoming"  # Created, not yet opened by an admin
    ACTIVE = "active"  # Accepting ballots while inside the date window
    CLOSED = "closed"  # Terminal, results are final


class Voting(Base):
    """
    Voting model storing metadata and lifecycle status.

    Ballot casting is gated on the *effective* state: status must be
    ``active`` and the current time must fall within ``[start_date, end_date]``.
    """

    __tablename__ = "votings"

    __table_args__ = (
        # "the active voting" lookup
        Index("ix_votings_status_created", "status", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    start_date: Mapped[datetime] = mapped_column(UTCDateTime())
    end_date: Mapped[datetime] = mapped_column(UTCDateTime())

    status: Mapped[str] = mapped_column(
        String(50),
        default=VotingStatus.UPCOMING.value,
        index=True,
    )

    created_by: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow)

    options: Mapped[list["VotingOption"]] = relationship(
        "VotingOption",
        back_populates="voting",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [VotingOption.position, VotingOption.id],
    )

    def is_effectively_active(self, now: Optional[datetime] = None) -> bool:
        """Status is active and ``now`` lies inside the date window (inclusive)."""
        now = as_utc(now) if now else utcnow()
        return (
            self.status == VotingStatus.ACTIVE.value
            and as_utc(self.start_date) <= now <= as_utc(self.end_date)
        )


class VotingOption(Base):
    """
    One selectable project within a voting.

    ``votes_count`` is only ever changed by a single atomic UPDATE statement.
    ``position`` is the creation order and the tie-break key for winners.
    """

    __tablename__ = "voting_options"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    voting_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("votings.id", ondelete="CASCADE"),
        index=True,
    )
    project_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("projects.id"),
        index=True,
    )

    votes_count: Mapped[int] = mapped_column(Integer, default=0)
    position: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)

    voting: Mapped["Voting"] = relationship("Voting", back_populates="options")
    project: Mapped["Project"] = relationship("Project")
