"""
SQLAlchemy ORM models for the critique memory.

Defines the schema for participants and their critique rules.
"""

from datetime import datetime, timezone
from typing import List

import sqlalchemy as sa
from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Participant(Base):
    """
    A simulated debate participant whose responses are steered by its
    critique memory.
    """

    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    position: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    archived: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, default=utcnow, nullable=False
    )

    critique_rules: Mapped[List["CritiqueRule"]] = relationship(
        "CritiqueRule", back_populates="participant", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Participant(id={self.id}, name={self.name})>"


class CritiqueRule(Base):
    """
    A critique pattern remembered for one participant.

    ``rule`` is the comparison key for similarity, ``bad_pattern`` is kept
    for diagnostics only, and ``guidance`` is the instruction rendered into
    future prompts. ``strength`` stays within [0.1, 1.0] at two decimals.
    """

    __tablename__ = "critique_rules"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    participant_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False
    )

    rule: Mapped[str] = mapped_column(sa.Text, nullable=False)
    bad_pattern: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    guidance: Mapped[str] = mapped_column(sa.Text, nullable=False)
    strength: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.7)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime, default=utcnow, nullable=False
    )

    participant: Mapped["Participant"] = relationship(
        "Participant", back_populates="critique_rules"
    )

    __table_args__ = (
        Index("idx_critique_rules_participant_id", "participant_id"),
        Index("idx_critique_rules_participant_strength", "participant_id", "strength"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<CritiqueRule(id={self.id}, participant={self.participant_id}, "
            f"strength={self.strength}, rule={self.rule[:50]})>"
        )
