"""SQLAlchemy ORM model for the trade operations table.

The analytics engine only reads this table; the owning application manages
its schema.  ``Base.metadata.create_all`` exists for dev/test databases.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from decimal import Decimal

from sqlalchemy import Date, DateTime, Index, Integer, Numeric, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""

    pass


class TradeOperationRecord(Base):
    """One logged trade operation of a user."""

    __tablename__ = "trading_operations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=_new_uuid,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    operation_date: Mapped[date] = mapped_column(Date, nullable=False)
    operation_time: Mapped[time] = mapped_column(Time, nullable=False)
    result: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    strategy: Mapped[str | None] = mapped_column(String(128), nullable=True)
    asset: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    contracts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    costs: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    __table_args__ = (
        Index("ix_trading_operations_user_date", "user_id", "operation_date", "operation_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<TradeOperationRecord {self.operation_date} {self.operation_time} "
            f"{self.strategy} result={self.result}>"
        )
