"""
SQLAlchemy database models.
"""
from __future__ import annotations

from sqlalchemy import (
    Integer,
    String,
    Text,
    Enum,
    Boolean,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
)

from autopunch.models import Action, AttendanceLog


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class AttendanceLogRecord(Base):
    """
    One executed attendance action.

    Rows are only ever inserted; the autoincrement id gives insertion order.
    """
    __tablename__ = "attendance_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    action: Mapped[Action] = mapped_column(Enum(Action), nullable=False)
    scheduled_time: Mapped[str | None] = mapped_column(String(5), nullable=True)  # HH:MM
    execution_time: Mapped[str] = mapped_column(String(40), nullable=False)  # ISO 8601
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    @classmethod
    def from_log(cls, log: AttendanceLog) -> "AttendanceLogRecord":
        return cls(
            user_id=log.user_id,
            action=log.action,
            scheduled_time=log.scheduled_time,
            execution_time=log.execution_time,
            success=log.success,
            error=log.error,
        )

    def to_log(self) -> AttendanceLog:
        return AttendanceLog(
            user_id=self.user_id,
            action=self.action,
            scheduled_time=self.scheduled_time,
            execution_time=self.execution_time,
            success=self.success,
            error=self.error,
        )
