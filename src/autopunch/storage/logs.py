"""
Append-only attendance log store backed by SQLAlchemy.
"""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from autopunch.db.models import AttendanceLogRecord
from autopunch.exceptions import StoreReadFailure, StoreWriteFailure
from autopunch.models import AttendanceLog

logger = logging.getLogger(__name__)


class SqlLogStore:
    """
    Attendance logs persisted in a SQL table.

    There is no update or delete path: entries are immutable once appended.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def append(self, log: AttendanceLog) -> None:
        """
        Append one log entry.

        Raises:
            StoreWriteFailure: If the insert fails
        """
        db = self.session_factory()
        try:
            db.add(AttendanceLogRecord.from_log(log))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreWriteFailure(f"Failed to append attendance log: {e}") from e
        finally:
            db.close()

    def query_filtered(self, user_id: Optional[str] = None, limit: Optional[int] = None) -> List[AttendanceLog]:
        """
        Get logs, newest first.

        Args:
            user_id: Only return entries for this user
            limit: Maximum number of entries to return

        Returns:
            List of AttendanceLog in reverse chronological order
        """
        query = select(AttendanceLogRecord).order_by(AttendanceLogRecord.id.desc())
        if user_id:
            query = query.where(AttendanceLogRecord.user_id == user_id)
        if limit is not None:
            query = query.limit(limit)

        db = self.session_factory()
        try:
            return [record.to_log() for record in db.scalars(query).all()]
        except SQLAlchemyError as e:
            raise StoreReadFailure(f"Failed to read attendance logs: {e}") from e
        finally:
            db.close()
