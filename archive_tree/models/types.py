"""
Archive Tree — column types shared by the archivable models.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """``DateTime(timezone=True)`` that always writes UTC.

    SQLite drops tzinfo and keeps the wall time, so an aware value at
    another offset would land in the wrong year/month once the archive
    offset is applied. Naive values are taken to already be UTC.
    """

    impl = DateTime
    cache_ok = True

    def __init__(self):
        super().__init__(timezone=True)

    def process_bind_param(self, value: datetime | None, dialect):
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc)
        return value
