"""
Archive Tree — Activity Log model.
Audit entries browsed month by month through their ``created_at`` stamp.
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from archive_tree.database import Base
from archive_tree.models.types import UTCDateTime


class ActivityLog(Base):
    """Immutable audit trail; archived on ``created_at``."""
    __tablename__ = "activity_logs"
    __archive_field__ = "created_at"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)   # "post", "comment"
    entity_id: Mapped[str] = mapped_column(String(40), nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False)        # "published", "edited"
    description: Mapped[str] = mapped_column(Text, default="")
    actor: Mapped[str] = mapped_column(String(200), default="admin")

    extra_data: Mapped[dict] = mapped_column("metadata", JSON, default=dict)

    created_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), server_default=func.now()
    )

    def __repr__(self):
        return f"<ActivityLog {self.entity_type}/{self.entity_id} — {self.action}>"
