"""
Archive Tree — Post model, the canonical archivable entity.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from archive_tree.database import Base
from archive_tree.models.types import UTCDateTime


class Post(Base):
    """A blog post; drafts have no ``published_at`` and stay out of the archive."""
    __tablename__ = "posts"
    __archive_field__ = "published_at"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    body: Mapped[str] = mapped_column(Text, default="")
    featured: Mapped[bool] = mapped_column(Boolean, default=False)

    published_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )

    __table_args__ = (Index("ix_posts_published_at", "published_at"),)

    def __repr__(self):
        return f"<Post {self.title!r} @ {self.published_at}>"
