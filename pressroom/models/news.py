"""
Pressroom Backend: NewsItem SQLAlchemy Model
============================================

What:  ORM model for the `news_items` table, shared by the Spanish (/news) and
       English (/news-en) feeds through the `locale` column.

Image storage:
    Images are never stored in the database. The upload goes to the configured
    ObjectStorage, and the row keeps:
      - image_url:          durable public URL returned by the storage backend
      - image_key:          backend key, used by GET /news/image/{id} and for cleanup
      - image_content_type: replayed as Content-Type when serving the bytes
    All three are NULL for news without an image.

Unlike posts, news items have no owner: any authenticated caller may edit them.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from pressroom.database import Base

SUPPORTED_LOCALES = ("es", "en")


class NewsItem(Base):
    __tablename__ = "news_items"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    locale: Mapped[str] = mapped_column(String(8), nullable=False, default="es")

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True, default=None)
    image_key: Mapped[str | None] = mapped_column(String(512), nullable=True, default=None)
    image_content_type: Mapped[str | None] = mapped_column(String(100), nullable=True, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_news_items_locale_created_at", "locale", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<NewsItem(id={self.id}, locale='{self.locale}', title='{self.title}')>"
