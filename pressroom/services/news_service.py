"""
Pressroom Backend: News Store
=============================

What:  CRUD for news items, one feed per locale ("es" → /news, "en" → /news-en).
Why:   Both feeds share one table and one code path; `locale` scopes every query
       so an id from one feed is a 404 in the other.
How:   Images go to the injected ObjectStorage first; the row stores the returned
       durable URL and key. The database never holds image bytes.
Who:   Called by the routers built in routes/news.py.

Image lifecycle:
    create            → upload, then insert; upload is removed if the commit fails
    update + image    → upload new, commit row, then remove the old object
    update w/o image  → image fields untouched
    delete            → commit the delete, then remove its object

Writes commit inside the service, so an old object is only removed once no
committed row references it. get_db_session's own commit is then a no-op.
Removing an old object is best-effort: a storage failure there is logged and the
request still succeeds.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.exceptions import DatabaseError, NotFoundError, PressroomError, ValidationError
from pressroom.models.news import SUPPORTED_LOCALES, NewsItem
from pressroom.schemas.news import ImageUpload, NewsDraft
from pressroom.services.storage_base import ObjectStorage, StoredObject, validate_image_upload

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class NewsService:
    """
    Args:
        storage:        Where news images are kept
        max_file_size:  Upper bound for an image upload, in bytes
    """

    def __init__(self, storage: ObjectStorage, max_file_size: int):
        self.storage = storage
        self.max_file_size = max_file_size

    # ── Helpers ───────────────────────────────────────────────────────────

    def _check_locale(self, locale: str) -> None:
        if locale not in SUPPORTED_LOCALES:
            raise ValidationError(
                message=f"Unsupported locale '{locale}'",
                field="locale",
                context={"allowed": list(SUPPORTED_LOCALES)},
            )

    async def _fetch(self, db: AsyncSession, locale: str, news_id: uuid.UUID) -> NewsItem:
        self._check_locale(locale)
        try:
            result = await db.execute(
                select(NewsItem).where(NewsItem.id == news_id, NewsItem.locale == locale)
            )
            item = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching news %s: %s", news_id, str(e))
            raise DatabaseError(context={"news_id": str(news_id)})

        if item is None:
            raise NotFoundError(resource="news", resource_id=str(news_id))
        return item

    async def _store_image(self, image: ImageUpload) -> StoredObject:
        validate_image_upload(image, self.max_file_size)
        return await self.storage.upload(image.content, image.filename, image.content_type)

    async def _discard(self, key: Optional[str]) -> None:
        if not key:
            return
        try:
            await self.storage.delete(key)
        except PressroomError as e:
            logger.warning("Could not remove stored image %s: %s", key, e.message)

    # ── Operations ────────────────────────────────────────────────────────

    async def create_news(self, db: AsyncSession, locale: str, draft: NewsDraft) -> NewsItem:
        """
        Create a news item, uploading its image first when one is attached.

        Raises:
            ValidationError:       title or description missing/blank, bad image
            UpstreamServiceError:  storage upload failed (nothing is inserted)
            DatabaseError:         insert failed (the uploaded image is removed)
        """
        self._check_locale(locale)
        if _blank(draft.title) or _blank(draft.description):
            raise ValidationError(message="Title and description are required")

        stored: Optional[StoredObject] = None
        if draft.image is not None:
            stored = await self._store_image(draft.image)

        item = NewsItem(
            locale=locale,
            title=draft.title,
            description=draft.description,
            image_url=stored.url if stored else None,
            image_key=stored.key if stored else None,
            image_content_type=draft.image.content_type if stored else None,
        )
        try:
            db.add(item)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error creating news: %s", str(e))
            await self._discard(stored.key if stored else None)
            raise DatabaseError(context={"operation": "create_news"})

        logger.info("News %s created (locale=%s, image=%s)", item.id, locale, bool(stored))
        return item

    async def get_news(self, db: AsyncSession, locale: str, news_id: uuid.UUID) -> NewsItem:
        return await self._fetch(db, locale, news_id)

    async def list_news(self, db: AsyncSession, locale: str) -> List[NewsItem]:
        self._check_locale(locale)
        try:
            result = await db.execute(
                select(NewsItem)
                .where(NewsItem.locale == locale)
                .order_by(NewsItem.created_at.asc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing news: %s", str(e))
            raise DatabaseError(context={"operation": "list_news", "locale": locale})

    async def update_news(
        self,
        db: AsyncSession,
        locale: str,
        news_id: uuid.UUID,
        draft: NewsDraft,
    ) -> NewsItem:
        """
        Partial update: blank or missing text fields and a missing image keep
        their current values.
        """
        item = await self._fetch(db, locale, news_id)

        if not _blank(draft.title):
            item.title = draft.title
        if not _blank(draft.description):
            item.description = draft.description

        stale_key: Optional[str] = None
        stored: Optional[StoredObject] = None
        if draft.image is not None:
            stored = await self._store_image(draft.image)
            stale_key = item.image_key
            item.image_url = stored.url
            item.image_key = stored.key
            item.image_content_type = draft.image.content_type

        try:
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error updating news %s: %s", news_id, str(e))
            await self._discard(stored.key if stored else None)
            raise DatabaseError(context={"news_id": str(news_id)})

        await self._discard(stale_key)
        logger.info("News %s updated (new image=%s)", news_id, bool(stored))
        return item

    async def delete_news(self, db: AsyncSession, locale: str, news_id: uuid.UUID) -> None:
        item = await self._fetch(db, locale, news_id)
        image_key = item.image_key

        try:
            await db.delete(item)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting news %s: %s", news_id, str(e))
            raise DatabaseError(context={"news_id": str(news_id)})

        await self._discard(image_key)
        logger.info("News %s deleted (locale=%s)", news_id, locale)

    async def read_image(
        self,
        db: AsyncSession,
        locale: str,
        news_id: uuid.UUID,
    ) -> Tuple[bytes, str]:
        """
        Return (bytes, content_type) of the image attached to a news item.

        Raises:
            NotFoundError: unknown news id, or the item has no image
        """
        item = await self._fetch(db, locale, news_id)
        if not item.image_key:
            raise NotFoundError(resource="image", context={"news_id": str(news_id)})

        content = await self.storage.download(item.image_key)
        return content, item.image_content_type or "application/octet-stream"
