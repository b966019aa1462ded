"""
Pressroom Backend: News Routes
==============================

What:  The Spanish (/news) and English (/news-en) news feeds.
How:   `build_news_router(prefix, locale)` produces one router per feed; both
       are backed by the same NewsService and table, scoped by locale.

Route Inventory (shown for /news, identical for /news-en):
    POST   /news               bearer  multipart {title, description, image?} → 201
    GET    /news               public                                         → 200 [news]
    GET    /news/image/{id}    public  stored image bytes + content type     → 200 | 404
    GET    /news/{id}          public                                         → 200 | 404
    PUT    /news/{id}          bearer  multipart, every field optional        → 200 | 404
    DELETE /news/{id}          bearer                                         → 200 | 404

Any authenticated caller may edit or delete any news item; there is no
per-item owner.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.database import get_db_session
from pressroom.dependencies import get_current_identity, get_news_service
from pressroom.schemas.auth import Identity
from pressroom.schemas.common import ErrorResponse, MessageResponse
from pressroom.schemas.news import ImageUpload, NewsDraft, NewsResponse
from pressroom.services.news_service import NewsService

logger = logging.getLogger(__name__)


async def read_upload(upload: Optional[UploadFile]) -> Optional[ImageUpload]:
    """
    Read a multipart file field into memory.

    Browsers submit an empty part (no filename, no bytes) for an untouched file
    input; that is treated as "no image".
    """
    if upload is None or not upload.filename:
        return None
    try:
        content = await upload.read()
    finally:
        await upload.close()
    return ImageUpload(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        content=content,
    )


def build_news_router(prefix: str, locale: str) -> APIRouter:
    """Create the CRUD router for one news feed."""
    router = APIRouter(prefix=prefix, tags=[f"News ({locale})"])

    auth_errors = {
        401: {"description": "Missing bearer token", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
    }
    not_found = {404: {"description": "News item not found", "model": ErrorResponse}}

    @router.post(
        "",
        status_code=201,
        response_model=NewsResponse,
        responses={**auth_errors, 400: {"description": "Missing field or bad image", "model": ErrorResponse}},
        summary="Publish a news item",
    )
    async def create_news(
        identity: Identity = Depends(get_current_identity),
        title: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
        image: Optional[UploadFile] = File(None, description="Optional image (image/*)"),
        db: AsyncSession = Depends(get_db_session),
        news_service: NewsService = Depends(get_news_service),
    ) -> NewsResponse:
        draft = NewsDraft(title=title, description=description, image=await read_upload(image))
        item = await news_service.create_news(db, locale, draft)
        logger.info("News %s published by %s", item.id, identity.username)
        return NewsResponse.model_validate(item)

    @router.get("", response_model=List[NewsResponse], summary="List news, oldest first")
    async def list_news(
        db: AsyncSession = Depends(get_db_session),
        news_service: NewsService = Depends(get_news_service),
    ) -> List[NewsResponse]:
        items = await news_service.list_news(db, locale)
        return [NewsResponse.model_validate(item) for item in items]

    # Registered before /{news_id} so "image" is never parsed as an id
    @router.get(
        "/image/{news_id}",
        response_class=Response,
        responses={200: {"description": "Image bytes", "content": {"image/*": {}}}, **not_found},
        summary="Download the image attached to a news item",
    )
    async def get_news_image(
        news_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_session),
        news_service: NewsService = Depends(get_news_service),
    ) -> Response:
        content, content_type = await news_service.read_image(db, locale, news_id)
        return Response(
            content=content,
            media_type=content_type,
            headers={"Cache-Control": "public, max-age=86400"},
        )

    @router.get("/{news_id}", response_model=NewsResponse, responses=not_found, summary="Get one news item")
    async def get_news(
        news_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_session),
        news_service: NewsService = Depends(get_news_service),
    ) -> NewsResponse:
        item = await news_service.get_news(db, locale, news_id)
        return NewsResponse.model_validate(item)

    @router.put(
        "/{news_id}",
        response_model=NewsResponse,
        responses={**auth_errors, **not_found},
        summary="Edit a news item; omitted fields and image are kept",
    )
    async def update_news(
        news_id: uuid.UUID,
        identity: Identity = Depends(get_current_identity),
        title: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
        image: Optional[UploadFile] = File(None),
        db: AsyncSession = Depends(get_db_session),
        news_service: NewsService = Depends(get_news_service),
    ) -> NewsResponse:
        draft = NewsDraft(title=title, description=description, image=await read_upload(image))
        item = await news_service.update_news(db, locale, news_id, draft)
        return NewsResponse.model_validate(item)

    @router.delete(
        "/{news_id}",
        response_model=MessageResponse,
        responses={**auth_errors, **not_found},
        summary="Delete a news item and its image",
    )
    async def delete_news(
        news_id: uuid.UUID,
        identity: Identity = Depends(get_current_identity),
        db: AsyncSession = Depends(get_db_session),
        news_service: NewsService = Depends(get_news_service),
    ) -> MessageResponse:
        await news_service.delete_news(db, locale, news_id)
        logger.info("News %s deleted by %s", news_id, identity.username)
        return MessageResponse(message="News deleted")

    return router


router = build_news_router("/news", "es")
english_router = build_news_router("/news-en", "en")
