"""
Pressroom Backend: Post Routes
==============================

What:  The post feed, owner-only edits, and public voting.

Route Inventory:
    POST   /posts                  bearer         → 201 post
    GET    /posts                  public         → 200 [post]
    GET    /posts/{id}             public         → 200 post | 404
    PUT    /posts/{id}             bearer + owner → 200 post | 403 | 404 | 400
    DELETE /posts/{id}             bearer + owner → 200 message | 403 | 404
    POST   /posts/{id}/like        public         → 200 post | 404
    POST   /posts/{id}/dislike     public         → 200 post | 404

PUT reads the raw request body and lets PostService decode and validate it
only after the ownership check, so a non-owner is refused with 403 whatever the payload.
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.database import get_db_session
from pressroom.dependencies import get_current_identity, get_post_service
from pressroom.schemas.auth import Identity
from pressroom.schemas.common import ErrorResponse, MessageResponse
from pressroom.schemas.post import PostCreate, PostResponse, PostUpdate
from pressroom.services.post_service import PostService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])

_AUTH_ERRORS = {
    401: {"description": "Missing bearer token", "model": ErrorResponse},
    403: {"description": "Invalid/expired token or not the owner", "model": ErrorResponse},
}
_NOT_FOUND = {404: {"description": "Post not found", "model": ErrorResponse}}


@router.post(
    "",
    status_code=201,
    response_model=PostResponse,
    responses={**_AUTH_ERRORS, 400: {"description": "Missing title/content", "model": ErrorResponse}},
    summary="Create a post owned by the caller",
)
async def create_post(
    body: PostCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> PostResponse:
    post = await post_service.create_post(db, identity, body.title, body.content)
    return PostResponse.model_validate(post)


@router.get("", response_model=List[PostResponse], summary="List all posts, oldest first")
async def list_posts(
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> List[PostResponse]:
    posts = await post_service.list_posts(db)
    return [PostResponse.model_validate(post) for post in posts]


@router.get("/{post_id}", response_model=PostResponse, responses=_NOT_FOUND, summary="Get one post")
async def get_post(
    post_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> PostResponse:
    post = await post_service.get_post(db, post_id)
    return PostResponse.model_validate(post)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    responses={**_AUTH_ERRORS, **_NOT_FOUND, 400: {"description": "Invalid update", "model": ErrorResponse}},
    summary="Edit title and/or content of your own post",
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": PostUpdate.model_json_schema()}},
            "required": False,
        }
    },
)
async def update_post(
    post_id: uuid.UUID,
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> PostResponse:
    # decoded by the service after the ownership guard
    raw_body = await request.body()
    post = await post_service.update_post(db, identity, post_id, raw_body)
    return PostResponse.model_validate(post)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={**_AUTH_ERRORS, **_NOT_FOUND},
    summary="Delete your own post",
)
async def delete_post(
    post_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> MessageResponse:
    await post_service.delete_post(db, identity, post_id)
    return MessageResponse(message="Post deleted")


@router.post("/{post_id}/like", response_model=PostResponse, responses=_NOT_FOUND, summary="Like a post")
async def like_post(
    post_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> PostResponse:
    post = await post_service.increment_counter(db, post_id, "likes")
    return PostResponse.model_validate(post)


@router.post(
    "/{post_id}/dislike",
    response_model=PostResponse,
    responses=_NOT_FOUND,
    summary="Dislike a post",
)
async def dislike_post(
    post_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> PostResponse:
    post = await post_service.increment_counter(db, post_id, "dislikes")
    return PostResponse.model_validate(post)
