"""
Pressroom Backend: Post Store
=============================

What:  CRUD and voting for posts.
Who:   Called by routes/posts.py.

Authorization summary:
    create            → any authenticated identity (becomes the owner)
    update / delete   → authenticated AND owner (Ownership Guard)
    list / get        → public
    like / dislike    → public, unbounded, no dedupe

Concurrency:
    increment_counter() issues `UPDATE posts SET likes = likes + 1 WHERE id = :id`.
    The database serializes concurrent increments of the same row, so N concurrent
    votes always add exactly N. The row is re-read afterwards only to build the
    response.

Design Decision:
    PostService is stateless; every method receives the request's session. Edits
    check ownership BEFORE validating the payload, so a non-owner always gets 403
    whatever they sent.
"""

import json
import logging
import uuid
from typing import Any, List

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.exceptions import DatabaseError, NotFoundError, ValidationError
from pressroom.models.post import COUNTER_FIELDS, Post
from pressroom.schemas.auth import Identity
from pressroom.schemas.post import PostUpdate
from pressroom.services.ownership import ensure_can_mutate

logger = logging.getLogger(__name__)


class PostService:

    async def _fetch(self, db: AsyncSession, post_id: uuid.UUID) -> Post:
        # populate_existing: refresh objects already in the identity map, e.g.
        # after a counter UPDATE that bypassed the ORM
        result = await db.execute(
            select(Post)
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    async def create_post(
        self,
        db: AsyncSession,
        owner: Identity,
        title: str,
        content: str,
    ) -> Post:
        """Create a post owned by `owner` with both counters at zero."""
        if not title or not title.strip() or not content or not content.strip():
            raise ValidationError(message="Title and content are required")

        try:
            post = Post(title=title, content=content, owner_id=owner.user_id, likes=0, dislikes=0)
            db.add(post)
            await db.flush()
            post = await self._fetch(db, post.id)
        except SQLAlchemyError as e:
            logger.error("Database error creating post: %s", str(e))
            raise DatabaseError(context={"operation": "create_post"})

        logger.info("Post %s created by %s", post.id, owner.username)
        return post

    async def get_post(self, db: AsyncSession, post_id: uuid.UUID) -> Post:
        try:
            return await self._fetch(db, post_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(context={"post_id": str(post_id)})

    async def list_posts(self, db: AsyncSession) -> List[Post]:
        """All posts in insertion order. No pagination or filtering."""
        try:
            result = await db.execute(select(Post).order_by(Post.created_at.asc()))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e))
            raise DatabaseError(context={"operation": "list_posts"})

    async def update_post(
        self,
        db: AsyncSession,
        identity: Identity,
        post_id: uuid.UUID,
        payload: Any,
    ) -> Post:
        """
        Partially update title/content of a post owned by `identity`.

        Order of checks: 404 (missing) → 403 (not owner) → 400 (bad payload).

        Args:
            payload: Request body as raw bytes, or an already decoded object.
                     Decoded and validated against PostUpdate after the guard.
        """
        post = await self.get_post(db, post_id)
        ensure_can_mutate(identity, post)

        if isinstance(payload, bytes):
            payload = self._decode_body(payload)

        try:
            changes = PostUpdate.model_validate(payload if payload is not None else {}).changes()
        except PydanticValidationError as e:
            raise ValidationError(
                message="Invalid post update",
                context={"errors": [err["msg"] for err in e.errors()]},
            )

        for field, value in changes.items():
            setattr(post, field, value)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating post %s: %s", post_id, str(e))
            raise DatabaseError(context={"post_id": str(post_id)})

        logger.info("Post %s updated (%s)", post_id, ", ".join(sorted(changes)) or "no changes")
        return post

    @staticmethod
    def _decode_body(raw: bytes) -> Any:
        """An empty body means "no changes"; anything else must be valid JSON."""
        if not raw or not raw.strip():
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(
                message="Request body is not valid JSON",
                context={"errors": [str(e)]},
            )

    async def delete_post(self, db: AsyncSession, identity: Identity, post_id: uuid.UUID) -> None:
        post = await self.get_post(db, post_id)
        ensure_can_mutate(identity, post)

        try:
            await db.delete(post)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting post %s: %s", post_id, str(e))
            raise DatabaseError(context={"post_id": str(post_id)})

        logger.info("Post %s deleted by %s", post_id, identity.username)

    async def increment_counter(self, db: AsyncSession, post_id: uuid.UUID, which: str) -> Post:
        """
        Atomically add one to `likes` or `dislikes`.

        Raises:
            ValidationError: `which` is not a counter column
            NotFoundError:   no post with that id
        """
        if which not in COUNTER_FIELDS:
            raise ValidationError(
                message=f"Unknown counter '{which}'",
                field="counter",
                context={"allowed": list(COUNTER_FIELDS)},
            )

        column = getattr(Post, which)
        try:
            result = await db.execute(
                update(Post)
                .where(Post.id == post_id)
                .values({column: column + 1})
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error("Database error incrementing %s on post %s: %s", which, post_id, str(e))
            raise DatabaseError(context={"post_id": str(post_id)})

        if result.rowcount == 0:
            raise NotFoundError(resource="post", resource_id=str(post_id))

        return await self.get_post(db, post_id)
