"""
Pressroom Backend: Ownership Guard
==================================

What:  The single rule deciding whether a verified identity may change a post.
Where: Applied to post edit and post delete only.

Deliberately NOT applied to:
    - news items: any authenticated caller may create, edit or delete them
    - likes/dislikes: public, unauthenticated, no per-user dedupe
"""

import logging

from pressroom.exceptions import ForbiddenError
from pressroom.models.post import Post
from pressroom.schemas.auth import Identity

logger = logging.getLogger(__name__)


def can_mutate(identity: Identity, post: Post) -> bool:
    """True iff the identity owns the post."""
    return post.owner_id == identity.user_id


def ensure_can_mutate(identity: Identity, post: Post) -> None:
    """Raise ForbiddenError unless the identity owns the post."""
    if not can_mutate(identity, post):
        logger.warning(
            "User %s attempted to modify post %s owned by %s",
            identity.user_id,
            post.id,
            post.owner_id,
        )
        raise ForbiddenError(
            message="Unauthorized action",
            context={"post_id": str(post.id)},
        )
