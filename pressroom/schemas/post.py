"""
Pressroom Backend: Post Schemas
===============================

What:  Request bodies for creating/editing posts and the post representation.
Why:   PostUpdate is partial: omitted fields keep their stored value, but a field
       that is sent must not be blank.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    content: str = Field(min_length=1)


class PostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    content: Optional[str] = Field(default=None, min_length=1)

    def changes(self) -> dict:
        """Fields the client actually sent, ready for a partial update."""
        return self.model_dump(exclude_none=True)


class PostOwner(BaseModel):
    id: uuid.UUID
    username: str

    model_config = {"from_attributes": True}


class PostResponse(BaseModel):
    """
    What:  Full representation of a post as shown in the feed.
    Why:   `owner` carries the author's username so the feed needs no second request.
    """
    id: uuid.UUID
    title: str
    content: str
    owner: PostOwner
    likes: int = Field(ge=0)
    dislikes: int = Field(ge=0)
    created_at: datetime

    model_config = {"from_attributes": True}
