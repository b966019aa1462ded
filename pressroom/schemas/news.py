"""
Pressroom Backend: News Schemas
===============================

What:  News representation plus the internal upload/draft types.
How:   News is created from multipart forms, so there are no JSON request models;
       the route collects form fields into a `NewsDraft` for the service.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ImageUpload(BaseModel):
    """An uploaded file already read into memory."""
    filename: str
    content_type: str
    content: bytes


class NewsDraft(BaseModel):
    """Fields submitted for a create or a partial update. None means "not sent"."""
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[ImageUpload] = None


class NewsResponse(BaseModel):
    id: uuid.UUID
    locale: str
    title: str
    description: str
    image_url: Optional[str] = Field(
        default=None,
        description="Durable URL of the attached image, null when there is none",
    )
    created_at: datetime

    model_config = {"from_attributes": True}
