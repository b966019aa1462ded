"""ORM models. Importing this package registers every table on Base.metadata."""

from pressroom.models.news import NewsItem
from pressroom.models.post import Post
from pressroom.models.user import User

__all__ = ["NewsItem", "Post", "User"]
