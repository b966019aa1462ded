"""
Pressroom Backend: User SQLAlchemy Model
========================================

What:  ORM model for the `users` table (the credential store).
How:   Username is unique at the database level; the service layer checks first so
       the common case returns a friendly 409, and the constraint catches the race.

Table Design Rationale:
    - UUID primary key: non-sequential, also used as the token's user_id claim
    - password_hash: bcrypt output (salt embedded), never the raw password
    - No update/delete path is exposed by the API
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from pressroom.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
        unique=True,
        index=True,
    )

    # bcrypt hashes are 60 characters
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
