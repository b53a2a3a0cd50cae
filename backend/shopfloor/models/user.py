"""User account table."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from .base import utcnow


class UserBase(SQLModel):
    username: str = Field(unique=True, index=True, max_length=256)
    email: str = Field(unique=True, index=True, max_length=256)


# Database model, database table inferred from class name
class User(UserBase, table=True):
    __tablename__ = "users"

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36
    )
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime())
    last_login_at: datetime | None = Field(default=None, sa_type=DateTime())
