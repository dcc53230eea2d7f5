"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Each class maps to a table and uses relationships where appropriate.
"""

from typing import List, Optional
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `email_address`: unique login name
    - `password_hash`: password digest (never store plaintext)
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str = Field(nullable=False)
    last_name: str = ""
    email_address: str = Field(index=True, nullable=False, unique=True)
    password_hash: str = Field(nullable=False)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Post(SQLModel, table=True):
    """A post authored by a user.

    Deleting a post deletes its comments through the `comments`
    relationship cascade.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key='user.id', index=True)
    title: str = Field(max_length=500, nullable=False)
    content: str = Field(nullable=False)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
    author: Optional[User] = Relationship()
    comments: List['Comment'] = Relationship(
        back_populates='post',
        sa_relationship_kwargs={'cascade': 'all, delete-orphan'},
    )


class Comment(SQLModel, table=True):
    """A reply to a `Post`."""
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key='user.id', index=True)
    post_id: int = Field(foreign_key='post.id', index=True)
    comment: str = Field(nullable=False)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
    author: Optional[User] = Relationship()
    post: Optional[Post] = Relationship(back_populates='comments')
