"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. Attributes are snake_case in Python and
camelCase on the wire (`alias_generator=to_camel`); validation errors are
reported under the wire name.
"""

import re
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from . import models

EMAIL_RE = re.compile(r"^[\w\-.]+@([\w-]+\.)+[\w-]{2,4}$", re.ASCII)

# largest id (and offset) a 64-bit INTEGER column can hold
MAX_ID = 2**63 - 1


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


def _email(value: str) -> str:
    if not EMAIL_RE.fullmatch(value):
        raise ValueError("malformed email address")
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]
EmailAddress = Annotated[str, AfterValidator(_email)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -- auth ---------------------------------------------------------------------

class LoginIn(CamelModel):
    """Payload for the login endpoint."""
    email_address: EmailAddress
    password: NonBlankStr


class SignupIn(CamelModel):
    """Payload for the signup endpoint.

    `lastName` may be omitted or null and is stored as an empty string.
    """
    first_name: NonBlankStr
    last_name: Optional[str] = ""
    email_address: EmailAddress
    password: NonBlankStr
    confirm_password: NonBlankStr


class TokenOut(BaseModel):
    """Authentication response containing a bearer token."""
    token: str


# -- posts --------------------------------------------------------------------

class PostIn(CamelModel):
    """Body of create-post and update-post requests."""
    title: NonBlankStr = Field(max_length=500)
    content: NonBlankStr


class AuthorOut(CamelModel):
    """Display name of the user who wrote a post or comment."""
    first_name: str
    last_name: str = ""

    @classmethod
    def from_user(cls, user: Optional[models.User]) -> Optional["AuthorOut"]:
        if user is None:
            return None
        return cls(first_name=user.first_name, last_name=user.last_name or "")


class PostOut(CamelModel):
    post_id: int
    user_id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    posted_user: Optional[AuthorOut] = None

    @classmethod
    def from_model(cls, post: models.Post, author: Optional[models.User] = None) -> "PostOut":
        return cls(
            post_id=post.id,
            user_id=post.user_id,
            title=post.title,
            content=post.content,
            created_at=post.created_at,
            updated_at=post.updated_at,
            posted_user=AuthorOut.from_user(author or post.author),
        )


class PostEnvelope(BaseModel):
    post: PostOut


class PostsEnvelope(BaseModel):
    posts: List[PostOut]


# -- comments -----------------------------------------------------------------

class CommentIn(CamelModel):
    """Body of a create-comment request. `postId` must be a JSON integer."""
    post_id: int = Field(strict=True, le=MAX_ID)
    comment: NonBlankStr


class CommentUpdateIn(CamelModel):
    comment: NonBlankStr


class CommentOut(CamelModel):
    comment_id: int
    post_id: int
    user_id: int
    comment: str
    created_at: datetime
    updated_at: datetime
    commentor: Optional[AuthorOut] = None

    @classmethod
    def from_model(cls, comment: models.Comment, author: Optional[models.User] = None) -> "CommentOut":
        return cls(
            comment_id=comment.id,
            post_id=comment.post_id,
            user_id=comment.user_id,
            comment=comment.comment,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            commentor=AuthorOut.from_user(author or comment.author),
        )


class CommentEnvelope(BaseModel):
    comment: CommentOut


class CommentsEnvelope(BaseModel):
    comments: List[CommentOut]


# -- misc ---------------------------------------------------------------------

class DeletedOut(CamelModel):
    is_deleted: bool = True


class ErrorOut(BaseModel):
    """Body of every non-2xx response."""
    error: str
