"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and the security helpers. Services are intentionally thin: they enforce
the domain rules (credential checks, resource ownership) and persist
aggregates via repositories. Failures are raised as `errors.BlogAPIError`
subclasses.
"""

import logging
from typing import List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from . import errors, models, repositories
from .config import Settings
from .security import decode_token, hash_password, issue_token, verify_password

logger = logging.getLogger("blogapi.services")

Owned = TypeVar("Owned", models.Post, models.Comment)


def ensure_owner(resource: Optional[Owned], user_id: int, not_found: Type[errors.BlogAPIError]) -> Owned:
    """Return `resource` if `user_id` owns it.

    Existence is checked first: a missing resource raises `not_found`
    even when the caller would not have owned it.
    """
    if resource is None:
        raise not_found()
    if resource.user_id != user_id:
        raise errors.PermissionDenied()
    return resource


class AuthService:
    """Authentication related operations (signup, login, token checks)."""
    def __init__(self, session: Session, settings: Settings):
        self.session = session
        self.settings = settings
        self.user_repo = repositories.UserRepository(session)

    def resolve(self, user_id: int) -> models.User:
        """Return the user with `user_id` or raise `UserNotFound`."""
        user = self.user_repo.get(user_id)
        if not user:
            raise errors.UserNotFound()
        return user

    def login(self, email_address: str, password: str) -> str:
        """Verify credentials and return a signed token."""
        user = self.user_repo.get_by_email(email_address)
        if not user:
            raise errors.UserNotFound()
        if not verify_password(password, user.password_hash, self.settings.PASSWORD_SCHEMES):
            logger.warning("login rejected: password mismatch for user %s", user.id)
            raise errors.PasswordMismatch()
        return issue_token(user.id, self.settings)

    def signup(self, first_name: str, last_name: str, email_address: str, password: str) -> str:
        """Create a user and return a signed token for it.

        Raises `UserAlreadyExists` without writing anything when the
        email address is taken.
        """
        if self.user_repo.exists_by_email(email_address):
            raise errors.UserAlreadyExists()
        user = models.User(
            first_name=first_name,
            last_name=last_name or "",
            email_address=email_address,
            password_hash=hash_password(password, self.settings.PASSWORD_SCHEMES),
        )
        try:
            user = self.user_repo.create(user)
        except IntegrityError:
            # lost a race with a concurrent signup for the same address
            self.session.rollback()
            raise errors.UserAlreadyExists()
        logger.info("user %s signed up", user.id)
        return issue_token(user.id, self.settings)

    def verify_token(self, token: str) -> models.User:
        """Return the live user a token was issued for.

        Raises `TokenInvalid` for a bad token and `UserNotFound` when the
        user no longer exists.
        """
        user_id = decode_token(token, self.settings)
        return self.resolve(user_id)


class PostService:
    """Create, read, update and delete posts."""
    def __init__(self, session: Session, page_size: int = 10):
        self.session = session
        self.page_size = page_size
        self.post_repo = repositories.PostRepository(session)

    def create_post(self, user_id: int, title: str, content: str) -> models.Post:
        post = models.Post(user_id=user_id, title=title, content=content)
        return self.post_repo.save(post)

    def list_posts(self, skip: int = 0, limit: Optional[int] = None) -> List[models.Post]:
        """Return the most recent posts, `limit` (default page size) at a time."""
        return self.post_repo.list_recent(skip, limit or self.page_size)

    def get_post(self, post_id: int) -> models.Post:
        post = self.post_repo.get(post_id)
        if not post:
            raise errors.PostNotFound()
        return post

    def update_post(self, user_id: int, post_id: int, title: str, content: str) -> models.Post:
        post = ensure_owner(self.post_repo.get(post_id), user_id, errors.PostNotFound)
        post.title = title
        post.content = content
        post.updated_at = models.utcnow()
        return self.post_repo.save(post)

    def delete_post(self, user_id: int, post_id: int) -> None:
        post = ensure_owner(self.post_repo.get(post_id), user_id, errors.PostNotFound)
        self.post_repo.delete(post)
        logger.info("post %s deleted by user %s", post_id, user_id)


class CommentService:
    """Create, read, update and delete comments on posts."""
    def __init__(self, session: Session, page_size: int = 10):
        self.session = session
        self.page_size = page_size
        self.post_repo = repositories.PostRepository(session)
        self.comment_repo = repositories.CommentRepository(session)

    def create_comment(self, user_id: int, post_id: int, comment: str) -> models.Comment:
        """Attach a comment to an existing post."""
        if not self.post_repo.get(post_id):
            raise errors.PostNotFound()
        return self.comment_repo.save(models.Comment(user_id=user_id, post_id=post_id, comment=comment))

    def list_comments(self, post_id: int, skip: int = 0, limit: Optional[int] = None) -> List[models.Comment]:
        if not self.post_repo.get(post_id):
            raise errors.PostNotFound()
        return self.comment_repo.list_for_post(post_id, skip, limit or self.page_size)

    def update_comment(self, user_id: int, comment_id: int, comment: str) -> models.Comment:
        target = ensure_owner(self.comment_repo.get(comment_id), user_id, errors.CommentNotFound)
        target.comment = comment
        target.updated_at = models.utcnow()
        return self.comment_repo.save(target)

    def delete_comment(self, user_id: int, comment_id: int) -> None:
        target = ensure_owner(self.comment_repo.get(comment_id), user_id, errors.CommentNotFound)
        self.comment_repo.delete(target)
