"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
posts, comments). Repositories return SQLModel objects and perform
commits/refreshes where appropriate.
"""

from typing import List, Optional
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select
from . import models


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_email(self, email_address: str) -> Optional[models.User]:
        """Return a `User` by email address or `None` if not found."""
        stmt = select(models.User).where(models.User.email_address == email_address)
        return self.session.exec(stmt).first()

    def exists_by_email(self, email_address: str) -> bool:
        stmt = select(models.User.id).where(models.User.email_address == email_address)
        return self.session.exec(stmt).first() is not None

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)


class PostRepository:
    """CRUD operations for `Post` records."""
    def __init__(self, session: Session):
        self.session = session

    def save(self, post: models.Post) -> models.Post:
        """Insert or update `post` and return the refreshed instance."""
        self.session.add(post)
        self.session.commit()
        self.session.refresh(post)
        return post

    def get(self, post_id: int) -> Optional[models.Post]:
        """Fetch a post by id."""
        return self.session.get(models.Post, post_id)

    def list_recent(self, skip: int, limit: int) -> List[models.Post]:
        """Return a page of posts, newest first, with their authors loaded."""
        stmt = (
            select(models.Post)
            .options(selectinload(models.Post.author))
            .order_by(models.Post.created_at.desc(), models.Post.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return self.session.exec(stmt).all()

    def delete(self, post: models.Post) -> None:
        """Delete `post`; its comments go with it."""
        self.session.delete(post)
        self.session.commit()


class CommentRepository:
    """CRUD operations for `Comment` records."""
    def __init__(self, session: Session):
        self.session = session

    def save(self, comment: models.Comment) -> models.Comment:
        self.session.add(comment)
        self.session.commit()
        self.session.refresh(comment)
        return comment

    def get(self, comment_id: int) -> Optional[models.Comment]:
        return self.session.get(models.Comment, comment_id)

    def list_for_post(self, post_id: int, skip: int, limit: int) -> List[models.Comment]:
        """Return a page of a post's comments, newest first."""
        stmt = (
            select(models.Comment)
            .where(models.Comment.post_id == post_id)
            .options(selectinload(models.Comment.author))
            .order_by(models.Comment.created_at.desc(), models.Comment.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return self.session.exec(stmt).all()

    def delete(self, comment: models.Comment) -> None:
        self.session.delete(comment)
        self.session.commit()
