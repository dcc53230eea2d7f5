"""FastAPI dependencies for settings and services.

Settings and the engine live on `app.state` (set by `create_app`), so
everything here is resolved per request from the running application.
"""

from fastapi import Depends, Request
from sqlmodel import Session

from . import services
from .config import Settings
from .database import get_session


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_service(
    db: Session = Depends(get_session), settings: Settings = Depends(get_settings)
) -> services.AuthService:
    return services.AuthService(db, settings)


def get_post_service(
    db: Session = Depends(get_session), settings: Settings = Depends(get_settings)
) -> services.PostService:
    return services.PostService(db, page_size=settings.PAGE_SIZE)


def get_comment_service(
    db: Session = Depends(get_session), settings: Settings = Depends(get_settings)
) -> services.CommentService:
    return services.CommentService(db, page_size=settings.PAGE_SIZE)
