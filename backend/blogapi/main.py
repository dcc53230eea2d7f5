"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the blog backend. Controllers
are intentionally thin: they validate input (through the request schemas),
delegate to services, and shape JSON responses. Domain failures raised
by services are rendered by the handlers in `errors`.

Endpoints implemented:
- POST /auth/signup
- POST /auth/login
- POST /api/posts/create-post
- GET /api/posts/get-posts
- GET /api/posts/get-post/{post_id}
- PUT /api/posts/update-post/{post_id}
- DELETE /api/posts/delete-post/{post_id}
- POST /api/comments/create-comment
- GET /api/comments/get-comments/{post_id}
- PUT /api/comments/update-comment/{comment_id}
- DELETE /api/comments/delete-comment/{comment_id}

Every `/api` route requires an `Authorization: Bearer <token>` header.
Generated documentation is served at /api-docs.
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Path, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response

from . import errors, services
from .auth import get_current_user_id
from .config import Settings
from .database import create_db_and_tables, create_db_engine
from .dependencies import get_auth_service, get_comment_service, get_post_service
from .schemas import (
    CommentEnvelope,
    CommentIn,
    CommentOut,
    CommentsEnvelope,
    CommentUpdateIn,
    DeletedOut,
    ErrorOut,
    LoginIn,
    MAX_ID,
    PostEnvelope,
    PostIn,
    PostOut,
    PostsEnvelope,
    SignupIn,
    TokenOut,
)

logger = logging.getLogger("blogapi.api")

DESCRIPTION = (
    "REST API for a small blog: signup and login return a bearer token, which "
    "is required by every `/api` route. Posts and comments can only be changed "
    "or deleted by the user who created them.\n\n"
    "Errors are returned as `{\"error\": \"<code>\"}`."
)


def _error(description: str) -> dict:
    return {"model": ErrorOut, "description": description}


UNAUTHORIZED = {
    401: _error(
        "`authHeader-invalid` when no Authorization header is sent; "
        "`jwt-invalid` when the header is not `Bearer <token>` or the token is invalid."
    )
}
BAD_REQUEST = {400: _error("`<field>-invalid` for malformed input.")}
POST_NOT_FOUND = {404: _error("`post-not-found`")}
NOT_OWNER = {403: _error("`permission-denied` when the resource belongs to another user.")}


auth_router = APIRouter(prefix="/auth", tags=["Auth"], responses=BAD_REQUEST)
api_router = APIRouter(prefix="/api", responses={**UNAUTHORIZED, **BAD_REQUEST})
misc_router = APIRouter(include_in_schema=False)


@auth_router.post('/signup', status_code=201, response_model=TokenOut,
                  responses={409: _error("`user-already-exist`")})
def signup(payload: SignupIn, auth: services.AuthService = Depends(get_auth_service)):
    """Create an account and return a bearer token for it.

    `password` and `confirmPassword` must match (`passwords-mismatch`).
    """
    if payload.password != payload.confirm_password:
        raise errors.InvalidInput("passwords-mismatch")
    token = auth.signup(payload.first_name, payload.last_name or "", payload.email_address, payload.password)
    return TokenOut(token=token)


@auth_router.post('/login', response_model=TokenOut,
                  responses={401: _error("`password-mismatch`"), 404: _error("`user-not-found`")})
def login(payload: LoginIn, auth: services.AuthService = Depends(get_auth_service)):
    """Exchange an email address and password for a bearer token."""
    token = auth.login(payload.email_address, payload.password)
    return TokenOut(token=token)


@api_router.post('/posts/create-post', status_code=201, response_model=PostEnvelope, tags=["Posts"])
def create_post(
    payload: PostIn,
    user_id: int = Depends(get_current_user_id),
    posts: services.PostService = Depends(get_post_service),
):
    """Create a post owned by the authenticated user."""
    post = posts.create_post(user_id, payload.title, payload.content)
    return PostEnvelope(post=PostOut.from_model(post))


@api_router.get('/posts/get-posts', response_model=PostsEnvelope, tags=["Posts"])
def get_posts(
    skip: int = Query(0, ge=0, le=MAX_ID, description="Number of posts to skip, for pagination."),
    user_id: int = Depends(get_current_user_id),
    posts: services.PostService = Depends(get_post_service),
):
    """List the most recent posts, one page at a time (newest first)."""
    return PostsEnvelope(posts=[PostOut.from_model(p) for p in posts.list_posts(skip)])


@api_router.get('/posts/get-post/{post_id}', response_model=PostEnvelope, tags=["Posts"], responses=POST_NOT_FOUND)
def get_post(
    post_id: int = Path(le=MAX_ID),
    user_id: int = Depends(get_current_user_id),
    posts: services.PostService = Depends(get_post_service),
):
    return PostEnvelope(post=PostOut.from_model(posts.get_post(post_id)))


@api_router.put('/posts/update-post/{post_id}', response_model=PostEnvelope, tags=["Posts"],
                responses={**POST_NOT_FOUND, **NOT_OWNER})
def update_post(
    payload: PostIn,
    post_id: int = Path(le=MAX_ID),
    user_id: int = Depends(get_current_user_id),
    posts: services.PostService = Depends(get_post_service),
):
    """Replace the title and content of a post owned by the authenticated user."""
    post = posts.update_post(user_id, post_id, payload.title, payload.content)
    return PostEnvelope(post=PostOut.from_model(post))


@api_router.delete('/posts/delete-post/{post_id}', response_model=DeletedOut, tags=["Posts"],
                   responses={**POST_NOT_FOUND, **NOT_OWNER})
def delete_post(
    post_id: int = Path(le=MAX_ID),
    user_id: int = Depends(get_current_user_id),
    posts: services.PostService = Depends(get_post_service),
):
    """Delete a post owned by the authenticated user, along with its comments."""
    posts.delete_post(user_id, post_id)
    return DeletedOut(is_deleted=True)


@api_router.post('/comments/create-comment', status_code=201, response_model=CommentEnvelope,
                 tags=["Comments"], responses=POST_NOT_FOUND)
def create_comment(
    payload: CommentIn,
    user_id: int = Depends(get_current_user_id),
    comments: services.CommentService = Depends(get_comment_service),
):
    """Comment on an existing post as the authenticated user."""
    comment = comments.create_comment(user_id, payload.post_id, payload.comment)
    return CommentEnvelope(comment=CommentOut.from_model(comment))


@api_router.get('/comments/get-comments/{post_id}', response_model=CommentsEnvelope,
                tags=["Comments"], responses=POST_NOT_FOUND)
def get_comments(
    post_id: int = Path(le=MAX_ID),
    skip: int = Query(0, ge=0, le=MAX_ID, description="Number of comments to skip, for pagination."),
    user_id: int = Depends(get_current_user_id),
    comments: services.CommentService = Depends(get_comment_service),
):
    """List a post's comments, newest first."""
    page = comments.list_comments(post_id, skip)
    return CommentsEnvelope(comments=[CommentOut.from_model(c) for c in page])


@api_router.put('/comments/update-comment/{comment_id}', response_model=CommentEnvelope, tags=["Comments"],
                responses={404: _error("`comment-not-found`"), **NOT_OWNER})
def update_comment(
    payload: CommentUpdateIn,
    comment_id: int = Path(le=MAX_ID),
    user_id: int = Depends(get_current_user_id),
    comments: services.CommentService = Depends(get_comment_service),
):
    comment = comments.update_comment(user_id, comment_id, payload.comment)
    return CommentEnvelope(comment=CommentOut.from_model(comment))


@api_router.delete('/comments/delete-comment/{comment_id}', response_model=DeletedOut, tags=["Comments"],
                   responses={404: _error("`comment-not-found`"), **NOT_OWNER})
def delete_comment(
    comment_id: int = Path(le=MAX_ID),
    user_id: int = Depends(get_current_user_id),
    comments: services.CommentService = Depends(get_comment_service),
):
    comments.delete_comment(user_id, comment_id)
    return DeletedOut(is_deleted=True)


@misc_router.get("/")
def home():
    return RedirectResponse(url="/api-docs")


@misc_router.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


async def request_context_middleware(request: Request, call_next):
    """Tag each request with an id and log its outcome.

    Any exception that escapes the route is logged with its traceback and
    answered with a generic 500 so the client always gets a response.
    """
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
        response = JSONResponse(status_code=500, content={"error": "internal-error"})
        response.headers["X-Request-ID"] = req_id
        return response
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "user_id": getattr(request.state, "user_id", None),
            },
            ensure_ascii=True,
        ),
    )
    return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables(app.state.engine)
    logger.info("database ready")
    yield
    app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own settings and database engine."""
    settings = settings or Settings()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(
        title="Blog API",
        description=DESCRIPTION,
        version="1.0.0",
        docs_url="/api-docs",
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = create_db_engine(settings.DATABASE_URL)

    # Wide-open CORS keeps local browser frontends working without extra config in dev.
    if settings.ALLOW_DEV_CORS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.middleware("http")(request_context_middleware)
    errors.register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(api_router)
    app.include_router(misc_router)
    return app


app = create_app()
