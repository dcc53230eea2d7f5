"""Domain errors and their HTTP rendering.

Every expected business failure is a subclass of `BlogAPIError` carrying
the wire `code` sent to clients as `{"error": code}` and the HTTP status
it maps to. Services raise them; the handlers registered by
`register_exception_handlers` turn them into JSON responses.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel


class BlogAPIError(Exception):
    """Base class for expected failures surfaced to API clients."""

    code = "internal-error"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)

    def to_dict(self) -> dict:
        return {"error": self.code}


# -- authentication -----------------------------------------------------------

class AuthHeaderMissing(BlogAPIError):
    code = "authHeader-invalid"
    status_code = 401


class TokenInvalid(BlogAPIError):
    """The bearer token is malformed, badly signed or carries no usable claim."""
    code = "jwt-invalid"
    status_code = 401


class UserNotFound(BlogAPIError):
    code = "user-not-found"
    status_code = 404


class UserAlreadyExists(BlogAPIError):
    code = "user-already-exist"
    status_code = 409


class PasswordMismatch(BlogAPIError):
    code = "password-mismatch"
    status_code = 401


# -- resources ----------------------------------------------------------------

class PostNotFound(BlogAPIError):
    code = "post-not-found"
    status_code = 404


class CommentNotFound(BlogAPIError):
    code = "comment-not-found"
    status_code = 404


class PermissionDenied(BlogAPIError):
    """The acting user does not own the targeted resource."""
    code = "permission-denied"
    status_code = 403


# -- request validation -------------------------------------------------------

class InvalidInput(BlogAPIError):
    """Malformed request input, rejected before any service call."""
    status_code = 400

    def __init__(self, code: str):
        self.code = code
        super().__init__(code)

    @classmethod
    def for_field(cls, field: str) -> "InvalidInput":
        return cls(f"{field}-invalid")


async def blog_api_error_handler(request: Request, exc: BlogAPIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render the first validation error as `{"error": "<field>-invalid"}`.

    Field names are reported in camelCase like the wire names (`postId`,
    `firstName`). A missing or unparsable body reports as `body-invalid`.
    """
    errors = exc.errors()
    field = "body"
    if errors:
        loc = [str(part) for part in errors[0].get("loc", ()) if not isinstance(part, int)]
        if loc:
            field = to_camel(loc[-1]) if "_" in loc[-1] else loc[-1]
    return JSONResponse(status_code=400, content=InvalidInput.for_field(field).to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogAPIError, blog_api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
