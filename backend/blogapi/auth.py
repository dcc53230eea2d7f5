"""Bearer token gate for protected routes.

`get_current_user_id` is a FastAPI dependency that reads the raw
`Authorization` header, verifies the bearer token through
`AuthService.verify_token` and binds the resolved user id to
`request.state.user_id`. Rejections are raised as `errors` variants and
rendered as 401 responses:

- no header (or an empty one): `authHeader-invalid`
- anything else that fails, including a token whose user no longer
  exists: `jwt-invalid`
"""

from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader

from . import errors, services
from .dependencies import get_auth_service

authorization_header = APIKeyHeader(
    name="Authorization",
    scheme_name="bearerAuth",
    description="Enter `Bearer <token>` using the token returned by `/auth/login` or `/auth/signup`.",
    auto_error=False,
)


def parse_bearer(header: Optional[str]) -> str:
    """Extract the token from an `Authorization: Bearer <token>` value."""
    if not header:
        raise errors.AuthHeaderMissing()
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise errors.TokenInvalid("malformed authorization header")
    return token.strip()


def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Security(authorization_header),
    auth: services.AuthService = Depends(get_auth_service),
) -> int:
    """FastAPI dependency returning the authenticated user's id."""
    token = parse_bearer(authorization)
    try:
        user = auth.verify_token(token)
    except (errors.TokenInvalid, errors.UserNotFound):
        # both cases look the same to the client
        raise errors.TokenInvalid()
    request.state.user_id = user.id
    return user.id
