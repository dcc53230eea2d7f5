"""Password digests and bearer tokens.

Passwords are digested through a passlib `CryptContext`. The default
scheme, `hex_sha512`, produces the unsalted 128-character hexadecimal
SHA-512 digest stored by earlier deployments of this service; it has no
salt or work factor. Listing a stronger scheme first in
`PASSWORD_SCHEMES` (e.g. `pbkdf2_sha256,hex_sha512`) makes new digests use
it while existing ones keep verifying.

Tokens are HS256 JWTs (PyJWT) carrying a single `userId` claim. They
carry no `exp` claim unless `JWT_EXPIRE_HOURS` is configured.
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Sequence, Tuple

import jwt
from passlib.context import CryptContext

from .config import Settings
from .errors import TokenInvalid

DEFAULT_SCHEMES: Tuple[str, ...] = ("hex_sha512",)


@lru_cache(maxsize=8)
def _password_context(schemes: Tuple[str, ...]) -> CryptContext:
    return CryptContext(schemes=list(schemes), deprecated="auto")


def hash_password(password: str, schemes: Sequence[str] = DEFAULT_SCHEMES) -> str:
    """Return the digest of `password` under the first configured scheme."""
    return _password_context(tuple(schemes)).hash(password)


def verify_password(password: str, digest: str, schemes: Sequence[str] = DEFAULT_SCHEMES) -> bool:
    """Check `password` against a stored digest.

    A digest produced by a scheme that is not configured never matches.
    """
    if not digest:
        return False
    try:
        return _password_context(tuple(schemes)).verify(password, digest)
    except ValueError:
        return False


def issue_token(user_id: int, settings: Settings) -> str:
    """Sign a token for `user_id`."""
    claims = {"userId": user_id}
    if settings.JWT_EXPIRE_HOURS:
        claims["exp"] = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRE_HOURS)
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Settings) -> int:
    """Verify `token` and return the `userId` it was issued for.

    Raises `TokenInvalid` when the signature does not validate, the token
    is structurally malformed or expired, or the claim is not an integer.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenInvalid("token expired")
    except jwt.InvalidTokenError:
        raise TokenInvalid("invalid token")
    user_id = payload.get("userId")
    # bool is an int subclass
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise TokenInvalid("invalid token payload")
    return user_id
