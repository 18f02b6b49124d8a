"""Password hashing, login and access tokens.

Tokens are HS256 JWTs whose `sub` claim is the user id. The role is not put in
the token; it is re-read from the store on every request so a role change
takes effect immediately.
"""

import os
from datetime import UTC, datetime, timedelta

import jwt
from passlib.context import CryptContext
from protean.utils.globals import current_domain

from storefront.shared.exceptions import BadRequest, ErrorCode, NotFound, Unauthenticated
from storefront.user.user import User
from storefront.utils.logging import get_environment, get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


_LOCAL_ENVIRONMENTS = ("development", "test")


def jwt_secret() -> str:
    """Signing key for access tokens.

    Only development and test runs may fall back to a built-in key; everywhere
    else `JWT_SECRET` must be set.
    """
    secret = os.getenv("JWT_SECRET")
    if secret:
        return secret
    if get_environment() in _LOCAL_ENVIRONMENTS:
        return "storefront-dev-secret"
    raise RuntimeError("JWT_SECRET must be set outside development and test environments")


def jwt_algorithm() -> str:
    return os.getenv("JWT_ALGORITHM", "HS256")


def token_ttl() -> timedelta:
    return timedelta(minutes=int(os.getenv("ACCESS_TOKEN_TTL_MINUTES", "10080")))


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user_id: str) -> str:
    now = datetime.now(UTC)
    payload = {"sub": str(user_id), "iat": now, "exp": now + token_ttl()}
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> str:
    """Return the user id carried by `token`, or raise Unauthenticated."""
    try:
        payload = jwt.decode(token, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.PyJWTError:
        raise Unauthenticated("Unauthorized") from None

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Unauthorized")
    return user_id


def authenticate(email: str, password: str) -> tuple[User, str]:
    """Check credentials and issue a token for the matching user."""
    user = current_domain.repository_for(User).find_by_email(email)
    if user is None:
        logger.info("login_failed", reason="unknown_email")
        raise NotFound("User not found", ErrorCode.USER_NOT_FOUND)

    if not verify_password(password, user.password_hash):
        logger.info("login_failed", reason="incorrect_password", user_id=str(user.id))
        raise BadRequest("Incorrect password", ErrorCode.INCORRECT_PASSWORD)

    return user, create_access_token(str(user.id))
