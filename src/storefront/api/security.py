"""Bearer-token authentication and role checks for the HTTP layer.

Routes depend on `current_user` (any signed-in user) or `require_admin`.
Either dependency yields an immutable `AuthenticatedContext`; nothing is
attached to the request object.
"""

from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.shared.exceptions import Forbidden, Unauthenticated
from storefront.user.authentication import decode_access_token
from storefront.user.user import User, UserRole

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedContext:
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


async def current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedContext:
    if credentials is None:
        raise Unauthenticated("Unauthorized")

    user_id = decode_access_token(credentials.credentials)
    try:
        user = current_domain.repository_for(User).get(user_id)
    except ObjectNotFoundError:
        raise Unauthenticated("Unauthorized") from None

    return AuthenticatedContext(user_id=str(user.id), role=user.role)


async def require_admin(context: AuthenticatedContext = Depends(current_user)) -> AuthenticatedContext:
    if not context.is_admin:
        raise Forbidden("Unauthorized")
    return context
