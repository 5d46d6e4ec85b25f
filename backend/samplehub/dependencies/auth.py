"""
Authorization dependencies for route protection.

A protected request must carry the access token twice: as a Bearer
Authorization header and as the HTTP-only access cookie. Both must be equal,
verify as an AccessToken, name an allowed role, and belong to an Active,
non-deleted principal. Every failure answers 403 "Unauthenticated" unless
the account check itself failed, whose status code is kept.
"""
import secrets
from typing import Annotated, Callable, Optional

from bson import ObjectId
from fastapi import Depends, Header, Request
from pydantic import BaseModel

from samplehub.core.exceptions import Forbidden, InvalidToken, ServiceError
from samplehub.core.tokens import TokenService, TokenType
from samplehub.dependencies.providers import (
    AppSettings,
    get_admin_store,
    get_token_service,
    get_user_store,
)
from samplehub.models.principal import (
    ADMIN_ROLES,
    ALL_ROLES,
    GUEST_ROLE,
    SUPER_ADMIN_ROLES,
    USER_ROLES,
    AccountStatus,
)
from samplehub.services.credential_store import AdminStore, UserStore, store_for_role


class ClientIdentity(BaseModel):
    """The caller, as attached to request.state.client."""
    id: str
    name: str
    role: str
    status: str


def _bearer_token(authorization: Optional[str]) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Forbidden()
    return token.strip()


def require_access(*roles: str, allow_guest: bool = False) -> Callable:
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/admin-only")
        async def admin_route(client: ClientIdentity = Depends(require_access("Admin"))):
            ...

    Args:
        *roles: Roles that are allowed to access the route
        allow_guest: Let requests without an Authorization header through as Guest

    Returns:
        Dependency resolving to the caller's ClientIdentity
    """
    allowed = frozenset(roles)

    async def access_checker(
        request: Request,
        settings: AppSettings,
        tokens: Annotated[TokenService, Depends(get_token_service)],
        users: Annotated[UserStore, Depends(get_user_store)],
        admins: Annotated[AdminStore, Depends(get_admin_store)],
        authorization: Annotated[Optional[str], Header()] = None,
    ) -> ClientIdentity:
        if authorization is None and allow_guest:
            identity = ClientIdentity(
                id=str(ObjectId()),
                name="Guest",
                role=GUEST_ROLE,
                status=AccountStatus.ACTIVE.value,
            )
            request.state.client = identity
            return identity

        token = _bearer_token(authorization)
        cookie = request.cookies.get(settings.access_cookie_name)
        if not cookie or not secrets.compare_digest(token.encode(), cookie.encode()):
            raise Forbidden()

        try:
            payload = tokens.verify(token, TokenType.ACCESS)
        except InvalidToken:
            raise Forbidden()
        if payload.role not in allowed:
            raise Forbidden()

        store = store_for_role(payload.role, users, admins)
        try:
            principal = await store.check_status(payload.id, [AccountStatus.ACTIVE.value])
        except ServiceError as exc:
            raise Forbidden(status_code=exc.status_code)
        if principal.role not in allowed:
            raise Forbidden()

        identity = ClientIdentity(
            id=principal.id,
            name=principal.name,
            role=principal.role,
            status=principal.status,
        )
        request.state.client = identity
        return identity

    return access_checker


super_admin_access = require_access(*SUPER_ADMIN_ROLES)
admin_access = require_access(*ADMIN_ROLES)
user_access = require_access(*USER_ROLES)
all_role_access = require_access(*ALL_ROLES)
guest_access = require_access(*ALL_ROLES, allow_guest=True)

# Type aliases for cleaner route signatures
SuperAdminClient = Annotated[ClientIdentity, Depends(super_admin_access)]
AdminClient = Annotated[ClientIdentity, Depends(admin_access)]
UserClient = Annotated[ClientIdentity, Depends(user_access)]
AnyClient = Annotated[ClientIdentity, Depends(all_role_access)]
GuestOrClient = Annotated[ClientIdentity, Depends(guest_access)]
