"""
Admin accounts router. Same shape as the user router without registration
or OTP login; creating and editing admins is reserved to super admins.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from samplehub.core.cookies import clear_token_cookies
from samplehub.dependencies.auth import AdminClient, SuperAdminClient
from samplehub.dependencies.providers import (
    AppSettings,
    RedisClient,
    get_admin_service,
    get_admin_sessions,
)
from samplehub.routers.common import deliver_session, envelope, limit_attempts
from samplehub.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
)
from samplehub.schemas.common import (
    AvailabilityResponse,
    MessageResponse,
    PaginatedResponse,
    ResultResponse,
    TokenResponse,
)
from samplehub.schemas.principal import (
    EmailChange,
    PhoneChange,
    PrincipalCreate,
    PrincipalUpdate,
    ProfileUpdate,
    StatusChange,
    UsernameChange,
)
from samplehub.services.pagination import DeletedFilter
from samplehub.services.principal_service import PrincipalService
from samplehub.services.session_service import SessionService

router = APIRouter(prefix="/api/v1/admin", tags=["Admins"])

Admins = Annotated[PrincipalService, Depends(get_admin_service)]
Sessions = Annotated[SessionService, Depends(get_admin_sessions)]


@router.get("/", response_model=PaginatedResponse, summary="List admins")
async def list_admins(
    client: AdminClient,
    admins: Admins,
    page: int = 1,
    limit: int = 10,
    timestamp: Optional[str] = None,
    role: Optional[str] = None,
    name: Optional[str] = None,
    username: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    status_filter: Annotated[Optional[list[str]], Query(alias="status")] = None,
    deleted: DeletedFilter = "NO",
):
    result = await admins.list_principals(
        page=page,
        limit=limit,
        timestamp=timestamp,
        role=role,
        name=name,
        username=username,
        email=email,
        phone=phone,
        statuses=status_filter,
        deleted=deleted,
    )
    return envelope(result)


@router.post(
    "/",
    response_model=ResultResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an admin",
)
async def add_admin(body: PrincipalCreate, client: SuperAdminClient, admins: Admins):
    return envelope(await admins.add(body))


# ==================== Sessions ====================

@router.patch("/login", response_model=TokenResponse, summary="Admin login")
async def login(
    request: Request,
    body: LoginRequest,
    response: Response,
    sessions: Sessions,
    redis: RedisClient,
    settings: AppSettings,
):
    await limit_attempts(request, redis, "admin:login", settings)
    session = await sessions.login(body)
    return deliver_session(response, session, sessions.tokens, settings, "Login Successfully")


@router.get("/upgrade-access-token", response_model=TokenResponse, summary="Refresh the session")
async def upgrade_access_token(
    request: Request,
    response: Response,
    sessions: Sessions,
    settings: AppSettings,
):
    session = await sessions.refresh(
        request.cookies.get(settings.access_cookie_name),
        request.cookies.get(settings.refresh_cookie_name),
    )
    return deliver_session(response, session, sessions.tokens, settings, "Token refreshed")


@router.post("/logout", response_model=MessageResponse, summary="Logout")
async def logout(
    request: Request,
    response: Response,
    sessions: Sessions,
    settings: AppSettings,
):
    await sessions.logout(request.cookies.get(settings.refresh_cookie_name))
    clear_token_cookies(response, settings)
    return {"success": True, "message": "Logout Successfully"}


@router.patch("/forget-password", response_model=MessageResponse)
async def forget_password(body: ForgotPasswordRequest, sessions: Sessions):
    message = await sessions.forgot_password(body.email)
    return {"success": True, "message": message}


@router.patch("/reset-password", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, sessions: Sessions):
    await sessions.reset_password(body.token, body.password)
    return {"success": True, "message": "Password reset successfully"}


@router.get("/check-username", response_model=AvailabilityResponse)
async def check_username(admins: Admins, username: Optional[str] = None):
    return envelope(await admins.check_username(username))


# ==================== Own profile ====================

@router.get("/profile", response_model=ResultResponse)
async def get_profile(client: AdminClient, admins: Admins):
    return envelope(await admins.get(client.id, client.role))


@router.patch("/profile", response_model=ResultResponse)
async def update_profile(body: ProfileUpdate, client: AdminClient, admins: Admins):
    return envelope(await admins.update_profile(client.id, body))


@router.patch("/change-username", response_model=ResultResponse)
async def change_username(body: UsernameChange, client: AdminClient, admins: Admins):
    return envelope(await admins.change_username(client.id, body.username))


@router.patch("/change-phone", response_model=ResultResponse)
async def change_phone(body: PhoneChange, client: AdminClient, admins: Admins):
    return envelope(await admins.change_phone(client.id, body.phone))


@router.patch("/change-email", response_model=ResultResponse)
async def change_email(body: EmailChange, client: AdminClient, admins: Admins):
    return envelope(await admins.change_email(client.id, body.email))


@router.patch("/change-password", response_model=MessageResponse)
async def change_password(body: ChangePasswordRequest, client: AdminClient, admins: Admins):
    return envelope(
        await admins.change_password(client.id, body.current_password, body.new_password)
    )


# ==================== Super admin management ====================

@router.patch("/change-status/{aid}", response_model=ResultResponse)
async def change_status(aid: str, body: StatusChange, client: SuperAdminClient, admins: Admins):
    return envelope(await admins.change_status(aid, body.status))


@router.put("/restore/{aid}", response_model=ResultResponse)
async def restore_admin(aid: str, client: SuperAdminClient, admins: Admins):
    return envelope(await admins.restore(aid))


@router.delete("/delete/all", response_model=MessageResponse)
async def delete_all_admins(client: SuperAdminClient, admins: Admins):
    """Permanently delete every Admin-role account. Development only."""
    return envelope(await admins.delete_all())


@router.delete("/delete/{aid}", response_model=MessageResponse)
async def permanent_delete_admin(aid: str, client: SuperAdminClient, admins: Admins):
    return envelope(await admins.permanent_delete(aid))


@router.patch("/send-login-credentials/{aid}", response_model=MessageResponse)
async def send_login_credentials(aid: str, client: SuperAdminClient, admins: Admins):
    return envelope(await admins.send_login_credentials(aid))


# ==================== Single admin ====================

@router.get("/{aid}", response_model=ResultResponse)
async def get_admin(aid: str, client: AdminClient, admins: Admins):
    return envelope(await admins.get(aid, client.role))


@router.patch("/{aid}", response_model=ResultResponse)
async def edit_admin(aid: str, body: PrincipalUpdate, client: SuperAdminClient, admins: Admins):
    return envelope(await admins.edit(aid, body))


@router.delete("/{aid}", response_model=MessageResponse)
async def delete_admin(aid: str, client: SuperAdminClient, admins: Admins):
    return envelope(await admins.delete(aid))
