"""
User accounts router: self-service sessions, profile and admin management.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from samplehub.core.cookies import clear_token_cookies
from samplehub.dependencies.auth import AdminClient, AnyClient, SuperAdminClient, UserClient
from samplehub.dependencies.providers import (
    AppSettings,
    RedisClient,
    get_user_service,
    get_user_sessions,
)
from samplehub.routers.common import deliver_session, envelope, limit_attempts
from samplehub.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SendOtpRequest,
    VerifyOtpRequest,
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

router = APIRouter(prefix="/api/v1/user", tags=["Users"])

Users = Annotated[PrincipalService, Depends(get_user_service)]
Sessions = Annotated[SessionService, Depends(get_user_sessions)]


# ==================== Listing / creation ====================

@router.get("/", response_model=PaginatedResponse, summary="List users")
async def list_users(
    client: AdminClient,
    users: Users,
    page: int = 1,
    limit: int = 10,
    timestamp: Optional[str] = None,
    name: Optional[str] = None,
    username: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    status_filter: Annotated[Optional[list[str]], Query(alias="status")] = None,
    deleted: DeletedFilter = "NO",
):
    """
    List users newest first.

    - **limit**: page size, -1 for all
    - **timestamp**: snapshot time; newer users are only counted in latest_count
    - **deleted**: NO, YES or BOTH
    """
    result = await users.list_principals(
        page=page,
        limit=limit,
        timestamp=timestamp,
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
    summary="Create a user",
)
async def add_user(body: PrincipalCreate, client: AdminClient, users: Users):
    """Create a user; a password is generated and mailed when none is given."""
    return envelope(await users.add(body))


# ==================== Sessions ====================

@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    body: RegisterRequest,
    response: Response,
    sessions: Sessions,
    settings: AppSettings,
):
    session = await sessions.register(body)
    return deliver_session(
        response, session, sessions.tokens, settings, f"{body.username}'s account created successfully"
    )


@router.patch("/login", response_model=TokenResponse, summary="Login with username, email or phone")
async def login(
    request: Request,
    body: LoginRequest,
    response: Response,
    sessions: Sessions,
    redis: RedisClient,
    settings: AppSettings,
):
    """
    Authenticate and receive access and refresh cookies.

    **Rate limited** per IP.
    """
    await limit_attempts(request, redis, "user:login", settings)
    session = await sessions.login(body)
    return deliver_session(response, session, sessions.tokens, settings, "Login Successfully")


@router.get("/upgrade-access-token", response_model=TokenResponse, summary="Refresh the session")
async def upgrade_access_token(
    request: Request,
    response: Response,
    sessions: Sessions,
    settings: AppSettings,
):
    """Exchange the refresh cookie for a new token pair. The used refresh token is revoked."""
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


@router.patch("/sent-otp", response_model=MessageResponse, summary="Send a login OTP")
async def send_otp(
    request: Request,
    body: SendOtpRequest,
    sessions: Sessions,
    redis: RedisClient,
    settings: AppSettings,
):
    await limit_attempts(request, redis, "user:sent-otp", settings)
    await sessions.send_otp(body.phone)
    return {"success": True, "message": "OTP sent successfully"}


@router.patch("/verify-otp-login", response_model=TokenResponse, summary="Login with an OTP")
async def verify_otp_login(
    request: Request,
    body: VerifyOtpRequest,
    response: Response,
    sessions: Sessions,
    redis: RedisClient,
    settings: AppSettings,
):
    await limit_attempts(request, redis, "user:verify-otp-login", settings)
    session = await sessions.verify_otp_login(body.phone, body.otp)
    return deliver_session(response, session, sessions.tokens, settings, "Login Successfully")


@router.patch("/forget-password", response_model=MessageResponse, summary="Request a password reset")
async def forget_password(body: ForgotPasswordRequest, sessions: Sessions):
    message = await sessions.forgot_password(body.email)
    return {"success": True, "message": message}


@router.patch("/reset-password", response_model=MessageResponse, summary="Reset password with a token")
async def reset_password(body: ResetPasswordRequest, sessions: Sessions):
    await sessions.reset_password(body.token, body.password)
    return {"success": True, "message": "Password reset successfully"}


@router.get("/check-username", response_model=AvailabilityResponse, summary="Check username availability")
async def check_username(users: Users, username: Optional[str] = None):
    return envelope(await users.check_username(username))


# ==================== Own profile ====================

@router.get("/profile", response_model=ResultResponse, summary="Get own profile")
async def get_profile(client: UserClient, users: Users):
    return envelope(await users.get(client.id, client.role))


@router.patch("/profile", response_model=ResultResponse, summary="Update own profile")
async def update_profile(body: ProfileUpdate, client: UserClient, users: Users):
    return envelope(await users.update_profile(client.id, body))


@router.patch("/change-username", response_model=ResultResponse)
async def change_username(body: UsernameChange, client: UserClient, users: Users):
    return envelope(await users.change_username(client.id, body.username))


@router.patch("/change-phone", response_model=ResultResponse)
async def change_phone(body: PhoneChange, client: UserClient, users: Users):
    return envelope(await users.change_phone(client.id, body.phone))


@router.patch("/change-email", response_model=ResultResponse)
async def change_email(body: EmailChange, client: UserClient, users: Users):
    return envelope(await users.change_email(client.id, body.email))


@router.patch("/change-password", response_model=MessageResponse)
async def change_password(body: ChangePasswordRequest, client: UserClient, users: Users):
    return envelope(
        await users.change_password(client.id, body.current_password, body.new_password)
    )


# ==================== Super admin management ====================

@router.patch("/change-status/{uid}", response_model=ResultResponse)
async def change_status(uid: str, body: StatusChange, client: SuperAdminClient, users: Users):
    return envelope(await users.change_status(uid, body.status))


@router.put("/restore/{uid}", response_model=ResultResponse)
async def restore_user(uid: str, client: SuperAdminClient, users: Users):
    return envelope(await users.restore(uid))


@router.delete("/delete/all", response_model=MessageResponse)
async def delete_all_users(client: SuperAdminClient, users: Users):
    """Permanently delete every User account. Development only."""
    return envelope(await users.delete_all())


@router.delete("/delete/{uid}", response_model=MessageResponse)
async def permanent_delete_user(uid: str, client: SuperAdminClient, users: Users):
    """Permanently delete a soft-deleted user. Development only."""
    return envelope(await users.permanent_delete(uid))


@router.patch("/send-login-credentials/{uid}", response_model=MessageResponse)
async def send_login_credentials(uid: str, client: SuperAdminClient, users: Users):
    return envelope(await users.send_login_credentials(uid))


# ==================== Single user ====================

@router.get("/{uid}", response_model=ResultResponse, summary="Get a user")
async def get_user(uid: str, client: AnyClient, users: Users):
    return envelope(await users.get(uid, client.role))


@router.patch("/{uid}", response_model=ResultResponse, summary="Edit a user")
async def edit_user(uid: str, body: PrincipalUpdate, client: AdminClient, users: Users):
    return envelope(await users.edit(uid, body))


@router.delete("/{uid}", response_model=MessageResponse, summary="Soft delete a user")
async def delete_user(uid: str, client: AdminClient, users: Users):
    return envelope(await users.delete(uid))
