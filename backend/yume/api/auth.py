"""Account routes: registration, email verification, login and the signed-in profile."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from yume.api.deps import checked, get_current_user, get_mailer, get_synchronizer, require_user
from yume.api.schemas import (
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    PublicUser,
    RegisterRequest,
    ResendRequest,
)
from yume.models import User
from yume.services import session, users
from yume.services.email_service import VerificationMailer
from yume.services.results import ActionResult
from yume.services.state_sync import StateSynchronizer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=ActionResult, status_code=201)
async def register(
    body: RegisterRequest,
    sync: StateSynchronizer = Depends(get_synchronizer),
    mailer: VerificationMailer = Depends(get_mailer),
) -> ActionResult:
    """Create a pending account and send its verification email."""
    result = await users.register(sync, mailer, body.username, body.email, body.password)
    return checked(result)


@router.post("/verify/{token}", response_model=ActionResult)
async def verify_email(token: str, sync: StateSynchronizer = Depends(get_synchronizer)) -> ActionResult:
    return checked(users.verify_email(sync, token))


@router.post("/resend", response_model=ActionResult)
async def resend_verification(
    body: ResendRequest,
    sync: StateSynchronizer = Depends(get_synchronizer),
    mailer: VerificationMailer = Depends(get_mailer),
) -> ActionResult:
    return checked(await users.resend_verification(sync, mailer, body.email))


@router.post("/login", response_model=PublicUser)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> PublicUser:
    result = users.login(sync, body.username, body.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.message)
    session.set_session_cookie(response, result.user, request.url.hostname or "")
    logger.info(f"User {result.user.username!r} logged in")
    return PublicUser.from_user(result.user)


@router.post("/logout", status_code=204)
async def logout(request: Request, response: Response) -> None:
    session.clear_session_cookie(response, request.url.hostname or "")


@router.get("/me", response_model=PublicUser)
async def me(user: User | None = Depends(get_current_user)) -> PublicUser:
    if user is None:
        raise HTTPException(status_code=401, detail="errorNotLoggedIn")
    return PublicUser.from_user(user)


@router.patch("/me", response_model=ActionResult)
async def update_profile(
    body: ProfileUpdate,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ActionResult:
    result = users.update_user_profile(
        sync,
        user.id,
        username=body.username,
        password=body.password,
        profile_picture_url=body.profile_picture_url,
    )
    return checked(result)


@router.post("/me/password", response_model=ActionResult)
async def change_password(
    body: PasswordChange,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ActionResult:
    result = users.change_password(
        sync, user.id, body.current_password, body.new_password, body.confirm_password
    )
    return checked(result)
