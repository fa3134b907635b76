"""FastAPI dependencies: the shared synchronizer, the mailer and the signed-in user."""

from fastapi import Depends, HTTPException, Request

from yume.config import settings
from yume.core.errors import PermissionDeniedError
from yume.models import Role, User
from yume.services.email_service import VerificationMailer
from yume.services.results import ActionResult
from yume.services.session import read_session_cookie
from yume.services.state_sync import StateSynchronizer
from yume.services.users import OVERRIDE_ADMIN_ID, override_admin


def get_synchronizer(request: Request) -> StateSynchronizer:
    return request.app.state.synchronizer


def get_mailer(request: Request) -> VerificationMailer:
    return request.app.state.mailer


def get_current_user(
    request: Request, sync: StateSynchronizer = Depends(get_synchronizer)
) -> User | None:
    """The signed-in user, re-read from the document so role changes apply at once."""
    identity = read_session_cookie(request)
    if identity is None:
        return None
    if identity.id == OVERRIDE_ADMIN_ID:
        if settings.admin_username and identity.username.lower() == settings.admin_username.lower():
            return override_admin()
        return None
    return next((u for u in sync.read().users if u.id == identity.id), None)


def require_user(user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="errorNotLoggedIn")
    return user


def require_staff(user: User = Depends(require_user)) -> User:
    if not user.is_staff:
        raise PermissionDeniedError("Moderator or administrator role required")
    return user


def require_admin(user: User = Depends(require_user)) -> User:
    if user.role != Role.ADMIN:
        raise PermissionDeniedError("Administrator role required")
    return user


def ensure_owner_or_staff(user: User, owner_id: int | None) -> None:
    """Authors may change their own content; moderators and admins anyone's."""
    if user.is_staff:
        return
    if owner_id is not None and owner_id == user.id:
        return
    raise PermissionDeniedError("Only the author or a moderator may change this")


def checked(result: ActionResult) -> ActionResult:
    """Turn a failed ActionResult into a 400 carrying its message code."""
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return result
