"""Accounts: registration with email verification, login, profiles, watch history.

Pure mutators take the current AppDocument and return a new one. The
service functions validate against ``sync.read()`` and apply a mutator
through ``sync.update()``; they report outcomes as ActionResult values.
"""

import logging
import secrets
from datetime import datetime, timedelta

from yume.config import Settings, settings
from yume.core.errors import NotFoundError
from yume.models import AppDocument, PendingUser, Role, User, WatchedItem
from yume.models.base import next_id, utcnow
from yume.models.user import RECENTLY_WATCHED_LIMIT
from yume.services.email_service import VerificationMailer
from yume.services.entities import get_by_id, remove_by_id, replace_by_id
from yume.services.results import ActionResult, LoginResult
from yume.services.state_sync import StateSynchronizer

logger = logging.getLogger(__name__)

# Id of the synthetic account returned for the administrator override login
OVERRIDE_ADMIN_ID = 0


def _same(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


def username_taken(doc: AppDocument, username: str, exclude_user_id: int | None = None) -> bool:
    """Case-insensitive check over confirmed and pending accounts."""
    return any(
        _same(u.username, username) for u in doc.users if u.id != exclude_user_id
    ) or any(_same(p.username, username) for p in doc.pending_users)


def email_taken(doc: AppDocument, email: str, exclude_user_id: int | None = None) -> bool:
    """Case-insensitive check over confirmed and pending accounts."""
    return any(_same(u.email, email) for u in doc.users if u.id != exclude_user_id) or any(
        _same(p.email, email) for p in doc.pending_users
    )


def new_verification_token() -> str:
    return secrets.token_urlsafe(32)


# --- Mutators ---


def add_pending_user(doc: AppDocument, pending: PendingUser) -> AppDocument:
    return doc.model_copy(update={"pending_users": [*doc.pending_users, pending]})


def promote_pending_user(doc: AppDocument, token: str) -> AppDocument:
    """Turn the pending registration with ``token`` into a confirmed user.

    The first confirmed user becomes an administrator.
    """
    pending = next((p for p in doc.pending_users if p.verification_token == token), None)
    if pending is None:
        raise NotFoundError("Verification token not found")
    user = User(
        id=next_id(doc.users),
        username=pending.username,
        email=pending.email,
        password=pending.password,
        role=Role.USER if doc.users else Role.ADMIN,
        recently_watched=[],
        profile_picture_url=pending.profile_picture_url,
    )
    return doc.model_copy(
        update={
            "users": [*doc.users, user],
            "pending_users": [p for p in doc.pending_users if p.verification_token != token],
        }
    )


def reissue_token(doc: AppDocument, email: str, token: str, expires: datetime) -> AppDocument:
    pending_users = [
        p.model_copy(update={"verification_token": token, "token_expires": expires})
        if _same(p.email, email)
        else p
        for p in doc.pending_users
    ]
    return doc.model_copy(update={"pending_users": pending_users})


def update_user(doc: AppDocument, user_id: int, **changes) -> AppDocument:
    users = replace_by_id(doc.users, user_id, lambda u: u.model_copy(update=changes), "User")
    return doc.model_copy(update={"users": users})


def update_user_role(doc: AppDocument, user_id: int, role: Role) -> AppDocument:
    return update_user(doc, user_id, role=Role(role))


def delete_user(doc: AppDocument, user_id: int) -> AppDocument:
    return doc.model_copy(update={"users": remove_by_id(doc.users, user_id, "User")})


def track_media_progress(
    doc: AppDocument,
    user_id: int,
    media_id: int,
    progress: float,
    duration: float,
    season_number: int | None = None,
    episode_number: int | None = None,
    now: datetime | None = None,
) -> AppDocument:
    """Record a playback position in the user's recently-watched list.

    The same movie or episode is replaced rather than duplicated and moves to
    the front; the list keeps the 24 most recent entries. A zero duration
    (metadata not loaded yet) is ignored.
    """
    if not duration:
        return doc

    item = WatchedItem(
        media_id=media_id,
        watched_at=now or utcnow(),
        progress=progress,
        duration=duration,
        season_number=season_number,
        episode_number=episode_number,
    )

    def _record(user: User) -> User:
        history = [w for w in user.recently_watched if w.key != item.key]
        return user.model_copy(
            update={"recently_watched": [item, *history][:RECENTLY_WATCHED_LIMIT]}
        )

    return doc.model_copy(update={"users": replace_by_id(doc.users, user_id, _record, "User")})


# --- Services ---


async def register(
    sync: StateSynchronizer,
    mailer: VerificationMailer,
    username: str,
    email: str,
    password: str,
    now: datetime | None = None,
    config: Settings = settings,
) -> ActionResult:
    """Create a pending registration and email its verification link."""
    username = username.strip()
    email = email.strip()
    if not username or not email:
        return ActionResult.fail("errorMissingFields")

    doc = sync.read()
    if username_taken(doc, username):
        return ActionResult.fail("errorUsernameExists")
    if email_taken(doc, email):
        return ActionResult.fail("errorEmailExists")
    if len(password) < config.min_password_length:
        return ActionResult.fail("errorPasswordTooShort")

    pending = PendingUser(
        username=username,
        email=email,
        password=password,
        verification_token=new_verification_token(),
        token_expires=(now or utcnow()) + timedelta(hours=config.verification_token_ttl_hours),
    )
    sync.update(lambda d: add_pending_user(d, pending))
    logger.info(f"Registered pending account {username!r}")

    await mailer.send_verification(
        email, username, pending.verification_token, site_name=doc.settings.site_name
    )
    return ActionResult.ok("registerSuccessPending")


def verify_email(sync: StateSynchronizer, token: str, now: datetime | None = None) -> ActionResult:
    """Consume a verification token. A token can be used once."""
    doc = sync.read()
    pending = next((p for p in doc.pending_users if p.verification_token == token), None)
    if pending is None:
        return ActionResult.fail("errorInvalidToken")
    if (now or utcnow()) > pending.token_expires:
        return ActionResult.fail("errorTokenExpired")

    is_first_user = not doc.users
    sync.update(lambda d: promote_pending_user(d, token))
    logger.info(f"Verified account {pending.username!r}")
    return ActionResult.ok("verifySuccessAdmin" if is_first_user else "verifySuccess")


async def resend_verification(
    sync: StateSynchronizer,
    mailer: VerificationMailer,
    email: str,
    now: datetime | None = None,
    config: Settings = settings,
) -> ActionResult:
    """Issue a fresh token (and expiry) for a pending registration and send it again."""
    doc = sync.read()
    pending = next((p for p in doc.pending_users if _same(p.email, email)), None)
    if pending is None:
        return ActionResult.fail("errorUserNotFound")

    token = new_verification_token()
    expires = (now or utcnow()) + timedelta(hours=config.verification_token_ttl_hours)
    sync.update(lambda d: reissue_token(d, pending.email, token, expires))

    await mailer.send_verification(
        pending.email, pending.username, token, site_name=doc.settings.site_name
    )
    return ActionResult.ok("verificationResent")


def override_admin(config: Settings = settings) -> User:
    """Synthetic administrator for the configured override credentials. Never persisted."""
    return User(
        id=OVERRIDE_ADMIN_ID,
        username=config.admin_username,
        email="",
        password="",
        role=Role.ADMIN,
    )


def is_override_admin(user: User, config: Settings = settings) -> bool:
    return (
        bool(config.admin_username)
        and user.id == OVERRIDE_ADMIN_ID
        and _same(user.username, config.admin_username)
    )


def login(
    sync: StateSynchronizer, username: str, password: str, config: Settings = settings
) -> LoginResult:
    if (
        config.admin_username
        and _same(username, config.admin_username)
        and password == config.admin_password
    ):
        logger.info("Administrator override login")
        return LoginResult(success=True, message="loginSuccess", user=override_admin(config))

    doc = sync.read()
    user = next((u for u in doc.users if _same(u.username, username)), None)
    if user is not None and user.password == password:
        return LoginResult(success=True, message="loginSuccess", user=user)

    if user is None and any(
        _same(p.username, username) and p.password == password for p in doc.pending_users
    ):
        return LoginResult(success=False, message="errorEmailNotVerified")
    return LoginResult(success=False, message="errorInvalidCredentials")


def update_user_profile(
    sync: StateSynchronizer,
    user_id: int,
    username: str | None = None,
    password: str | None = None,
    profile_picture_url: str | None = None,
) -> ActionResult:
    """Self-service profile change: username, password, avatar."""
    doc = sync.read()
    user = next((u for u in doc.users if u.id == user_id), None)
    if user is None:
        return ActionResult.fail("errorUserNotFound")

    changes = {}
    if username and username.strip() and username.strip() != user.username:
        if username_taken(doc, username, exclude_user_id=user_id):
            return ActionResult.fail("errorUsernameTaken")
        changes["username"] = username.strip()
    if password:
        changes["password"] = password
    if profile_picture_url:
        changes["profile_picture_url"] = profile_picture_url

    if not changes:
        return ActionResult.fail("errorNoChanges")

    sync.update(lambda d: update_user(d, user_id, **changes))
    return ActionResult.ok("profileUpdateSuccess")


def change_password(
    sync: StateSynchronizer,
    user_id: int,
    current_password: str,
    new_password: str,
    confirm_password: str,
    config: Settings = settings,
) -> ActionResult:
    doc = sync.read()
    user = next((u for u in doc.users if u.id == user_id), None)
    if user is None:
        return ActionResult.fail("errorUserNotFound")
    if current_password != user.password:
        return ActionResult.fail("errorCurrentPasswordIncorrect")
    if len(new_password) < config.min_password_length:
        return ActionResult.fail("errorNewPasswordLength")
    if new_password != confirm_password:
        return ActionResult.fail("errorPasswordsDoNotMatch")

    sync.update(lambda d: update_user(d, user_id, password=new_password))
    return ActionResult.ok("passwordChangedSuccess")


def admin_update_user(
    sync: StateSynchronizer,
    user_id: int,
    username: str,
    email: str,
    password: str | None = None,
    profile_picture_url: str | None = None,
) -> ActionResult:
    """Administrator edit of any account."""
    doc = sync.read()
    if not any(u.id == user_id for u in doc.users):
        return ActionResult.fail("errorUserNotFound")
    if username_taken(doc, username, exclude_user_id=user_id):
        return ActionResult.fail("errorUsernameTaken")
    if email_taken(doc, email, exclude_user_id=user_id):
        return ActionResult.fail("errorEmailTaken")

    changes = {"username": username.strip(), "email": email.strip()}
    if password:
        changes["password"] = password
    if profile_picture_url:
        changes["profile_picture_url"] = profile_picture_url

    sync.update(lambda d: update_user(d, user_id, **changes))
    return ActionResult.ok("profileUpdateSuccess")


def get_user(doc: AppDocument, user_id: int) -> User:
    return get_by_id(doc.users, user_id, "User")


def get_watched_progress(
    user: User, media_id: int, season_number: int | None = None, episode_number: int | None = None
) -> WatchedItem | None:
    key = (media_id, season_number, episode_number)
    return next((w for w in user.recently_watched if w.key == key), None)
