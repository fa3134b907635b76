"""Outcome values for user-initiated actions.

Validation, not-found and expiry failures are not exceptions: they come back
as ``ActionResult(success=False, message=<code>)`` and the caller shows the
message code (a translation key) to the user.
"""

from pydantic import BaseModel

from yume.models import User


class ActionResult(BaseModel):
    """Result of an account or profile action."""

    success: bool
    message: str

    @classmethod
    def ok(cls, message: str) -> "ActionResult":
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, message: str) -> "ActionResult":
        return cls(success=False, message=message)


class LoginResult(ActionResult):
    """Login outcome, carrying the authenticated user on success."""

    user: User | None = None
