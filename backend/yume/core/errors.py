"""Error handling framework for Yume TV.

Provides custom exception types and decorators for standardized error handling
across the application.

Only infrastructure failures are exceptions. Outcomes a user can cause
(duplicate username, expired token, wrong password) are reported as
ActionResult values, see services/results.py.
"""

import inspect
import logging
from functools import wraps

logger = logging.getLogger(__name__)


# Custom Exception Hierarchy
class YumeError(Exception):
    """Base exception for all Yume-specific errors."""

    pass


class DocumentStoreError(YumeError):
    """Remote document store operation failed.

    Raised when the GET or PUT against the JSON document endpoint fails
    (unreachable host, timeout, non-2xx status, body that is not a JSON object).
    """

    pass


class DocumentValidationError(YumeError):
    """Remote document does not fit the application schema."""

    pass


class EmailDeliveryError(YumeError):
    """Outbound email provider rejected or did not answer the request."""

    pass


class NotFoundError(YumeError):
    """An addressed user, media item, post or comment does not exist."""

    pass


class PermissionDeniedError(YumeError):
    """The current user's role does not allow the operation."""

    pass


# Error Handling Decorator
def handle_errors(
    *,
    error_types: tuple[type[Exception], ...],
    default_message: str,
    log_level: str = "error",
    reraise: bool = True,
    wrap_as: type[YumeError] | None = None,
):
    """Decorator for standardized error handling.

    Args:
        error_types: Tuple of exception types to catch
        default_message: Message to log when error occurs
        log_level: Logging level (error, warning, info, debug)
        reraise: Whether to re-raise the exception after logging
        wrap_as: Optionally wrap the caught exception in a YumeError subclass

    Example:
        @handle_errors(
            error_types=(httpx.HTTPError,),
            default_message="Document fetch failed",
            wrap_as=DocumentStoreError
        )
        async def fetch():
            # ... operation ...
    """

    def decorator(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except error_types as e:
                log_func = getattr(logger, log_level)
                log_func(
                    f"{default_message}: {e}",
                    exc_info=(log_level == "error"),
                )
                if wrap_as:
                    raise wrap_as(f"{default_message}: {e}") from e
                if reraise:
                    raise

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except error_types as e:
                log_func = getattr(logger, log_level)
                log_func(
                    f"{default_message}: {e}",
                    exc_info=(log_level == "error"),
                )
                if wrap_as:
                    raise wrap_as(f"{default_message}: {e}") from e
                if reraise:
                    raise

        # Return appropriate wrapper based on function type
        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


# Context Manager for Error Handling
class error_context:
    """Context manager for error handling in specific code blocks.

    Example:
        with error_context(
            error_types=(ValidationError,),
            default_message="Remote document has an unexpected shape",
            wrap_as=DocumentValidationError
        ):
            # ... code that might raise errors ...
    """

    def __init__(
        self,
        *,
        error_types: tuple[type[Exception], ...],
        default_message: str,
        log_level: str = "error",
        wrap_as: type[YumeError] | None = None,
    ):
        self.error_types = error_types
        self.default_message = default_message
        self.log_level = log_level
        self.wrap_as = wrap_as

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None and issubclass(exc_type, self.error_types):
            log_func = getattr(logger, self.log_level)
            log_func(
                f"{self.default_message}: {exc_val}",
                exc_info=(self.log_level == "error"),
            )
            if self.wrap_as:
                raise self.wrap_as(f"{self.default_message}: {exc_val}") from exc_val
            return False  # Re-raise the original exception
        return False  # Don't suppress other exceptions
