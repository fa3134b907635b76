"""Core modules for Yume TV."""

from yume.core.errors import (
    DocumentStoreError,
    DocumentValidationError,
    EmailDeliveryError,
    NotFoundError,
    PermissionDeniedError,
    YumeError,
)

__all__ = [
    "YumeError",
    "DocumentStoreError",
    "DocumentValidationError",
    "EmailDeliveryError",
    "NotFoundError",
    "PermissionDeniedError",
]
