"""Site-wide settings stored in the remote document."""

from typing import Any

from pydantic import Field, field_validator

from yume.models.base import DocumentModel

DEFAULT_MAINTENANCE_MESSAGE = (
    "Our services are temporarily unavailable as we're working on making things even better."
)


class MaintenanceMode(DocumentModel):
    enabled: bool = False
    message: str = DEFAULT_MAINTENANCE_MESSAGE


class PlayerSettings(DocumentModel):
    auto_play: bool = True
    auto_next: bool = True


class SiteSettings(DocumentModel):
    """Singleton settings object.

    Validating a stored object merges it field by field with the defaults:
    stored values win, fields missing from storage (including nested ones)
    take their default, so newly introduced settings always have a value.
    """

    site_name: str = "Yume TV"
    maintenance_mode: MaintenanceMode = Field(default_factory=MaintenanceMode)
    player: PlayerSettings = Field(default_factory=PlayerSettings)

    @field_validator("maintenance_mode", "player", mode="before")
    @classmethod
    def _missing_section_uses_defaults(cls, value: Any) -> Any:
        return {} if value is None else value
