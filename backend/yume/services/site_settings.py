"""Mutators for the site settings singleton."""

from yume.models import AppDocument, MaintenanceMode


def update_site_settings(
    doc: AppDocument, site_name: str | None = None, maintenance_mode: MaintenanceMode | None = None
) -> AppDocument:
    changes = {}
    if site_name is not None and site_name.strip():
        changes["site_name"] = site_name.strip()
    if maintenance_mode is not None:
        changes["maintenance_mode"] = maintenance_mode
    if not changes:
        return doc
    return doc.model_copy(update={"settings": doc.settings.model_copy(update=changes)})


def set_maintenance_mode(doc: AppDocument, enabled: bool, message: str | None = None) -> AppDocument:
    current = doc.settings.maintenance_mode
    maintenance_mode = MaintenanceMode(
        enabled=enabled, message=message if message is not None else current.message
    )
    return update_site_settings(doc, maintenance_mode=maintenance_mode)


def update_player_settings(
    doc: AppDocument, auto_play: bool | None = None, auto_next: bool | None = None
) -> AppDocument:
    """Merge the given player flags into the stored ones."""
    changes = {
        name: value
        for name, value in (("auto_play", auto_play), ("auto_next", auto_next))
        if value is not None
    }
    player = doc.settings.player.model_copy(update=changes)
    return doc.model_copy(update={"settings": doc.settings.model_copy(update={"player": player})})
