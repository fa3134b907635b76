"""Site settings routes."""

from fastapi import APIRouter, Depends

from yume.api.deps import get_synchronizer, require_admin, require_user
from yume.api.schemas import PlayerSettingsUpdate, SiteSettingsUpdate
from yume.models import SiteSettings, User
from yume.services import site_settings
from yume.services.state_sync import StateSynchronizer

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=SiteSettings)
async def get_settings(sync: StateSynchronizer = Depends(get_synchronizer)) -> SiteSettings:
    return sync.read().settings


@router.put("", response_model=SiteSettings)
async def update_settings(
    body: SiteSettingsUpdate,
    _: User = Depends(require_admin),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> SiteSettings:
    doc = sync.update(
        lambda d: site_settings.update_site_settings(
            d, site_name=body.site_name, maintenance_mode=body.maintenance_mode
        )
    )
    return doc.settings


@router.put("/player", response_model=SiteSettings)
async def update_player(
    body: PlayerSettingsUpdate,
    _: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> SiteSettings:
    doc = sync.update(
        lambda d: site_settings.update_player_settings(
            d, auto_play=body.auto_play, auto_next=body.auto_next
        )
    )
    return doc.settings
