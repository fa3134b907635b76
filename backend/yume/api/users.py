"""User administration and public profile routes."""

from fastapi import APIRouter, Depends

from yume.api.deps import checked, get_synchronizer, require_admin
from yume.api.schemas import AdminUserUpdate, PublicUser, RoleUpdate
from yume.models import User
from yume.services import profiles, users
from yume.services.profiles import ActivityItem
from yume.services.results import ActionResult
from yume.services.state_sync import StateSynchronizer

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=list[PublicUser])
async def list_users(
    _: User = Depends(require_admin), sync: StateSynchronizer = Depends(get_synchronizer)
) -> list[PublicUser]:
    return [PublicUser.from_user(u) for u in sync.read().users]


@router.get("/{user_id}", response_model=PublicUser)
async def get_user(user_id: int, sync: StateSynchronizer = Depends(get_synchronizer)) -> PublicUser:
    return PublicUser.from_user(users.get_user(sync.read(), user_id))


@router.get("/{user_id}/activity", response_model=list[ActivityItem])
async def get_activity(
    user_id: int, sync: StateSynchronizer = Depends(get_synchronizer)
) -> list[ActivityItem]:
    doc = sync.read()
    return profiles.user_activity(doc, users.get_user(doc, user_id))


@router.patch("/{user_id}", response_model=ActionResult)
async def update_user(
    user_id: int,
    body: AdminUserUpdate,
    _: User = Depends(require_admin),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ActionResult:
    result = users.admin_update_user(
        sync,
        user_id,
        body.username,
        body.email,
        password=body.password,
        profile_picture_url=body.profile_picture_url,
    )
    return checked(result)


@router.put("/{user_id}/role", response_model=PublicUser)
async def update_role(
    user_id: int,
    body: RoleUpdate,
    _: User = Depends(require_admin),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> PublicUser:
    doc = sync.update(lambda d: users.update_user_role(d, user_id, body.role))
    return PublicUser.from_user(users.get_user(doc, user_id))


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    _: User = Depends(require_admin),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> None:
    sync.update(lambda d: users.delete_user(d, user_id))
