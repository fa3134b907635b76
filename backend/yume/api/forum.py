"""Community forum routes."""

from fastapi import APIRouter, Depends

from yume.api.deps import ensure_owner_or_staff, get_synchronizer, require_staff, require_user
from yume.api.schemas import CommentText, CommentVoteRequest, PostInput, PostVoteRequest
from yume.models import ForumPost, PostCategory, User
from yume.services import forum
from yume.services.forum import PostSort
from yume.services.state_sync import StateSynchronizer

router = APIRouter(prefix="/api/forum", tags=["forum"])


@router.get("/posts", response_model=list[ForumPost])
async def list_posts(
    category: PostCategory | None = None,
    author_id: int | None = None,
    sort: PostSort = PostSort.NEWEST,
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> list[ForumPost]:
    return forum.list_posts(sync.read().posts, category=category, author_id=author_id, sort=sort)


@router.get("/categories", response_model=dict[str, int])
async def categories(sync: StateSynchronizer = Depends(get_synchronizer)) -> dict[str, int]:
    return forum.category_counts(sync.read().posts)


@router.get("/posts/{post_id}", response_model=ForumPost)
async def get_post(post_id: int, sync: StateSynchronizer = Depends(get_synchronizer)) -> ForumPost:
    return forum.get_post(sync.read(), post_id)


@router.post("/posts", response_model=ForumPost, status_code=201)
async def create_post(
    body: PostInput,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ForumPost:
    doc = sync.update(lambda d: forum.add_post(d, body.title, body.content, body.category, user))
    return doc.posts[0]


@router.put("/posts/{post_id}", response_model=ForumPost)
async def update_post(
    post_id: int,
    body: PostInput,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ForumPost:
    ensure_owner_or_staff(user, owner_id=forum.get_post(sync.read(), post_id).author_id)
    doc = sync.update(
        lambda d: forum.update_post(d, post_id, body.title, body.content, body.category)
    )
    return forum.get_post(doc, post_id)


@router.delete("/posts/{post_id}", status_code=204)
async def delete_post(
    post_id: int,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> None:
    ensure_owner_or_staff(user, owner_id=forum.get_post(sync.read(), post_id).author_id)
    sync.update(lambda d: forum.delete_post(d, post_id))


@router.post("/posts/{post_id}/pin", response_model=ForumPost)
async def toggle_pin(
    post_id: int,
    _: User = Depends(require_staff),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ForumPost:
    doc = sync.update(lambda d: forum.toggle_pin(d, post_id))
    return forum.get_post(doc, post_id)


@router.post("/posts/{post_id}/vote", response_model=ForumPost)
async def vote_post(
    post_id: int,
    body: PostVoteRequest,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ForumPost:
    doc = sync.update(lambda d: forum.vote_post(d, post_id, user.id, body.vote))
    return forum.get_post(doc, post_id)


@router.post("/posts/{post_id}/comments", response_model=ForumPost, status_code=201)
async def add_comment(
    post_id: int,
    body: CommentText,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ForumPost:
    doc = sync.update(lambda d: forum.add_comment(d, post_id, user, body.text.strip()))
    return forum.get_post(doc, post_id)


@router.post(
    "/posts/{post_id}/comments/{comment_id}/replies", response_model=ForumPost, status_code=201
)
async def add_reply(
    post_id: int,
    comment_id: int,
    body: CommentText,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ForumPost:
    doc = sync.update(lambda d: forum.add_reply(d, post_id, comment_id, user, body.text.strip()))
    return forum.get_post(doc, post_id)


@router.put("/posts/{post_id}/comments/{comment_id}", response_model=ForumPost)
async def edit_comment(
    post_id: int,
    comment_id: int,
    body: CommentText,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ForumPost:
    comment = forum.get_comment(sync.read(), post_id, comment_id)
    ensure_owner_or_staff(user, owner_id=comment.author_id)
    doc = sync.update(lambda d: forum.edit_comment(d, post_id, comment_id, body.text))
    return forum.get_post(doc, post_id)


@router.delete("/posts/{post_id}/comments/{comment_id}", status_code=204)
async def delete_comment(
    post_id: int,
    comment_id: int,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> None:
    comment = forum.get_comment(sync.read(), post_id, comment_id)
    ensure_owner_or_staff(user, owner_id=comment.author_id)
    sync.update(lambda d: forum.delete_comment(d, post_id, comment_id))


@router.post("/posts/{post_id}/comments/{comment_id}/vote", response_model=ForumPost)
async def vote_comment(
    post_id: int,
    comment_id: int,
    body: CommentVoteRequest,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> ForumPost:
    doc = sync.update(lambda d: forum.vote_comment(d, post_id, comment_id, user.id, body.vote))
    return forum.get_post(doc, post_id)
