"""
Saved posts (bookmarks).

Every operation is a single INSERT or DELETE backed by the unique
(user, post) constraint, never a read-then-write pair.
"""
from typing import List, Optional

from tortoise.exceptions import IntegrityError

from bloogle.models.post import SavedPost
from bloogle.models.user import User


async def save(user: User, post_id: int) -> None:
    """Bookmark a post; saving twice leaves one row."""
    try:
        await SavedPost.create(user_id=user.id, post_id=post_id)
    except IntegrityError:
        pass  # Already saved (possibly by a concurrent request)


async def unsave(user: User, post_id: int) -> None:
    await SavedPost.filter(user_id=user.id, post_id=post_id).delete()


async def toggle(user: User, post_id: int, currently_saved: Optional[bool] = None) -> bool:
    """
    Flip the bookmark state of a post.

    Parameters:
    - currently_saved: the state the client displayed when the button was clicked.
      When given, the request means "set to the opposite", which is idempotent:
      two concurrent clicks from the same page both save and leave exactly one row.
      When omitted, an existing bookmark is deleted, otherwise one is inserted.

    Returns:
    - bool: True if the post is saved afterwards
    """
    if currently_saved is True:
        await unsave(user, post_id)
        return False
    if currently_saved is False:
        await save(user, post_id)
        return True

    removed = await SavedPost.filter(user_id=user.id, post_id=post_id).delete()
    if removed:
        return False
    await save(user, post_id)
    return True


async def saved_post_ids(user: Optional[User]) -> List[int]:
    if user is None:
        return []
    return await SavedPost.filter(user_id=user.id).values_list("post_id", flat=True)
