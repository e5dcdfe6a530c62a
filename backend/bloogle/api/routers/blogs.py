# bloogle/api/routers/blogs.py
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from bloogle.api.deps import ensure_owner, get_identity, parse_id, require_user
from bloogle.models.post import Post
from bloogle.models.user import User
from bloogle.schemas.post import PostIn, PostOut
from bloogle.services import saves
from bloogle.services.images import InvalidUpload, image_from_upload
from bloogle.services.tokens import utc_now

router = APIRouter(tags=["blogs"])


# ===== Helpers =====
def _post_to_dict(p: Post) -> dict:
    return PostOut(
        id=p.id,
        title=p.title,
        description=p.description,
        author=p.author.username,
        imageId=p.image_id,
        postTime=p.post_time.isoformat(),
    ).model_dump()


def _feed(page: str, posts: list[Post], saved: list[int], user: User | None) -> dict:
    return {
        "success": True,
        "data": {
            "page": page,
            "user": {"id": user.id, "username": user.username} if user else None,
            "items": [_post_to_dict(p) for p in posts],
            "saved": saved,
        },
    }


def _parse_post_form(title: str, description: str) -> PostIn:
    try:
        return PostIn(title=title.strip(), description=description.strip())
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="TITLE_AND_DESCRIPTION_REQUIRED")


def _parse_flag(raw: str | None) -> bool | None:
    if raw is None or raw == "":
        return None
    if raw.lower() in ("true", "1", "yes"):
        return True
    if raw.lower() in ("false", "0", "no"):
        return False
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="INVALID_SAVED_FLAG")


def _back(request: Request) -> str:
    """Path of the Referer when it points at this site, otherwise home."""
    referer = request.headers.get("referer")
    if not referer:
        return "/"
    parts = urlsplit(referer)
    if parts.netloc and parts.netloc != request.url.netloc:
        return "/"
    path = parts.path if parts.path.startswith("/") else "/"
    return f"{path}?{parts.query}" if parts.query else path


async def _get_post_or_404(post_id: int) -> Post:
    post = await Post.filter(id=post_id).select_related("author").first()
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NOT_FOUND")
    return post


async def _store_upload(upload: UploadFile | None):
    try:
        return await image_from_upload(upload)
    except InvalidUpload as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


# ===== Feeds =====
@router.get("/")
async def home_feed(user: User | None = Depends(get_identity)):
    """
    All posts, newest first.
    For logged-in visitors `saved` lists the ids they bookmarked.
    """
    posts = await Post.all().select_related("author").order_by("-post_time", "-id")
    return _feed("home", posts, await saves.saved_post_ids(user), user)


@router.get("/myposts")
async def my_posts(user: User = Depends(require_user)):
    posts = await Post.filter(author_id=user.id).select_related("author").order_by("-post_time", "-id")
    return _feed("myposts", posts, await saves.saved_post_ids(user), user)


@router.get("/saved")
async def saved_posts(user: User = Depends(require_user)):
    saved = await saves.saved_post_ids(user)
    posts = await Post.filter(id__in=saved).select_related("author").order_by("-post_time", "-id")
    return _feed("saved", posts, saved, user)


@router.get("/blog/{post_id}")
async def view_post(post_id: str, user: User | None = Depends(get_identity)):
    """
    A single post.

    Raises:
        HTTPException (400): If the id is not numeric (INVALID_ID)
        HTTPException (404): If the post does not exist
    """
    post = await _get_post_or_404(parse_id(post_id))
    return {
        "success": True,
        "data": {
            "page": "blog",
            "post": _post_to_dict(post),
            "isOwner": bool(user and post.author_id == user.id),
        },
    }


# ===== Create / edit / delete =====
@router.get("/create")
async def create_page(user: User = Depends(require_user)):
    return {"success": True, "data": {"page": "create", "post": None}}


@router.get("/edit/{post_id}")
async def edit_page(post_id: str, user: User = Depends(require_user)):
    """
    Data for the edit form of one of the user's own posts.

    Raises:
        HTTPException (404): If the post does not exist
        HTTPException (403): If the post belongs to someone else
    """
    post = await _get_post_or_404(parse_id(post_id))
    ensure_owner(user, post)
    return {"success": True, "data": {"page": "create", "post": _post_to_dict(post)}}


@router.post("/post")
async def create_post(
    title: str = Form(""),
    description: str = Form(""),
    image: UploadFile | None = File(None),
    user: User = Depends(require_user),
):
    form = _parse_post_form(title, description)
    stored = await _store_upload(image)
    await Post.create(
        author_id=user.id,
        title=form.title,
        description=form.description,
        image_id=stored.id if stored else None,
        post_time=utc_now(),
    )
    return _home()


@router.post("/update/{post_id}")
async def update_post(
    post_id: str,
    title: str = Form(""),
    description: str = Form(""),
    image: UploadFile | None = File(None),
    user: User = Depends(require_user),
):
    """
    Update one of the user's own posts; post_time is refreshed.
    The image is only replaced when a new file is uploaded.
    """
    post = await _get_post_or_404(parse_id(post_id))
    ensure_owner(user, post)
    form = _parse_post_form(title, description)
    stored = await _store_upload(image)

    changes = {"title": form.title, "description": form.description, "post_time": utc_now()}
    if stored:
        changes["image_id"] = stored.id
    # Author predicate kept on the UPDATE itself
    await Post.filter(id=post.id, author_id=user.id).update(**changes)
    return _home()


@router.post("/delete")
async def delete_post(id: str = Form(""), user: User = Depends(require_user)):
    """
    Delete one of the user's own posts.

    Raises:
        HTTPException (400): If the id is not numeric
        HTTPException (404): If the post does not exist
        HTTPException (403): If the post belongs to someone else
    """
    post = await _get_post_or_404(parse_id(id))
    ensure_owner(user, post)
    await Post.filter(id=post.id, author_id=user.id).delete()
    return _home()


# ===== Bookmarks =====
@router.post("/save")
async def toggle_save(
    request: Request,
    id: str = Form(""),
    saved: str | None = Form(None),
    user: User = Depends(require_user),
):
    """
    Toggle the bookmark on a post, then go back to the page the click came from.

    Args:
        id: post id
        saved: optional, the bookmark state the page showed ("true"/"false");
               makes repeated or concurrent clicks from the same page idempotent
    """
    post_id = parse_id(id)
    currently_saved = _parse_flag(saved)
    if not await Post.filter(id=post_id).exists():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NOT_FOUND")
    await saves.toggle(user, post_id, currently_saved)
    return RedirectResponse(url=_back(request), status_code=status.HTTP_303_SEE_OTHER)
