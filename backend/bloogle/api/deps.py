# bloogle/api/deps.py
from fastapi import Depends, HTTPException, Request, Response, status

from bloogle.config import settings
from bloogle.models.post import Post
from bloogle.models.user import User
from bloogle.services import sessions

MAX_ID = 2**31 - 1  # int4 primary keys


class LoginRequired(Exception):
    """
    Raised by `require_user` for anonymous requests.
    The application maps it to a redirect to the login page.
    """


async def get_identity(request: Request) -> User | None:
    """
    FastAPI dependency resolving the session cookie to a user.

    The identity is resolved once per request and kept on `request.state.user`,
    so every downstream check in the same request sees the same value.

    Returns:
        User | None: The logged-in user, or None for anonymous requests
    """
    if hasattr(request.state, "user"):
        return request.state.user
    handle = request.cookies.get(settings.session_cookie_name)
    user = await sessions.resolve(handle)
    request.state.user = user
    return user


async def require_user(user: User | None = Depends(get_identity)) -> User:
    """
    FastAPI dependency to ensure the request is authenticated.

    Raises:
        LoginRequired: If no live session is attached (redirects to /login)

    Usage:
        @router.get("/myposts")
        async def my_posts(user: User = Depends(require_user)):
            ...
    """
    if user is None:
        raise LoginRequired()
    return user


def ensure_owner(user: User, post: Post) -> None:
    """
    Second gate on top of `require_user`: only the author may modify a post.

    Raises:
        HTTPException (403): If the post belongs to someone else (FORBIDDEN_NOT_OWNER)
    """
    if post.author_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="FORBIDDEN_NOT_OWNER")


def set_session_cookie(response: Response, handle: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        handle,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def parse_id(raw: str | None) -> int:
    """
    Parse a numeric id from a path or form field.

    Raises:
        HTTPException (400): If the value is not a positive integer (INVALID_ID)
    """
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="INVALID_ID")
    if value <= 0 or value > MAX_ID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="INVALID_ID")
    return value
