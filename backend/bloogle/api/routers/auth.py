# bloogle/api/routers/auth.py
import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError
from tortoise.exceptions import IntegrityError

from bloogle.api.deps import (
    clear_session_cookie,
    get_identity,
    require_user,
    set_session_cookie,
)
from bloogle.config import settings
from bloogle.core.security import hash_password
from bloogle.models.user import User
from bloogle.schemas.auth import LoginIn, RegisterIn, UserOut
from bloogle.services import sessions
from bloogle.services.images import InvalidUpload, image_from_upload
from bloogle.services.mail_factory import send_verification_email
from bloogle.services.tokens import issue, reissue
from bloogle.services.verifier import (
    CredentialOutcome,
    TokenOutcome,
    verify_credentials,
    verify_token,
)

logger = logging.getLogger("uvicorn.error")

router = APIRouter(tags=["auth"])

# Query flags on /login -> message shown on the login page
LOGIN_MESSAGES = {
    ("verified", "success"): "Email verified! You can now log in.",
    ("error", "expired"): "Verification link expired or invalid. Request a new one below.",
    ("error", "invalid_credentials"): "Incorrect username or password.",
    ("error", "unverified"): "Please verify your email before logging in.",
    ("error", "unverified_resent"): "Please verify your email before logging in. We sent you a new link.",
    ("error", "missing_fields"): "Username and password are required.",
    ("info", "check_email"): "Check your email to verify your account.",
    ("info", "email_failed"): "Your account was created but we could not send the verification email. "
                               "Request a new link below.",
    ("info", "resent"): "If that address belongs to an unverified account, a new link is on its way.",
}

CONFLICT_MESSAGES = {
    "USERNAME_EXISTS": "Username already exists",
    "EMAIL_EXISTS": "Email already registered",
}


def _redirect(path: str, **params: str) -> RedirectResponse:
    url = f"{path}?{urlencode(params)}" if params else path
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def _login_message(request: Request) -> str | None:
    for key in ("verified", "error", "info"):
        value = request.query_params.get(key)
        if value and (key, value) in LOGIN_MESSAGES:
            return LOGIN_MESSAGES[(key, value)]
    return None


def _user_to_dict(u: User) -> dict:
    return UserOut(id=u.id, username=u.username, email=u.email, imageId=u.image_id).model_dump()


def _register_error(code: str, message: str, http_status: int) -> JSONResponse:
    return JSONResponse(
        status_code=http_status,
        content={"success": False, "data": {"page": "register"},
                 "error": {"code": code, "message": message}},
    )


async def _conflict_code(username: str, email: str) -> str | None:
    if await User.filter(username=username).exists():
        return "USERNAME_EXISTS"
    if await User.filter(email=email).exists():
        return "EMAIL_EXISTS"
    return None


@router.get("/login")
async def login_page(request: Request, user: User | None = Depends(get_identity)):
    """
    Data for the login page.

    Query flags set by the other auth routes (verified=success, error=expired, ...)
    are turned into a user-facing message. Logged-in users are sent home.
    """
    if user is not None:
        return _redirect("/")
    return {"success": True, "data": {"page": "login", "message": _login_message(request)}}


@router.post("/login")
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
):
    """
    Authenticate with username and password.

    On success a server-side session is created, its handle is set as an
    HttpOnly cookie and the browser is redirected home. Every failure
    redirects back to /login with an error flag; an unknown username and a
    wrong password produce the same flag.
    """
    if not username.strip() or not password:
        return _redirect("/login", error="missing_fields")
    try:
        form = LoginIn(username=username.strip(), password=password)
    except ValidationError:
        # Over-long input can never match a stored account
        return _redirect("/login", error="invalid_credentials")

    result = await verify_credentials(form.username, form.password)

    if result.outcome is CredentialOutcome.ACCOUNT_UNVERIFIED:
        if settings.resend_verification_on_login and result.secret_matches:
            fresh = await reissue(result.user)
            if fresh and await send_verification_email(result.user, fresh.token):
                return _redirect("/login", error="unverified_resent")
        return _redirect("/login", error="unverified")

    if not result.ok:
        return _redirect("/login", error="invalid_credentials")

    # A fresh handle on every login; any session the browser already carried is dropped
    await sessions.destroy(request.cookies.get(settings.session_cookie_name))
    handle = await sessions.establish(result.user)
    response = _redirect("/")
    set_session_cookie(response, handle)
    return response


@router.get("/register")
async def register_page(user: User | None = Depends(get_identity)):
    """Data for the sign-up page. Logged-in users are sent home."""
    if user is not None:
        return _redirect("/")
    return {"success": True, "data": {"page": "register", "message": None}}


@router.post("/register")
async def register(
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    dp: UploadFile | None = File(None),
):
    """
    Register a new, unverified account and email its verification link.

    Args:
        username: str (must be unique)
        email: str (must be unique, receives the verification link)
        password: str (hashed with Argon2 before storage)
        dp: optional profile image

    Returns:
        303 redirect to /login?info=check_email on success
        (info=email_failed if the email could not be sent; the account still exists),
        or a JSON error:
            - 400 BAD_REQUEST: missing or malformed field, bad image
            - 409 USERNAME_EXISTS / EMAIL_EXISTS
    """
    try:
        form = RegisterIn(username=username.strip(), email=email.strip(), password=password)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        return _register_error("BAD_REQUEST", f"Invalid or missing: {', '.join(fields)}",
                               status.HTTP_400_BAD_REQUEST)

    email_addr = form.email.lower()
    conflict = await _conflict_code(form.username, email_addr)
    if conflict:
        return _register_error(conflict, CONFLICT_MESSAGES[conflict], status.HTTP_409_CONFLICT)

    try:
        image = await image_from_upload(dp)
    except InvalidUpload as e:
        return _register_error("BAD_REQUEST", str(e), status.HTTP_400_BAD_REQUEST)

    issued = issue(form.username)
    try:
        user = await User.create(
            username=form.username,
            email=email_addr,
            password_hash=hash_password(form.password),
            is_verified=False,
            verification_token=issued.token,
            verification_expires=issued.expires_at,
            image_id=image.id if image else None,
        )
    except IntegrityError:
        # Lost a race against a concurrent registration with the same username/email
        conflict = await _conflict_code(form.username, email_addr) or "USERNAME_EXISTS"
        return _register_error(conflict, CONFLICT_MESSAGES[conflict], status.HTTP_409_CONFLICT)

    logger.info("[auth] registered user id=%s", user.id)
    if not await send_verification_email(user, issued.token):
        return _redirect("/login", info="email_failed")
    return _redirect("/login", info="check_email")


@router.get("/verify/{token}")
async def verify(token: str):
    """
    Consume an email verification token.

    Redirects to /login?verified=success, or /login?error=expired for a token
    that is unknown, expired or already used.
    """
    outcome = await verify_token(token)
    if outcome is TokenOutcome.SUCCESS:
        return _redirect("/login", verified="success")
    return _redirect("/login", error="expired")


@router.post("/verify/resend")
async def resend_verification(email: str = Form("")):
    """
    Issue a new verification link for an unverified account.

    Always answers with the same redirect, whether or not the address is
    known, so the endpoint cannot be used to discover accounts.
    """
    address = email.strip().lower()
    user = await User.get_or_none(email=address, is_verified=False) if address else None
    if user is not None:
        fresh = await reissue(user)
        if fresh:
            await send_verification_email(user, fresh.token)
    return _redirect("/login", info="resent")


@router.get("/logout")
async def logout(request: Request):
    """
    Destroy the server-side session, clear the cookie and go home.
    Always succeeds, even without a session.
    """
    await sessions.destroy(request.cookies.get(settings.session_cookie_name))
    response = _redirect("/")
    clear_session_cookie(response)
    return response


@router.get("/me")
async def me(user: User = Depends(require_user)):
    """Current user information."""
    return {"success": True, "data": _user_to_dict(user)}
