import os
import re
import uuid

TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["MAIL_PROVIDER"] = "console"
os.environ.setdefault("ENV", "test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from bloogle.config import settings
from bloogle.core import db as db_module
from bloogle.core.security import hash_password
from bloogle.main import app
from bloogle.models.user import User
from bloogle.services.mail_console import console_mail_dispatcher


db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL

COOKIE = settings.session_cookie_name
VERIFY_LINK_RE = re.compile(r"/verify/([A-Za-z0-9_\-]+)")


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """
    Fresh database for service-level tests that do not need HTTP.
    """
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client(db):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    # Use ASGITransport without lifespan parameter (not supported in all httpx versions)
    try:
        transport = ASGITransport(app=app, lifespan="off")
    except TypeError:
        # Fallback for httpx versions that don't support lifespan parameter
        transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture
def outbox():
    """
    Messages captured by the console mail dispatcher during the test.
    """
    console_mail_dispatcher.clear()
    yield console_mail_dispatcher.outbox
    console_mail_dispatcher.clear()


@pytest.fixture
def token_from_mail():
    """
    Extract the verification token from the last email sent to an address.
    """

    def _extract(outbox, email: str) -> str:
        for message in reversed(outbox):
            if message.recipient == email:
                match = VERIFY_LINK_RE.search(message.html_body)
                assert match, message.html_body
                return match.group(1)
        raise AssertionError(f"no email sent to {email}")

    return _extract


@pytest_asyncio.fixture
async def create_user(db):
    """
    Factory fixture to create users directly via ORM (verified by default).
    """

    async def _create_user(password: str = "UserPass!23", verified: bool = True) -> tuple[User, str]:
        name = f"user_{uuid.uuid4().hex[:6]}"
        user = await User.create(
            username=name,
            email=f"{name}@example.com",
            password_hash=hash_password(password),
            is_verified=verified,
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def login_as(client):
    """
    Helper fixture that logs in through the form endpoint; the session cookie
    lands in the client's cookie jar.
    """

    async def _login(username: str, password: str):
        client.cookies.clear()
        resp = await client.post("/login", data={"username": username, "password": password})
        assert resp.status_code == 303, resp.text
        assert resp.headers["location"] == "/"
        return resp

    return _login
