# bloogle/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from tortoise.exceptions import DBConnectionError, OperationalError

# Your configuration and DB
from bloogle.config import settings
from bloogle.core.db import init_db, close_db
from bloogle.core.scheduler import start_scheduler, stop_scheduler

from bloogle.api.deps import LoginRequired
from bloogle.api.routers import auth, blogs, images

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    # Interactive pages: anonymous visitors are sent to the login form, not given a bare 401
    return RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(DBConnectionError)
@app.exception_handler(OperationalError)
async def storage_unavailable_handler(request: Request, exc: Exception):
    logger.error("[db] %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"success": False,
                 "error": {"code": "SERVICE_UNAVAILABLE", "message": "Please try again later"}},
    )


@app.on_event("startup")
async def on_startup():
    await init_db()
    # Periodic sweep of expired sessions
    start_scheduler()


@app.on_event("shutdown")
async def on_shutdown():
    await stop_scheduler()
    await close_db()


app.include_router(auth.router)
app.include_router(blogs.router)
app.include_router(images.router)


@app.get("/healthz")
def healthz():
    return {"ok": True}
