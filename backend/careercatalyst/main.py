from functools import lru_cache
from pathlib import Path
from typing import Any, List

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from .config import get_settings
from .db import create_db_and_tables
from .exceptions import CareerCatalystError, NotFoundError
from .interview_window import Clock, evaluate_window, system_clock, window_bounds
from .logging_config import setup_logging, get_logger
from .mailer import ConfirmationMailer, build_mailer
from .models import User, ScheduledInterview
from .repository import (
    create_user,
    authenticate_user,
    get_user_by_id,
    record_interview,
    list_interviews,
)

__version__ = "1.0.0"

settings = get_settings()
setup_logging(level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file)
logger = get_logger(__name__)

ENDPOINTS = [
    "POST /api/register",
    "POST /api/login",
    "GET  /api/user/{id}",
    "POST /api/send-interview-confirmation",
    "POST /api/check-interview-status",
    "GET  /api/interviews",
]


# -----------------------------------------------------------------------------
# App setup
# -----------------------------------------------------------------------------
app = FastAPI(title="CareerCatalyst API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_mailer() -> ConfirmationMailer:
    return build_mailer(get_settings())


def get_clock() -> Clock:
    return system_clock


@app.on_event("startup")
def on_startup():
    """Creates the tables and tells in the log whether email is usable."""
    create_db_and_tables()

    if not settings.email_configured:
        logger.warning("Email service: not configured (EMAIL_USER / EMAIL_PASS missing)")
    elif settings.smtp_verify_on_startup:
        mailer = get_mailer()
        if mailer.sender.test_connection():
            logger.info("Email server is ready to send messages")
    else:
        logger.info("Email service: configured")

    logger.info("CareerCatalyst API %s started", __version__)
    for endpoint in ENDPOINTS:
        logger.info("  %s", endpoint)


# -----------------------------------------------------------------------------
# Error handling
# Every domain error becomes {"success": false, "error": kind, "message": ...}
# -----------------------------------------------------------------------------
@app.exception_handler(CareerCatalystError)
async def domain_error_handler(request: Request, exc: CareerCatalystError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.kind, "message": exc.message},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "server_error", "message": "Internal server error"},
    )


# -----------------------------------------------------------------------------
# Request / response models (field names follow the JSON the frontend sends)
# -----------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str
    message: str
    windowOpensAt: int
    windowClosesAt: int


class ConfirmationRequest(BaseModel):
    to: str
    username: str
    interviewDate: str
    interviewTime: str
    interviewLink: str


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str
    userType: str | None = None


class LoginRequest(BaseModel):
    username: str
    password: str


class UserOut(BaseModel):
    id: str
    username: str
    email: str
    type: str | None = None


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: UserOut


class UserProfile(UserOut):
    createdAt: str


class InterviewOut(BaseModel):
    id: int
    username: str
    email: str
    interviewDate: str
    interviewTime: str
    interviewLink: str
    messageId: str
    createdAt: str


def _user_out(user: User) -> UserOut:
    return UserOut(id=user.id, username=user.username, email=user.email, type=user.user_type)


def _interview_out(item: ScheduledInterview) -> InterviewOut:
    return InterviewOut(
        id=item.id,
        username=item.username,
        email=item.email,
        interviewDate=item.interview_date,
        interviewTime=item.interview_time,
        interviewLink=item.interview_link,
        messageId=item.message_id,
        createdAt=item.created_at.isoformat(),
    )


# -----------------------------------------------------------------------------
# Basic routes
# -----------------------------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


# -----------------------------------------------------------------------------
# Interview link status
# -----------------------------------------------------------------------------
@app.post("/api/check-interview-status", response_model=StatusResponse)
def check_interview_status(payload: Any = Body(default=None), clock: Clock = Depends(get_clock)):
    """
    Tells if the interview link can be opened right now.
    "now" comes from the injected clock, never from the client.

    The body is taken as raw JSON: a missing body, null, a list or an object
    without interviewTimestamp all end up as invalid_input from the evaluator.
    """
    timestamp = payload.get("interviewTimestamp") if isinstance(payload, dict) else None
    now = clock()
    state = evaluate_window(timestamp, now)
    opens_at, closes_at = window_bounds(timestamp)
    logger.debug("Interview status %s (timestamp=%s, now=%s)", state.value, timestamp, now)
    return StatusResponse(
        status=state.value,
        message=state.message,
        windowOpensAt=opens_at,
        windowClosesAt=closes_at,
    )


# -----------------------------------------------------------------------------
# Confirmation email
# -----------------------------------------------------------------------------
@app.post("/api/send-interview-confirmation")
def send_interview_confirmation(
    req: ConfirmationRequest, mailer: ConfirmationMailer = Depends(get_mailer)
):
    """
    Sends the confirmation email and keeps a record of it.
    Delivery errors are reported back as they are, nothing is retried.
    """
    logger.info("Sending interview confirmation to %s", req.to)
    try:
        message_id = mailer.send_confirmation(
            to=req.to,
            username=req.username,
            interview_date=req.interviewDate,
            interview_time=req.interviewTime,
            interview_link=req.interviewLink,
        )
    except CareerCatalystError as e:
        logger.error("Error sending email to %s: %s", req.to, e.message)
        e.message = f"Failed to send email: {e.message}"
        raise

    logger.info("Email sent: %s", message_id)
    record_interview(
        username=req.username,
        email=req.to,
        interview_date=req.interviewDate,
        interview_time=req.interviewTime,
        interview_link=req.interviewLink,
        message_id=message_id,
    )
    return {"success": True, "message": "Email sent successfully", "messageId": message_id}


@app.get("/api/interviews", response_model=List[InterviewOut])
def get_interviews(username: str | None = None, limit: int = Query(20, ge=1, le=100)):
    return [_interview_out(item) for item in list_interviews(username=username, limit=limit)]


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------
@app.post("/api/register", response_model=AuthResponse)
def register(req: RegisterRequest):
    user = create_user(req.username, req.email, req.password, req.userType)
    logger.info("New user registered: %s", user.username)
    return AuthResponse(message="User registered successfully", user=_user_out(user))


@app.post("/api/login", response_model=AuthResponse)
def login(req: LoginRequest):
    try:
        user = authenticate_user(req.username, req.password)
    except CareerCatalystError:
        logger.warning("Failed login for %s", req.username)
        raise
    logger.info("User logged in: %s", user.username)
    return AuthResponse(message="Login successful", user=_user_out(user))


@app.get("/api/user/{user_id}", response_model=UserProfile)
def get_user(user_id: str):
    user = get_user_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserProfile(
        id=user.id,
        username=user.username,
        email=user.email,
        type=user.user_type,
        createdAt=user.created_at.isoformat(),
    )


# -----------------------------------------------------------------------------
# Frontend
# When FRONTEND_DIR points to a built frontend, every other GET falls back to
# its index.html (client-side routing). Without it, / just describes the API.
# -----------------------------------------------------------------------------
def _frontend_file(path: str) -> Path | None:
    if settings.frontend_dir is None:
        return None
    root = Path(settings.frontend_dir).resolve()
    index = root / "index.html"
    if not index.is_file():
        return None
    if path:
        candidate = (root / path).resolve()
        if candidate.is_file() and candidate.is_relative_to(root):
            return candidate
    return index


@app.get("/")
def root():
    page = _frontend_file("")
    if page is not None:
        return FileResponse(page)
    return {"name": "CareerCatalyst API", "version": __version__, "endpoints": ENDPOINTS}


@app.get("/{full_path:path}")
def frontend(full_path: str):
    if full_path.startswith("api/"):
        raise HTTPException(status_code=404, detail="Not Found")
    page = _frontend_file(full_path)
    if page is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(page)
