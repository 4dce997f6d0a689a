"""
Authentication API endpoints.

Handles basic and detailed (wizard) registration and login, each answering
with a JWT access token and the public account view.
"""

import json
import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from pydantic import AfterValidator, field_validator

from app.api.deps import get_current_user, get_store, optional_auth
from app.api.schemas import AccountOut, AuthResponse, Email, StrictCamelModel, validate_form
from app.core.errors import Forbidden, InvalidCredentials, ValidationError
from app.core.security import TokenClaims, ensure_signing_ready, issue_token_for
from app.models.user import Role, User
from app.services.credential_store import CredentialStore
from app.services.uploads import remove_upload, store_upload

logger = logging.getLogger("auth")

router = APIRouter()

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72  # bcrypt ignores anything past this


# ============== Pydantic Schemas ==============


def _check_password(v: str) -> str:
    if len(v or "") < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
    return v


Password = Annotated[str, AfterValidator(_check_password)]


class UserRegister(StrictCamelModel):
    """Schema for basic registration."""

    name: str
    email: Email
    password: Password
    role: Role = Role.USER


class DetailedRegister(StrictCamelModel):
    """Schema for the multipart registration the wizard submits."""

    name: str
    email: Email
    password: Password
    confirm_password: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    current_position: Optional[str] = None
    experience: Optional[str] = None
    skills: Optional[str] = None
    education: Optional[str] = None
    expected_salary: Optional[str] = None
    preferred_location: Optional[str] = None
    job_type: Optional[str] = None
    work_mode: Optional[str] = None
    interested_services: list[str] = []

    @field_validator("interested_services", mode="before")
    @classmethod
    def decode_services(cls, v):
        """Multipart clients send the list JSON-encoded; a bare string is one tag."""
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                v = [v]
        if isinstance(v, str):
            v = [v]
        return [s.strip() for s in v or [] if isinstance(s, str) and s.strip()]

    def profile(self) -> dict:
        return self.model_dump(
            exclude={"name", "email", "password", "confirm_password"},
            exclude_none=True,
        )


class UserLogin(StrictCamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return (v or "").strip().lower()


# ============== Helper Functions ==============


def auth_response(user: User, message: str) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=issue_token_for(user),
        user=AccountOut.model_validate(user),
    )


# ============== API Endpoints ==============


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    caller: Optional[TokenClaims] = Depends(optional_auth),
    store: CredentialStore = Depends(get_store),
):
    """
    Register a new account.

    Anyone may create a ``user`` account; creating an ``admin`` account
    requires the request to carry an admin token.
    """
    if user_data.role is Role.ADMIN and (caller is None or not caller.is_admin):
        raise Forbidden("Admin access required", code="admin_required")

    ensure_signing_ready()
    user = store.create(
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
        role=user_data.role,
    )
    logger.info("Registered %s via basic registration", user.id)
    return auth_response(user, "User registered successfully")


@router.post(
    "/register-detailed",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_detailed(
    request: Request,
    resume: Optional[UploadFile] = File(None),
    store: CredentialStore = Depends(get_store),
):
    """
    Register with the full profile collected by the wizard.

    Multipart body: profile fields, ``interestedServices`` as a JSON list, and
    an optional ``resume`` file. Either the account is created with
    ``profileCompleted`` set, or nothing is kept (the resume file included).
    """
    form = await request.form()
    data = validate_form(DetailedRegister, form, files={"resume"})

    if data.confirm_password is not None and data.confirm_password != data.password:
        raise ValidationError("Passwords do not match", code="password_mismatch")

    ensure_signing_ready()

    profile = data.profile()
    resume_path = None
    if resume is not None and resume.filename:
        resume_path = await store_upload(resume, "resume", kind="resume")
        profile["resume"] = resume_path

    try:
        user = await run_in_threadpool(
            store.create,
            name=data.name,
            email=data.email,
            password=data.password,
            profile=profile,
            detailed=True,
        )
    except Exception:
        remove_upload(resume_path)
        raise

    logger.info("Registered %s via detailed registration (resume=%s)", user.id, bool(resume_path))
    return auth_response(user, "User registered successfully")


@router.post("/login", response_model=AuthResponse)
def login(credentials: UserLogin, store: CredentialStore = Depends(get_store)):
    """
    Login and get a JWT access token.

    Unknown email and wrong password produce the same 400 response.
    """
    try:
        user = store.verify(credentials.email, credentials.password)
    except InvalidCredentials:
        logger.info("Failed login attempt")
        raise

    logger.info("Account %s logged in", user.id)
    return auth_response(user, "Login successful")


@router.get("/me", response_model=AccountOut)
def get_me(current_user: User = Depends(get_current_user)):
    """
    Get the current authenticated account.

    Requires valid JWT token in Authorization header.
    """
    return current_user
