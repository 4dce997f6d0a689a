"""
User profile API endpoints.

Owners read and update their own profile; admins may act on any profile.
"""

import json
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import field_validator

from app.api.deps import ensure_self_or_admin, get_store, require_auth
from app.api.schemas import AccountOut, CamelModel, StrictCamelModel, validate_form
from app.core.security import TokenClaims
from app.services.credential_store import CredentialStore
from app.services.uploads import remove_upload, store_upload

logger = logging.getLogger("users")

router = APIRouter()


# ============== Pydantic Schemas ==============


class ProfileUpdate(StrictCamelModel):
    """Owner-editable fields. Email, password and role are not accepted."""

    name: Optional[str] = None
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
    interested_services: Optional[list[str]] = None

    @field_validator("interested_services", mode="before")
    @classmethod
    def decode_services(cls, v):
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                v = [v]
        return v


class ProfileUpdateResponse(CamelModel):
    message: str
    user: AccountOut


# ============== API Endpoints ==============


@router.get("/{user_id}", response_model=AccountOut)
def get_profile(
    user_id: str,
    claims: TokenClaims = Depends(require_auth),
    store: CredentialStore = Depends(get_store),
):
    ensure_self_or_admin(claims, user_id)
    return store.get(user_id)


@router.put("/{user_id}", response_model=ProfileUpdateResponse)
async def update_profile(
    user_id: str,
    request: Request,
    resume: Optional[UploadFile] = File(None),
    claims: TokenClaims = Depends(require_auth),
    store: CredentialStore = Depends(get_store),
):
    """
    Update a profile from a multipart form.

    Only the fields present in the form change. A new ``resume`` file
    replaces the stored one.
    """
    ensure_self_or_admin(claims, user_id)
    previous_resume = (await run_in_threadpool(store.get, user_id)).resume

    form = await request.form()
    changes = validate_form(ProfileUpdate, form, files={"resume"}).model_dump(exclude_unset=True)

    new_resume = None
    if resume is not None and resume.filename:
        new_resume = await store_upload(resume, "resume", kind="resume")
        changes["resume"] = new_resume

    try:
        user = await run_in_threadpool(store.update_profile, user_id, changes)
    except Exception:
        remove_upload(new_resume)
        raise

    if new_resume:
        remove_upload(previous_resume)

    logger.info("Profile %s updated by %s", user_id, claims.account_id)
    return ProfileUpdateResponse(message="Profile updated successfully", user=AccountOut.model_validate(user))
