"""
Response schemas shared across routers.

The public API speaks camelCase JSON; models accept either spelling on input.
"""

import re
from datetime import date, datetime
from typing import Annotated, Any, Iterable, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from starlette.datastructures import FormData

from app.core.errors import ValidationError, describe_validation_errors
from app.models.user import Role

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")


def _check_email(v: str) -> str:
    v = (v or "").strip().lower()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email format")
    return v


Email = Annotated[str, AfterValidator(_check_email)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class StrictCamelModel(CamelModel):
    """Input model that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid")


class MessageResponse(BaseModel):
    message: str


class AccountOut(CamelModel):
    """Public view of an account. The password hash is never part of it."""

    id: str
    name: str
    email: str
    role: Role
    is_active: bool = True
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
    resume: Optional[str] = None
    profile_completed: bool = False
    created_at: Optional[datetime] = None

    @field_validator("interested_services", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v or []


class AuthResponse(CamelModel):
    message: str
    token: str
    user: AccountOut


FormModel = TypeVar("FormModel", bound=BaseModel)


def validate_form(model: type[FormModel], form: FormData, files: Iterable[str] = ()) -> FormModel:
    """
    Validate multipart form fields against a model.

    File parts named in ``files`` are skipped (the endpoint takes them as
    ``UploadFile`` parameters); any other file part is rejected. Empty
    strings count as "not provided".
    """
    skip = set(files)
    data: dict[str, Any] = {}
    for key, value in form.multi_items():
        if key in skip:
            continue
        if not isinstance(value, str):
            raise ValidationError(f"Unexpected file field: {key}")
        if value == "":
            continue
        data[key] = value
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_errors(exc.errors()))
