"""
Multi-step registration wizard.

An explicit state machine over four steps that stages the registration draft
locally and only creates the account with one multipart call at the end:

    STEP1_BASIC -> STEP2_PERSONAL -> STEP3_PROFESSIONAL -> STEP4_PREFERENCES
        -> SUBMITTING -> SUCCESS | FAILED

"Next" is gated on the current step's required fields; "Previous" is never
validated and never discards data. A failed submission keeps the draft so it
can be corrected and submitted again.
"""

import json
import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional

from app.client.api import ApiClient, ApiError, AuthResult, ResumeFile
from app.client.session import SessionContext
from app.core.errors import AppError, UploadRejected, ValidationError
from app.services.uploads import validate_upload

logger = logging.getLogger("client.wizard")

MIN_PASSWORD_LENGTH = 6

MISSING_FIELDS_MESSAGE = "Please fill in all required fields"
PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"
PASSWORD_TOO_SHORT_MESSAGE = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
SUCCESS_MESSAGE = "Registration successful! Welcome to CareerGuard."


class WizardState(Enum):
    STEP1_BASIC = 1
    STEP2_PERSONAL = 2
    STEP3_PROFESSIONAL = 3
    STEP4_PREFERENCES = 4
    SUBMITTING = 5
    SUCCESS = 6
    FAILED = 7


# state -> (next, previous)
TRANSITIONS: dict[WizardState, tuple[Optional[WizardState], Optional[WizardState]]] = {
    WizardState.STEP1_BASIC: (WizardState.STEP2_PERSONAL, None),
    WizardState.STEP2_PERSONAL: (WizardState.STEP3_PROFESSIONAL, WizardState.STEP1_BASIC),
    WizardState.STEP3_PROFESSIONAL: (WizardState.STEP4_PREFERENCES, WizardState.STEP2_PERSONAL),
    WizardState.STEP4_PREFERENCES: (WizardState.SUBMITTING, WizardState.STEP3_PROFESSIONAL),
    WizardState.SUBMITTING: (None, None),
    WizardState.SUCCESS: (None, None),
    WizardState.FAILED: (WizardState.SUBMITTING, WizardState.STEP4_PREFERENCES),
}

REQUIRED_FIELDS: dict[WizardState, tuple[str, ...]] = {
    WizardState.STEP1_BASIC: ("name", "email", "password", "confirm_password", "phone"),
    WizardState.STEP2_PERSONAL: ("date_of_birth", "gender", "address", "city", "state"),
    WizardState.STEP3_PROFESSIONAL: ("experience", "education", "skills"),
    WizardState.STEP4_PREFERENCES: (),
}

EDITABLE_STATES = frozenset(REQUIRED_FIELDS) | {WizardState.FAILED}


class StepErrorKind(Enum):
    MISSING_FIELDS = "missing_fields"
    PASSWORD_MISMATCH = "password_mismatch"
    PASSWORD_TOO_SHORT = "password_too_short"
    NO_SERVICE_SELECTED = "no_service_selected"


class StepValidationError(ValidationError):
    """A step's gate refused to open."""

    def __init__(self, kind: StepErrorKind, message: str, missing: tuple[str, ...] = ()):
        super().__init__(message, code=kind.value)
        self.kind = kind
        self.missing = missing


class WizardStateError(RuntimeError):
    """An action that the current wizard state does not allow."""


@dataclass
class RegistrationDraft:
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    phone: str = ""
    date_of_birth: str = ""
    gender: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    current_position: str = ""
    experience: str = ""
    skills: str = ""
    education: str = ""
    expected_salary: str = ""
    preferred_location: str = ""
    job_type: str = ""
    work_mode: str = ""
    interested_services: list[str] = field(default_factory=list)
    resume: Optional[ResumeFile] = None

    @classmethod
    def text_fields(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name not in ("interested_services", "resume"))

    def set(self, name: str, value: str) -> None:
        if name not in self.text_fields():
            raise ValidationError(f"Unknown registration field: {name}", code="unknown_field")
        setattr(self, name, value if value is not None else "")

    def missing(self, required: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(name for name in required if not str(getattr(self, name)).strip())

    def to_form(self) -> dict[str, str]:
        """Multipart form fields in the server's camelCase; empty values are left out."""
        form: dict[str, str] = {}
        for name in self.text_fields():
            value = getattr(self, name)
            if value != "":
                form[_camel(name)] = value
        form["interestedServices"] = json.dumps(self.interested_services)
        return form


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class RegistrationWizard:
    """Drives one registration from the first step to a created account."""

    def __init__(self, api: ApiClient, session: SessionContext):
        self.api = api
        self.session = session
        self.state = WizardState.STEP1_BASIC
        self.draft = RegistrationDraft()
        self.status_message: Optional[str] = None
        self.last_error: Optional[StepErrorKind] = None
        self.result: Optional[AuthResult] = None

    @property
    def step(self) -> Optional[int]:
        """1-based step index while editing; ``None`` once submission started."""
        if self.state is WizardState.FAILED:
            return WizardState.STEP4_PREFERENCES.value
        return self.state.value if self.state in REQUIRED_FIELDS else None

    # ============== Draft Editing ==============

    def _ensure_editable(self) -> None:
        if self.state not in EDITABLE_STATES:
            raise WizardStateError(f"Draft cannot be edited while {self.state.name}")

    def set_field(self, name: str, value: str) -> None:
        self._ensure_editable()
        self.draft.set(name, value)

    def toggle_service(self, tag: str) -> None:
        self._ensure_editable()
        services = self.draft.interested_services
        if tag in services:
            services.remove(tag)
        else:
            services.append(tag)

    def attach_resume(self, filename: str, content_type: str, data: bytes) -> ResumeFile:
        """
        Stage a resume for the final submission.

        Raises:
            UploadRejected: too large or not a PDF/Word document; the draft is unchanged
        """
        self._ensure_editable()
        try:
            validate_upload(filename, content_type, len(data), kind="resume")
        except UploadRejected as exc:
            self.status_message = exc.message
            raise
        self.draft.resume = ResumeFile(filename=filename, content_type=content_type, data=data)
        return self.draft.resume

    def remove_resume(self) -> None:
        self._ensure_editable()
        self.draft.resume = None

    # ============== Transitions ==============

    def validate_step(self, state: WizardState) -> None:
        """Raise ``StepValidationError`` if ``state``'s gate is closed."""
        draft = self.draft
        if state is WizardState.STEP1_BASIC:
            if draft.password != draft.confirm_password:
                raise StepValidationError(StepErrorKind.PASSWORD_MISMATCH, PASSWORD_MISMATCH_MESSAGE)
            if len(draft.password or "") < MIN_PASSWORD_LENGTH:
                raise StepValidationError(StepErrorKind.PASSWORD_TOO_SHORT, PASSWORD_TOO_SHORT_MESSAGE)

        if state is WizardState.STEP4_PREFERENCES:
            if not draft.interested_services:
                raise StepValidationError(StepErrorKind.NO_SERVICE_SELECTED, MISSING_FIELDS_MESSAGE)
            return

        missing = draft.missing(REQUIRED_FIELDS[state])
        if missing:
            raise StepValidationError(StepErrorKind.MISSING_FIELDS, MISSING_FIELDS_MESSAGE, missing)

    def _gate(self, state: WizardState) -> None:
        try:
            self.validate_step(state)
        except StepValidationError as exc:
            self.status_message = exc.message
            self.last_error = exc.kind
            raise
        self.status_message = None
        self.last_error = None

    def next(self) -> WizardState:
        """Advance one step; on the last step this submits."""
        if self.state in (WizardState.STEP4_PREFERENCES, WizardState.FAILED):
            return self.submit()
        if self.state not in REQUIRED_FIELDS:
            raise WizardStateError(f"Cannot advance from {self.state.name}")

        self._gate(self.state)
        self.state = TRANSITIONS[self.state][0]
        return self.state

    def previous(self) -> WizardState:
        if self.state in (WizardState.SUBMITTING, WizardState.SUCCESS):
            raise WizardStateError(f"Cannot go back from {self.state.name}")
        target = TRANSITIONS[self.state][1]
        if target is not None:
            self.state = target
        self.status_message = None
        self.last_error = None
        return self.state

    def submit(self) -> WizardState:
        """
        Validate every step and create the account with one multipart request.

        Returns the terminal state. Gate failures raise ``StepValidationError``
        and leave the wizard where it was; server failures land in ``FAILED``
        with the server's message in ``status_message``.
        """
        if self.state not in (WizardState.STEP4_PREFERENCES, WizardState.FAILED):
            raise WizardStateError(f"Cannot submit from {self.state.name}")

        for state in REQUIRED_FIELDS:
            self._gate(state)

        self.state = WizardState.SUBMITTING
        try:
            result = self.api.register_detailed(self.draft.to_form(), self.draft.resume)
        except (ApiError, AppError) as exc:
            self.state = WizardState.FAILED
            self.status_message = exc.message
            logger.info("Registration failed: %s", exc.message)
            return self.state

        self.session.login(result.token, result.user)
        self.result = result
        self.draft = RegistrationDraft()
        self.state = WizardState.SUCCESS
        self.status_message = SUCCESS_MESSAGE
        return self.state
