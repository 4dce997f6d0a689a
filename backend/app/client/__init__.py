from app.client.api import ApiClient, ApiError, AuthResult, ResumeFile
from app.client.session import FileStorage, MemoryStorage, SessionContext, SessionState
from app.client.wizard import (
    RegistrationDraft,
    RegistrationWizard,
    StepErrorKind,
    StepValidationError,
    WizardState,
    WizardStateError,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthResult",
    "ResumeFile",
    "FileStorage",
    "MemoryStorage",
    "SessionContext",
    "SessionState",
    "RegistrationDraft",
    "RegistrationWizard",
    "StepErrorKind",
    "StepValidationError",
    "WizardState",
    "WizardStateError",
]
