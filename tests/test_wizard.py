"""Tests for the multi-step registration wizard."""
import pytest

from app.client.api import ApiClient
from app.client.session import MemoryStorage, SessionContext, SessionState
from app.client.wizard import (
    RegistrationWizard,
    StepErrorKind,
    StepValidationError,
    WizardState,
    WizardStateError,
)
from app.core.errors import UploadRejected, ValidationError

MB = 1024 * 1024


class RecordingHttp:
    """Passes requests through to a test client and remembers them."""

    def __init__(self, http=None):
        self.http = http
        self.calls = []

    def request(self, method, path, **kwargs):
        self.calls.append((method, path, kwargs))
        if self.http is None:
            raise AssertionError(f"unexpected network call: {method} {path}")
        return self.http.request(method, path, **kwargs)


def _wizard(http=None):
    recorder = RecordingHttp(http)
    session = SessionContext(MemoryStorage())
    return RegistrationWizard(ApiClient(recorder, session), session), recorder, session


def _fill_step1(wizard, **overrides):
    values = {
        "name": "Ravi",
        "email": "ravi@x.com",
        "password": "secret1",
        "confirm_password": "secret1",
        "phone": "9876543210",
    }
    values.update(overrides)
    for name, value in values.items():
        wizard.set_field(name, value)


def _fill_step2(wizard):
    for name, value in {
        "date_of_birth": "1996-02-11",
        "gender": "male",
        "address": "12 Park Road",
        "city": "Bengaluru",
        "state": "KA",
    }.items():
        wizard.set_field(name, value)


def _fill_step3(wizard):
    wizard.set_field("experience", "2 years")
    wizard.set_field("education", "MCA")
    wizard.set_field("skills", "java, spring")


def _walk_to_step4(wizard):
    _fill_step1(wizard)
    wizard.next()
    _fill_step2(wizard)
    wizard.next()
    _fill_step3(wizard)
    wizard.next()
    assert wizard.state is WizardState.STEP4_PREFERENCES


def test_starts_on_first_step():
    wizard, _, _ = _wizard()
    assert wizard.state is WizardState.STEP1_BASIC
    assert wizard.step == 1


def test_password_mismatch_blocks_step1():
    wizard, recorder, _ = _wizard()
    _fill_step1(wizard, confirm_password="secret2")

    for _ in range(3):
        with pytest.raises(StepValidationError) as exc:
            wizard.next()
        assert exc.value.kind is StepErrorKind.PASSWORD_MISMATCH
        assert wizard.step == 1
        assert wizard.status_message == "Passwords do not match"
    assert recorder.calls == []


def test_mismatch_reported_even_with_missing_fields():
    wizard, _, _ = _wizard()
    wizard.set_field("password", "secret1")
    with pytest.raises(StepValidationError) as exc:
        wizard.next()
    assert exc.value.kind is StepErrorKind.PASSWORD_MISMATCH
    assert wizard.status_message != "Please fill in all required fields"


def test_short_password_blocks_step1():
    wizard, _, _ = _wizard()
    _fill_step1(wizard, password="abc", confirm_password="abc")
    with pytest.raises(StepValidationError) as exc:
        wizard.next()
    assert exc.value.kind is StepErrorKind.PASSWORD_TOO_SHORT
    assert wizard.status_message == "Password must be at least 6 characters long"
    assert wizard.state is WizardState.STEP1_BASIC


def test_blank_password_reported_as_too_short():
    wizard, recorder, _ = _wizard()
    with pytest.raises(StepValidationError) as exc:
        wizard.next()
    assert exc.value.kind is StepErrorKind.PASSWORD_TOO_SHORT
    assert wizard.status_message == "Password must be at least 6 characters long"

    _fill_step1(wizard, name="", password="", confirm_password="")
    with pytest.raises(StepValidationError) as exc:
        wizard.next()
    assert exc.value.kind is StepErrorKind.PASSWORD_TOO_SHORT
    assert wizard.state is WizardState.STEP1_BASIC
    assert recorder.calls == []


def test_missing_fields_block_each_step():
    wizard, _, _ = _wizard()
    _fill_step1(wizard, phone="")
    with pytest.raises(StepValidationError) as exc:
        wizard.next()
    assert exc.value.kind is StepErrorKind.MISSING_FIELDS
    assert exc.value.missing == ("phone",)
    assert wizard.status_message == "Please fill in all required fields"

    wizard.set_field("phone", "9876543210")
    assert wizard.next() is WizardState.STEP2_PERSONAL
    assert wizard.status_message is None

    wizard.set_field("city", "Bengaluru")
    with pytest.raises(StepValidationError) as exc:
        wizard.next()
    assert set(exc.value.missing) == {"date_of_birth", "gender", "address", "state"}
    assert wizard.state is WizardState.STEP2_PERSONAL


def test_previous_keeps_data_and_skips_validation():
    wizard, _, _ = _wizard()
    _fill_step1(wizard)
    wizard.next()
    wizard.set_field("city", "Bengaluru")

    assert wizard.previous() is WizardState.STEP1_BASIC
    assert wizard.previous() is WizardState.STEP1_BASIC
    assert wizard.draft.name == "Ravi"
    assert wizard.draft.city == "Bengaluru"


def test_unknown_field_rejected():
    wizard, _, _ = _wizard()
    with pytest.raises(ValidationError):
        wizard.set_field("role", "admin")


def test_step4_requires_a_service():
    wizard, recorder, _ = _wizard()
    _walk_to_step4(wizard)

    with pytest.raises(StepValidationError) as exc:
        wizard.next()
    assert exc.value.kind is StepErrorKind.NO_SERVICE_SELECTED
    assert wizard.state is WizardState.STEP4_PREFERENCES
    assert recorder.calls == []

    wizard.toggle_service("job-consultancy")
    wizard.toggle_service("job-consultancy")
    assert wizard.draft.interested_services == []


def test_oversized_resume_rejected_without_network():
    wizard, recorder, _ = _wizard()
    _fill_step1(wizard)

    with pytest.raises(UploadRejected) as exc:
        wizard.attach_resume("cv.pdf", "application/pdf", b"\0" * (15 * MB))
    assert exc.value.message == "File size should be less than 10MB"
    assert wizard.draft.resume is None
    assert wizard.draft.name == "Ravi"
    assert wizard.draft.email == "ravi@x.com"
    assert recorder.calls == []


def test_wrong_resume_type_keeps_previous_file():
    wizard, _, _ = _wizard()
    staged = wizard.attach_resume("cv.pdf", "application/pdf", b"%PDF-1.4")
    with pytest.raises(UploadRejected):
        wizard.attach_resume("avatar.png", "image/png", b"\x89PNG")
    assert wizard.draft.resume is staged


def test_draft_form_encoding():
    wizard, _, _ = _wizard()
    _fill_step1(wizard)
    wizard.toggle_service("fraud-assistance")
    form = wizard.draft.to_form()
    assert form["confirmPassword"] == "secret1"
    assert form["interestedServices"] == '["fraud-assistance"]'
    assert "dateOfBirth" not in form


def test_complete_wizard_registers_once(client):
    wizard, recorder, session = _wizard(client)
    _walk_to_step4(wizard)
    wizard.toggle_service("job-consultancy")

    assert wizard.next() is WizardState.SUCCESS

    assert [(m, p) for m, p, _ in recorder.calls] == [("POST", "/api/auth/register-detailed")]
    assert recorder.calls[0][2]["files"] is None
    user = wizard.result.user
    assert user["profileCompleted"] is True
    assert user["resume"] is None
    assert user["interestedServices"] == ["job-consultancy"]

    assert session.state is SessionState.ACTIVE
    assert session.user["email"] == "ravi@x.com"
    assert wizard.draft.name == ""
    assert wizard.status_message.startswith("Registration successful")

    me = client.get("/api/auth/me", headers=session.auth_header()).json()
    assert me["resume"] is None
    assert me["profileCompleted"] is True


def test_complete_wizard_with_resume(client):
    wizard, recorder, _ = _wizard(client)
    _walk_to_step4(wizard)
    wizard.toggle_service("fraud-assistance")
    wizard.attach_resume("cv.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document", b"PK\x03\x04")

    assert wizard.submit() is WizardState.SUCCESS
    assert len(recorder.calls) == 1
    assert wizard.result.user["resume"].endswith(".docx")


def test_failed_submission_keeps_draft(client, member):
    wizard, recorder, session = _wizard(client)
    _fill_step1(wizard, email="ava@x.com")
    wizard.next()
    _fill_step2(wizard)
    wizard.next()
    _fill_step3(wizard)
    wizard.next()
    wizard.toggle_service("general")

    assert wizard.submit() is WizardState.FAILED
    assert wizard.status_message == "User already exists"
    assert wizard.draft.email == "ava@x.com"
    assert wizard.draft.skills == "java, spring"
    assert not session.is_authenticated

    assert wizard.previous() is WizardState.STEP4_PREFERENCES
    wizard.previous()
    wizard.previous()
    wizard.previous()
    assert wizard.state is WizardState.STEP1_BASIC
    wizard.set_field("email", "ravi@x.com")
    for _ in range(3):
        wizard.next()
    assert wizard.next() is WizardState.SUCCESS
    assert len(recorder.calls) == 2


def test_retry_directly_from_failed(client, member):
    wizard, recorder, _ = _wizard(client)
    _walk_to_step4(wizard)
    wizard.set_field("email", "ava@x.com")
    wizard.toggle_service("general")
    assert wizard.submit() is WizardState.FAILED

    wizard.set_field("email", "ravi2@x.com")
    assert wizard.submit() is WizardState.SUCCESS
    assert len(recorder.calls) == 2


def test_finished_wizard_is_locked(client):
    wizard, _, _ = _wizard(client)
    _walk_to_step4(wizard)
    wizard.toggle_service("general")
    wizard.submit()

    with pytest.raises(WizardStateError):
        wizard.set_field("name", "Other")
    with pytest.raises(WizardStateError):
        wizard.submit()
    with pytest.raises(WizardStateError):
        wizard.previous()
