"""Tests for the registration and login endpoints."""
import inspect
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.api.v1 import auth, users
from app.core.security import decode_access_token
from app.main import app
from app.services.credential_store import CredentialStore

PDF_BYTES = b"%PDF-1.4\n% resume\n"


def _detailed_form(**overrides):
    form = {
        "name": "Ravi",
        "email": "ravi@x.com",
        "password": "secret1",
        "confirmPassword": "secret1",
        "phone": "9876543210",
        "dateOfBirth": "1996-02-11",
        "gender": "male",
        "address": "12 Park Road",
        "city": "Bengaluru",
        "state": "KA",
        "experience": "2 years",
        "education": "MCA",
        "skills": "java, spring",
        "jobType": "full-time",
        "interestedServices": json.dumps(["job-consultancy"]),
    }
    form.update(overrides)
    return form


def test_register_new_user(client):
    r = client.post("/api/auth/register", json={"name": "Ava", "email": "ava@x.com", "password": "secret1"})
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "User registered successfully"
    assert body["user"]["role"] == "user"
    assert body["user"]["email"] == "ava@x.com"
    assert "password" not in body["user"]
    assert "hashedPassword" not in body["user"]

    claims = decode_access_token(body["token"])
    assert claims.account_id == body["user"]["id"]
    assert claims.email == "ava@x.com"
    assert claims.role.value == "user"


def test_register_same_email_twice(client):
    payload = {"name": "Ava", "email": "ava@x.com", "password": "secret1"}
    assert client.post("/api/auth/register", json=payload).status_code == 201

    r = client.post("/api/auth/register", json=payload)
    assert r.status_code == 400
    assert r.json()["message"] == "User already exists"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "ava@x.com", "password": "secret1"},
        {"name": "Ava", "email": "not-an-email", "password": "secret1"},
        {"name": "Ava", "email": "ava@x.com", "password": "123"},
        {"name": "Ava", "email": "ava@x.com", "password": "secret1", "isAdmin": True},
    ],
)
def test_register_invalid_payload(client, payload):
    r = client.post("/api/auth/register", json=payload)
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


def test_register_admin_requires_admin_caller(client, admin_headers, member_headers):
    payload = {"name": "Boss", "email": "boss@x.com", "password": "secret1", "role": "admin"}

    r = client.post("/api/auth/register", json=payload)
    assert r.status_code == 403

    r = client.post("/api/auth/register", json=payload, headers=member_headers)
    assert r.status_code == 403
    assert r.json()["code"] == "admin_required"

    r = client.post("/api/auth/register", json=payload, headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["user"]["role"] == "admin"


def test_login_success(client, member):
    r = client.post("/api/auth/login", json={"email": "AVA@x.com", "password": "secret1"})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Login successful"
    assert body["user"]["id"] == member.id
    assert decode_access_token(body["token"]).account_id == member.id


def test_login_failures_look_the_same(client, member):
    wrong_password = client.post("/api/auth/login", json={"email": "ava@x.com", "password": "nope123"})
    unknown_email = client.post("/api/auth/login", json={"email": "ghost@x.com", "password": "secret1"})

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json() == {
        "message": "Invalid credentials",
        "code": "invalid_credentials",
    }


def test_me_requires_token(client, member_headers):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["message"] == "Access token required"

    r = client.get("/api/auth/me", headers=member_headers)
    assert r.status_code == 200
    assert r.json()["email"] == "ava@x.com"


def test_register_detailed_without_resume(client, session_factory):
    r = client.post("/api/auth/register-detailed", data=_detailed_form())
    assert r.status_code == 201
    user = r.json()["user"]
    assert user["profileCompleted"] is True
    assert user["interestedServices"] == ["job-consultancy"]
    assert user["dateOfBirth"] == "1996-02-11"
    assert user["resume"] is None

    db = session_factory()
    try:
        stored = CredentialStore(db).find_by_email("ravi@x.com")
        assert stored.profile_completed is True
        assert stored.resume is None
    finally:
        db.close()


def test_register_detailed_with_resume(client, test_settings):
    r = client.post(
        "/api/auth/register-detailed",
        data=_detailed_form(),
        files={"resume": ("cv.pdf", PDF_BYTES, "application/pdf")},
    )
    assert r.status_code == 201
    resume = r.json()["user"]["resume"]
    assert resume.startswith("uploads/resume-")
    assert resume.endswith(".pdf")
    assert (Path(test_settings.UPLOAD_DIR) / Path(resume).name).read_bytes() == PDF_BYTES


def test_register_detailed_rejects_bad_resume(client, test_settings):
    r = client.post(
        "/api/auth/register-detailed",
        data=_detailed_form(),
        files={"resume": ("notes.txt", b"plain text", "text/plain")},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Only PDF and Word documents are allowed"

    login = client.post("/api/auth/login", json={"email": "ravi@x.com", "password": "secret1"})
    assert login.status_code == 400
    upload_dir = Path(test_settings.UPLOAD_DIR)
    assert not upload_dir.exists() or not any(upload_dir.iterdir())


def test_register_detailed_incomplete_keeps_nothing(client, test_settings):
    r = client.post(
        "/api/auth/register-detailed",
        data=_detailed_form(skills=""),
        files={"resume": ("cv.pdf", PDF_BYTES, "application/pdf")},
    )
    assert r.status_code == 400
    assert "skills" in r.json()["message"]

    login = client.post("/api/auth/login", json={"email": "ravi@x.com", "password": "secret1"})
    assert login.status_code == 400
    assert not any(Path(test_settings.UPLOAD_DIR).iterdir())


def test_register_detailed_password_mismatch(client):
    r = client.post("/api/auth/register-detailed", data=_detailed_form(confirmPassword="secret2"))
    assert r.status_code == 400
    assert r.json() == {"message": "Passwords do not match", "code": "password_mismatch"}


def test_register_detailed_duplicate_email(client, member):
    r = client.post("/api/auth/register-detailed", data=_detailed_form(email="ava@x.com"))
    assert r.status_code == 400
    assert r.json()["message"] == "User already exists"


def test_unexpected_failure_is_generic_500(client, monkeypatch):
    def broken_create(self, **kwargs):
        raise RuntimeError("database connection refused at 10.0.0.5")

    monkeypatch.setattr(CredentialStore, "create", broken_create)
    raw = TestClient(app, raise_server_exceptions=False)

    r = raw.post("/api/auth/register", json={"name": "Ava", "email": "ava@x.com", "password": "secret1"})
    assert r.status_code == 500
    assert r.json() == {"message": "Internal server error", "error": "Internal server error"}
    assert "10.0.0.5" not in r.text


def test_register_without_signing_secret_keeps_nothing(client, session_factory, test_settings):
    test_settings.JWT_SECRET = ""
    raw = TestClient(app, raise_server_exceptions=False)

    r = raw.post("/api/auth/register", json={"name": "Bo", "email": "bo@x.com", "password": "secret1"})
    assert r.status_code == 500
    assert r.json() == {"message": "Internal server error", "error": "Internal server error"}

    r = raw.post(
        "/api/auth/register-detailed",
        data=_detailed_form(),
        files={"resume": ("cv.pdf", PDF_BYTES, "application/pdf")},
    )
    assert r.status_code == 500

    db = session_factory()
    try:
        assert CredentialStore(db).find_by_email("bo@x.com") is None
        assert CredentialStore(db).find_by_email("ravi@x.com") is None
    finally:
        db.close()
    upload_dir = Path(test_settings.UPLOAD_DIR)
    assert not upload_dir.exists() or not any(upload_dir.iterdir())


def test_password_longer_than_bcrypt_limit_rejected(client, session_factory):
    r = client.post("/api/auth/register", json={"name": "Bo", "email": "bo@x.com", "password": "a" * 100})
    assert r.status_code == 400
    assert "at most 72 bytes" in r.json()["message"]

    # multi-byte characters count by their encoded size
    r = client.post(
        "/api/auth/register-detailed",
        data=_detailed_form(password="é" * 40, confirmPassword="é" * 40),
    )
    assert r.status_code == 400

    db = session_factory()
    try:
        assert CredentialStore(db).find_by_email("bo@x.com") is None
        assert CredentialStore(db).find_by_email("ravi@x.com") is None
    finally:
        db.close()

    r = client.post("/api/auth/register", json={"name": "Bo", "email": "bo@x.com", "password": "a" * 72})
    assert r.status_code == 201


def test_blocking_handlers_stay_off_the_event_loop(client, monkeypatch):
    for handler in (auth.register, auth.login, auth.get_me, users.get_profile):
        assert not inspect.iscoroutinefunction(handler)

    offloaded = []

    async def recording_threadpool(func, *args, **kwargs):
        offloaded.append(getattr(func, "__name__", func))
        return func(*args, **kwargs)

    monkeypatch.setattr(auth, "run_in_threadpool", recording_threadpool)
    r = client.post("/api/auth/register-detailed", data=_detailed_form())
    assert r.status_code == 201
    assert offloaded == ["create"]
