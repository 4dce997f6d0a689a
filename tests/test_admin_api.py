"""Tests for account moderation, profile access and the admin overview."""
from pathlib import Path

PDF_BYTES = b"%PDF-1.4\n"


def test_list_users(client, admin_headers, member):
    r = client.get("/api/users", headers=admin_headers)
    assert r.status_code == 200
    emails = {u["email"] for u in r.json()}
    assert emails == {"admin@example.com", "ava@x.com"}
    assert all("hashedPassword" not in u for u in r.json())


def test_role_change(client, admin, admin_headers, member, member_headers):
    r = client.patch(f"/api/users/{member.id}/role", json={"role": "admin"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["user"]["role"] == "admin"

    # A token issued before the promotion still carries the old role
    assert client.get("/api/users", headers=member_headers).status_code == 403

    r = client.patch(f"/api/users/{admin.id}/role", json={"role": "user"}, headers=admin_headers)
    assert r.status_code == 403
    assert r.json()["message"] == "You cannot remove your own admin role"


def test_deactivated_user_cannot_login(client, admin, admin_headers, member):
    r = client.patch(f"/api/users/{member.id}/status", json={"isActive": False}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["user"]["isActive"] is False

    login = client.post("/api/auth/login", json={"email": "ava@x.com", "password": "secret1"})
    assert login.status_code == 400
    assert login.json()["message"] == "Invalid credentials"

    r = client.patch(f"/api/users/{admin.id}/status", json={"isActive": False}, headers=admin_headers)
    assert r.status_code == 403


def test_delete_user_removes_resume(client, admin, admin_headers, test_settings):
    form = {
        "name": "Ravi",
        "email": "ravi@x.com",
        "password": "secret1",
        "phone": "9876543210",
        "dateOfBirth": "1996-02-11",
        "gender": "male",
        "address": "12 Park Road",
        "city": "Bengaluru",
        "state": "KA",
        "experience": "2 years",
        "education": "MCA",
        "skills": "java",
        "interestedServices": '["general"]',
    }
    created = client.post(
        "/api/auth/register-detailed",
        data=form,
        files={"resume": ("cv.pdf", PDF_BYTES, "application/pdf")},
    ).json()["user"]
    stored = Path(test_settings.UPLOAD_DIR) / Path(created["resume"]).name
    assert stored.exists()

    r = client.delete(f"/api/users/{created['id']}", headers=admin_headers)
    assert r.json() == {"message": "User deleted successfully"}
    assert not stored.exists()
    assert client.delete(f"/api/users/{created['id']}", headers=admin_headers).status_code == 404
    assert client.delete(f"/api/users/{admin.id}", headers=admin_headers).status_code == 403


def test_moderation_needs_admin(client, member, member_headers):
    assert client.get("/api/users", headers=member_headers).status_code == 403
    assert client.delete(f"/api/users/{member.id}", headers=member_headers).status_code == 403
    assert client.patch(f"/api/users/{member.id}/role", json={"role": "admin"}).status_code == 401


def test_profile_access_rules(client, admin_headers, member, member_headers, store, headers_for):
    other = store.create(name="Other", email="other@x.com", password="secret1")

    assert client.get(f"/api/users/{member.id}", headers=member_headers).status_code == 200
    assert client.get(f"/api/users/{other.id}", headers=member_headers).status_code == 403
    assert client.get(f"/api/users/{other.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/users/{other.id}").status_code == 401
    assert client.get("/api/users/missing", headers=admin_headers).status_code == 404
    assert client.get(f"/api/users/{member.id}", headers=headers_for(other)).status_code == 403


def test_profile_update(client, member, member_headers, test_settings):
    r = client.put(
        f"/api/users/{member.id}",
        data={"name": "Ava K", "city": "Pune", "interestedServices": '["fraud-assistance"]'},
        headers=member_headers,
    )
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["name"] == "Ava K"
    assert user["city"] == "Pune"
    assert user["interestedServices"] == ["fraud-assistance"]
    assert user["email"] == "ava@x.com"

    first = client.put(
        f"/api/users/{member.id}",
        files={"resume": ("a.pdf", PDF_BYTES, "application/pdf")},
        headers=member_headers,
    ).json()["user"]["resume"]
    second = client.put(
        f"/api/users/{member.id}",
        files={"resume": ("b.pdf", PDF_BYTES, "application/pdf")},
        headers=member_headers,
    ).json()["user"]["resume"]
    upload_dir = Path(test_settings.UPLOAD_DIR)
    assert not (upload_dir / Path(first).name).exists()
    assert (upload_dir / Path(second).name).exists()


def test_profile_update_cannot_touch_credentials(client, member, member_headers):
    for field in ("email", "role", "password"):
        r = client.put(f"/api/users/{member.id}", data={field: "admin"}, headers=member_headers)
        assert r.status_code == 400
    me = client.get("/api/auth/me", headers=member_headers).json()
    assert me["role"] == "user"
    assert me["email"] == "ava@x.com"


def test_dashboard_overview(client, admin_headers, member):
    client.post(
        "/api/contact",
        json={"name": "K", "email": "k@x.com", "phone": "1", "service": "fraud-assistance", "message": "help"},
    )
    client.post("/api/newsletter/subscribe", json={"email": "reader@x.com"})

    r = client.get("/api/dashboard/stats", headers=admin_headers)
    assert r.status_code == 200
    overview = r.json()
    assert overview["totalUsers"] == 1
    assert overview["totalAdmins"] == 1
    assert overview["totalContacts"] == 1
    assert overview["totalFraudCases"] == 1
    assert overview["totalApplications"] == 0
    assert overview["newContacts"] == 1
    assert overview["newsletterSubscribers"] == 1
    assert overview["happyClients"] == "5000+"
