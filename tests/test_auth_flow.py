"""
Auth flow integration tests.
- register -> OTP verification -> login, by email and by college id
- login gates: unverified, pending warden, deactivated
- profile / password self-service
- Google sign-in through a fake OAuth client

"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from app.db.base import utcnow
from app.models.user import ApprovalStatus, Role, User
from app.services.email import otp_email_html
from app.services.google_oauth import GoogleProfile, get_google_client
from app.main import app as fastapi_app
from tests.helpers import (
    PASSWORD,
    auth_header,
    create_student_in_db,
    create_warden_in_db,
    get_user,
    headers_for,
    unique_email,
)


def _register(client, **overrides):
    body = {
        "name": "Test Student",
        "college_id": "21bcs001",
        "email": unique_email("student"),
        "password": PASSWORD,
        "room_number": "101",
        "hostel_block": "A",
    }
    body.update(overrides)
    return client.post("/auth/register", json=body), body


def test_register_verify_login_flow(client, db):
    r, body = _register(client)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["requires_verification"] is True
    # mail is not configured in tests; the account is still created
    assert data["email_sent"] is False
    assert data["user"]["college_id"] == "21BCS001"
    assert data["user"]["email_verified"] is False
    assert "password_hash" not in data["user"]
    assert "email_verification_otp" not in data["user"]

    # login blocked until verified
    r = client.post("/auth/login", json={"email": body["email"], "password": PASSWORD})
    assert r.status_code == 403, r.text
    assert r.json()["requires_verification"] is True
    assert r.json()["email"] == body["email"]

    user = get_user(db, data["user"]["id"])
    otp = user.email_verification_otp
    assert otp and len(otp) == 6

    r = client.post("/auth/verify-email", json={"email": body["email"], "otp": otp})
    assert r.status_code == 200, r.text
    assert r.json()["data"]["user"]["email_verified"] is True

    user = get_user(db, data["user"]["id"])
    assert user.email_verification_otp is None
    assert user.email_verification_otp_expires is None

    r = client.post("/auth/login", json={"email": body["email"], "password": PASSWORD})
    assert r.status_code == 200, r.text
    token = r.json()["data"]["token"]

    # college id login is case-insensitive
    r = client.post("/auth/login", json={"college_id": "21bcs001", "password": PASSWORD})
    assert r.status_code == 200, r.text

    me = client.get("/auth/me", headers=auth_header(token))
    assert me.status_code == 200, me.text
    assert me.json()["data"]["user"]["email"] == body["email"]


def test_verify_email_rejects_wrong_and_expired_otp(client, db):
    r, body = _register(client)
    assert r.status_code == 201, r.text
    user_id = r.json()["data"]["user"]["id"]

    r = client.post("/auth/verify-email", json={"email": body["email"], "otp": "000000"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid verification code"

    user = get_user(db, user_id)
    user.email_verification_otp_expires = utcnow() - timedelta(minutes=1)
    db.commit()

    r = client.post("/auth/verify-email", json={"email": body["email"], "otp": user.email_verification_otp})
    assert r.status_code == 400
    assert "expired" in r.json()["message"]


def test_resend_otp_reports_mail_failure(client, db):
    r, body = _register(client)
    user_id = r.json()["data"]["user"]["id"]

    r = client.post("/auth/send-verification-otp", json={"email": body["email"]})
    # resend is not best effort: unconfigured mail is reported
    assert r.status_code == 503, r.text
    assert r.json()["success"] is False

    user = get_user(db, user_id)
    assert user.email_verification_otp is not None
    assert user.email_verification_otp_expires is not None

    r = client.post("/auth/send-verification-otp", json={"email": unique_email("nobody")})
    assert r.status_code == 404


def test_register_validation(client, db):
    r, _ = _register(client, email="someone@gmail.com")
    assert r.status_code == 400
    assert r.json()["message"] == "Only @nitj.ac.in email addresses are allowed"

    r, _ = _register(client, role="admin")
    assert r.status_code == 403

    r, _ = _register(client, room_number=None)
    assert r.status_code == 400
    assert r.json()["message"] == "Room number is required for students"

    r, _ = _register(client, password="123")
    assert r.status_code == 400
    assert r.json()["message"].startswith("password")

    ok_r, body = _register(client, college_id="DUP001")
    assert ok_r.status_code == 201, ok_r.text
    r, _ = _register(client, college_id="dup001")
    assert r.status_code == 400
    assert r.json()["message"] == "User with this email or college ID already exists"
    r, _ = _register(client, email=body["email"].upper(), college_id="OTHER01")
    assert r.status_code == 400


def test_warden_registration_waits_for_approval(client, db):
    r, body = _register(client, role="warden", college_id="WAR100", room_number=None)
    assert r.status_code == 201, r.text
    assert r.json()["data"]["user"]["approval_status"] == "pending"

    user = get_user(db, r.json()["data"]["user"]["id"])
    user.email_verified = True
    db.commit()

    r = client.post("/auth/login", json={"email": body["email"], "password": PASSWORD})
    assert r.status_code == 403
    assert r.json()["message"] == "Your account is pending approval"


def test_login_failures(client, db):
    student = create_student_in_db(db)

    r = client.post("/auth/login", json={"email": student.email, "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid credentials"

    r = client.post("/auth/login", json={"password": PASSWORD})
    assert r.status_code == 400

    student.is_active = False
    db.commit()
    r = client.post("/auth/login", json={"email": student.email, "password": PASSWORD})
    assert r.status_code == 401
    assert r.json()["message"] == "Your account has been deactivated"


def test_protected_route_token_errors(client, db):
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.json()["message"] == "Not authorized to access this route. Please login."

    r = client.get("/auth/me", headers=auth_header("not-a-token"))
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or expired token. Please login again."

    warden = create_warden_in_db(db, approval_status=ApprovalStatus.PENDING)
    r = client.get("/auth/me", headers=headers_for(warden))
    assert r.status_code == 401
    assert r.json()["message"] == "Your account is pending. Access denied."


def test_update_profile_and_change_password(client, db):
    student = create_student_in_db(db)
    h = headers_for(student)

    r = client.put("/auth/update-profile", headers=h, json={"name": "Renamed", "room_number": "202"})
    assert r.status_code == 200, r.text
    assert r.json()["data"]["user"]["name"] == "Renamed"
    assert r.json()["data"]["user"]["room_number"] == "202"

    r = client.put(
        "/auth/change-password",
        headers=h,
        json={"current_password": "nope", "new_password": "NewPassw0rd!"},
    )
    assert r.status_code == 401

    r = client.put(
        "/auth/change-password",
        headers=h,
        json={"current_password": PASSWORD, "new_password": "NewPassw0rd!"},
    )
    assert r.status_code == 200, r.text

    r = client.post("/auth/login", json={"email": student.email, "password": "NewPassw0rd!"})
    assert r.status_code == 200, r.text


def test_warden_cannot_change_room_number(client, db):
    warden = create_warden_in_db(db)
    r = client.put("/auth/update-profile", headers=headers_for(warden), json={"room_number": "999"})
    assert r.status_code == 200, r.text
    assert r.json()["data"]["user"]["room_number"] is None


def test_otp_email_escapes_user_name():
    html = otp_email_html("<script>alert(1)</script> & co", "123456", 10)
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; co" in html
    assert "123456" in html


# Google sign-in


class FakeGoogleClient:
    def __init__(self, profile: GoogleProfile):
        self.profile = profile

    def authorization_url(self, state=None):
        return "https://accounts.google.com/o/oauth2/v2/auth?client_id=test"

    def fetch_profile(self, code):
        return self.profile


@pytest.fixture()
def fake_google():
    def _install(profile: GoogleProfile):
        fastapi_app.dependency_overrides[get_google_client] = lambda: FakeGoogleClient(profile)

    yield _install
    fastapi_app.dependency_overrides.pop(get_google_client, None)


def test_google_unconfigured(client):
    r = client.get("/auth/google", follow_redirects=False)
    assert r.status_code == 503
    assert r.json()["message"] == "Google OAuth is not configured"


def test_google_redirect(client, fake_google):
    fake_google(GoogleProfile(google_id="g-1", email=unique_email(), name="X"))
    r = client.get("/auth/google", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"].startswith("https://accounts.google.com/")


def test_google_new_account_needs_verification(client, db, fake_google):
    email = "jdoe.cse21@nitj.ac.in"
    fake_google(GoogleProfile(google_id="g-new", email=email, name="J Doe", avatar="https://img/x.png"))

    r = client.get("/auth/google/callback", params={"code": "abc"})
    assert r.status_code == 403, r.text
    body = r.json()
    assert body["requires_verification"] is True
    assert body["is_new_user"] is True
    assert body["email"] == email

    db.expire_all()
    user = db.scalar(select(User).where(User.email == email))
    assert user.role == Role.STUDENT
    assert user.college_id == "JDOE.CSE21"
    assert user.google_id == "g-new"
    assert user.password_hash is None
    assert user.email_verification_otp is not None


def test_google_links_existing_verified_account(client, db, fake_google):
    student = create_student_in_db(db)
    fake_google(GoogleProfile(google_id="g-link", email=student.email, name=student.name))

    r = client.get("/auth/google/callback", params={"code": "abc"})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["is_new_user"] is False
    assert data["token"]
    assert get_user(db, student.id).google_id == "g-link"


def test_google_rejects_foreign_domain(client, fake_google):
    fake_google(GoogleProfile(google_id="g-x", email="someone@gmail.com", name="X"))
    r = client.get("/auth/google/callback", params={"code": "abc"})
    assert r.status_code == 403
    assert r.json()["message"] == "Only @nitj.ac.in email addresses are allowed"
