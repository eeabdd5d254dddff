from datetime import timedelta

from fastapi.testclient import TestClient

from main import app
from models import Booking, BookingStatus, Token, TokenPurpose, User
from models.base import utcnow
from services import token_service

from conftest import PASSWORD


def _signup(client, **overrides):
    body = {
        "fullName": "Ada Obi",
        "email": "ada@example.com",
        "phoneNumber": "08012345678",
        "password": PASSWORD,
        "role": "student",
        "university": "University of Lagos",
        "yearOfStudy": "200",
    }
    body.update(overrides)
    return client.post("/api/users/signup", json=body)


def test_healthz(client):
    res = client.get("/healthz")
    assert res.status_code == 200
    assert res.json()["status"] == "success"


def test_startup_purges_expired_tokens(db, make_user):
    user = make_user(verified=False)
    token_service.create_verification_code(db, user.id, user.email)
    token_service.create_reset_code(db, user.id, user.email)
    db.commit()
    db.query(Token).filter(Token.purpose == TokenPurpose.RESET_PASSWORD).update(
        {Token.expires_at: utcnow() - timedelta(minutes=1)}, synchronize_session=False
    )
    db.commit()

    with TestClient(app) as client:
        assert client.get("/healthz").status_code == 200

    db.expire_all()
    remaining = db.query(Token).all()
    assert len(remaining) == 1
    assert remaining[0].purpose == TokenPurpose.EMAIL_VERIFICATION


def test_unknown_route_envelope(client):
    res = client.get("/api/nothing-here")
    assert res.status_code == 404
    assert res.json() == {"status": "fail", "data": {"error": "Route not found"}}


def test_signup_verify_login_me(client, mail):
    res = _signup(client)
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["status"] == "success"
    assert body["data"]["user"]["email"] == "ada@example.com"
    assert body["data"]["user"]["role"] == "student"
    assert "password" not in body["data"]["user"]

    res = client.post("/api/users/login", json={"email": "ada@example.com", "password": PASSWORD})
    assert res.status_code == 400
    assert res.json()["data"]["error"] == "Please verify your email first"

    code = mail["verification"].call_args.args[2]
    res = client.post("/api/users/verify-otp", json={"email": "ada@example.com", "code": code})
    assert res.status_code == 200, res.text
    assert res.json()["data"]["user"]["is_verified"] is True

    res = client.post("/api/users/login", json={"email": "ada@example.com", "password": PASSWORD})
    assert res.status_code == 200, res.text
    token = res.json()["data"]["token"]

    res = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    assert res.json()["data"]["email"] == "ada@example.com"


def test_verify_via_signed_link(client, mail):
    _signup(client)
    signed = mail["verification"].call_args.args[3]

    res = client.get(f"/api/users/verify-otp/{signed}")
    assert res.status_code == 200, res.text

    res = client.get("/api/users/verify-otp/garbage")
    assert res.status_code == 400
    assert res.json()["data"]["error"] == "Invalid verification link"


def test_signup_validation_error_envelope(client):
    res = _signup(client, email="not-an-email")

    assert res.status_code == 400
    body = res.json()
    assert body["status"] == "fail"
    fields = [err["field"] for err in body["data"]["validation_errors"]]
    assert "email" in fields


def test_signup_rollback_leaves_nothing(db, mail):
    mail["verification"].side_effect = Exception("Brevo error: unavailable")
    client = TestClient(app, raise_server_exceptions=False)

    res = _signup(client)

    assert res.status_code == 500
    assert res.json() == {"status": "error", "message": "Internal server error"}
    assert db.query(User).count() == 0


def test_resend_rate_limit_returns_429(client, mail):
    _signup(client)
    for _ in range(2):
        res = client.post("/api/users/resend-verify-otp", json={"email": "ada@example.com"})
        assert res.status_code == 200, res.text

    res = client.post("/api/users/resend-verify-otp", json={"email": "ada@example.com"})
    assert res.status_code == 429


def test_password_reset_endpoints(client, make_user, mail):
    user = make_user()

    res = client.post("/api/users/forget-password", json={"email": user.email})
    assert res.status_code == 200, res.text
    code = mail["reset"].call_args.args[2]

    res = client.post("/api/users/reset-password", json={"code": code, "newPassword": "brand-new-pass"})
    assert res.status_code == 200, res.text

    res = client.post("/api/users/login", json={"email": user.email, "password": "brand-new-pass"})
    assert res.status_code == 200


def test_missing_and_invalid_token(client):
    res = client.get("/api/booking")
    assert res.status_code == 401
    assert res.json() == {"status": "fail", "data": {"error": "Missing token"}}

    res = client.get("/api/booking", headers={"Authorization": "Bearer nonsense"})
    assert res.status_code == 401
    assert res.json()["data"]["error"] == "Invalid token"


def test_list_users_admin_only(client, make_user, auth_header):
    student = make_user()
    admin = make_user(role="admin")

    res = client.get("/api/users", headers=auth_header(student, "student"))
    assert res.status_code == 403

    res = client.get("/api/users", headers=auth_header(admin, "admin"))
    assert res.status_code == 200
    assert res.json()["data"]["count"] == 2


def test_role_is_read_from_role_record(client, make_user, auth_header):
    student = make_user()

    # A token claiming admin does not make a student an admin
    res = client.get("/api/users", headers=auth_header(student, "admin"))
    assert res.status_code == 403


def test_update_and_delete_user(client, make_user, auth_header):
    user = make_user()
    other = make_user()

    res = client.put(
        f"/api/users/{user.id}",
        json={"fullName": "Renamed"},
        headers=auth_header(user, "student"),
    )
    assert res.status_code == 200, res.text
    assert res.json()["data"]["full_name"] == "Renamed"

    res = client.delete(f"/api/users/{user.id}", headers=auth_header(other, "student"))
    assert res.status_code == 401

    res = client.delete(f"/api/users/{user.id}", headers=auth_header(user, "student"))
    assert res.status_code == 200


def test_booking_flow(client, db, make_user, make_property, auth_header):
    agent = make_user(role="agent")
    other_agent = make_user(role="agent")
    student = make_user()
    prop = make_property(agent=agent)

    res = client.post(
        "/api/booking",
        json={
            "propertyId": prop.id,
            "propertyType": "single",
            "gender": "male",
            "moveInDate": "2026-09-01",
            "duration": "6 months",
            "amount": 500,
        },
        headers=auth_header(student, "student"),
    )
    assert res.status_code == 201, res.text
    booking = res.json()["data"]
    assert booking["tenant_id"] == student.id
    assert booking["agent_id"] == agent.id
    assert booking["status"] == "pending"
    assert booking["payment_status"] == "pending"
    assert booking["property"]["title"] == prop.title
    assert booking["agent"]["email"] == agent.email

    res = client.patch(
        f"/api/booking/{booking['id']}/status",
        json={"status": "confirmed"},
        headers=auth_header(other_agent, "agent"),
    )
    assert res.status_code == 401
    assert res.json()["data"]["error"] == "Only the assigned agent can update this booking"

    res = client.patch(
        f"/api/booking/{booking['id']}/status",
        json={"status": "confirmed", "version": booking["version"]},
        headers=auth_header(agent, "agent"),
    )
    assert res.status_code == 200, res.text
    assert res.json()["data"]["status"] == "confirmed"

    res = client.patch(
        f"/api/booking/{booking['id']}/status",
        json={"status": "cancelled", "version": booking["version"]},
        headers=auth_header(agent, "agent"),
    )
    assert res.status_code == 409

    db.expire_all()
    assert db.get(Booking, booking["id"]).status == BookingStatus.CONFIRMED

    res = client.get(f"/api/booking/agent/{agent.id}", headers=auth_header(agent, "agent"))
    assert res.status_code == 200
    assert res.json()["data"]["count"] == 1

    res = client.get(f"/api/booking/{booking['id']}", headers=auth_header(other_agent, "agent"))
    assert res.status_code == 401

    res = client.delete(f"/api/booking/{booking['id']}", headers=auth_header(student, "student"))
    assert res.status_code == 200
    assert db.query(Booking).count() == 0


def test_agent_booking_without_tenant(client, make_user, make_property, auth_header):
    agent = make_user(role="agent")
    prop = make_property(agent=agent)

    res = client.post(
        "/api/booking",
        json={
            "propertyId": prop.id,
            "propertyType": "single",
            "gender": "female",
            "moveInDate": "2026-09-01",
            "duration": "1 year",
            "amount": 900,
        },
        headers=auth_header(agent, "agent"),
    )

    assert res.status_code == 400
    assert res.json()["data"]["error"] == "Tenant is required when an agent creates a booking"


def test_malformed_booking_id(client, make_user, auth_header):
    admin = make_user(role="admin")

    res = client.get("/api/booking/123", headers=auth_header(admin, "admin"))
    assert res.status_code == 400
    assert res.json()["data"]["error"] == "Invalid booking ID"
