from datetime import datetime

from app.models.user import EnrollmentStatus

API = "/api/v1"


def test_login_as_gym_admin(client, gym_admin):
    response = client.post(f"{API}/auth/login", json={"email": "admin@irontemple.com", "password": "secret123"})

    assert response.status_code == 200
    data = response.json()
    assert data["access_token"] == "token-admin-1"
    assert data["session"]["console"] == "dashboard"
    assert data["session"]["gym"]["id"] == "gym-1"


def test_login_as_super_admin(client, super_admin):
    response = client.post(f"{API}/auth/login", json={"email": "root@platform.com", "password": "secret123"})

    assert response.status_code == 200
    assert response.json()["session"]["console"] == "super-admin"


def test_login_with_wrong_password(client, gym_admin):
    response = client.post(f"{API}/auth/login", json={"email": "admin@irontemple.com", "password": "nope"})
    assert response.status_code == 401


def test_members_cannot_log_in(client, make_member):
    make_member("member-x", status=EnrollmentStatus.APPROVED)
    response = client.post(f"{API}/auth/login", json={"email": "member@mail.com", "password": "secret123"})
    assert response.status_code == 403


def test_requests_without_token_are_rejected(client, gym_admin):
    response = client.get(f"{API}/dashboard/")
    assert response.status_code == 401


def test_session_info(client, gym_admin, login_as):
    login_as("admin-1")
    response = client.get(f"{API}/auth/me")
    assert response.status_code == 200
    assert response.json()["uid"] == "admin-1"


def test_gym_admin_cannot_use_super_admin_console(client, gym_admin, login_as):
    login_as("admin-1")
    assert client.get(f"{API}/gyms/").status_code == 403
    assert client.get(f"{API}/platform/flagged-gyms").status_code == 403


def test_super_admin_cannot_use_gym_dashboard(client, super_admin, login_as):
    login_as("root-1")
    assert client.get(f"{API}/dashboard/").status_code == 403
    assert client.get(f"{API}/gyms/").status_code == 200


def test_enrollment_actions_map_errors(client, gym_admin, login_as, make_member, make_enrollment):
    login_as("admin-1")
    make_member("ana")
    enrollment = make_enrollment("ana")

    approved = client.post(f"{API}/enrollments/{enrollment.id}/approve")
    assert approved.status_code == 200
    assert approved.json()["changed"] is True

    assert client.post(f"{API}/enrollments/{enrollment.id}/reject").status_code == 409
    assert client.post(f"{API}/enrollments/missing/approve").status_code == 404


def test_member_of_other_gym_is_forbidden(client, gym_admin, login_as, make_member):
    login_as("admin-1")
    make_member("zoe", gym_id="gym-2")
    response = client.get(f"{API}/members/zoe")
    assert response.status_code == 403
    assert "detail" in response.json()


def test_member_list_filter_param(client, gym_admin, login_as, make_member):
    login_as("admin-1")
    make_member("ana", status=EnrollmentStatus.APPROVED, enrolled_at=datetime(2024, 3, 1))
    make_member("beto")

    response = client.get(f"{API}/members/", params={"filter": "pending"})

    assert response.status_code == 200
    assert [m["profile"]["uid"] for m in response.json()["members"]] == ["beto"]


def test_payments_export_is_csv(client, gym_admin, login_as, make_enrollment):
    login_as("admin-1")
    make_enrollment("ana", status=EnrollmentStatus.APPROVED)

    response = client.get(f"{API}/payments/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=payments_" in response.headers["content-disposition"]
    assert response.text.splitlines()[0] == "Date,Member,Amount,Method,Status,Transaction ID"


def test_update_gym_settings(client, gym_admin, login_as):
    login_as("admin-1")

    response = client.put(f"{API}/settings/", json={"monthly_fee": 1800, "capacity": 60})

    assert response.status_code == 200
    assert response.json()["monthly_fee"] == 1800.0
    assert response.json()["capacity"] == 60


def test_invalid_timezone_is_rejected(client, gym_admin, login_as):
    login_as("admin-1")
    response = client.put(f"{API}/settings/", json={"timezone": "Mars/Olympus"})
    assert response.status_code == 422


def test_attendance_history_validates_dates(client, gym_admin, login_as):
    login_as("admin-1")
    assert client.get(f"{API}/attendance/history", params={"date_from": "03/01/2024"}).status_code == 422
    assert client.get(f"{API}/attendance/history", params={"date_from": "2024-03-01"}).status_code == 200


def test_provision_gym_endpoint(client, super_admin, login_as):
    login_as("root-1")
    response = client.post(f"{API}/gyms/", json={
        "gym": {"name": "Power House", "monthly_fee": 1200},
        "admin": {"admin_name": "Priya", "admin_email": "priya@powerhouse.com", "admin_password": "secret123"},
    })

    assert response.status_code == 201
    assert response.json()["admin_uid"] == "new-admin"
