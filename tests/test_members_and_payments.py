import csv
import io
from datetime import datetime

import pytest

from app.core.errors import PermissionDeniedError
from app.models.check_in import CheckInHistory
from app.models.user import EnrollmentStatus, UserProfile
from app.schemas.member import MemberFilter, MembershipState
from app.services.member import member_service
from app.services.payments import payment_service
from app.services.reports import report_service

NOW = datetime(2024, 3, 10, 12, 0)


@pytest.fixture
def members(make_member):
    old = datetime(2023, 12, 1)
    make_member("m-active", status=EnrollmentStatus.APPROVED, enrolled_at=datetime(2024, 3, 1), created_at=old)
    make_member("m-expiring", status=EnrollmentStatus.APPROVED, enrolled_at=datetime(2024, 2, 12), created_at=old)
    make_member("m-expired", status=EnrollmentStatus.APPROVED, enrolled_at=datetime(2024, 1, 1), created_at=old)
    make_member("m-pending", status=EnrollmentStatus.PENDING, created_at=datetime(2024, 3, 5))
    make_member("m-none", status=EnrollmentStatus.NONE, created_at=old)
    make_member("m-elsewhere", gym_id="gym-2", status=EnrollmentStatus.APPROVED, created_at=old)


def uids(response):
    return sorted(row.profile.uid for row in response.members)


@pytest.mark.parametrize("member_filter,expected", [
    (MemberFilter.ALL, ["m-active", "m-expired", "m-expiring", "m-none", "m-pending"]),
    (MemberFilter.ACTIVE, ["m-active", "m-expired", "m-expiring"]),
    (MemberFilter.INACTIVE, ["m-none"]),
    (MemberFilter.PENDING, ["m-pending"]),
    (MemberFilter.EXPIRING, ["m-expiring"]),
    (MemberFilter.EXPIRED, ["m-expired"]),
    (MemberFilter.RECENT, ["m-pending"]),
])
def test_member_filters(db, admin_session, members, member_filter, expected):
    response = member_service.list_members(db, admin_session, member_filter=member_filter, now=NOW)
    assert uids(response) == expected
    assert response.total == len(expected)


def test_member_search_is_case_insensitive(db, admin_session, members):
    response = member_service.list_members(db, admin_session, search="EXP", now=NOW)
    assert uids(response) == ["m-expired", "m-expiring"]


def test_member_rows_carry_expiry(db, admin_session, members):
    response = member_service.list_members(db, admin_session, member_filter=MemberFilter.EXPIRING, now=NOW)
    expiry = response.members[0].expiry
    assert expiry.state == MembershipState.EXPIRING_SOON
    assert expiry.expiry_date == datetime(2024, 3, 12)
    assert expiry.plan_duration == 1


def test_member_detail_includes_history(db, admin_session, members, make_enrollment):
    make_enrollment("m-active", status=EnrollmentStatus.APPROVED)
    make_enrollment("m-active", gym_id="gym-2")
    db.add(CheckInHistory(
        gym_id="gym-1",
        user_id="m-active",
        check_in_time=datetime(2024, 3, 2, 6, 0),
        check_out_time=datetime(2024, 3, 2, 7, 0),
        duration=3600,
        date="2024-03-02",
    ))
    db.commit()

    detail = member_service.get_member_detail(db, admin_session, "m-active", now=NOW)

    assert detail.profile.uid == "m-active"
    assert len(detail.enrollments) == 1
    assert [c.duration for c in detail.check_ins] == [3600]
    assert detail.expiry.state == MembershipState.ACTIVE


def test_member_of_other_gym_is_forbidden(db, admin_session, members):
    with pytest.raises(PermissionDeniedError):
        member_service.get_member_detail(db, admin_session, "m-elsewhere")


def test_delete_member(db, admin_session, members):
    member_service.delete_member(db, admin_session, "m-none")
    assert db.get(UserProfile, "m-none") is None


@pytest.fixture
def payments(make_enrollment):
    make_enrollment("alice", status=EnrollmentStatus.APPROVED, amount=1000.0, payment_method="online",
                    transaction_id="UPI-111", created_at=datetime(2024, 3, 1, 10, 0))
    make_enrollment("bob", status=EnrollmentStatus.PENDING, amount=3000.0, payment_method="Quarterly",
                    transaction_id="UPI-222", created_at=datetime(2024, 3, 1, 20, 0))
    make_enrollment("carol", status=EnrollmentStatus.REJECTED, amount=500.0, payment_method="offline",
                    transaction_id=None, created_at=datetime(2024, 2, 20, 9, 0))
    make_enrollment("dave", gym_id="gym-2", status=EnrollmentStatus.APPROVED, amount=9999.0)


def test_payments_totals(db, admin_session, payments):
    response = payment_service.list_payments(db, admin_session)

    assert [p.user_id for p in response.payments] == ["bob", "alice", "carol"]
    assert response.totals.total_revenue == 1000.0
    assert response.totals.pending_amount == 3000.0
    assert response.totals.total_count == 3
    assert response.totals.approved_count == 1
    assert response.totals.pending_count == 1


def test_payments_filters_apply_to_totals(db, admin_session, payments):
    by_method = payment_service.list_payments(db, admin_session, method="QUARTERLY")
    assert [p.user_id for p in by_method.payments] == ["bob"]
    assert by_method.totals.total_revenue == 0.0

    by_transaction = payment_service.list_payments(db, admin_session, search="upi-111")
    assert [p.user_id for p in by_transaction.payments] == ["alice"]

    by_name = payment_service.list_payments(db, admin_session, search="car")
    assert [p.user_id for p in by_name.payments] == ["carol"]

    by_status = payment_service.list_payments(db, admin_session, method="all", status=EnrollmentStatus.REJECTED)
    assert [p.user_id for p in by_status.payments] == ["carol"]


def read_csv(output):
    return list(csv.reader(io.StringIO(output.getvalue().decode("utf-8"))))


def test_payments_csv_uses_gym_local_dates(db, admin_session, payments):
    rows = read_csv(payment_service.export_csv(db, admin_session))

    assert rows[0] == ["Date", "Member", "Amount", "Method", "Status", "Transaction ID"]
    assert rows[1] == ["2024-03-02", "Bob", "3000.0", "Quarterly", "pending", "UPI-222"]
    assert rows[2] == ["2024-03-01", "Alice", "1000.0", "online", "approved", "UPI-111"]
    assert rows[3][5] == ""


def test_empty_payments_csv_keeps_header(db, admin_session):
    rows = read_csv(payment_service.export_csv(db, admin_session))
    assert rows == [["Date", "Member", "Amount", "Method", "Status", "Transaction ID"]]


def test_report_totals_and_csv(db, admin_session, payments, make_member):
    make_member("alice", status=EnrollmentStatus.APPROVED, enrolled_at=datetime(2024, 3, 1))

    totals = report_service.totals(db, admin_session)
    assert totals.total_revenue == 1000.0
    assert totals.approved_members == 1
    assert totals.approved_enrollments == 1
    assert totals.pending_enrollments == 1
    assert totals.total_enrollments == 3

    rows = read_csv(report_service.export_csv(db, admin_session))
    assert rows[0] == ["Date", "Member", "Email", "Amount", "Payment Method", "Status"]
    assert len(rows) == 4
    assert rows[2][2] == "alice@mail.com"
