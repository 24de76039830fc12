from datetime import datetime
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import (
    BackendUnavailableError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from app.models.enrollment import Enrollment
from app.models.user import EnrollmentStatus, UserProfile
from app.services.enrollment import enrollment_service


def reload(db, model, id):
    db.expire_all()
    return db.get(model, id)


def test_approve_updates_enrollment_and_profile(db, admin_session, make_member, make_enrollment):
    make_member("alice")
    enrollment = make_enrollment("alice")

    result = enrollment_service.approve(db, admin_session, enrollment.id)

    assert result.changed is True
    assert result.enrollment.status == EnrollmentStatus.APPROVED
    assert result.enrollment.verified_by == "admin-1"
    assert result.enrollment.verified_at is not None
    profile = reload(db, UserProfile, "alice")
    assert profile.enrollment_status == EnrollmentStatus.APPROVED
    assert profile.enrolled_at is not None
    assert profile.gym_id == "gym-1"


def test_reapproving_is_idempotent_and_keeps_enrolled_at(db, admin_session, make_member, make_enrollment):
    make_member("alice")
    enrollment = make_enrollment("alice")
    enrollment_service.approve(db, admin_session, enrollment.id)
    first_enrolled_at = reload(db, UserProfile, "alice").enrolled_at

    result = enrollment_service.approve(db, admin_session, enrollment.id)

    assert result.changed is False
    assert reload(db, UserProfile, "alice").enrolled_at == first_enrolled_at


def test_reject_clears_gym_from_profile(db, admin_session, make_member, make_enrollment):
    make_member("bob")
    enrollment = make_enrollment("bob")

    result = enrollment_service.reject(db, admin_session, enrollment.id)

    assert result.changed is True
    assert result.enrollment.status == EnrollmentStatus.REJECTED
    profile = reload(db, UserProfile, "bob")
    assert profile.enrollment_status == EnrollmentStatus.REJECTED
    assert profile.gym_id is None


def test_rejected_enrollment_cannot_be_approved(db, admin_session, make_member, make_enrollment):
    make_member("bob", gym_id=None, status=EnrollmentStatus.REJECTED)
    enrollment = make_enrollment("bob", status=EnrollmentStatus.REJECTED)

    with pytest.raises(InvalidTransitionError):
        enrollment_service.approve(db, admin_session, enrollment.id)
    assert reload(db, Enrollment, enrollment.id).status == EnrollmentStatus.REJECTED


def test_enrollment_of_another_gym_is_forbidden(db, admin_session, other_gym, make_member, make_enrollment):
    make_member("carol", gym_id="gym-2")
    enrollment = make_enrollment("carol", gym_id="gym-2")

    with pytest.raises(PermissionDeniedError):
        enrollment_service.approve(db, admin_session, enrollment.id)


def test_unknown_enrollment_is_not_found(db, admin_session):
    with pytest.raises(NotFoundError):
        enrollment_service.approve(db, admin_session, "does-not-exist")


def test_missing_profile_rolls_back_enrollment(db, admin_session, make_enrollment):
    enrollment = make_enrollment("ghost")

    with pytest.raises(NotFoundError):
        enrollment_service.approve(db, admin_session, enrollment.id)
    assert reload(db, Enrollment, enrollment.id).status == EnrollmentStatus.PENDING


def test_commit_failure_leaves_both_records_untouched(db, admin_session, make_member, make_enrollment):
    make_member("dave")
    enrollment = make_enrollment("dave")

    with patch.object(db, "commit", side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))):
        with pytest.raises(BackendUnavailableError):
            enrollment_service.approve(db, admin_session, enrollment.id)

    assert reload(db, Enrollment, enrollment.id).status == EnrollmentStatus.PENDING
    profile = reload(db, UserProfile, "dave")
    assert profile.enrollment_status == EnrollmentStatus.PENDING
    assert profile.enrolled_at is None


def test_approve_member_resolves_latest_pending_enrollment(db, admin_session, make_member, make_enrollment):
    make_member("erin")
    older = make_enrollment("erin", created_at=datetime(2024, 1, 1))
    newer = make_enrollment("erin", created_at=datetime(2024, 2, 1))

    result = enrollment_service.approve_member(db, admin_session, "erin")

    assert result.enrollment.id == newer.id
    assert reload(db, Enrollment, newer.id).status == EnrollmentStatus.APPROVED
    assert reload(db, Enrollment, older.id).status == EnrollmentStatus.PENDING
    assert reload(db, UserProfile, "erin").enrollment_status == EnrollmentStatus.APPROVED


def test_approve_member_without_enrollment_updates_profile_only(db, admin_session, make_member):
    make_member("frank")

    result = enrollment_service.approve_member(db, admin_session, "frank")

    assert result.enrollment is None
    assert result.profile.enrollment_status == EnrollmentStatus.APPROVED


def test_reject_member_requires_pending(db, admin_session, make_member):
    make_member("gina", status=EnrollmentStatus.APPROVED, enrolled_at=datetime(2024, 1, 1))

    with pytest.raises(InvalidTransitionError):
        enrollment_service.reject_member(db, admin_session, "gina")


def test_set_pending_then_reapprove_resets_enrolled_at(db, admin_session, make_member, make_enrollment):
    make_member("hugo", status=EnrollmentStatus.APPROVED, enrolled_at=datetime(2023, 6, 1))
    enrollment = make_enrollment(
        "hugo",
        status=EnrollmentStatus.APPROVED,
        verified_at=datetime(2023, 6, 1),
        verified_by="admin-1",
    )

    result = enrollment_service.set_member_pending(db, admin_session, "hugo")

    assert result.changed is True
    assert result.profile.enrollment_status == EnrollmentStatus.PENDING
    assert result.profile.enrolled_at is None
    reverted = reload(db, Enrollment, enrollment.id)
    assert reverted.status == EnrollmentStatus.PENDING
    assert reverted.verified_at is None
    assert reverted.verified_by is None

    enrollment_service.approve(db, admin_session, enrollment.id)
    assert reload(db, UserProfile, "hugo").enrolled_at > datetime(2023, 6, 1)


def test_set_pending_on_pending_member_is_a_no_op(db, admin_session, make_member):
    make_member("ivy")
    result = enrollment_service.set_member_pending(db, admin_session, "ivy")
    assert result.changed is False


def test_set_pending_rejects_rejected_members(db, admin_session, make_member):
    make_member("jack", status=EnrollmentStatus.REJECTED)
    with pytest.raises(InvalidTransitionError):
        enrollment_service.set_member_pending(db, admin_session, "jack")


def test_member_actions_refuse_non_member_profiles(db, admin_session):
    with pytest.raises(PermissionDeniedError):
        enrollment_service.approve_member(db, admin_session, "admin-1")


def test_counts_by_status(db, admin_session, make_member, make_enrollment):
    make_enrollment("a", status=EnrollmentStatus.APPROVED, amount=500.0)
    make_enrollment("b", status=EnrollmentStatus.APPROVED, amount=1500.0)
    make_enrollment("c", status=EnrollmentStatus.PENDING)
    make_enrollment("d", status=EnrollmentStatus.REJECTED)

    response = enrollment_service.list_with_counts(db, admin_session, status=EnrollmentStatus.PENDING)

    assert [e.user_id for e in response.enrollments] == ["c"]
    assert response.counts.total == 4
    assert response.counts.approved == 2
    assert response.counts.rejected == 1
    assert response.counts.approved_revenue == 2000.0


def test_reject_member_rejects_latest_pending_enrollment(db, admin_session, make_member, make_enrollment):
    make_member("kara")
    older = make_enrollment("kara", created_at=datetime(2024, 1, 1))
    newer = make_enrollment("kara", created_at=datetime(2024, 2, 1))

    result = enrollment_service.reject_member(db, admin_session, "kara")

    assert result.changed is True
    assert result.enrollment.id == newer.id
    rejected = reload(db, Enrollment, newer.id)
    assert rejected.status == EnrollmentStatus.REJECTED
    assert rejected.verified_by == "admin-1"
    assert rejected.verified_at is not None
    assert reload(db, Enrollment, older.id).status == EnrollmentStatus.PENDING
    profile = reload(db, UserProfile, "kara")
    assert profile.enrollment_status == EnrollmentStatus.REJECTED
    assert profile.gym_id is None


def test_member_transition_commit_failure_leaves_both_records_untouched(
    db, admin_session, make_member, make_enrollment
):
    make_member("liam")
    enrollment = make_enrollment("liam")

    with patch.object(db, "commit", side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))):
        with pytest.raises(BackendUnavailableError):
            enrollment_service.reject_member(db, admin_session, "liam")

    assert reload(db, Enrollment, enrollment.id).status == EnrollmentStatus.PENDING
    profile = reload(db, UserProfile, "liam")
    assert profile.enrollment_status == EnrollmentStatus.PENDING
    assert profile.gym_id == "gym-1"


def test_set_pending_reverts_the_approved_enrollment_not_a_newer_one(
    db, admin_session, make_member, make_enrollment
):
    make_member("kim", status=EnrollmentStatus.APPROVED, enrolled_at=datetime(2024, 1, 1))
    approved = make_enrollment(
        "kim",
        status=EnrollmentStatus.APPROVED,
        created_at=datetime(2024, 1, 1),
        verified_at=datetime(2024, 1, 1),
        verified_by="admin-1",
    )
    stale = make_enrollment("kim", status=EnrollmentStatus.REJECTED, created_at=datetime(2024, 2, 1))

    result = enrollment_service.set_member_pending(db, admin_session, "kim")

    assert result.enrollment.id == approved.id
    assert reload(db, Enrollment, approved.id).status == EnrollmentStatus.PENDING
    assert reload(db, Enrollment, stale.id).status == EnrollmentStatus.REJECTED
    assert reload(db, UserProfile, "kim").enrollment_status == EnrollmentStatus.PENDING
