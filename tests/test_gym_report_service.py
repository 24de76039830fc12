from datetime import datetime

import pytest

from app.core.errors import InvalidTransitionError, PermissionDeniedError
from app.models.gym_report import GymReport, ReportStatus
from app.services.gym_report import gym_report_service


@pytest.fixture
def make_report(db):
    def _make(report_id, status=ReportStatus.PENDING, gym_id="gym-1", issue_types=("Equipment",), **kwargs):
        created_at = kwargs.pop("created_at", datetime(2024, 3, 1))
        report = GymReport(
            id=report_id,
            gym_id=gym_id,
            gym_name="Iron Temple" if gym_id == "gym-1" else "Muscle Barn",
            user_id="u1",
            issue_types=list(issue_types),
            description="Treadmill broken",
            status=status,
            created_at=created_at,
            **kwargs,
        )
        db.add(report)
        db.commit()
        return report
    return _make


def test_mark_reviewed_stores_audit_and_notes(db, admin_session, make_report):
    make_report("rep-1")

    report = gym_report_service.mark_reviewed(db, admin_session, "rep-1", "  Técnico avisado ")

    assert report.status == ReportStatus.REVIEWED
    assert report.reviewed_by == "admin-1"
    assert report.reviewed_at is not None
    assert report.admin_notes == "Técnico avisado"


def test_blank_notes_do_not_overwrite_existing(db, admin_session, make_report):
    make_report("rep-1", admin_notes="Nota previa")

    report = gym_report_service.reject(db, admin_session, "rep-1", "   ")

    assert report.status == ReportStatus.REJECTED
    assert report.admin_notes == "Nota previa"


def test_resolve_deletes_report(db, admin_session, make_report):
    make_report("rep-1", ReportStatus.REVIEWED)

    resolution = gym_report_service.resolve(db, admin_session, "rep-1")

    assert resolution.deleted is True
    assert db.get(GymReport, "rep-1") is None


@pytest.mark.parametrize("current,action", [
    (ReportStatus.REVIEWED, "mark_reviewed"),
    (ReportStatus.REVIEWED, "reject"),
    (ReportStatus.REJECTED, "mark_reviewed"),
])
def test_disallowed_transitions(db, admin_session, make_report, current, action):
    make_report("rep-1", current)
    with pytest.raises(InvalidTransitionError):
        getattr(gym_report_service, action)(db, admin_session, "rep-1")


def test_rejected_report_cannot_be_resolved(db, admin_session, make_report):
    make_report("rep-1", ReportStatus.REJECTED)
    with pytest.raises(InvalidTransitionError):
        gym_report_service.resolve(db, admin_session, "rep-1")


def test_reports_of_other_gyms_are_forbidden(db, admin_session, make_report):
    make_report("rep-1", gym_id="gym-2")
    with pytest.raises(PermissionDeniedError):
        gym_report_service.mark_reviewed(db, admin_session, "rep-1")


def test_list_for_gym_counts_pending(db, admin_session, make_report):
    make_report("rep-1", created_at=datetime(2024, 3, 1))
    make_report("rep-2", ReportStatus.REVIEWED, created_at=datetime(2024, 3, 2))
    make_report("rep-3", gym_id="gym-2")

    response = gym_report_service.list_for_gym(db, admin_session)

    assert [r.id for r in response.reports] == ["rep-2", "rep-1"]
    assert response.pending_count == 1


def test_flagged_gyms_use_gym_names(db, gym, other_gym, make_report):
    for i in range(3):
        make_report(f"a-{i}", gym_id="gym-2", issue_types=["Safety"])
    make_report("b-1", gym_id="gym-1")
    make_report("b-2", ReportStatus.RESOLVED, gym_id="gym-1")

    flagged = gym_report_service.flagged_gyms(db)

    assert len(flagged) == 1
    assert flagged[0].gym_id == "gym-2"
    assert flagged[0].gym_name == "Muscle Barn"
    assert flagged[0].issue_breakdown == {"Safety": 3}


def test_platform_reports_newest_first_with_gym_filter(db, make_report):
    make_report("rep-1", created_at=datetime(2024, 3, 1))
    make_report("rep-2", gym_id="gym-2", created_at=datetime(2024, 3, 3))
    make_report("rep-3", ReportStatus.RESOLVED, created_at=datetime(2024, 3, 2))

    everything = gym_report_service.list_platform_reports(db)
    assert [r.id for r in everything] == ["rep-2", "rep-3", "rep-1"]

    only_gym_1 = gym_report_service.list_platform_reports(db, gym_id="gym-1")
    assert [r.id for r in only_gym_1] == ["rep-3", "rep-1"]
