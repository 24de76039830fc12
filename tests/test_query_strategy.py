import logging
from datetime import datetime

import pytest
from sqlalchemy import update

from app.core.errors import BackendUnavailableError, MissingIndexError
from app.models.enrollment import Enrollment
from app.models.user import EnrollmentStatus
from app.repositories.query_strategy import (
    FallbackQueryRunner,
    IndexedQueryStrategy,
    IndexRegistry,
    ListQuery,
    ScanSortStrategy,
    SortSpec,
    build_query_runner,
)


@pytest.fixture
def enrollments(db):
    rows = [
        ("e-01", "gym-1", datetime(2024, 3, 1)),
        ("e-02", "gym-1", datetime(2024, 3, 3)),
        ("e-03", "gym-1", None),
        ("e-04", "gym-1", datetime(2024, 3, 3)),
        ("e-05", "gym-2", datetime(2024, 3, 5)),
        ("e-06", "gym-1", datetime(2024, 3, 2)),
        ("e-07", "gym-1", None),
    ]
    for enrollment_id, gym_id, created_at in rows:
        db.add(Enrollment(
            id=enrollment_id,
            user_id="u1",
            gym_id=gym_id,
            amount=10.0,
            status=EnrollmentStatus.PENDING,
            created_at=created_at,
        ))
    db.commit()
    # La columna tiene default=utc_now: los nulos se fijan después del alta
    null_ids = [enrollment_id for enrollment_id, _, created_at in rows if created_at is None]
    db.execute(update(Enrollment).where(Enrollment.id.in_(null_ids)).values(created_at=None))
    db.commit()


def ids(records):
    return [r.id for r in records]


def test_registry_supports_declared_and_trivial_queries():
    registry = IndexRegistry(["enrollments:gym_id,status:created_at"])

    assert registry.supports("enrollments", {"status", "gym_id"}, "created_at")
    assert registry.supports("enrollments", set(), "created_at")
    assert registry.supports("enrollments", {"gym_id"}, None)
    assert registry.supports("enrollments", {"created_at"}, "created_at")
    assert not registry.supports("enrollments", {"gym_id"}, "created_at")
    assert not registry.supports("users", {"gym_id", "status"}, "created_at")


def test_registry_rejects_malformed_declarations():
    with pytest.raises(ValueError):
        IndexRegistry(["enrollments:created_at"])


def test_indexed_strategy_raises_without_declared_index(db, enrollments):
    strategy = IndexedQueryStrategy(IndexRegistry())
    query = ListQuery(filters={"gym_id": "gym-1"}, sort=SortSpec("created_at"))

    with pytest.raises(MissingIndexError) as exc_info:
        strategy.fetch(db, Enrollment, query)
    assert exc_info.value.collection == "enrollments"


@pytest.mark.parametrize("descending", [True, False])
@pytest.mark.parametrize("limit", [None, 3])
def test_both_strategies_return_the_same_order(db, enrollments, descending, limit):
    query = ListQuery(filters={"gym_id": "gym-1"}, sort=SortSpec("created_at", descending), limit=limit)
    indexed = IndexedQueryStrategy(IndexRegistry(["enrollments:gym_id:created_at"]))

    assert ids(indexed.fetch(db, Enrollment, query)) == ids(ScanSortStrategy().fetch(db, Enrollment, query))


def test_scan_sort_puts_nulls_last_and_breaks_ties_by_id(db, enrollments):
    query = ListQuery(filters={"gym_id": "gym-1"}, sort=SortSpec("created_at", descending=True))
    assert ids(ScanSortStrategy().fetch(db, Enrollment, query)) == ["e-04", "e-02", "e-06", "e-01", "e-07", "e-03"]


def test_limit_is_applied_after_sorting(db, enrollments):
    query = ListQuery(filters={"gym_id": "gym-1"}, sort=SortSpec("created_at"), limit=2)
    assert ids(ScanSortStrategy().fetch(db, Enrollment, query)) == ["e-04", "e-02"]


def test_runner_falls_back_and_logs_warning(db, enrollments, caplog):
    runner = build_query_runner([])
    query = ListQuery(filters={"gym_id": "gym-1"}, sort=SortSpec("created_at"), limit=1)

    with caplog.at_level(logging.WARNING, logger="app.repositories.query_strategy"):
        result = runner.run(db, Enrollment, query)

    assert ids(result) == ["e-04"]
    assert "enrollments" in caplog.text
    assert "scan_sort" in caplog.text


class FailingStrategy:
    name = "failing"

    def fetch(self, db, model, list_query):
        raise BackendUnavailableError()


class RecordingStrategy:
    name = "recording"

    def __init__(self):
        self.calls = 0

    def fetch(self, db, model, list_query):
        self.calls += 1
        return []


def test_runner_does_not_fall_back_on_other_errors(db):
    fallback = RecordingStrategy()
    runner = FallbackQueryRunner(FailingStrategy(), fallback)

    with pytest.raises(BackendUnavailableError):
        runner.run(db, Enrollment, ListQuery())
    assert fallback.calls == 0
