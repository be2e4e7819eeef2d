from datetime import UTC, datetime, timedelta, timezone

import pytest

from job_harvester.db import Database, format_timestamp, parse_timestamp
from job_harvester.errors import StoreError
from job_harvester.models import validate_job


def test_init_db(db):
    """Test that the table is created correctly."""
    cursor = db.connection.cursor()
    cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='jobs'")
    assert cursor.fetchone() is not None


def test_insert_and_find_one_round_trip(db, sample_candidate):
    job = validate_job(sample_candidate)
    stamp = datetime(2026, 5, 1, 12, 30, tzinfo=UTC)

    row_id = db.insert(job, created_at=stamp)

    assert row_id > 0
    stored = db.find_one(apply_link="https://careers.acme.com/jobs/1")
    assert stored is not None
    assert stored.skills == ["Python", "PostgreSQL"]
    assert stored.salary_max == 900000
    assert stored.created_at == stamp


def test_insert_sets_created_at_when_not_given(db, sample_candidate):
    before = datetime.now(tz=UTC)
    db.insert(validate_job(sample_candidate))

    stored = db.find_one(company="Acme")
    assert stored is not None
    assert stored.created_at is not None
    assert stored.created_at >= before - timedelta(seconds=1)


def test_insert_ignores_created_at_on_record(db, sample_candidate):
    job = validate_job({**sample_candidate, "created_at": "2020-01-01T00:00:00+00:00"})
    stamp = datetime(2026, 5, 1, tzinfo=UTC)

    db.insert(job, created_at=stamp)

    assert db.find_one(company="Acme").created_at == stamp


def test_find_one_by_created_at(db, sample_candidate):
    stamp = datetime(2026, 5, 1, 9, 30, tzinfo=UTC)
    db.insert(validate_job(sample_candidate), created_at=stamp)

    found = db.find_one(created_at=stamp)

    assert found is not None
    assert found.created_at == stamp
    assert db.find_one(created_at=stamp + timedelta(seconds=1)) is None


def test_find_one_no_match(db, sample_candidate):
    db.insert(validate_job(sample_candidate))

    assert db.find_one(company="Acme", role="Designer") is None


def test_find_one_rejects_unknown_field(db):
    with pytest.raises(ValueError, match="Unknown job fields"):
        db.find_one(salary="lots")


def test_find_one_requires_predicate(db):
    with pytest.raises(ValueError):
        db.find_one()


def test_delete_created_before(db, sample_candidate):
    now = datetime(2026, 10, 19, tzinfo=UTC)
    old = validate_job({**sample_candidate, "apply_link": "https://a.com/old"})
    new = validate_job({**sample_candidate, "apply_link": "https://a.com/new"})
    db.insert(old, created_at=now - timedelta(days=90))
    db.insert(new, created_at=now - timedelta(days=30))

    deleted = db.delete_created_before(now - timedelta(days=60))

    assert deleted == 1
    assert db.count() == 1
    assert db.find_one(apply_link="https://a.com/new") is not None


def test_naive_timestamps_are_treated_as_utc():
    naive = datetime(2026, 1, 2, 3, 4, 5)

    assert parse_timestamp(format_timestamp(naive)) == naive.replace(tzinfo=UTC)


def test_timestamps_are_normalized_to_utc():
    aware = datetime(2026, 1, 2, 3, 0, tzinfo=UTC)
    offset = aware.astimezone(timezone(timedelta(hours=5)))

    assert format_timestamp(offset) == format_timestamp(aware)


def test_context_manager_closes_connection():
    """Test that the context manager properly closes the connection on exit."""
    with Database(db_path=":memory:") as test_db:
        assert test_db.connection is not None

    assert test_db._conn is None
    with pytest.raises(StoreError):
        _ = test_db.connection


def test_close_is_idempotent():
    test_db = Database(db_path=":memory:")
    test_db.close()
    test_db.close()
    assert test_db._conn is None


def test_operations_on_closed_store_raise_store_error(sample_candidate):
    test_db = Database(db_path=":memory:")
    test_db.close()

    with pytest.raises(StoreError):
        test_db.insert(validate_job(sample_candidate))


def test_open_failure_raises_store_error(tmp_path):
    with pytest.raises(StoreError, match="Could not open job store"):
        Database(db_path=str(tmp_path / "missing" / "jobs.db"))


def test_init_db_called_twice_is_safe(db, sample_candidate):
    db.insert(validate_job(sample_candidate))

    db.init_db()

    assert db.count() == 1
