from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from job_harvester.errors import StoreError
from job_harvester.models import validate_job
from job_harvester.retention import RETENTION_MONTHS, subtract_months, sweep

NOW = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)


def test_subtract_months_simple():
    assert subtract_months(NOW, 2) == datetime(2026, 8, 19, 8, 0, tzinfo=UTC)


def test_subtract_months_across_year_boundary():
    moment = datetime(2026, 1, 15, tzinfo=UTC)
    assert subtract_months(moment, 2) == datetime(2025, 11, 15, tzinfo=UTC)


def test_subtract_months_clamps_day():
    assert subtract_months(datetime(2026, 4, 30), 2) == datetime(2026, 2, 28)
    assert subtract_months(datetime(2024, 4, 30), 2) == datetime(2024, 2, 29)
    assert subtract_months(datetime(2026, 3, 31), 2) == datetime(2026, 1, 31)


def test_sweep_deletes_only_expired_jobs(db, sample_candidate):
    old = validate_job({**sample_candidate, "apply_link": "https://a.com/three-months"})
    recent = validate_job({**sample_candidate, "apply_link": "https://a.com/one-month"})
    db.insert(old, created_at=subtract_months(NOW, 3))
    db.insert(recent, created_at=subtract_months(NOW, 1))

    deleted = sweep(db, NOW)

    assert deleted == 1
    assert db.find_one(apply_link="https://a.com/three-months") is None
    assert db.find_one(apply_link="https://a.com/one-month") is not None


def test_sweep_keeps_job_exactly_at_cutoff(db, sample_candidate):
    db.insert(validate_job(sample_candidate), created_at=subtract_months(NOW, RETENTION_MONTHS))

    assert sweep(db, NOW) == 0
    assert db.count() == 1


def test_sweep_empty_store(db):
    assert sweep(db, NOW) == 0


def test_sweep_uses_two_month_cutoff():
    store = MagicMock()
    store.delete_created_before.return_value = 4

    assert sweep(store, NOW) == 4
    store.delete_created_before.assert_called_once_with(NOW - timedelta(days=61))


def test_sweep_store_error_is_logged_not_raised(caplog):
    store = MagicMock()
    store.delete_created_before.side_effect = StoreError("disk full")

    assert sweep(store, NOW) == 0
    assert "Retention sweep failed" in caplog.text
