from unittest.mock import MagicMock

from job_harvester.dedup import DUPLICATE_RULES, is_duplicate, matching_rules
from job_harvester.models import validate_job


def _job(sample_candidate, **changes):
    return validate_job({**sample_candidate, **changes})


def test_new_job_is_not_duplicate(db, sample_candidate):
    assert is_duplicate(_job(sample_candidate), db) is False


def test_same_apply_link_is_duplicate(db, sample_candidate):
    db.insert(_job(sample_candidate))
    candidate = _job(
        sample_candidate,
        company="Other Co",
        role="Designer",
        category="UI/UX Design",
        sub_category="UI Designer",
    )

    assert matching_rules(candidate, db) == [("apply_link",)]
    assert is_duplicate(candidate, db) is True


def test_same_company_and_role_is_duplicate(db, sample_candidate):
    db.insert(_job(sample_candidate))
    candidate = _job(
        sample_candidate,
        apply_link="https://careers.acme.com/jobs/2",
        category="DevOps & Cloud Engineering",
        sub_category="Cloud Engineer",
    )

    assert matching_rules(candidate, db) == [("company", "role")]


def test_same_company_category_and_sub_category_is_duplicate(db, sample_candidate):
    db.insert(_job(sample_candidate))
    candidate = _job(
        sample_candidate,
        apply_link="https://careers.acme.com/jobs/3",
        role="Senior Backend Developer",
    )

    assert matching_rules(candidate, db) == [("company", "category", "sub_category")]


def test_same_role_at_other_company_is_not_duplicate(db, sample_candidate):
    db.insert(_job(sample_candidate))
    candidate = _job(
        sample_candidate, company="Globex", apply_link="https://globex.com/jobs/1"
    )

    assert is_duplicate(candidate, db) is False


def test_every_rule_is_evaluated(sample_candidate):
    """A hit on the first rule does not skip the remaining lookups."""
    store = MagicMock()
    store.find_one.return_value = object()

    hits = matching_rules(_job(sample_candidate), store)

    assert hits == list(DUPLICATE_RULES)
    assert store.find_one.call_count == 3
    store.find_one.assert_any_call(apply_link="https://careers.acme.com/jobs/1")
    store.find_one.assert_any_call(company="Acme", role="Backend Engineer")
    store.find_one.assert_any_call(
        company="Acme", category="Software Development", sub_category="Backend"
    )
