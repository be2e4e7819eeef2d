import logging
from typing import Any, Protocol

from job_harvester.models import JobRecord

logger = logging.getLogger(__name__)

# Each rule is a set of fields that, when all equal, make two postings the same job.
DUPLICATE_RULES: tuple[tuple[str, ...], ...] = (
    ("apply_link",),
    ("company", "role"),
    ("company", "category", "sub_category"),
)


class JobLookup(Protocol):
    def find_one(self, **predicate: Any) -> JobRecord | None: ...


def matching_rules(job: JobRecord, store: JobLookup) -> list[tuple[str, ...]]:
    """Evaluate every duplicate rule against the store and return the ones that hit."""
    hits = []
    for rule in DUPLICATE_RULES:
        predicate = {field: getattr(job, field) for field in rule}
        if store.find_one(**predicate) is not None:
            hits.append(rule)
    return hits


def is_duplicate(job: JobRecord, store: JobLookup) -> bool:
    hits = matching_rules(job, store)
    if hits:
        matched = "; ".join(" + ".join(rule) for rule in hits)
        logger.debug(f"Duplicate of stored job by {matched}: {job.title}")
    return bool(hits)
