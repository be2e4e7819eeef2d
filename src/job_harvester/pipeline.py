import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from job_harvester.dedup import is_duplicate
from job_harvester.errors import ExtractionError, JobValidationError, StoreError
from job_harvester.extraction import (
    ExtractionOutcome,
    ServiceFailure,
    normalize,
    parse_extraction_output,
)
from job_harvester.formatter import JobFormatter
from job_harvester.links import LinkValidator, canonicalize
from job_harvester.models import JobRecord, PostingFragment, validate_job
from job_harvester.prompts import build_extraction_prompt

logger = logging.getLogger(__name__)


class ExtractionService(Protocol):
    async def complete(self, prompt: str) -> str: ...


class JobStore(Protocol):
    def find_one(self, **predicate: Any) -> JobRecord | None: ...

    def insert(self, job: JobRecord, created_at: datetime | None = None) -> int: ...


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class IngestStats:
    accepted: int = 0
    rejected: int = 0
    duplicates: int = 0
    skipped: int = 0

    def __add__(self, other: "IngestStats") -> "IngestStats":
        return IngestStats(
            accepted=self.accepted + other.accepted,
            rejected=self.rejected + other.rejected,
            duplicates=self.duplicates + other.duplicates,
            skipped=self.skipped + other.skipped,
        )


class Ingestor:
    """
    Drives postings one at a time through extraction, normalization, validation,
    link canonicalization and the duplicate check, then persists new jobs.

    A failure on one posting is logged and counted as rejected; it never stops
    the remaining postings from being processed.
    """

    def __init__(
        self,
        store: JobStore,
        extraction_service: ExtractionService,
        link_validator: LinkValidator,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.extraction_service = extraction_service
        self.link_validator = link_validator
        self.clock = clock

    async def ingest(self, fragments: list[PostingFragment]) -> IngestStats:
        stats = IngestStats()

        for index, fragment in enumerate(fragments, start=1):
            label = fragment.link or fragment.post_id or f"{fragment.source} #{index}"
            if not fragment.text or not fragment.text.strip():
                logger.warning(f"Skipping posting without a text body: {label}")
                stats.skipped += 1
                continue

            try:
                is_new = await self._ingest_one(fragment)
            except ExtractionError as e:
                logger.error(f"Extraction failed for {label} ({e.reason}): {e}")
                stats.rejected += 1
                continue
            except JobValidationError as e:
                logger.warning(
                    f"Rejected invalid job from {label} ({e.reason}): {e}. "
                    f"Payload: {e.payload!r}"
                )
                stats.rejected += 1
                continue
            except StoreError as e:
                logger.error(f"Store error while ingesting {label}: {e}")
                stats.rejected += 1
                continue
            except Exception:
                logger.exception(f"Unexpected error while ingesting {label}")
                stats.rejected += 1
                continue

            if is_new:
                stats.accepted += 1
            else:
                stats.duplicates += 1

        logger.info(
            f"Ingested {len(fragments)} postings. "
            f"Accepted: {stats.accepted}, "
            f"Duplicates: {stats.duplicates}, "
            f"Rejected: {stats.rejected}, "
            f"Skipped: {stats.skipped}"
        )
        return stats

    async def extract(self, text: str) -> ExtractionOutcome:
        """Call the extraction service, turning any failure into a ServiceFailure outcome."""
        try:
            output = await self.extraction_service.complete(build_extraction_prompt(text))
        except Exception as e:
            return ServiceFailure(reason=str(e) or type(e).__name__)
        return parse_extraction_output(output)

    async def _ingest_one(self, fragment: PostingFragment) -> bool:
        """Returns True when the job was stored, False when it was a duplicate."""
        outcome = await self.extract(fragment.text or "")
        candidate = normalize(outcome)
        job = validate_job(candidate)

        apply_link = await canonicalize(job.apply_link, self.link_validator)
        job = job.model_copy(update={"apply_link": apply_link})
        if not job.message:
            job = job.model_copy(update={"message": JobFormatter.format_message(job)})

        if is_duplicate(job, self.store):
            logger.info(f"Job already exists in the database: {job.title}")
            return False

        self.store.insert(job, created_at=self.clock())
        logger.info(f"Job saved: {job.title} ({job.apply_link})")
        return True
