import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime

import httpx

from job_harvester import config
from job_harvester.db import Database
from job_harvester.errors import FetchError, StoreError
from job_harvester.extraction_service import MistralClient
from job_harvester.links import LinkValidator
from job_harvester.pipeline import Ingestor, IngestStats
from job_harvester.retention import sweep
from job_harvester.scrapers.wordpress import WordPressSource

# Set up logging once, in the application entry point only
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO
)
logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    sources_ok: int = 0
    sources_failed: int = 0
    stats: IngestStats = field(default_factory=IngestStats)
    deleted: int = 0


async def run_pipeline(
    source_urls: list[str] | None = None,
    db_path: str | None = None,
    delay: float | None = None,
) -> RunSummary:
    """
    Run a single harvest: fetch every source, ingest its postings, then sweep
    expired jobs once. Opening the store is the only failure that aborts the run.
    """
    urls = source_urls if source_urls is not None else config.SOURCE_URLS
    delay = delay if delay is not None else config.SOURCE_DELAY
    summary = RunSummary()

    logger.info(f"Starting job at: {datetime.now(tz=UTC).isoformat()}")

    with Database(db_path=db_path or config.DB_PATH) as db:
        async with httpx.AsyncClient() as client:
            source = WordPressSource(client)
            ingestor = Ingestor(
                store=db,
                extraction_service=MistralClient(
                    client, api_key=config.MISTRAL_API_KEY, model=config.MISTRAL_MODEL
                ),
                link_validator=LinkValidator(client),
            )

            for position, url in enumerate(urls):
                # Pause between sources to respect extraction-service rate limits
                if position > 0:
                    await asyncio.sleep(delay)

                logger.info(f"Fetching: {url} at {datetime.now(tz=UTC).isoformat()}")
                try:
                    fragments = await source.fetch(url)
                except FetchError as e:
                    logger.error(f"Error fetching data: {e}")
                    summary.sources_failed += 1
                    continue

                summary.sources_ok += 1
                summary.stats += await ingestor.ingest(fragments)

        summary.deleted = sweep(db, datetime.now(tz=UTC))

    stats = summary.stats
    logger.info(
        f"Pipeline finished. "
        f"Sources: {summary.sources_ok} ok / {summary.sources_failed} failed, "
        f"Accepted: {stats.accepted}, "
        f"Duplicates: {stats.duplicates}, "
        f"Rejected: {stats.rejected}, "
        f"Skipped: {stats.skipped}, "
        f"Deleted: {summary.deleted}"
    )
    logger.info(f"Job completed at: {datetime.now(tz=UTC).isoformat()}")
    return summary


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="job-harvester",
        description=(
            "Harvest job postings, extract structured records, store new ones "
            "and delete expired ones."
        ),
    )
    parser.add_argument(
        "--source",
        action="append",
        dest="sources",
        default=None,
        metavar="URL",
        help="Source endpoint to harvest (repeatable; overrides the URLS env var).",
    )
    parser.add_argument(
        "--db-path",
        default=None,
        help="SQLite database file (overrides the DB_PATH env var).",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Pause between sources (overrides the SOURCE_DELAY env var).",
    )
    return parser.parse_args(argv)


def cli(argv: list[str] | None = None) -> None:
    """CLI entry point for the package."""
    args = parse_args(argv)

    if args.delay is not None and args.delay < 0:
        logger.error("--delay must be a non-negative number.")
        sys.exit(1)

    try:
        asyncio.run(run_pipeline(args.sources, args.db_path, args.delay))
    except (StoreError, ValueError) as e:
        logger.error(f"Run aborted: {e}")
        sys.exit(1)
    except Exception:
        logger.exception("Unhandled error during run")


if __name__ == "__main__":
    cli()
