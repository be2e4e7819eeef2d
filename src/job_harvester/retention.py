import calendar
import logging
from datetime import datetime
from typing import Protocol

from job_harvester.errors import StoreError

logger = logging.getLogger(__name__)

RETENTION_MONTHS = 2


class JobEviction(Protocol):
    def delete_created_before(self, cutoff: datetime) -> int: ...


def subtract_months(moment: datetime, months: int) -> datetime:
    """
    Step back a number of calendar months, clamping the day to the
    length of the target month (31 Mar - 1 month = 28/29 Feb).
    """
    total = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def sweep(store: JobEviction, now: datetime) -> int:
    """Delete every job older than the retention window and return how many went."""
    cutoff = subtract_months(now, RETENTION_MONTHS)
    logger.info(f"Deleting jobs created before {cutoff.isoformat()}...")
    try:
        deleted = store.delete_created_before(cutoff)
    except StoreError as e:
        logger.error(f"Retention sweep failed: {e}")
        return 0
    logger.info(f"Deleted {deleted} old jobs.")
    return deleted
