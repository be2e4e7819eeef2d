import json
import logging
import sqlite3
from datetime import UTC, datetime
from types import TracebackType
from typing import Any

from job_harvester.errors import StoreError
from job_harvester.models import LIST_FIELDS, JobRecord

logger = logging.getLogger(__name__)

# Fixed-width UTC text so that string comparison in SQL orders chronologically
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

RECORD_COLUMNS = (
    "title",
    "job_id",
    "role",
    "company",
    "category",
    "sub_category",
    "skills",
    "experience_min",
    "experience_max",
    "employment_type",
    "job_type",
    "apply_link",
    "salary_min",
    "salary_max",
    "education",
    "location",
    "batch",
    "message",
)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=UTC)


class Database:
    """
    SQLite store for persisted job records.
    Uses a single persistent connection for both file-based and in-memory databases.
    Supports context manager protocol so one run opens and closes it exactly once.
    """

    def __init__(self, db_path: str = "jobs.db") -> None:
        self.db_path = db_path
        try:
            self._conn: sqlite3.Connection | None = sqlite3.connect(db_path)
            self._conn.row_factory = sqlite3.Row
            self.init_db()
        except sqlite3.Error as e:
            raise StoreError(f"Could not open job store at {db_path}: {e}") from e

    @property
    def connection(self) -> sqlite3.Connection:
        """Return the persistent database connection."""
        if self._conn is None:
            raise StoreError("Database connection is closed")
        return self._conn

    def init_db(self) -> None:
        """Create the jobs table and lookup indexes if they don't exist."""
        cursor = self.connection.cursor()
        cursor.executescript("""
            CREATE TABLE IF NOT EXISTS jobs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                job_id INTEGER,
                role TEXT NOT NULL,
                company TEXT NOT NULL,
                category TEXT NOT NULL,
                sub_category TEXT NOT NULL,
                skills TEXT NOT NULL DEFAULT '[]',
                experience_min INTEGER NOT NULL DEFAULT 0,
                experience_max INTEGER NOT NULL DEFAULT 0,
                employment_type TEXT NOT NULL DEFAULT '[]',
                job_type TEXT NOT NULL DEFAULT '[]',
                apply_link TEXT NOT NULL,
                salary_min INTEGER NOT NULL DEFAULT 0,
                salary_max INTEGER NOT NULL DEFAULT 0,
                education TEXT NOT NULL DEFAULT '[]',
                location TEXT NOT NULL DEFAULT '[]',
                batch TEXT NOT NULL DEFAULT '[]',
                message TEXT,
                created_at TEXT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_jobs_apply_link ON jobs (apply_link);
            CREATE INDEX IF NOT EXISTS idx_jobs_company_role ON jobs (company, role);
            CREATE INDEX IF NOT EXISTS idx_jobs_company_category
                ON jobs (company, category, sub_category);
            CREATE INDEX IF NOT EXISTS idx_jobs_created_at ON jobs (created_at);
        """)
        self.connection.commit()
        logger.info(f"Database initialized at {self.db_path}")

    @staticmethod
    def _to_column(name: str, value: Any) -> Any:
        if name in LIST_FIELDS:
            return json.dumps(list(value), ensure_ascii=False)
        if name == "created_at" and isinstance(value, datetime):
            return format_timestamp(value)
        return value

    @staticmethod
    def _row_to_job(row: sqlite3.Row) -> JobRecord:
        data: dict[str, Any] = {name: row[name] for name in RECORD_COLUMNS}
        for name in LIST_FIELDS:
            data[name] = json.loads(row[name])
        data["created_at"] = parse_timestamp(row["created_at"])
        return JobRecord.model_validate(data)

    def find_one(self, **predicate: Any) -> JobRecord | None:
        """
        Return the first stored job whose columns equal every given value,
        or None when nothing matches.
        """
        if not predicate:
            raise ValueError("find_one needs at least one field to match on")
        unknown = set(predicate) - set(RECORD_COLUMNS) - {"created_at"}
        if unknown:
            raise ValueError(f"Unknown job fields: {', '.join(sorted(unknown))}")

        clauses = " AND ".join(f"{name} = ?" for name in predicate)
        params = [self._to_column(name, value) for name, value in predicate.items()]
        try:
            cursor = self.connection.execute(
                f"SELECT * FROM jobs WHERE {clauses} LIMIT 1", params
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Query on {sorted(predicate)} failed: {e}") from e
        return self._row_to_job(row) if row else None

    def insert(self, job: JobRecord, created_at: datetime | None = None) -> int:
        """
        Insert a job and stamp it with its creation time.
        Any created_at already on the record is ignored. Returns the new row id.
        """
        stamp = created_at or datetime.now(tz=UTC)
        columns = [*RECORD_COLUMNS, "created_at"]
        values = [self._to_column(name, getattr(job, name)) for name in RECORD_COLUMNS]
        values.append(format_timestamp(stamp))
        placeholders = ", ".join("?" for _ in columns)
        try:
            cursor = self.connection.execute(
                f"INSERT INTO jobs ({', '.join(columns)}) VALUES ({placeholders})", values
            )
            self.connection.commit()
        except sqlite3.Error as e:
            logger.error(f"Error saving job {job.apply_link}: {e}")
            raise StoreError(f"Insert failed for {job.apply_link}: {e}") from e
        return int(cursor.lastrowid or 0)

    def delete_created_before(self, cutoff: datetime) -> int:
        """Delete every job created strictly before the cutoff. Returns the count."""
        try:
            cursor = self.connection.execute(
                "DELETE FROM jobs WHERE created_at < ?", (format_timestamp(cutoff),)
            )
            self.connection.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Bulk delete before {cutoff.isoformat()} failed: {e}") from e
        return cursor.rowcount

    def count(self) -> int:
        try:
            row = self.connection.execute("SELECT COUNT(*) FROM jobs").fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Count failed: {e}") from e
        return int(row[0])

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "Database":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
