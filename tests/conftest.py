import os

import pytest

# Set environment variables for tests before any imports happen
os.environ["URLS"] = "https://jobs.example.com/wp-json/wp/v2/posts"
os.environ["API_KEY"] = "test_api_key"
os.environ["DB_PATH"] = ":memory:"
os.environ["SOURCE_DELAY"] = "0"

from job_harvester.db import Database  # noqa: E402
from job_harvester.models import PostingFragment  # noqa: E402


class StubLinkValidator:
    """Link validator answering from a fixed set of reachable URLs."""

    def __init__(self, reachable: set[str] | None = None) -> None:
        self.reachable = reachable or set()
        self.checked: list[str] = []

    async def is_reachable(self, url: str) -> bool:
        self.checked.append(url)
        return url in self.reachable


class StubExtractionService:
    """Extraction service replaying canned outputs (or raising canned errors) in order."""

    def __init__(self, *outputs: str | Exception) -> None:
        self.outputs = list(outputs)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


@pytest.fixture
def db():
    """Fixture to provide an in-memory database for testing."""
    with Database(db_path=":memory:") as test_db:
        yield test_db


@pytest.fixture
def sample_candidate():
    """A reusable valid candidate record, as the extraction service would emit it."""
    return {
        "title": "Acme is hiring Backend Engineer",
        "role": "Backend Engineer",
        "company": "Acme",
        "category": "Software Development",
        "sub_category": "Backend",
        "skills": ["Python", "PostgreSQL"],
        "experience_min": 0,
        "experience_max": 0,
        "job_type": ["Full-Time"],
        "apply_link": "https://careers.acme.com/jobs/1",
        "salary_min": 600000,
        "salary_max": 900000,
        "education": ["B.Tech"],
        "location": ["Bengaluru"],
        "batch": ["2025"],
    }


@pytest.fixture
def fragment():
    """A posting fragment with a text body."""
    return PostingFragment(
        source="https://jobs.example.com/wp-json/wp/v2/posts",
        text="Acme is hiring a Backend Engineer. Apply at https://careers.acme.com/jobs/1",
        link="https://jobs.example.com/acme-backend",
        post_id="101",
    )
