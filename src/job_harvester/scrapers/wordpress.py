import asyncio
import logging
from typing import Any

import httpx
from bs4 import BeautifulSoup

from job_harvester.errors import FetchError
from job_harvester.models import PostingFragment
from job_harvester.scrapers.base import BaseSource

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
INITIAL_BACKOFF = 2  # seconds
HTTP_TIMEOUT = 15.0  # seconds
RETRYABLE_STATUS = {429, 500, 502, 503, 504}
HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/108.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json",
}


class WordPressSource(BaseSource):
    """
    Reads job postings from a WordPress REST endpoint (e.g. /wp-json/wp/v2/posts).
    Each post's `content.rendered` markup is flattened to plain text.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_retries: int = MAX_RETRIES,
        initial_backoff: float = INITIAL_BACKOFF,
    ) -> None:
        self.client = client
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff

    async def fetch(self, url: str) -> list[PostingFragment]:
        payload = await self._get_json(url)
        posts = [payload] if isinstance(payload, dict) else payload
        if not isinstance(posts, list):
            raise FetchError(url, f"Expected a list of posts, got {type(payload).__name__}")

        fragments = [self._parse_post(url, post) for post in posts]
        logger.info(f"Fetched {len(fragments)} postings from {url}")
        return fragments

    async def _get_json(self, url: str) -> Any:
        for attempt in range(1, self.max_retries + 1):
            try:
                response = await self.client.get(url, headers=HEADERS, timeout=HTTP_TIMEOUT)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status not in RETRYABLE_STATUS:
                    logger.error(f"Source {url} returned {status}, not retrying")
                    raise FetchError(url, f"Source returned {status}") from e
                error: Exception = e
            except httpx.HTTPError as e:
                error = e
            else:
                try:
                    return response.json()
                except ValueError as e:
                    raise FetchError(url, "Failed to decode JSON response") from e

            if attempt == self.max_retries:
                logger.error(
                    f"HTTP error after {self.max_retries} attempts fetching {url}: {error}"
                )
                raise FetchError(url, f"Source unreachable: {error}") from error
            backoff = self.initial_backoff * (2 ** (attempt - 1))
            logger.warning(
                f"Fetch attempt {attempt}/{self.max_retries} failed: {error}. "
                f"Retrying in {backoff}s..."
            )
            await asyncio.sleep(backoff)

        raise FetchError(url, "No fetch attempts were made")

    @staticmethod
    def html_to_text(markup: str) -> str:
        """Flatten rendered post markup to text, one block per line."""
        soup = BeautifulSoup(markup, "html.parser")
        for tag in soup(["script", "style"]):
            tag.decompose()
        lines = [line.strip() for line in soup.get_text("\n").splitlines()]
        return "\n".join(line for line in lines if line)

    def _parse_post(self, url: str, post: Any) -> PostingFragment:
        if not isinstance(post, dict):
            return PostingFragment(source=url)

        content = post.get("content")
        rendered = content.get("rendered") if isinstance(content, dict) else None
        text = self.html_to_text(rendered) if isinstance(rendered, str) else None

        link = post.get("link")
        post_id = post.get("id")
        return PostingFragment(
            source=url,
            text=text or None,
            link=link if isinstance(link, str) else None,
            post_id=str(post_id) if post_id is not None else None,
        )
