import asyncio
import logging
from typing import Any

import httpx

from job_harvester.errors import ExtractionServiceError

logger = logging.getLogger(__name__)

MISTRAL_BASE_URL = "https://api.mistral.ai/v1"
DEFAULT_MODEL = "mistral-small-latest"
MAX_RETRIES = 3
INITIAL_BACKOFF = 2  # seconds
REQUEST_TIMEOUT = 60.0  # seconds
RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class MistralClient:
    """
    Minimal chat-completions client for the Mistral API.

    Retries timeouts, connection errors, rate limiting and server errors with
    exponential backoff. Anything else (bad key, bad request) fails at once.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = MISTRAL_BASE_URL,
        max_retries: int = MAX_RETRIES,
        initial_backoff: float = INITIAL_BACKOFF,
    ) -> None:
        self.client = client
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff

    async def complete(self, prompt: str) -> str:
        """Send one user prompt and return the model's text reply."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

        for attempt in range(1, self.max_retries + 1):
            try:
                response = await self.client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=headers,
                    timeout=REQUEST_TIMEOUT,
                )
                response.raise_for_status()
                return self._extract_text(response.json())
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status not in RETRYABLE_STATUS:
                    raise ExtractionServiceError(
                        f"Extraction service rejected request: {status}"
                    ) from e
                error: Exception = e
            except httpx.HTTPError as e:
                error = e
            except ValueError as e:
                raise ExtractionServiceError("Extraction service returned invalid JSON") from e

            if attempt == self.max_retries:
                logger.error(f"Extraction failed after {self.max_retries} attempts: {error}")
                raise ExtractionServiceError(f"Extraction service unavailable: {error}") from error
            backoff = self.initial_backoff * (2 ** (attempt - 1))
            logger.warning(
                f"Extraction attempt {attempt}/{self.max_retries} failed: {error}. "
                f"Retrying in {backoff}s..."
            )
            await asyncio.sleep(backoff)

        raise ExtractionServiceError("No extraction attempts were made")

    @staticmethod
    def _extract_text(body: Any) -> str:
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExtractionServiceError("Extraction response has no message content") from e

        # Content may arrive as a list of typed chunks
        if isinstance(content, list):
            content = "".join(
                chunk.get("text", "") for chunk in content if isinstance(chunk, dict)
            )
        if not isinstance(content, str) or not content.strip():
            raise ExtractionServiceError("Extraction response was empty")
        return content
