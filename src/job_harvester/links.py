import logging

import httpx

logger = logging.getLogger(__name__)

LINK_TIMEOUT = 2.0  # seconds
TRACKING_DELIMITER = "&"


class LinkValidator:
    """
    Checks whether a URL currently answers with a 2xx or 3xx status.
    Timeouts and network errors count as unreachable.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float = LINK_TIMEOUT) -> None:
        self.client = client
        self.timeout = timeout

    async def is_reachable(self, url: str) -> bool:
        try:
            response = await self.client.get(url, timeout=self.timeout, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.debug(f"Link check failed for {url}: {e}")
            return False
        return 200 <= response.status_code < 400


def strip_tracking(url: str) -> str:
    """Keep only the part of the URL before the first '&'."""
    return url.split(TRACKING_DELIMITER, 1)[0]


async def canonicalize(url: str, validator: LinkValidator) -> str:
    """
    Return the tracking-free form of an apply URL when it is still reachable,
    otherwise the original URL untouched.
    """
    stripped = strip_tracking(url)
    if stripped == url:
        return url
    try:
        reachable = await validator.is_reachable(stripped)
    except Exception as e:
        logger.warning(f"Link validator raised for {stripped}: {e}")
        reachable = False
    if reachable:
        logger.debug(f"Canonicalized apply link {url} -> {stripped}")
        return stripped
    return url
