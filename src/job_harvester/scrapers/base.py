from abc import ABC, abstractmethod

from job_harvester.models import PostingFragment


class BaseSource(ABC):
    """
    Abstract base class for all content sources.
    """

    @abstractmethod
    async def fetch(self, url: str) -> list[PostingFragment]:
        """
        Fetch the raw postings published at `url`.
        Raises FetchError when the source is unreachable or returns unusable data.
        """
        pass
