"""Knowledge provider adapters for the advisory aggregator.

Every provider answers `search(query)` with a tagged outcome instead of
raising: Content(text) when it found something usable, Unavailable(reason)
otherwise. Request shaping (auth header, query parameter name) is per
provider configuration; the aggregation logic never sees it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Union

import httpx

from logger_config import setup_logger

logger = setup_logger(__name__, 'providers.log')


@dataclass(frozen=True)
class Content:
    text: str


@dataclass(frozen=True)
class Unavailable:
    reason: str = "no result"


ProviderOutcome = Union[Content, Unavailable]


@dataclass(frozen=True)
class ProviderConfig:
    """How to reach one knowledge provider."""

    name: str
    endpoint: str
    auth_token: str = ""
    query_param: str = "query"


class Provider(ABC):
    """A knowledge source answering with Content or Unavailable."""

    name: str = "provider"

    @abstractmethod
    async def search(self, query: str) -> ProviderOutcome:
        ...


def extract_first_content(data) -> Optional[str]:
    """Pull `results[0].content` out of a search response, if present and non-blank."""
    if not isinstance(data, dict):
        return None
    results = data.get("results")
    if not isinstance(results, list) or not results:
        return None
    first = results[0]
    if not isinstance(first, dict):
        return None
    content = first.get("content")
    if not isinstance(content, str) or not content.strip():
        return None
    return content


class HttpSearchProvider(Provider):
    """Provider backed by a bearer-authenticated HTTP search endpoint."""

    def __init__(
        self,
        config: ProviderConfig,
        timeout: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config
        self.name = config.name
        self.timeout = timeout
        self._transport = transport

    async def search(self, query: str) -> ProviderOutcome:
        headers = {}
        if self.config.auth_token:
            headers["Authorization"] = f"Bearer {self.config.auth_token}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    self.config.endpoint,
                    params={self.config.query_param: query},
                    headers=headers
                )
        except httpx.TimeoutException:
            logger.warning(f"{self.name} search timed out")
            return Unavailable("timeout")
        except httpx.RequestError as e:
            logger.warning(f"{self.name} search network error: {str(e)}")
            return Unavailable(f"network error: {str(e)}")

        if not response.is_success:
            logger.warning(f"{self.name} search returned status {response.status_code}")
            return Unavailable(f"status {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"{self.name} search returned invalid JSON")
            return Unavailable("invalid JSON")

        content = extract_first_content(data)
        if content is None:
            return Unavailable("no result")
        return Content(content)


def default_provider_configs(settings) -> List[ProviderConfig]:
    """WebMD first, then BabyCenter - the declared priority order."""
    return [
        ProviderConfig(
            name="WebMD",
            endpoint=settings.WEBMD_API_URL,
            auth_token=settings.WEBMD_API_KEY,
            query_param="query",
        ),
        ProviderConfig(
            name="BabyCenter",
            endpoint=settings.BABYCENTER_API_URL,
            auth_token=settings.BABYCENTER_API_KEY,
            query_param="q",
        ),
    ]
