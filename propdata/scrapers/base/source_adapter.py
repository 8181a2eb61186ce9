"""
Source adapter base classes.

An adapter answers one question for one external source: "what do you
know about this address in this city?". Not knowing is a normal answer
(None). Being unreachable, rejecting the request or returning garbage is
not, and surfaces as SourceUnavailableError so the resolver can log it
and move on.
"""
import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import aiohttp
import structlog

from ...errors import SourceUnavailableError
from ...models import RawRecord, SourceKind

logger = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = "propdata/1.0 (+property-data-resolver)"


class SourceAdapter(ABC):
    """Assessment-chain capability: look up one property."""

    name: str = "source"
    kind: SourceKind = SourceKind.GOVERNMENT_ASSESSMENT

    @abstractmethod
    async def lookup(self, address: str, city: str) -> Optional[RawRecord]:
        """
        Return the source's record for this address, or None if it has none.

        Raises:
            SourceUnavailableError: source unreachable, HTTP error,
                malformed payload or credentials not configured
        """


class ComparablesSource(ABC):
    """Comparables-chain capability: recent sales for a city."""

    name: str = "comparables"

    @abstractmethod
    async def search(self, address: str, city: str, limit: int) -> List[RawRecord]:
        """Return up to `limit` sale records, possibly empty."""


class HttpSourceAdapter:
    """
    JSON-over-HTTP plumbing shared by the concrete adapters.

    If a session is attached (see the resolver's async context manager)
    every request reuses it; otherwise each request opens a short-lived
    aiohttp session of its own.
    """

    name: str = "http"

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.session = session
        self.timeout = timeout
        self.user_agent = user_agent

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self.session is not None:
            yield self.session
            return

        timeout_config = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(
            timeout=timeout_config,
            headers={'User-Agent': self.user_agent}
        ) as session:
            yield session

    async def _request_json(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Perform one request and decode its JSON body."""
        logger.debug("source_request", source=self.name, method=method, url=url)

        try:
            async with self._session_scope() as session:
                async with session.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=headers,
                ) as response:
                    if response.status >= 400:
                        raise SourceUnavailableError(self.name, f"HTTP {response.status} from {url}")
                    return await response.json(content_type=None)

        except SourceUnavailableError:
            raise
        except asyncio.TimeoutError as e:
            raise SourceUnavailableError(self.name, f"request to {url} timed out") from e
        except aiohttp.ClientError as e:
            raise SourceUnavailableError(self.name, f"request to {url} failed: {e}") from e
        except ValueError as e:
            raise SourceUnavailableError(self.name, f"malformed JSON from {url}") from e

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                        headers: Optional[Dict[str, str]] = None) -> Any:
        return await self._request_json('GET', url, params=params, headers=headers)

    async def _post_json(self, url: str, payload: Dict[str, Any],
                         headers: Optional[Dict[str, str]] = None) -> Any:
        return await self._request_json('POST', url, json=payload, headers=headers)

    def _expect_mapping(self, payload: Any) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise SourceUnavailableError(self.name, f"expected a JSON object, got {type(payload).__name__}")
        return payload

    def _expect_list(self, value: Any, field_name: str) -> List[Any]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise SourceUnavailableError(self.name, f"'{field_name}' is not a list")
        return value
