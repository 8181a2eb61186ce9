"""Test doubles for adapters and aiohttp sessions."""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from propdata.models import RawRecord, SourceKind
from propdata.scrapers.base.source_adapter import ComparablesSource, SourceAdapter


class FakeResponse:
    def __init__(self, payload: Any = None, status: int = 200):
        self.payload = payload
        self.status = status

    async def json(self, content_type=None):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


@dataclass
class RecordedRequest:
    method: str
    url: str
    params: Optional[Dict[str, Any]] = None
    json: Optional[Dict[str, Any]] = None
    headers: Optional[Dict[str, str]] = None


@dataclass
class FakeSession:
    """
    Stands in for aiohttp.ClientSession. Routes are matched in order on
    method and a URL substring; a route's response may be a FakeResponse,
    an exception to raise, or a callable taking the RecordedRequest.
    """
    routes: List[tuple] = field(default_factory=list)
    calls: List[RecordedRequest] = field(default_factory=list)

    def add(self, method: str, url_part: str, payload: Any = None, status: int = 200) -> "FakeSession":
        self.routes.append((method, url_part, FakeResponse(payload, status)))
        return self

    def add_error(self, method: str, url_part: str, error: BaseException) -> "FakeSession":
        self.routes.append((method, url_part, error))
        return self

    def add_handler(self, method: str, url_part: str, handler: Callable[[RecordedRequest], FakeResponse]) -> "FakeSession":
        self.routes.append((method, url_part, handler))
        return self

    def request(self, method, url, params=None, json=None, headers=None):
        call = RecordedRequest(method, str(url), params, json, headers)
        self.calls.append(call)

        for route_method, url_part, response in self.routes:
            if route_method != method or url_part not in call.url:
                continue
            if isinstance(response, BaseException):
                raise response
            if callable(response) and not isinstance(response, FakeResponse):
                return response(call)
            return response

        raise AssertionError(f"Unexpected request: {method} {url}")

    def urls(self) -> List[str]:
        return [call.url for call in self.calls]


class FakeAdapter(SourceAdapter):
    def __init__(
        self,
        name: str,
        kind: SourceKind,
        fields: Optional[Dict[str, Any]] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self.name = name
        self.kind = kind
        self.fields = fields
        self.error = error
        self.delay = delay
        self.calls = 0

    async def lookup(self, address, city):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.fields is None:
            return None
        return RawRecord(source=self.name, kind=self.kind, fields=dict(self.fields))


class FakeComparables(ComparablesSource):
    def __init__(
        self,
        name: str,
        records: Optional[List[Dict[str, Any]]] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self.name = name
        self.records = records or []
        self.error = error
        self.delay = delay
        self.calls = 0

    async def search(self, address, city, limit):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [
            RawRecord(source=self.name, kind=SourceKind.LISTING_DERIVED, fields=dict(record))
            for record in self.records[:limit]
        ]
