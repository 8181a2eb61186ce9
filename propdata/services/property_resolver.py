"""
Property Data Resolver

Resolves an (address, city) pair into an assessment record and a set of
comparable sales by running two chains concurrently:

  Assessment chain (ordered, stops at the first accepted record):
    active listing -> municipal open data -> assessment search -> GIS parcel

  Comparables chain (every source, unioned in order):
    sold listings, active listings -> dedupe by MLS number -> cap

Every adapter call is bounded by a per-adapter timeout. A timeout, an
unreachable source or an unexpected adapter error counts as "no answer"
for that step and is recorded in the result's trace. When no step
answers, the assessment is None; nothing is synthesized from
comparables.

Usage:
    async with PropertyDataResolver.from_settings() as resolver:
        result = await resolver.resolve("20387 Dale Drive", "Maple Ridge")
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, List, Optional, Sequence, Tuple

import aiohttp
import structlog

from ..config.settings import Settings, get_settings
from ..errors import IntegrityViolation, InvalidInputError, SourceUnavailableError
from ..intelligence.analyzers.market_analyzer import MarketAnalyzer
from ..models import (
    AssessmentRecord,
    ComparableSale,
    PropertyDataResult,
    SourceOutcome,
    TraceEntry,
)
from ..scrapers.base.source_adapter import (
    DEFAULT_USER_AGENT,
    ComparablesSource,
    HttpSourceAdapter,
    SourceAdapter,
)
from ..scrapers.data_sources import (
    ActiveListingAdapter,
    ActiveListingComparables,
    AssessmentSearchAdapter,
    GISParcelAdapter,
    MunicipalOpenDataAdapter,
    SoldListingAdapter,
)
from ..scrapers.registry import MunicipalRegistry
from ..utils.address_matcher import get_address_matcher
from ..utils.field_normalizer import to_assessment_record, to_comparable_sale
from .integrity_guard import IntegrityGuard
from .lookup_cache import LookupCache
from .result_composer import compose_result

logger = structlog.get_logger(__name__)

ASSESSMENT_CHAIN = "assessment"
COMPARABLES_CHAIN = "comparables"


@dataclass(frozen=True)
class _StepResult:
    value: Any
    failed: bool
    trace: Optional[TraceEntry] = None


class PropertyDataResolver:
    """Orchestrates adapters, guard, analyzer and composer for one lookup at a time."""

    def __init__(
        self,
        assessment_sources: Sequence[SourceAdapter],
        comparables_sources: Sequence[ComparablesSource] = (),
        guard: Optional[IntegrityGuard] = None,
        analyzer: Optional[MarketAnalyzer] = None,
        cache: Optional[LookupCache] = None,
        registry: Optional[MunicipalRegistry] = None,
        adapter_timeout: float = 5.0,
        comparables_limit: int = 10,
        http_timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """
        Args:
            assessment_sources: Assessment chain adapters, in precedence order
            comparables_sources: Comparables chain sources, in union order
            guard: Integrity guard every assessment candidate goes through
            analyzer: Market analyzer for the comparables
            cache: Optional lookup cache keyed on the normalized address/city
            registry: Municipal registry for typical zoning, the shipped cities when None
            adapter_timeout: Deadline in seconds for each adapter call
            comparables_limit: Maximum comparables returned
            http_timeout: Total timeout of the shared session (context manager use)
            user_agent: User-Agent header of the shared session
        """
        if adapter_timeout <= 0:
            raise ValueError("adapter_timeout must be positive")
        if comparables_limit < 0:
            raise ValueError("comparables_limit must not be negative")

        self.assessment_sources = tuple(assessment_sources)
        self.comparables_sources = tuple(comparables_sources)
        self.guard = guard or IntegrityGuard()
        self.analyzer = analyzer or MarketAnalyzer()
        self.cache = cache
        self.registry = registry
        self.adapter_timeout = adapter_timeout
        self.comparables_limit = comparables_limit
        self.http_timeout = http_timeout
        self.user_agent = user_agent

        self._session: Optional[aiohttp.ClientSession] = None
        self._attached: List[HttpSourceAdapter] = []

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        registry: Optional[MunicipalRegistry] = None,
        cache: Optional[LookupCache] = None,
    ) -> "PropertyDataResolver":
        """Wire the default adapter chains from configuration."""
        settings = settings or get_settings()
        if registry is None:
            registry = MunicipalRegistry.from_config_dir(settings.CITY_CONFIG_DIR)

        http = {'timeout': settings.HTTP_TIMEOUT_SECONDS, 'user_agent': settings.USER_AGENT}
        listing_feed = {
            'base_url': settings.DDF_BASE_URL,
            'username': settings.DDF_USERNAME,
            'password': settings.DDF_PASSWORD,
        }

        assessment_sources = [
            ActiveListingAdapter(scan_limit=settings.ACTIVE_LISTINGS_LIMIT, **listing_feed, **http),
            MunicipalOpenDataAdapter(registry, **http),
            AssessmentSearchAdapter(
                base_url=settings.ASSESSMENT_SEARCH_URL,
                api_key=settings.ASSESSMENT_SEARCH_API_KEY,
                **http
            ),
            GISParcelAdapter(
                registry,
                geocoder_url=settings.BC_GEOCODER_URL,
                wfs_url=settings.DATABC_WFS_URL,
                min_score=settings.GEOCODER_MIN_SCORE,
                **http
            ),
        ]
        comparables_sources = [
            SoldListingAdapter(**listing_feed, **http),
            ActiveListingComparables(**listing_feed, **http),
        ]

        if cache is None and settings.CACHE_ENABLED:
            cache = LookupCache(ttl_seconds=settings.CACHE_TTL_SECONDS, max_entries=settings.CACHE_MAX_ENTRIES)

        return cls(
            assessment_sources,
            comparables_sources,
            cache=cache,
            registry=registry,
            adapter_timeout=settings.ADAPTER_TIMEOUT_SECONDS,
            comparables_limit=settings.COMPARABLES_LIMIT,
            http_timeout=settings.HTTP_TIMEOUT_SECONDS,
            user_agent=settings.USER_AGENT,
        )

    async def __aenter__(self):
        """Share one aiohttp session across all HTTP adapters that have none."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()

    async def initialize(self) -> None:
        if self._session is not None:
            return

        timeout_config = aiohttp.ClientTimeout(total=self.http_timeout)
        self._session = aiohttp.ClientSession(
            timeout=timeout_config,
            headers={'User-Agent': self.user_agent}
        )

        seen = set()
        for adapter in (*self.assessment_sources, *self.comparables_sources):
            if not isinstance(adapter, HttpSourceAdapter) or id(adapter) in seen:
                continue
            seen.add(id(adapter))
            if adapter.session is None:
                adapter.session = self._session
                self._attached.append(adapter)

    async def cleanup(self) -> None:
        for adapter in self._attached:
            adapter.session = None
        self._attached = []

        if self._session is not None:
            await self._session.close()
            self._session = None

    async def resolve(self, address: str, city: str) -> PropertyDataResult:
        """
        Resolve one property

        Args:
            address: Street address, e.g. "20387 Dale Drive"
            city: City name, e.g. "Maple Ridge"

        Returns:
            PropertyDataResult (assessment may be None)

        Raises:
            InvalidInputError: address or city empty/blank
        """
        address, city = self._validate(address, city)

        cache_key = get_address_matcher().cache_key(address, city)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.info("resolution_cache_hit", address=address, city=city)
                return cached

        logger.info("resolution_started", address=address, city=city)

        (assessment, assessment_trace), (comparables, comparables_trace) = await asyncio.gather(
            self._run_assessment_chain(address, city),
            self._run_comparables_chain(address, city),
        )

        market = self.analyzer.analyze(comparables)
        result = compose_result(assessment, comparables, market, (*assessment_trace, *comparables_trace))

        logger.info(
            "resolution_completed",
            address=address,
            city=city,
            assessment_source=assessment.provenance.source if assessment else None,
            partial=assessment.is_partial if assessment else None,
            comparables=len(comparables),
            trend=market.trend.value
        )

        if self.cache is not None:
            unavailable = [entry.source for entry in result.trace if entry.outcome is SourceOutcome.UNAVAILABLE]
            if unavailable:
                logger.debug("resolution_not_cached", address=address, city=city, unavailable=unavailable)
            else:
                self.cache.set(cache_key, result)
        return result

    def _validate(self, address: Any, city: Any) -> Tuple[str, str]:
        if not isinstance(address, str) or not address.strip():
            raise InvalidInputError("address must be a non-empty string")
        if not isinstance(city, str) or not city.strip():
            raise InvalidInputError("city must be a non-empty string")
        return address.strip(), city.strip()

    async def _call(self, source: str, chain: str, call: Awaitable[Any]) -> _StepResult:
        """Await one adapter call under the per-adapter deadline."""
        try:
            value = await asyncio.wait_for(call, timeout=self.adapter_timeout)
            return _StepResult(value=value, failed=False)

        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            reason = f"timed out after {self.adapter_timeout:g}s"
            logger.warning("source_unavailable", source=source, chain=chain, reason=reason)
        except SourceUnavailableError as e:
            reason = e.reason
            logger.warning("source_unavailable", source=source, chain=chain, reason=reason)
        except Exception as e:
            reason = f"unexpected error: {e.__class__.__name__}"
            logger.warning("source_unavailable", source=source, chain=chain, reason=reason, exc_info=True)

        return _StepResult(
            value=None,
            failed=True,
            trace=TraceEntry(source, chain, SourceOutcome.UNAVAILABLE, reason),
        )

    async def _run_assessment_chain(
        self, address: str, city: str
    ) -> Tuple[Optional[AssessmentRecord], List[TraceEntry]]:
        trace: List[TraceEntry] = []
        logger.debug("assessment_chain_started", address=address, city=city)

        for index, adapter in enumerate(self.assessment_sources):
            step = await self._call(adapter.name, ASSESSMENT_CHAIN, adapter.lookup(address, city))
            if step.failed:
                trace.append(step.trace)
                continue

            raw = step.value
            if raw is None:
                trace.append(TraceEntry(adapter.name, ASSESSMENT_CHAIN, SourceOutcome.ABSENT))
                continue

            candidate = to_assessment_record(raw, address, city, self.registry)
            try:
                record = self.guard.accept(candidate, adapter.kind)
            except IntegrityViolation as e:
                trace.append(TraceEntry(adapter.name, ASSESSMENT_CHAIN, SourceOutcome.REJECTED, e.reason))
                continue

            if not record.parcel_id and record.total_assessed_value <= 0:
                trace.append(TraceEntry(
                    adapter.name, ASSESSMENT_CHAIN, SourceOutcome.ABSENT,
                    "record has neither parcel id nor assessed value"
                ))
                continue

            trace.append(TraceEntry(adapter.name, ASSESSMENT_CHAIN, SourceOutcome.HIT, record.provenance.note))
            trace.extend(
                TraceEntry(skipped.name, ASSESSMENT_CHAIN, SourceOutcome.SKIPPED)
                for skipped in self.assessment_sources[index + 1:]
            )
            logger.info(
                "assessment_resolved",
                source=adapter.name,
                kind=adapter.kind.value,
                parcel_id=record.parcel_id or None,
                partial=record.is_partial
            )
            return record, trace

        logger.info("assessment_not_found", address=address, city=city)
        return None, trace

    async def _run_comparables_chain(
        self, address: str, city: str
    ) -> Tuple[List[ComparableSale], List[TraceEntry]]:
        if not self.comparables_sources or self.comparables_limit == 0:
            return [], []

        steps = await asyncio.gather(*[
            self._call(source.name, COMPARABLES_CHAIN, source.search(address, city, self.comparables_limit))
            for source in self.comparables_sources
        ])

        trace: List[TraceEntry] = []
        comparables: List[ComparableSale] = []
        seen_mls: Dict[str, str] = {}

        for source, step in zip(self.comparables_sources, steps):
            if step.failed:
                trace.append(step.trace)
                continue

            records = step.value or []
            added = 0
            for raw in records:
                sale = to_comparable_sale(raw)
                if sale.mls_number:
                    if sale.mls_number in seen_mls:
                        continue
                    seen_mls[sale.mls_number] = source.name
                if len(comparables) < self.comparables_limit:
                    comparables.append(sale)
                    added += 1

            outcome = SourceOutcome.HIT if records else SourceOutcome.ABSENT
            trace.append(TraceEntry(source.name, COMPARABLES_CHAIN, outcome, f"{added} of {len(records)} used"))

        return comparables, trace


async def resolve(address: str, city: str, settings: Optional[Settings] = None) -> PropertyDataResult:
    """
    One-off resolution with the default adapter chains.

    Builds a fresh resolver (and cache) per call; keep a resolver around
    for repeated lookups.
    """
    async with PropertyDataResolver.from_settings(settings) as resolver:
        return await resolver.resolve(address, city)
