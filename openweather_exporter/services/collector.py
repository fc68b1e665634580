from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar, cast

import structlog
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from ..errors import CacheWriteError, UpstreamFetchError
from .cache import TTLCache
from .geocoding import Location
from .openweather import OpenWeatherClient
from .registry import POLLUTION_GAUGES, UV_GAUGES, WEATHER_GAUGES, Gauge

logger = structlog.get_logger()

S = TypeVar("S")


@dataclass(frozen=True)
class Source(Generic[S]):
    """One upstream data category: how to fetch it and what to export from it."""

    name: str
    fetch: Callable[[Location], S]
    gauges: Sequence[Gauge[S]]


def build_sources(client: OpenWeatherClient, enable_pol: bool = False, enable_uv: bool = False) -> List[Source[Any]]:
    sources: List[Source[Any]] = [Source("weather", client.fetch_weather, WEATHER_GAUGES)]
    if enable_uv:
        sources.append(Source("uv", client.fetch_uv, UV_GAUGES))
    if enable_pol:
        sources.append(Source("pollution", client.fetch_pollution, POLLUTION_GAUGES))
    return sources


class OpenWeatherCollector(Collector):
    """Custom Prometheus collector, one pass over every (location, source) per scrape.

    For each pair the snapshot comes from the cache when a live entry exists,
    otherwise from a fresh fetch that is then stored for ``ttl`` seconds. The
    snapshot is resolved once per pair and every gauge of the source is
    evaluated against that same object.

    Failures stay local to their pair: a failed fetch drops that source's
    samples for this scrape only, and a failed cache write still exports the
    snapshot in hand (it just is not reused next time).
    """

    def __init__(
        self,
        locations: Sequence[Location],
        sources: Sequence[Source[Any]],
        cache: TTLCache[str, Any],
        ttl: float,
    ) -> None:
        self.locations = tuple(locations)
        self.sources = tuple(sources)
        self.cache = cache
        self.ttl = ttl

    def describe(self) -> Iterator[GaugeMetricFamily]:
        for source in self.sources:
            for gauge in source.gauges:
                yield gauge.family()

    def collect(self) -> Iterator[GaugeMetricFamily]:
        start = time.perf_counter()
        emitted = 0
        for source in self.sources:
            resolved = self._resolve_all(source)
            for gauge in source.gauges:
                family = gauge.family()
                for location, snapshot in resolved:
                    gauge.add_sample(family, snapshot, location.name)
                emitted += len(family.samples)
                yield family
        logger.info(
            "scrape_completed",
            samples=emitted,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )

    def _resolve_all(self, source: Source[S]) -> List[Tuple[Location, S]]:
        resolved = []
        for location in self.locations:
            snapshot = self._resolve(source, location)
            if snapshot is not None:
                resolved.append((location, snapshot))
        return resolved

    def _resolve(self, source: Source[S], location: Location) -> Optional[S]:
        key = location.cache_key(source.name)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("cache_hit", source=source.name, location=location.name)
            # keys embed the source name, so the entry was written by this source
            return cast(S, cached)

        try:
            snapshot = source.fetch(location)
        except UpstreamFetchError as e:
            logger.warning(
                "upstream_fetch_failed",
                source=source.name,
                location=location.name,
                status_code=e.status_code,
                error=str(e),
            )
            return None

        try:
            self.cache.set(key, snapshot, self.ttl)
        except CacheWriteError as e:
            logger.warning("cache_store_failed", source=source.name, location=location.name, error=str(e))
        return snapshot
