from typing import Optional

import time
from fastapi import FastAPI
from prometheus_client import CollectorRegistry

from ..config import AppSettings
from ..logging import init_logging
from .middleware import RequestLoggingMiddleware
from .routes import health, metrics
from ..services.cache import TTLCache
from ..services.collector import OpenWeatherCollector, build_sources
from ..services.geocoding import Geocoder, NominatimGeocoder, resolve_locations
from ..services.openweather import OpenWeatherClient
from ..services.registry import build_api_call_counter


def create_app(
    settings: Optional[AppSettings] = None,
    geocoder: Optional[Geocoder] = None,
    client: Optional[OpenWeatherClient] = None,
) -> FastAPI:
    """Build the exporter app.

    Configuration and geocoding are checked here, before anything is served:
    a ``StartupError`` (bad unit, malformed location list, unresolvable
    location) propagates to the caller.
    """
    settings = settings or AppSettings()
    init_logging(settings.log_level, app=settings.app_name, version=settings.app_version)

    names = settings.locations()
    call_counter = build_api_call_counter(None)
    if client is None:
        client = OpenWeatherClient(
            api_key=settings.apikey,
            degrees_unit=settings.degrees_unit,
            language=settings.language,
            timeout=settings.request_timeout,
            call_counter=call_counter,
        )
    elif client.call_counter is None:
        client.call_counter = call_counter

    geocoder = geocoder or NominatimGeocoder(base_url=settings.geocoder_url, timeout=settings.request_timeout)
    locations = resolve_locations(names, geocoder)

    collector = OpenWeatherCollector(
        locations=locations,
        sources=build_sources(client, enable_pol=settings.enable_pol, enable_uv=settings.enable_uv),
        cache=TTLCache(),
        ttl=settings.cache_ttl,
    )
    # generate_latest reads collectors in registration order: the counter goes
    # after the collector so it includes the calls made by the same scrape.
    registry = CollectorRegistry()
    registry.register(collector)
    registry.register(client.call_counter)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        openapi_tags=[
            {"name": "health", "description": "Exporter health and uptime"},
            {"name": "metrics", "description": "Prometheus scrape endpoint"},
        ],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(metrics.router, prefix="/metrics", tags=["metrics"])

    app.state.settings = settings
    app.state.start_time = time.time()
    app.state.registry = registry
    app.state.call_counter = client.call_counter
    app.state.collector = collector

    return app
