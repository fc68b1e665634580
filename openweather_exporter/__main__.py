"""Command-line entry point: ``python -m openweather_exporter`` or ``openweather-exporter``.

Every flag falls back to its ``OW_*`` environment variable, then to the
settings default.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List, Optional

import structlog
import uvicorn
from pydantic import ValidationError

from .config import AppSettings
from .errors import StartupError

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="openweather-exporter",
        description="Openweather Exporter for Openweather API",
    )
    p.add_argument("--listen-address", dest="listen_address", help="HTTP address to listen on (OW_LISTEN_ADDRESS)")
    p.add_argument("--apikey", help="Openweather API key (OW_APIKEY)")
    p.add_argument("--city", help="Pipe-delimited locations to gather metrics from (OW_CITY)")
    p.add_argument("--degrees-unit", dest="degrees_unit", help="Temperature unit: C, F or K (OW_DEGREES_UNIT)")
    p.add_argument("--language", help="Language for condition descriptions (OW_LANGUAGE)")
    p.add_argument("--cache-ttl", dest="cache_ttl", type=int, help="Seconds to reuse an API response (OW_CACHE_TTL)")
    p.add_argument("--enable-pol", dest="enable_pol", action="store_true", default=None, help="Export air pollution metrics (OW_ENABLE_POL)")
    p.add_argument("--enable-uv", dest="enable_uv", action="store_true", default=None, help="Export UV index metric (OW_ENABLE_UV)")
    p.add_argument("--log-level", dest="log_level", help="Log level (OW_LOG_LEVEL)")
    return p


def load_settings(argv: Optional[List[str]] = None) -> AppSettings:
    args = build_parser().parse_args(argv)
    overrides: Dict[str, Any] = {k: v for k, v in vars(args).items() if v is not None}
    return AppSettings(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    from .api.main import create_app

    try:
        settings = load_settings(argv)
        host, port = settings.bind()
        app = create_app(settings)
    except ValidationError as e:
        logger.error("startup_failed", error=f"invalid configuration: {e}")
        return 1
    except StartupError as e:
        logger.error("startup_failed", error=str(e))
        return 1

    logger.info("serving", host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
