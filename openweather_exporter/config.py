from __future__ import annotations

from typing import List, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__
from .errors import ConfigurationError


class AppSettings(BaseSettings):
    app_name: str = "openweather-exporter"
    app_version: str = __version__
    log_level: str = "INFO"

    listen_address: str = ":9091"
    apikey: str = Field(..., min_length=1)
    # Pipe-delimited, e.g. "New York, NY|Seattle, WA"
    city: str = "New York, NY"
    degrees_unit: str = "F"
    language: str = "EN"
    cache_ttl: int = Field(300, gt=0)
    enable_pol: bool = False
    enable_uv: bool = False

    request_timeout: float = Field(10.0, gt=0)
    geocoder_url: str = "https://nominatim.openstreetmap.org"

    # OW_APIKEY, OW_CITY, ... and .env support
    model_config = SettingsConfigDict(
        env_prefix="OW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def locations(self) -> List[str]:
        names = [part.strip() for part in self.city.split("|")]
        if not names or any(not n for n in names):
            raise ConfigurationError(f"malformed location list: {self.city!r}")
        if len(set(names)) != len(names):
            raise ConfigurationError(f"duplicate location in list: {self.city!r}")
        return names

    def bind(self) -> Tuple[str, int]:
        host, sep, port = self.listen_address.rpartition(":")
        if not sep or not port.isdigit():
            raise ConfigurationError(f"malformed listen address: {self.listen_address!r}")
        port_num = int(port)
        if not 0 < port_num < 65536:
            raise ConfigurationError(f"listen port out of range: {port_num}")
        if host.startswith("[") and host.endswith("]"):
            # "[::]:9091" -> "::"
            host = host[1:-1]
        return host or "0.0.0.0", port_num
