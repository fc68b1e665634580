"""Prometheus exporter for OpenWeatherMap current conditions, air pollution and UV index."""

__version__ = "0.3.0"
