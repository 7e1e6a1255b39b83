"""Builds the offline runtime from CLI configuration."""

from __future__ import annotations

from datetime import timedelta

from wandergo.cli.client import get_server_url
from wandergo.cli.config import get_float_value
from wandergo.cli.sync.runtime import OfflineRuntime


def build_runtime() -> OfflineRuntime:
    """Create an ``OfflineRuntime`` configured from ``config.json``."""
    return OfflineRuntime(
        server_url=get_server_url(),
        interval=get_float_value("poll_interval", 5.0),
        default_ttl=timedelta(hours=get_float_value("cache_ttl_hours", 24.0)),
        offline_ttl=timedelta(days=get_float_value("offline_ttl_days", 7.0)),
    )
