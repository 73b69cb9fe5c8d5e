"""
Central configuration for the ddstore adapter.

Connection target and index names for the profiler's document store.
Values can be overridden per field or read from the environment with
:meth:`StoreConfig.from_env` (a ``.env`` file is honoured by the CLI).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

__all__ = ["StoreConfig"]


@dataclass
class StoreConfig:
    """Immutable‑by‑convention configuration container."""

    # ── Elasticsearch ──────────────────────────────────────────────────
    store_server: str = "localhost"
    store_port: int = 9200
    store_scheme: str = "http"
    request_timeout: float = 10.0

    # ── Indices ────────────────────────────────────────────────────────
    text_index: str = "text"
    profile_index: str = "profile"
    doc_type: str = "column"
    """Legacy mapping type name, kept in each index mapping's ``_meta``."""

    # ── Logging ────────────────────────────────────────────────────────
    quiet_transport_logs: bool = True
    """Raise the ``elastic_transport`` logger to WARNING on init."""

    @property
    def server_url(self) -> str:
        return f"{self.store_scheme}://{self.store_server}:{self.store_port}"

    @classmethod
    def from_env(cls, **overrides) -> StoreConfig:
        """Build a config from ``STORE_*`` environment variables.

        Explicit keyword *overrides* win over the environment; ``None``
        overrides are ignored so CLI options can be passed through as-is.
        """
        values: dict = {}
        if "STORE_SERVER" in os.environ:
            values["store_server"] = os.environ["STORE_SERVER"]
        if "STORE_PORT" in os.environ:
            values["store_port"] = int(os.environ["STORE_PORT"])
        if "STORE_SCHEME" in os.environ:
            values["store_scheme"] = os.environ["STORE_SCHEME"]
        if "STORE_REQUEST_TIMEOUT" in os.environ:
            values["request_timeout"] = float(os.environ["STORE_REQUEST_TIMEOUT"])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
