"""
Pager Configuration
===================
Construction-time options for the requester and the pagination driver.

All durations are milliseconds.
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

ENV_PREFIX = "CURSOR_PAGER_"

# Option names accepted by ``from_options`` mapped to dataclass fields
OPTION_ALIASES = {
    "max_retries": "max_retries",
    "retry_timeout": "retry_timeout_ms",
    "max_request_timeout": "max_request_timeout_ms",
    "threshold": "threshold_ms",
}


@dataclass(frozen=True)
class RequesterConfig:
    """Retry budget and per-attempt deadline."""
    max_retries: int = 4                 # Total attempts per logical request
    retry_timeout_ms: int = 1000         # Delay between attempts
    max_request_timeout_ms: int = 1000   # Deadline for a single attempt

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{f.name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{f.name} must be >= 0, got {value}")

    @classmethod
    def from_options(cls, **options: Any):
        """Build a config from ``max_retries``/``retry_timeout``-style options."""
        kwargs: Dict[str, Any] = {}
        known = {f.name for f in fields(cls)}
        for name, value in options.items():
            field_name = OPTION_ALIASES.get(name, name)
            if field_name not in known:
                raise ValueError(f"Unknown option: {name}")
            if value is not None:
                kwargs[field_name] = value
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None):
        """Build a config from ``CURSOR_PAGER_*`` environment variables."""
        environ = os.environ if environ is None else environ
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            try:
                kwargs[f.name] = int(raw)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}{f.name.upper()} must be an integer, got {raw!r}")
        return cls(**kwargs)


@dataclass(frozen=True)
class PaginationConfig(RequesterConfig):
    """Requester options plus the politeness delay between pages."""
    threshold_ms: int = 200
