#!/usr/bin/env python3
"""Review console behaviour settings (timeouts, paging, polling)"""
import os
from dataclasses import dataclass

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class ReviewConsoleConfig:
    """Campaign review console settings"""

    # Bounded wait applied by the store gateway
    read_timeout_seconds: float = 15.0
    write_timeout_seconds: float = 15.0

    # Shared page size for pending / active / completed lists
    page_size: int = 25

    # Background refresh interval
    poll_interval_seconds: float = 60.0

    # Last-good results kept for stale fallback, per cache
    fallback_cache_size: int = 256

    # HTTP surface
    service_host: str = "0.0.0.0"
    service_port: int = 8251

    @classmethod
    def from_env(cls) -> 'ReviewConsoleConfig':
        return cls(
            read_timeout_seconds=_float(os.getenv("CAMPAIGN_READ_TIMEOUT", "15"), 15.0),
            write_timeout_seconds=_float(os.getenv("CAMPAIGN_WRITE_TIMEOUT", "15"), 15.0),
            page_size=_int(os.getenv("CAMPAIGN_PAGE_SIZE", "25"), 25),
            poll_interval_seconds=_float(os.getenv("CAMPAIGN_POLL_INTERVAL", "60"), 60.0),
            fallback_cache_size=_int(os.getenv("CAMPAIGN_FALLBACK_CACHE_SIZE", "256"), 256),
            service_host=os.getenv("HOST", "0.0.0.0"),
            service_port=_int(os.getenv("SERVICE_PORT", "8251"), 8251),
        )
