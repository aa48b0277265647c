#!/usr/bin/env python3
"""
Core Module for the Campaign Review Console

Shared infrastructure components:
    - config/: dataclass configuration loaded from the environment
    - postgres_client.py: asyncpg pool wrapper for the campaign store
    - nats_client.py: NATS event bus for lifecycle notifications
    - auth_dependencies.py: caller identity extraction for FastAPI routes
"""

__version__ = "1.0.0"
