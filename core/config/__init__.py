#!/usr/bin/env python3
"""Modular configuration system for the campaign review console

Configuration hierarchy:
- infra_config: Campaign store (PostgreSQL) and notification runtime (NATS)
- console_config: Timeouts, paging and polling for the review console
- logging_config: Logging configuration
"""
import os
from pathlib import Path
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .console_config import ReviewConsoleConfig
from .app_config import AppConfig

# Load environment file based on ENV; staging/production files are supplied at deploy time
ENVIRONMENTS_DIR = Path(__file__).resolve().parents[2] / "deployment" / "environments"
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "dev.env",
    "dev": "dev.env",
    "testing": "test.env",
    "test": "test.env",
    "staging": "staging.env",
    "production": "production.env",
}
env_file = ENVIRONMENTS_DIR / env_files.get(env, "dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = AppConfig.from_env()

def get_settings() -> AppConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> AppConfig:
    """Reload settings from environment"""
    global settings
    settings = AppConfig.from_env()
    return settings

__all__ = [
    'AppConfig',
    'get_settings',
    'reload_settings',
    'settings',
    'LoggingConfig',
    'InfraConfig',
    'ReviewConsoleConfig',
]
