#!/usr/bin/env python3
"""Top-level configuration aggregating every sub-config"""
import os
from dataclasses import dataclass, field

from .console_config import ReviewConsoleConfig
from .infra_config import InfraConfig
from .logging_config import LoggingConfig

def _bool(val: str) -> bool:
    return val.lower() == "true"


@dataclass
class AppConfig:
    """Main configuration with all sub-configs"""

    # Environment
    environment: str = "development"
    debug: bool = False

    # Sub-configurations
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    infrastructure: InfraConfig = field(default_factory=InfraConfig)
    console: ReviewConsoleConfig = field(default_factory=ReviewConsoleConfig)

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),
            logging=LoggingConfig.from_env(),
            infrastructure=InfraConfig.from_env(),
            console=ReviewConsoleConfig.from_env(),
        )
