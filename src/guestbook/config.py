"""
Configuration Management for the Guest Book application.

Dataclass based configuration with per-environment defaults and
``GUESTBOOK_*`` environment variable overrides.
"""

import logging
import os
import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class WebConfig:
    """Web server configuration"""
    host: str = "0.0.0.0"
    port: int = 4001
    debug: bool = False
    auto_reload: bool = False


@dataclass
class SecurityConfig:
    """Security configuration"""
    secret_key: Optional[str] = None
    session_cookie: str = "session_"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class GuestBookConfig:
    """Guest book behaviour"""
    standalone_cap: int = 20
    component_cap: int = 15
    tick_interval: float = 5.0
    view_ttl: int = 300
    cleanup_interval: int = 60
    id_seed: int = 1


@dataclass
class AppConfig:
    """Complete application configuration"""
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    web: WebConfig = field(default_factory=WebConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    guestbook: GuestBookConfig = field(default_factory=GuestBookConfig)

    @classmethod
    def for_environment(cls, environment: Environment) -> 'AppConfig':
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.debug = True
            config.web.debug = True
            config.web.auto_reload = True
            config.logging.level = "DEBUG"

        elif environment == Environment.TESTING:
            config.web.host = "127.0.0.1"
            config.web.port = 4002
            config.logging.level = "WARNING"

        elif environment == Environment.PRODUCTION:
            config.debug = False
            config.web.debug = False
            config.web.auto_reload = False
            config.logging.level = "INFO"

        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'AppConfig':
        """Create configuration from dictionary"""
        environment = Environment(config_dict.get("environment", Environment.DEVELOPMENT.value))
        config = cls.for_environment(environment)

        if "debug" in config_dict:
            config.debug = bool(config_dict["debug"])

        for section in ("web", "security", "logging", "guestbook"):
            target = getattr(config, section)
            for key, value in config_dict.get(section, {}).items():
                if hasattr(target, key):
                    setattr(target, key, value)

        return config

    @classmethod
    def from_environment(cls) -> 'AppConfig':
        """Create configuration from environment variables"""
        env_name = os.getenv('GUESTBOOK_ENV', 'development')
        config = cls.for_environment(Environment(env_name))

        if os.getenv('GUESTBOOK_DEBUG'):
            config.debug = os.getenv('GUESTBOOK_DEBUG').lower() == 'true'
            config.web.debug = config.debug

        if os.getenv('GUESTBOOK_HOST'):
            config.web.host = os.getenv('GUESTBOOK_HOST')

        if os.getenv('GUESTBOOK_PORT'):
            config.web.port = int(os.getenv('GUESTBOOK_PORT'))

        if os.getenv('GUESTBOOK_SECRET_KEY'):
            config.security.secret_key = os.getenv('GUESTBOOK_SECRET_KEY')

        if os.getenv('GUESTBOOK_LOG_LEVEL'):
            config.logging.level = os.getenv('GUESTBOOK_LOG_LEVEL').upper()

        if os.getenv('GUESTBOOK_TICK_INTERVAL'):
            config.guestbook.tick_interval = float(os.getenv('GUESTBOOK_TICK_INTERVAL'))

        return config

    @property
    def secret_key(self) -> str:
        """Configured session secret, generated once per process when unset."""
        if not self.security.secret_key:
            self.security.secret_key = secrets.token_hex(32)
        return self.security.secret_key

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "environment": self.environment.value,
            "debug": self.debug,
            "web": {
                "host": self.web.host,
                "port": self.web.port,
                "debug": self.web.debug,
                "auto_reload": self.web.auto_reload,
            },
            "security": {
                "secret_key": self.security.secret_key,
                "session_cookie": self.security.session_cookie,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
            },
            "guestbook": {
                "standalone_cap": self.guestbook.standalone_cap,
                "component_cap": self.guestbook.component_cap,
                "tick_interval": self.guestbook.tick_interval,
                "view_ttl": self.guestbook.view_ttl,
                "cleanup_interval": self.guestbook.cleanup_interval,
                "id_seed": self.guestbook.id_seed,
            },
        }


def setup_logging(config: LoggingConfig) -> None:
    """Configure the root logger from a LoggingConfig."""
    logging.basicConfig(level=getattr(logging, config.level.upper(), logging.INFO),
                        format=config.format)


__all__ = [
    "AppConfig", "Environment", "WebConfig", "SecurityConfig",
    "LoggingConfig", "GuestBookConfig", "setup_logging",
]
