"""
Configuration management for the crawler and index tools.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_USER_AGENT = "minisearch/1.0"


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    seed_url: Optional[str] = None
    limit: int = 100
    request_timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    max_content_size: int = 10 * 1024 * 1024
    save_interval: int = 0


@dataclass
class IndexConfig:
    """Configuration for index storage."""
    path: str = "data/index.json"


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: Optional[str] = "logs/minisearch.log"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    metrics_enabled: bool = False
    prometheus_port: int = 8000


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


def _build_section(section_cls, data: Optional[Dict[str, Any]], name: str):
    if data is None:
        return section_cls()
    if not isinstance(data, dict):
        raise ValueError(f"Configuration section '{name}' must be a mapping")

    known = {f.name for f in fields(section_cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown keys in '{name}' section: {', '.join(sorted(unknown))}")
    return section_cls(**data)


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r') as file:
                config_data = yaml.safe_load(file) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(config_data, dict):
            raise ValueError(f"Configuration file {self.config_path} must contain a mapping")

        self._config = Config(
            crawler=_build_section(CrawlerConfig, config_data.get('crawler'), 'crawler'),
            index=_build_section(IndexConfig, config_data.get('index'), 'index'),
            logging=_build_section(LoggingConfig, config_data.get('logging'), 'logging'),
            monitoring=_build_section(MonitoringConfig, config_data.get('monitoring'), 'monitoring'),
        )

        validate_config(self._config)
        return self._config

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ValueError("Configuration not loaded. Call load_config() first.")
        return self._config


def _require_number(value: Any, name: str, integer: bool = True):
    types = int if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, types):
        kind = "an integer" if integer else "a number"
        raise ValueError(f"{name} must be {kind}, got {value!r}")


def validate_config(config: Config):
    """Validate configuration values."""
    crawler = config.crawler

    _require_number(crawler.limit, "limit")
    _require_number(crawler.request_timeout, "request_timeout", integer=False)
    _require_number(crawler.max_content_size, "max_content_size")
    _require_number(crawler.save_interval, "save_interval")
    _require_number(config.monitoring.prometheus_port, "prometheus_port")

    if crawler.limit < 1:
        raise ValueError("limit must be at least 1")

    if crawler.request_timeout <= 0:
        raise ValueError("request_timeout must be positive")

    if crawler.max_content_size < 1:
        raise ValueError("max_content_size must be at least 1")

    if crawler.save_interval < 0:
        raise ValueError("save_interval must be non-negative")

    if not isinstance(config.index.path, str) or not config.index.path:
        raise ValueError("index.path must be set")

    level = config.logging.level
    if not isinstance(level, str) or level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        raise ValueError(f"Invalid log level: {level}")

    logging.getLogger(__name__).debug("Configuration validation passed")


def load_config(config_path: str = "config.yaml") -> Config:
    """Load configuration from file."""
    return ConfigManager(config_path).load_config()
