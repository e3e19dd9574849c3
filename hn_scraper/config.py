"""Configuration handling for the Hacker News thread scraper."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv

from hn_scraper.errors import ConfigError

DEFAULT_API_BASE_URL = "https://hacker-news.firebaseio.com/v0"


def default_cache_dir() -> str:
    """Per-user cache directory, honouring XDG_CACHE_HOME."""
    base = os.getenv("XDG_CACHE_HOME") or os.path.join(Path.home(), ".cache")
    return os.path.join(base, "hn_scraper")


@dataclass
class MonitoringConfig:
    """Monitoring configuration."""

    # Prometheus textfile written at the end of a run; disabled when None
    textfile_path: Optional[str] = None


@dataclass
class Config:
    """Application configuration combining environment variables and YAML config."""

    # Values that may come from the environment
    api_base_url: str = DEFAULT_API_BASE_URL
    user_agent: str = "hn_scraper/0.1"
    cache_dir: str = field(default_factory=default_cache_dir)

    # YAML config values with defaults
    max_concurrency: int = 100
    request_timeout_sec: float = 30.0
    tolerate_child_failures: bool = False
    sort_output: bool = False
    output_indent: Optional[int] = None
    log_file: Optional[str] = None
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    @classmethod
    def from_files(cls, config_path: Optional[str] = None, env_path: Optional[str] = None) -> "Config":
        """
        Load configuration from YAML file and environment variables.

        Args:
            config_path: Path to YAML configuration file (skipped if missing)
            env_path: Optional path to .env file (defaults to .env in current directory)

        Returns:
            Config instance with merged configuration

        Raises:
            ConfigError: If the YAML file cannot be parsed or is not a mapping
        """
        # Load environment variables
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        config = cls()
        config.api_base_url = os.getenv("HN_API_BASE_URL", config.api_base_url)
        config.user_agent = os.getenv("HN_USER_AGENT", config.user_agent)
        config.cache_dir = os.getenv("HN_CACHE_DIR", config.cache_dir)

        # Load and merge YAML config
        if config_path and os.path.exists(config_path):
            try:
                with open(config_path, "r", encoding="utf-8") as file:
                    yaml_config = yaml.safe_load(file)
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

            if yaml_config is not None and not isinstance(yaml_config, dict):
                raise ConfigError(f"Config file {config_path} must contain a mapping, got {type(yaml_config).__name__}")

            if yaml_config:
                for key, value in yaml_config.items():
                    if key != "monitoring" and hasattr(config, key):
                        setattr(config, key, value)

                # Handle nested monitoring config if present
                if "monitoring" in yaml_config and isinstance(yaml_config["monitoring"], dict):
                    monitoring_config = MonitoringConfig()
                    for key, value in yaml_config["monitoring"].items():
                        if hasattr(monitoring_config, key):
                            setattr(monitoring_config, key, value)
                    config.monitoring = monitoring_config

        if isinstance(config.cache_dir, str) and config.cache_dir:
            config.cache_dir = os.path.expanduser(config.cache_dir)
        return config

    def validate(self) -> List[str]:
        """
        Validate configuration and return a list of validation errors.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not isinstance(self.api_base_url, str) or not self.api_base_url.startswith(("http://", "https://")):
            errors.append(f"api_base_url must be an http(s) URL, got {self.api_base_url!r}")

        if not isinstance(self.cache_dir, str) or not self.cache_dir:
            errors.append("cache_dir must be a non-empty path")

        if not isinstance(self.user_agent, str) or not self.user_agent:
            errors.append("user_agent must be a non-empty string")

        if isinstance(self.max_concurrency, bool) or not isinstance(self.max_concurrency, int) or self.max_concurrency <= 0:
            errors.append("max_concurrency must be a positive integer")

        if isinstance(self.request_timeout_sec, bool) or not isinstance(self.request_timeout_sec, (int, float)) or self.request_timeout_sec <= 0:
            errors.append("request_timeout_sec must be greater than 0")

        if self.output_indent is not None and (not isinstance(self.output_indent, int) or self.output_indent < 0):
            errors.append("output_indent must be a non-negative integer")

        return errors
