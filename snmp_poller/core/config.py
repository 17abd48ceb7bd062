"""
Configuration management for the SNMP poller.

Loads configuration from YAML files and environment variables.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from .errors import InvalidSettingError


DEFAULT_ADD_FIELD = {"host": "%{[metadata][host_address]}"}


@dataclass
class PollerConfig:
    """What to poll, where, and how often."""

    get: List[str] = field(default_factory=list)
    walk: List[str] = field(default_factory=list)
    hosts: List[Dict[str, Any]] = field(default_factory=list)
    mib_paths: List[str] = field(default_factory=list)
    oid_root_skip: int = 0
    interval: int = 30  # seconds between the end of a cycle and the next one
    max_concurrency: int = 1  # hosts polled at once, 1 = sequential
    add_field: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ADD_FIELD))

    def validate(self):
        """Check the scalar settings; OIDs and hosts are checked at registration."""
        if not _is_int(self.oid_root_skip) or self.oid_root_skip < 0:
            raise InvalidSettingError("oid_root_skip", self.oid_root_skip, "a non-negative integer")
        if not _is_int(self.interval) or self.interval <= 0:
            raise InvalidSettingError("interval", self.interval, "a positive integer")
        if not _is_int(self.max_concurrency) or self.max_concurrency < 1:
            raise InvalidSettingError("max_concurrency", self.max_concurrency, "an integer >= 1")
        if not isinstance(self.add_field, dict):
            raise InvalidSettingError("add_field", self.add_field, "a mapping")


@dataclass
class OutputConfig:
    """Where poll records are sent."""

    type: str = "stdout"  # stdout or mqtt


@dataclass
class MQTTConfig:
    """MQTT output configuration."""

    enabled: bool = False
    host: str = "localhost"
    port: int = 1883
    topic_prefix: str = "snmp-poller/records"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass
class Config:
    """Main configuration container."""

    poller: PollerConfig = field(default_factory=PollerConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    mqtt: MQTTConfig = field(default_factory=MQTTConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """Load configuration from YAML file."""
        config_path = Path(path)
        if not config_path.exists():
            config = cls()
            config._apply_env_overrides()
            return config

        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "Config":
        """Create config from dictionary."""
        config = cls()

        if data.get("poller"):
            config.poller = PollerConfig(**data["poller"])

        if data.get("output"):
            config.output = OutputConfig(**data["output"])

        if data.get("mqtt"):
            config.mqtt = MQTTConfig(**data["mqtt"])
            if config.mqtt.enabled:
                config.output.type = "mqtt"

        if data.get("logging"):
            config.logging = LoggingConfig(**data["logging"])

        # Override with environment variables
        config._apply_env_overrides()

        return config

    def _apply_env_overrides(self):
        """Apply environment variable overrides."""
        # Poller settings
        if os.getenv("SNMP_POLL_INTERVAL"):
            self.poller.interval = int(os.getenv("SNMP_POLL_INTERVAL"))
        if os.getenv("SNMP_OID_ROOT_SKIP"):
            self.poller.oid_root_skip = int(os.getenv("SNMP_OID_ROOT_SKIP"))
        if os.getenv("SNMP_MIB_PATHS"):
            self.poller.mib_paths = [p for p in os.getenv("SNMP_MIB_PATHS").split(",") if p]

        # MQTT settings
        if os.getenv("MQTT_ENABLED"):
            self.mqtt.enabled = os.getenv("MQTT_ENABLED").lower() == "true"
            if self.mqtt.enabled:
                self.output.type = "mqtt"
        if os.getenv("MQTT_HOST"):
            self.mqtt.host = os.getenv("MQTT_HOST")
        if os.getenv("MQTT_PORT"):
            self.mqtt.port = int(os.getenv("MQTT_PORT"))

        # Logging
        if os.getenv("LOG_LEVEL"):
            self.logging.level = os.getenv("LOG_LEVEL")

    def to_yaml(self, path: str):
        """Save configuration to YAML file."""
        data = {
            "poller": {
                "get": self.poller.get or ["1.3.6.1.2.1.1.1.0", "1.3.6.1.2.1.1.3.0"],
                "walk": self.poller.walk or ["1.3.6.1.2.1.2.2.1.2"],
                "hosts": self.poller.hosts or [
                    {"host": "udp:127.0.0.1/161", "community": "public", "version": "2c"},
                ],
                "mib_paths": self.poller.mib_paths,
                "oid_root_skip": self.poller.oid_root_skip,
                "interval": self.poller.interval,
                "max_concurrency": self.poller.max_concurrency,
                "add_field": self.poller.add_field,
            },
            "output": {
                "type": self.output.type,
            },
            "mqtt": {
                "enabled": self.mqtt.enabled,
                "host": self.mqtt.host,
                "port": self.mqtt.port,
                "topic_prefix": self.mqtt.topic_prefix,
            },
            "logging": {
                "level": self.logging.level,
                "file_path": self.logging.file_path,
                "max_file_size_mb": self.logging.max_file_size_mb,
                "backup_count": self.logging.backup_count,
            },
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def get_default_config_path() -> str:
    """Get the default configuration file path."""
    # Check common locations
    candidates = [
        Path("config/config.yaml"),
        Path("config.yaml"),
        Path.home() / ".snmp-poller" / "config.yaml",
        Path("/etc/snmp-poller/config.yaml"),
    ]

    for path in candidates:
        if path.exists():
            return str(path)

    # Return the first candidate as default
    return str(candidates[0])
