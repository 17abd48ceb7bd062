"""Core module containing data models, validation and configuration."""

from .config import Config, PollerConfig
from .errors import ConfigError, SnmpClientError
from .mib import MibIndex
from .models import (
    HostEndpoint,
    HostOptions,
    HostDefinition,
    ClientDefinition,
    OperationResult,
)

__all__ = [
    "Config",
    "PollerConfig",
    "ConfigError",
    "SnmpClientError",
    "MibIndex",
    "HostEndpoint",
    "HostOptions",
    "HostDefinition",
    "ClientDefinition",
    "OperationResult",
]
