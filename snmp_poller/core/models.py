"""
Data models for the SNMP poller.

These dataclasses represent validated host definitions, the per-host
polling bindings built at registration, and per-operation poll outcomes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

# Key under which host metadata is attached to every emitted record
METADATA_KEY = "metadata"

SUPPORTED_PROTOCOLS = ("udp", "tcp")
SUPPORTED_VERSIONS = ("1", "2c")


@dataclass(frozen=True)
class HostEndpoint:
    """Transport endpoint parsed from a `{protocol}:{address}/{port}` string."""

    protocol: str
    address: str
    port: int

    def __str__(self) -> str:
        return f"{self.protocol}:{self.address}/{self.port}"


@dataclass(frozen=True)
class HostOptions:
    """Per-host SNMP options."""

    community: str = "public"
    version: str = "2c"
    retries: int = 2
    timeout_ms: int = 1000

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


@dataclass(frozen=True)
class HostDefinition:
    """A validated host entry from the `hosts` configuration list."""

    host: str
    endpoint: HostEndpoint
    options: HostOptions = field(default_factory=HostOptions)


@dataclass(frozen=True)
class HostParseResult:
    """Outcome of parsing one raw host definition."""

    raw: Any
    definition: Optional[HostDefinition] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ClientDefinition:
    """
    One protocol client bound to one host, with the OIDs to poll on it.

    Created once at registration and never modified afterwards.
    """

    client: Any
    host: HostDefinition
    get: Tuple[str, ...] = ()
    walk: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.host.host

    def metadata(self) -> Dict[str, str]:
        endpoint = self.host.endpoint
        return {
            "host_protocol": endpoint.protocol,
            "host_address": endpoint.address,
            "host_port": str(endpoint.port),
            "host_community": self.host.options.community,
        }


@dataclass
class OperationResult:
    """Outcome of a single get or walk operation against one host."""

    operation: str  # get or walk
    oids: Tuple[str, ...]
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None
