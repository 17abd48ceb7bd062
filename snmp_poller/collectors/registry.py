"""
Client registry.

Binds every validated host definition to its own SNMP client and the set
of get/walk OIDs to poll on it. Registration happens once at startup.
"""

import logging
from typing import Callable, Iterable, List, Optional, Sequence

from ..core.config import PollerConfig
from ..core.errors import MibLoadError
from ..core.mib import MibIndex
from ..core.models import ClientDefinition, HostDefinition, HostEndpoint, HostOptions
from ..core.validation import validate_hosts, validate_oids
from .snmp_client import SnmpClient


logger = logging.getLogger(__name__)

ClientFactory = Callable[[HostEndpoint, HostOptions, MibIndex], object]


def load_mib_index(mib_paths: Optional[Iterable[str]]) -> MibIndex:
    """Build the shared MIB index, skipping paths that fail to load."""
    mib = MibIndex()
    for path in mib_paths or []:
        try:
            added = mib.add_mib_path(path)
            logger.info(f"Loaded {added} MIB names from {path}")
        except MibLoadError as e:
            logger.warning(f"Failed to load MIB path {path}, ignoring: {e}")
    mib.seal()
    return mib


class ClientRegistry:
    """
    The fixed set of client definitions polled every cycle.

    Hosts cannot be added or removed after registration.
    """

    def __init__(self, definitions: Sequence[ClientDefinition], mib: MibIndex):
        self._definitions = tuple(definitions)
        self.mib = mib

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions)

    @property
    def definitions(self) -> List[ClientDefinition]:
        return list(self._definitions)

    @classmethod
    def register(
        cls,
        hosts: Sequence[HostDefinition],
        get: Sequence[str],
        walk: Sequence[str],
        mib: MibIndex,
        client_factory: ClientFactory = SnmpClient,
    ) -> "ClientRegistry":
        """Create one client definition per validated host."""
        definitions = []
        for host in hosts:
            client = client_factory(host.endpoint, host.options, mib)
            definitions.append(ClientDefinition(
                client=client,
                host=host,
                get=tuple(get),
                walk=tuple(walk),
            ))
            logger.debug(f"Registered {host.host} ({len(get)} get OIDs, {len(walk)} walk OIDs)")

        logger.info(f"Registered {len(definitions)} hosts")
        return cls(definitions, mib)

    @classmethod
    def from_config(
        cls,
        config: PollerConfig,
        client_factory: ClientFactory = SnmpClient,
    ) -> "ClientRegistry":
        """
        Validate the poller configuration and register every host.

        Raises a ConfigError subclass for any invalid setting, OID or host;
        nothing is registered in that case.
        """
        config.validate()
        get, walk = validate_oids(config.get, config.walk)
        hosts = validate_hosts(config.hosts)
        mib = load_mib_index(config.mib_paths)
        return cls.register(hosts, get, walk, mib, client_factory=client_factory)

    def close(self):
        """Release client resources at shutdown."""
        for definition in self._definitions:
            close = getattr(definition.client, "close", None)
            if close is not None:
                close()
