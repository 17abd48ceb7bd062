"""Shared fixtures for the SNMP poller tests."""

from typing import Any, Dict, List, Optional

import pytest

from snmp_poller.core.errors import SnmpClientError
from snmp_poller.core.mib import MibIndex
from snmp_poller.core.models import ClientDefinition, HostDefinition, HostEndpoint, HostOptions


class FakeClient:
    """In-memory stand-in for SnmpClient; no network access."""

    def __init__(self, endpoint: HostEndpoint, options: HostOptions = None, mib: MibIndex = None):
        self.endpoint = endpoint
        self.options = options or HostOptions()
        self.mib = mib
        self.get_results: Dict[str, Any] = {}
        self.walk_results: Dict[str, Dict[str, Any]] = {}
        self.fail_get = False
        self.fail_walk: List[str] = []
        self.calls: List[tuple] = []
        self.closed = False

    async def get(self, oids, root_skip=0):
        self.calls.append(("get", tuple(oids), root_skip))
        if self.fail_get:
            raise SnmpClientError(f"timeout talking to {self.endpoint}")
        return dict(self.get_results)

    async def walk(self, oid, root_skip=0):
        self.calls.append(("walk", oid, root_skip))
        if oid in self.fail_walk:
            raise SnmpClientError(f"walk {oid} failed")
        return dict(self.walk_results.get(oid, {}))

    def close(self):
        self.closed = True


class RecordingSink:
    def __init__(self):
        self.records = []

    async def emit(self, record):
        self.records.append(record)


def make_definition(
    host: str = "udp:127.0.0.1/161",
    get=("1.3.6.1.2.1.1.1.0",),
    walk=(),
    community: str = "public",
    client: Optional[FakeClient] = None,
) -> ClientDefinition:
    protocol, rest = host.split(":", 1)
    address, port = rest.rsplit("/", 1)
    endpoint = HostEndpoint(protocol=protocol, address=address, port=int(port))
    definition = HostDefinition(host=host, endpoint=endpoint, options=HostOptions(community=community))
    return ClientDefinition(
        client=client or FakeClient(endpoint, definition.options),
        host=definition,
        get=tuple(get),
        walk=tuple(walk),
    )


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def rfc1213_dic(tmp_path):
    """A trimmed RFC1213-MIB dictionary as written by smidump -f python."""
    content = '''# python version 1.0						DO NOT EDIT
#
# Generated by smidump version 0.4.8:
#
#   smidump -f python RFC1213-MIB

FILENAME = "./RFC1213-MIB.txt"

MIB = {
    "moduleName" : "RFC1213-MIB",

    "RFC1213-MIB" : {
        "nodetype" : "module",
        "language" : "SMIv1",
    },

    "imports" : (
        {"module" : "RFC1155-SMI", "name" : "mgmt"},
    ),

    "nodes" : {
        "mib-2" : {
            "nodetype" : "node",
            "moduleName" : "RFC1213-MIB",
            "oid" : "1.3.6.1.2.1",
        }, # node
        "system" : {
            "nodetype" : "node",
            "moduleName" : "RFC1213-MIB",
            "oid" : "1.3.6.1.2.1.1",
        }, # node
        "sysDescr" : {
            "nodetype" : "scalar",
            "moduleName" : "RFC1213-MIB",
            "oid" : "1.3.6.1.2.1.1.1",
            "status" : "current",
            "description" :
                """A textual description of the entity.""",
        }, # scalar
        "sysUpTime" : {
            "nodetype" : "scalar",
            "moduleName" : "RFC1213-MIB",
            "oid" : "1.3.6.1.2.1.1.3",
        }, # scalar
    }, # nodes

    "notifications" : {
        "coldStart" : {
            "nodetype" : "notification",
            "moduleName" : "RFC1213-MIB",
            "oid" : "1.3.6.1.6.3.1.1.5.1",
        }, # notification
    }, # notifications
}
'''
    path = tmp_path / "RFC1213-MIB.dic"
    path.write_text(content)
    return path
