"""
SNMP Client for Remote Devices.

Performs SNMP GET and WALK requests against one host with pysnmp and
returns the results keyed by field name. Field names are the numeric OID,
optionally translated through the MIB index, with the first `root_skip`
components removed.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from pysnmp.error import PySnmpError
from pysnmp.hlapi.v3arch.asyncio import (
    get_cmd,
    walk_cmd,
    SnmpEngine,
    CommunityData,
    UdpTransportTarget,
    Udp6TransportTarget,
    ContextData,
    ObjectType,
    ObjectIdentity,
)
from pysnmp.proto import rfc1902, rfc1905
from pyasn1.type import univ

from ..core.errors import SnmpClientError
from ..core.mib import MibIndex
from ..core.models import HostEndpoint, HostOptions


logger = logging.getLogger(__name__)


NO_SUCH_OBJECT = "error: no such object currently exists at this OID"
NO_SUCH_INSTANCE = "error: no such instance currently exists at this OID"
END_OF_MIB_VIEW = "error: end of mib view"

# mpModel values for CommunityData
MP_MODELS = {"1": 0, "2c": 1}


def convert_value(value: Any) -> Any:
    """Convert a pysnmp value to a plain Python scalar."""
    if isinstance(value, rfc1905.NoSuchObject):
        return NO_SUCH_OBJECT
    if isinstance(value, rfc1905.NoSuchInstance):
        return NO_SUCH_INSTANCE
    if isinstance(value, rfc1905.EndOfMibView):
        return END_OF_MIB_VIEW
    if isinstance(value, univ.Null):
        return None
    if isinstance(value, univ.Integer):
        # Integer32, Counter32/64, Gauge32, Unsigned32 and TimeTicks
        return int(value)
    if isinstance(value, (rfc1902.IpAddress, rfc1902.Bits)):
        return value.prettyPrint()
    if isinstance(value, univ.OctetString):
        return decode_octets(bytes(value))
    if isinstance(value, univ.ObjectIdentifier):
        return str(value)
    return value.prettyPrint() if hasattr(value, "prettyPrint") else value


def decode_octets(raw: bytes) -> str:
    """Decode printable octet strings as text, anything else as hex pairs."""
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = None
    if text is not None and all(c.isprintable() or c in "\r\n\t" for c in text):
        return text
    return ":".join(f"{b:02x}" for b in raw)


class SnmpClient:
    """
    SNMP v1/v2c client bound to one host.

    The pysnmp engine and transport are created on the first request, so
    constructing a client never touches the network.
    """

    def __init__(
        self,
        endpoint: HostEndpoint,
        options: Optional[HostOptions] = None,
        mib: Optional[MibIndex] = None,
    ):
        self.endpoint = endpoint
        self.options = options or HostOptions()
        self.mib = mib
        self._engine: Optional[SnmpEngine] = None
        self._transport = None

    def __repr__(self) -> str:
        return f"SnmpClient({self.endpoint}, version={self.options.version})"

    @property
    def _auth(self) -> CommunityData:
        return CommunityData(self.options.community, mpModel=MP_MODELS[self.options.version])

    async def _get_transport(self):
        if self.endpoint.protocol != "udp":
            raise SnmpClientError(
                f"{self.endpoint.protocol} transport is not supported by the SNMP client for {self.endpoint}"
            )

        if self._transport is None:
            address = self.endpoint.address
            target_cls = UdpTransportTarget
            if address.startswith("[") and address.endswith("]"):
                address = address[1:-1]
                target_cls = Udp6TransportTarget
            elif ":" in address:
                target_cls = Udp6TransportTarget

            try:
                self._transport = await target_cls.create(
                    (address, self.endpoint.port),
                    timeout=self.options.timeout_seconds,
                    retries=self.options.retries,
                )
            except PySnmpError as e:
                raise SnmpClientError(f"cannot resolve transport for {self.endpoint}: {e}") from e
            self._engine = SnmpEngine()

        return self._transport

    def field_name(self, oid: str, root_skip: int = 0) -> str:
        """Derive the record field name for an OID."""
        path = self.mib.map_oid(oid) if self.mib is not None else oid.split(".")
        trimmed = path[root_skip:]
        # Skipping every component would leave an empty key
        return ".".join(trimmed or path)

    def _collect(self, var_binds: Iterable, root_skip: int, into: Dict[str, Any]):
        for var_bind in var_binds:
            oid, value = var_bind[0], var_bind[1]
            into[self.field_name(str(oid), root_skip)] = convert_value(value)

    async def get(self, oids: List[str], root_skip: int = 0) -> Dict[str, Any]:
        """
        Fetch the scalar values of `oids` in one request.

        Raises:
            SnmpClientError: transport failure, timeout or SNMP error status.
        """
        transport = await self._get_transport()
        try:
            error_indication, error_status, error_index, var_binds = await get_cmd(
                self._engine,
                self._auth,
                transport,
                ContextData(),
                *[ObjectType(ObjectIdentity(oid)) for oid in oids],
                lookupMib=False,
            )
        except PySnmpError as e:
            raise SnmpClientError(f"get {oids} on {self.endpoint} failed: {e}") from e

        if error_indication:
            raise SnmpClientError(f"get {oids} on {self.endpoint} failed: {error_indication}")
        if error_status:
            raise SnmpClientError(
                f"get {oids} on {self.endpoint} failed: {error_status.prettyPrint()} at {error_index}"
            )

        results: Dict[str, Any] = {}
        self._collect(var_binds, root_skip, results)
        return results

    async def walk(self, oid: str, root_skip: int = 0) -> Dict[str, Any]:
        """
        Fetch every value in the subtree rooted at `oid`.

        Raises:
            SnmpClientError: transport failure, timeout or SNMP error status.
        """
        transport = await self._get_transport()
        results: Dict[str, Any] = {}
        try:
            iterator = walk_cmd(
                self._engine,
                self._auth,
                transport,
                ContextData(),
                ObjectType(ObjectIdentity(oid)),
                lexicographicMode=False,
                lookupMib=False,
            )
            async for error_indication, error_status, error_index, var_binds in iterator:
                if error_indication:
                    raise SnmpClientError(f"walk {oid} on {self.endpoint} failed: {error_indication}")
                if error_status:
                    raise SnmpClientError(
                        f"walk {oid} on {self.endpoint} failed: {error_status.prettyPrint()} at {error_index}"
                    )
                self._collect(var_binds, root_skip, results)
        except PySnmpError as e:
            raise SnmpClientError(f"walk {oid} on {self.endpoint} failed: {e}") from e

        return results

    def close(self):
        """Release the pysnmp transport dispatcher."""
        if self._engine is not None:
            self._engine.close_dispatcher()
            self._engine = None
            self._transport = None
