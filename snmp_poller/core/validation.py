"""
Configuration validation for OIDs and host definitions.

All functions here are pure: they take raw configuration values and
return normalized values or raise a ConfigError subclass.
"""

import re
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .errors import (
    ConfigError,
    InvalidHostFormatError,
    InvalidHostOptionError,
    InvalidOidError,
    MissingHostKeyError,
    NoHostsConfiguredError,
    NoOidsConfiguredError,
    UnsupportedProtocolError,
    UnsupportedVersionError,
)
from .models import (
    SUPPORTED_PROTOCOLS,
    SUPPORTED_VERSIONS,
    HostDefinition,
    HostEndpoint,
    HostOptions,
    HostParseResult,
)


OID_REGEX = re.compile(r"[0-9.]+")
HOST_REGEX = re.compile(r"(?P<protocol>[A-Za-z0-9]+):(?P<address>.+)/(?P<port>\d+)")

HOST_KEYS = frozenset({"host", "community", "version", "retries", "timeout"})


def normalize_oid(oid: Any, option: str = "get") -> str:
    """Strip one optional leading dot and check the OID is digits and dots."""
    if not isinstance(oid, str):
        raise InvalidOidError(oid, option)
    stripped = oid[1:] if oid.startswith(".") else oid
    if not OID_REGEX.fullmatch(stripped):
        raise InvalidOidError(oid, option)
    return stripped


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def validate_oids(
    get: Optional[Iterable[Any]],
    walk: Optional[Iterable[Any]],
) -> Tuple[List[str], List[str]]:
    """
    Validate and normalize the `get` and `walk` OID lists.

    A single OID string is treated as a one-element list.

    Raises:
        InvalidOidError: an entry is not a dot-separated numeric OID.
        NoOidsConfiguredError: both lists are empty.
    """
    get_oids = [normalize_oid(oid, "get") for oid in _as_list(get)]
    walk_oids = [normalize_oid(oid, "walk") for oid in _as_list(walk)]

    if not get_oids and not walk_oids:
        raise NoOidsConfiguredError()

    return get_oids, walk_oids


def _parse_version(host: str, raw: Mapping) -> str:
    version = raw.get("version")
    if version is None:
        return HostOptions.version
    # YAML reads an unquoted 1 as an integer
    if isinstance(version, int) and not isinstance(version, bool):
        version = str(version)
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersionError(host, raw.get("version"))
    return version


def _parse_count(host: str, raw: Mapping, key: str, default: int) -> int:
    value = raw.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidHostOptionError(host, f"'{key}' must be a non-negative integer, got {value!r}")
    return value


def parse_host_definition(raw: Any) -> HostDefinition:
    """
    Parse one raw host definition into a HostDefinition.

    The definition is a mapping with a required `host` key in the form
    `{udp|tcp}:{address}/{port}` and optional `community`, `version`,
    `retries` and `timeout` (milliseconds) keys.
    """
    if not isinstance(raw, Mapping) or raw.get("host") is None:
        raise MissingHostKeyError()

    host = raw["host"]
    match = HOST_REGEX.fullmatch(host) if isinstance(host, str) else None
    if not match:
        raise InvalidHostFormatError(host)

    protocol = match.group("protocol").lower()
    if protocol not in SUPPORTED_PROTOCOLS:
        raise UnsupportedProtocolError(host, match.group("protocol"))

    version = _parse_version(host, raw)

    unknown = sorted(str(key) for key in raw if key not in HOST_KEYS)
    if unknown:
        raise InvalidHostOptionError(host, f"unknown keys: {', '.join(unknown)}")

    community = raw.get("community")
    if community is None:
        community = HostOptions.community
    elif not isinstance(community, str):
        raise InvalidHostOptionError(host, f"'community' must be a string, got {community!r}")

    options = HostOptions(
        community=community,
        version=version,
        retries=_parse_count(host, raw, "retries", HostOptions.retries),
        timeout_ms=_parse_count(host, raw, "timeout", HostOptions.timeout_ms),
    )
    endpoint = HostEndpoint(
        protocol=protocol,
        address=match.group("address"),
        port=int(match.group("port")),
    )
    return HostDefinition(host=host, endpoint=endpoint, options=options)


def parse_hosts(hosts: Optional[Iterable[Any]]) -> List[HostParseResult]:
    """Parse every host definition, collecting one result per entry."""
    results = []
    for raw in hosts or []:
        try:
            results.append(HostParseResult(raw=raw, definition=parse_host_definition(raw)))
        except ConfigError as e:
            results.append(HostParseResult(raw=raw, error=e))
    return results


def validate_hosts(hosts: Optional[Iterable[Any]]) -> List[HostDefinition]:
    """
    Validate the whole `hosts` list.

    Raises NoHostsConfiguredError for an empty list, otherwise the error of
    the first invalid entry.
    """
    results = parse_hosts(hosts)
    if not results:
        raise NoHostsConfiguredError()

    for result in results:
        if not result.ok:
            raise result.error

    return [result.definition for result in results]
