"""Tests for OID and host definition validation."""

import pytest

from snmp_poller.core.errors import (
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
from snmp_poller.core.models import HostEndpoint, HostOptions
from snmp_poller.core.validation import (
    normalize_oid,
    parse_host_definition,
    parse_hosts,
    validate_hosts,
    validate_oids,
)


class TestValidateOids:
    def test_strips_single_leading_dot(self):
        get, walk = validate_oids([".1.3.6.1.2.1.1.1.0"], ["1.3.6.1.2.1.2"])
        assert get == ["1.3.6.1.2.1.1.1.0"]
        assert walk == ["1.3.6.1.2.1.2"]

    def test_normalized_list_is_unchanged(self):
        oids = ["1.3.6.1.2.1.1.1.0", "1.3.6.1.2.1.1.5.0"]
        get, _ = validate_oids(oids, [])
        again, _ = validate_oids(get, [])
        assert get == oids
        assert again == get

    @pytest.mark.parametrize("oid", ["", ".", "1.3\n", "1.3.a", "1,3,6", " 1.3.6", "sysDescr.0", "1.3.6-1"])
    def test_rejects_invalid_oids(self, oid):
        with pytest.raises(InvalidOidError):
            validate_oids([oid], [])

    def test_error_names_oid_and_option(self):
        with pytest.raises(InvalidOidError) as exc_info:
            validate_oids(["1.3.6.1"], ["1.3.x"])
        assert exc_info.value.oid == "1.3.x"
        assert exc_info.value.option == "walk"
        assert "walk" in str(exc_info.value)
        assert "1.3.x" in str(exc_info.value)

    def test_non_string_oid_is_invalid(self):
        with pytest.raises(InvalidOidError):
            normalize_oid(1.3)

    def test_both_empty_fails(self):
        with pytest.raises(NoOidsConfiguredError):
            validate_oids([], [])

    def test_none_is_treated_as_empty(self):
        with pytest.raises(NoOidsConfiguredError):
            validate_oids(None, None)
        assert validate_oids(None, ["1.3.6"]) == ([], ["1.3.6"])


class TestParseHostDefinition:
    def test_defaults(self):
        definition = parse_host_definition({"host": "udp:127.0.0.1/161"})
        assert definition.endpoint == HostEndpoint("udp", "127.0.0.1", 161)
        assert definition.options == HostOptions(community="public", version="2c", retries=2, timeout_ms=1000)

    def test_explicit_options(self):
        definition = parse_host_definition({
            "host": "TCP:switch.example.net/1161",
            "community": "secret",
            "version": "1",
            "retries": 0,
            "timeout": 2500,
        })
        assert definition.endpoint == HostEndpoint("tcp", "switch.example.net", 1161)
        assert definition.options.community == "secret"
        assert definition.options.version == "1"
        assert definition.options.retries == 0
        assert definition.options.timeout_ms == 2500
        assert definition.options.timeout_seconds == 2.5

    def test_integer_version_one_is_accepted(self):
        assert parse_host_definition({"host": "udp:10.0.0.1/161", "version": 1}).options.version == "1"

    def test_ipv6_address(self):
        definition = parse_host_definition({"host": "udp:[::1]/161"})
        assert definition.endpoint.address == "[::1]"

    @pytest.mark.parametrize("raw", [None, "udp:127.0.0.1/161", ["host"], {}, {"community": "public"}, {"host": None}])
    def test_missing_host_key(self, raw):
        with pytest.raises(MissingHostKeyError):
            parse_host_definition(raw)

    @pytest.mark.parametrize("host", [
        "127.0.0.1",
        "udp:127.0.0.1",
        "udp:127.0.0.1:161",
        "udp:/161",
        "udp:127.0.0.1/port",
        "udp127.0.0.1/161",
        "",
    ])
    def test_invalid_format(self, host):
        with pytest.raises(InvalidHostFormatError):
            parse_host_definition({"host": host})

    def test_unsupported_protocol(self):
        with pytest.raises(UnsupportedProtocolError) as exc_info:
            parse_host_definition({"host": "icmp:127.0.0.1/161"})
        assert exc_info.value.protocol == "icmp"

    def test_unsupported_protocol_is_a_format_error(self):
        with pytest.raises(InvalidHostFormatError):
            parse_host_definition({"host": "http:127.0.0.1/80"})

    @pytest.mark.parametrize("version", ["3", "2", "v2c", "12c", "1 ", 2, "2C"])
    def test_unsupported_version(self, version):
        with pytest.raises(UnsupportedVersionError):
            parse_host_definition({"host": "udp:127.0.0.1/161", "version": version})

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidHostOptionError, match="unknown keys: port"):
            parse_host_definition({"host": "udp:127.0.0.1/161", "port": 162})

    @pytest.mark.parametrize("key,value", [("retries", -1), ("timeout", "1000"), ("retries", True)])
    def test_invalid_counts(self, key, value):
        with pytest.raises(InvalidHostOptionError):
            parse_host_definition({"host": "udp:127.0.0.1/161", key: value})


class TestHostList:
    def test_empty_list_fails(self):
        with pytest.raises(NoHostsConfiguredError):
            validate_hosts([])
        with pytest.raises(NoHostsConfiguredError):
            validate_hosts(None)

    def test_parse_hosts_reports_each_entry(self):
        results = parse_hosts([
            {"host": "udp:127.0.0.1/161"},
            {"host": "icmp:127.0.0.1/161"},
            {"host": "tcp:10.0.0.2/161"},
        ])
        assert [r.ok for r in results] == [True, False, True]
        assert isinstance(results[1].error, UnsupportedProtocolError)
        assert results[1].definition is None
        assert results[2].definition.endpoint.address == "10.0.0.2"

    def test_validate_hosts_raises_first_error(self):
        with pytest.raises(UnsupportedProtocolError):
            validate_hosts([{"host": "udp:127.0.0.1/161"}, {"host": "icmp:127.0.0.1/161"}])

    def test_validate_hosts_returns_definitions(self):
        hosts = validate_hosts([{"host": "udp:127.0.0.1/161"}, {"host": "udp:127.0.0.2/161"}])
        assert [h.endpoint.address for h in hosts] == ["127.0.0.1", "127.0.0.2"]

    def test_all_errors_are_config_errors(self):
        for raw in [{}, {"host": "x"}, {"host": "icmp:a/1"}, {"host": "udp:a/1", "version": "3"}]:
            with pytest.raises(ConfigError):
                validate_hosts([raw])


class TestSingleOidString:
    def test_single_string_is_one_oid(self):
        get, walk = validate_oids("1.3.6.1.2.1.1.1.0", ".1.3.6.1.2.1.2")
        assert get == ["1.3.6.1.2.1.1.1.0"]
        assert walk == ["1.3.6.1.2.1.2"]

    def test_single_invalid_string_names_whole_oid(self):
        with pytest.raises(InvalidOidError) as exc_info:
            validate_oids("1.3.x", None)
        assert exc_info.value.oid == "1.3.x"

    def test_tuple_is_accepted(self):
        assert validate_oids(("1.3.6",), ()) == (["1.3.6"], [])
