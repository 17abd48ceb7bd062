"""
Error types for the SNMP poller.

ConfigError and its subclasses are fatal at startup. SnmpClientError is
raised by a single get/walk request and is handled per poll operation.
"""


class ConfigError(Exception):
    """Invalid poller configuration; polling must not start."""


class InvalidOidError(ConfigError):
    def __init__(self, oid, option: str):
        self.oid = oid
        self.option = option
        super().__init__(f"The {option} option oid '{oid}' has an invalid format")


class NoOidsConfiguredError(ConfigError):
    def __init__(self):
        super().__init__("at least one get OID or one walk OID is required")


class NoHostsConfiguredError(ConfigError):
    def __init__(self):
        super().__init__("at least one host definition is required")


class MissingHostKeyError(ConfigError):
    def __init__(self):
        super().__init__('each host definition must have a "host" option')


class InvalidHostFormatError(ConfigError):
    def __init__(self, host):
        self.host = host
        super().__init__(
            f"invalid format for host option '{host}', expected {{udp|tcp}}:{{address}}/{{port}}"
        )


class UnsupportedProtocolError(InvalidHostFormatError):
    def __init__(self, host, protocol: str):
        self.protocol = protocol
        ConfigError.__init__(
            self, f"only udp & tcp protocols are supported for host option '{host}', got '{protocol}'"
        )
        self.host = host


class UnsupportedVersionError(ConfigError):
    def __init__(self, host, version):
        self.host = host
        self.version = version
        super().__init__(
            f"only protocol version '1' and '2c' are supported for host option '{host}', got '{version}'"
        )


class InvalidHostOptionError(ConfigError):
    def __init__(self, host, message: str):
        self.host = host
        super().__init__(f"host option '{host}': {message}")


class InvalidSettingError(ConfigError):
    def __init__(self, name: str, value, expected: str):
        self.name = name
        self.value = value
        super().__init__(f"setting '{name}' must be {expected}, got {value!r}")


class SnmpClientError(Exception):
    """A get or walk request against one host failed."""


class MibLoadError(Exception):
    """A MIB dictionary file could not be read."""
