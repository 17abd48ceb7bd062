"""Poll SNMP hosts for get and walk OIDs and emit one record per host."""

__version__ = "1.0.0"
