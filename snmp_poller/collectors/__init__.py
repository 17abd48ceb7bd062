"""Collectors module for polling SNMP hosts."""

from .snmp_client import SnmpClient
from .registry import ClientRegistry
from .poll_cycle import PollCycleExecutor

__all__ = [
    "SnmpClient",
    "ClientRegistry",
    "PollCycleExecutor",
]
