"""
Record sinks.

A sink receives every record produced by a poll cycle through its async
`emit(record)` method. Records are decorated with the configured
`add_field` entries before they are handed to the sink.
"""

import asyncio
import json
import logging
import re
import sys
from typing import Any, Dict, Mapping, Optional, TextIO

from amqtt.client import MQTTClient
from amqtt.mqtt.constants import QOS_0

from ..core.config import MQTTConfig
from ..core.models import METADATA_KEY

logger = logging.getLogger(__name__)

# %{name} or %{[metadata][host_address]}
FIELD_REFERENCE = re.compile(r"%\{([^}]+)\}")


def resolve_reference(record: Mapping[str, Any], reference: str) -> Optional[Any]:
    """Look up `name` or `[a][b]` in a record, None when missing."""
    if reference.startswith("["):
        path = re.findall(r"\[([^\]]+)\]", reference)
    else:
        path = [reference]

    value: Any = record
    for key in path:
        if not isinstance(value, Mapping) or key not in value:
            return None
        value = value[key]
    return value


def interpolate(template: str, record: Mapping[str, Any]) -> str:
    """Replace field references; unresolved references are left as written."""
    def replace(match):
        value = resolve_reference(record, match.group(1))
        return match.group(0) if value is None else str(value)

    return FIELD_REFERENCE.sub(replace, template)


def decorate(record: Dict[str, Any], add_field: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Add the configured fields to a record without overwriting polled values."""
    for name, template in (add_field or {}).items():
        if name in record:
            continue
        record[name] = interpolate(template, record) if isinstance(template, str) else template
    return record


class DecoratingSink:
    """Applies `add_field` to each record before passing it on."""

    def __init__(self, sink, add_field: Optional[Mapping[str, Any]] = None):
        self.sink = sink
        self.add_field = dict(add_field or {})

    async def emit(self, record: Dict[str, Any]):
        await self.sink.emit(decorate(record, self.add_field))


class QueueSink:
    """Puts records on an asyncio queue for an in-process consumer."""

    def __init__(self, queue: Optional[asyncio.Queue] = None):
        self.queue = queue if queue is not None else asyncio.Queue()

    async def emit(self, record: Dict[str, Any]):
        await self.queue.put(record)


class StdoutSink:
    """Writes one JSON document per record."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    async def emit(self, record: Dict[str, Any]):
        self.stream.write(json.dumps(record, default=str) + "\n")
        self.stream.flush()


class MqttSink:
    """Publishes records to an MQTT broker as JSON."""

    def __init__(self, config: MQTTConfig):
        self.config = config
        self._client: Optional[MQTTClient] = None
        self._running = False
        self._client_connected = False
        self._reconnect_task: Optional[asyncio.Task] = None
        self._reconnect_interval = 5  # seconds, initial
        self._max_reconnect_interval = 300  # seconds, cap

    @property
    def broker_url(self) -> str:
        return f"mqtt://{self.config.host}:{self.config.port}/"

    def topic_for(self, record: Mapping[str, Any]) -> str:
        address = record.get(METADATA_KEY, {}).get("host_address", "unknown")
        return f"{self.config.topic_prefix}/{address}"

    async def _connect(self) -> bool:
        """Attempt a single connection to the broker. Returns True on success."""
        try:
            self._client = MQTTClient()
            await self._client.connect(self.broker_url)
            self._client_connected = True
            self._reconnect_interval = 5  # reset backoff on success
            logger.info(f"Connected to MQTT Broker at {self.config.host}:{self.config.port}")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to MQTT Broker: {e}")
            self._client_connected = False
            return False

    async def start(self):
        """Connect and keep reconnecting in the background."""
        self._running = True
        await self._connect()
        self._reconnect_task = asyncio.create_task(self._reconnect_loop())

    async def _reconnect_loop(self):
        """Background task that reconnects when the connection is lost."""
        while self._running:
            await asyncio.sleep(self._reconnect_interval)

            if self._running and not self._client_connected:
                logger.info(f"Attempting MQTT reconnect (interval: {self._reconnect_interval}s)")
                connected = await self._connect()
                if not connected:
                    # Exponential backoff capped at max
                    self._reconnect_interval = min(
                        self._reconnect_interval * 2,
                        self._max_reconnect_interval,
                    )

    async def emit(self, record: Dict[str, Any]):
        """Publish a record; dropped with a warning while disconnected."""
        if not self._running or not self._client or not self._client_connected:
            logger.warning("MQTT not connected, dropping record")
            return

        topic = self.topic_for(record)
        try:
            message = json.dumps(record, default=str).encode("utf-8")
            await self._client.publish(topic, message, qos=QOS_0)
        except Exception as e:
            logger.error(f"Failed to publish to {topic}: {e}")
            self._client_connected = False

    async def stop(self):
        """Stop the MQTT client."""
        self._running = False

        if self._reconnect_task:
            self._reconnect_task.cancel()
            try:
                await self._reconnect_task
            except asyncio.CancelledError:
                pass

        if self._client and self._client_connected:
            try:
                await self._client.disconnect()
            except Exception as e:
                logger.debug(f"MQTT disconnect failed: {e}")
        self._client_connected = False
        logger.info("MQTT Client stopped")
