"""Services for scheduling poll cycles and delivering records."""

from .scheduler import Scheduler, SchedulerState
from .sinks import DecoratingSink, MqttSink, QueueSink, StdoutSink, decorate

__all__ = [
    "Scheduler",
    "SchedulerState",
    "DecoratingSink",
    "MqttSink",
    "QueueSink",
    "StdoutSink",
    "decorate",
]
