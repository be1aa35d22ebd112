"""Reattach Operator Sensor Framework.

Hook-based instrumentation of the volume expansion controller, inspired by
Faust's sensor architecture.

Key components:
- ExpansionSensor: Base class defining lifecycle hooks for controller events
- SensorDelegate: Fan-out pattern for routing events to multiple sensor backends
- PrometheusMonitor: Prometheus metrics exporter
"""

from reattach.sensors.base import ExpansionSensor
from reattach.sensors.delegate import SensorDelegate
from reattach.sensors.prometheus import PrometheusMonitor
from reattach.sensors.server import init_metrics_server

__all__ = [
    'ExpansionSensor',
    'SensorDelegate',
    'PrometheusMonitor',
    'init_metrics_server',
]
