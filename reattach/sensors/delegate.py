"""Sensor delegation for fan-out pattern.

This module provides SensorDelegate, which implements the delegation pattern
for routing sensor events to multiple monitoring backends simultaneously.
Each backend receives the same events and can maintain independent state.
A failing backend is logged and never interrupts the controller.
"""

from typing import Set, Dict, Optional, Any
import logging

from reattach.sensors.base import ExpansionSensor

logger = logging.getLogger(__name__)


class SensorDelegate(ExpansionSensor):
    """Delegate sensor that fans out events to multiple backends.

    Example:
        delegate = SensorDelegate()
        delegate.add(LoggingSensor())
        delegate.add(PrometheusMonitor())

        state = delegate.on_reconcile_start("data-pvc", "default")
        delegate.on_reconcile_complete("data-pvc", "default", state, True, "reattached")
    """

    def __init__(self) -> None:
        """Initialize empty sensor delegate."""
        self._sensors: Set[ExpansionSensor] = set()

    def add(self, sensor: ExpansionSensor) -> None:
        logger.info(f"Adding sensor: {sensor.__class__.__name__}")
        self._sensors.add(sensor)

    def remove(self, sensor: ExpansionSensor) -> None:
        logger.info(f"Removing sensor: {sensor.__class__.__name__}")
        self._sensors.discard(sensor)

    def clear(self) -> None:
        """Remove all sensors from the delegate."""
        logger.info(f"Clearing {len(self._sensors)} sensors")
        self._sensors.clear()

    def __len__(self) -> int:
        return len(self._sensors)

    def _dispatch(self, hook: str, *args, **kwargs) -> None:
        for sensor in self._sensors:
            try:
                getattr(sensor, hook)(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    # =============================================================================
    # Work Queue Hooks
    # =============================================================================

    def on_enqueued(self, claim: str, namespace: str, trigger: str, queue_depth: int) -> None:
        self._dispatch("on_enqueued", claim, namespace, trigger, queue_depth)

    def on_dequeued(self, claim: str, namespace: str, queue_depth: int) -> None:
        self._dispatch("on_dequeued", claim, namespace, queue_depth)

    def on_requeued(self, claim: str, namespace: str, delay: float, requeues: int) -> None:
        self._dispatch("on_requeued", claim, namespace, delay, requeues)

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self, claim: str, namespace: str
    ) -> Optional[Dict[ExpansionSensor, Any]]:
        """Delegate reconcile_start to all sensors.

        Returns:
            Dict mapping each sensor to its returned state, or None if no sensors
        """
        if not self._sensors:
            return None

        states = {}
        for sensor in self._sensors:
            try:
                state = sensor.on_reconcile_start(claim, namespace)
                if state is not None:
                    states[sensor] = state
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.on_reconcile_start: {e}",
                    exc_info=True,
                )

        return states if states else None

    def on_reconcile_complete(
        self,
        claim: str,
        namespace: str,
        state: Optional[Dict[ExpansionSensor, Any]],
        success: bool,
        outcome: str,
        error: Optional[Exception] = None,
    ) -> None:
        """Delegate reconcile_complete to all sensors with their specific state."""
        for sensor in self._sensors:
            try:
                sensor_state = state.get(sensor) if state else None
                sensor.on_reconcile_complete(
                    claim, namespace, sensor_state, success, outcome, error
                )
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.on_reconcile_complete: {e}",
                    exc_info=True,
                )

    # =============================================================================
    # Workload Operation Hooks
    # =============================================================================

    def on_scale(
        self,
        workload_kind: str,
        workload_name: str,
        namespace: str,
        replicas: int,
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        self._dispatch(
            "on_scale", workload_kind, workload_name, namespace, replicas, success, error
        )

    def on_resize_wait_complete(
        self, claim: str, namespace: str, observed: bool, duration: float
    ) -> None:
        self._dispatch("on_resize_wait_complete", claim, namespace, observed, duration)
