"""Prometheus monitoring backend for the reattach operator.

This module provides PrometheusMonitor, which collects controller lifecycle
events and exposes them as Prometheus metrics:

1. Work queue health - depth, enqueues, retries
2. Reconciliation - duration, outcome, errors
3. Workload operations - scale calls and resize wait results
"""

from typing import Dict, Optional, Any
import time
import logging

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, Gauge

from reattach.sensors.base import ExpansionSensor

logger = logging.getLogger(__name__)


class PrometheusMonitor(ExpansionSensor):
    """Prometheus metrics monitor for the reattach operator.

    Metrics are organized into three categories:
    - reattach_queue_* - Work queue metrics
    - reattach_reconcile_* - Reconciliation metrics
    - reattach_scale_* / reattach_resize_wait_* - Workload operation metrics

    Args:
        registry: Registry the metrics are registered with. Defaults to the
            global registry served by ``start_http_server``.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        super().__init__()

        # =============================================================================
        # Work Queue Metrics
        # =============================================================================

        self.queue_depth = Gauge(
            'reattach_queue_depth',
            'Number of claim keys waiting in the work queue',
            registry=registry,
        )

        self.queue_adds_total = Counter(
            'reattach_queue_adds_total',
            'Total number of claim keys added to the work queue',
            labelnames=['namespace', 'trigger'],
            registry=registry,
        )

        self.queue_retries_total = Counter(
            'reattach_queue_retries_total',
            'Total number of claim keys requeued after a failure',
            labelnames=['namespace'],
            registry=registry,
        )

        self.queue_retry_delay_seconds = Histogram(
            'reattach_queue_retry_delay_seconds',
            'Backoff delay applied to requeued claim keys',
            labelnames=['namespace'],
            buckets=[0.01, 0.1, 1.0, 5.0, 30.0, 60.0, 300.0, 1000.0],
            registry=registry,
        )

        # =============================================================================
        # Reconciliation Metrics
        # =============================================================================

        self.reconcile_duration = Histogram(
            'reattach_reconcile_duration_seconds',
            'Time spent processing a claim key',
            labelnames=['namespace', 'result'],
            buckets=[0.1, 0.5, 1.0, 5.0, 30.0, 60.0, 300.0, 1200.0, 3600.0],
            registry=registry,
        )

        self.reconcile_total = Counter(
            'reattach_reconcile_total',
            'Total number of claim keys processed',
            labelnames=['namespace', 'result', 'outcome'],
            registry=registry,
        )

        self.reconcile_errors = Counter(
            'reattach_reconcile_errors_total',
            'Total number of failed claim key attempts',
            labelnames=['namespace', 'error_type'],
            registry=registry,
        )

        # =============================================================================
        # Workload Operation Metrics
        # =============================================================================

        self.scale_total = Counter(
            'reattach_scale_total',
            'Total number of scale subresource updates',
            labelnames=['namespace', 'workload_kind', 'direction', 'result'],
            registry=registry,
        )

        self.resize_wait_seconds = Histogram(
            'reattach_resize_wait_seconds',
            'Time spent waiting for the filesystem resize pending condition',
            labelnames=['namespace', 'result'],
            buckets=[1.0, 5.0, 15.0, 60.0, 300.0, 900.0, 1800.0, 3600.0, 7200.0],
            registry=registry,
        )

        logger.info("PrometheusMonitor initialized with all metrics")

    # =============================================================================
    # Work Queue Hooks
    # =============================================================================

    def on_enqueued(self, claim: str, namespace: str, trigger: str, queue_depth: int) -> None:
        self.queue_adds_total.labels(namespace=namespace, trigger=trigger).inc()
        self.queue_depth.set(queue_depth)

    def on_dequeued(self, claim: str, namespace: str, queue_depth: int) -> None:
        self.queue_depth.set(queue_depth)

    def on_requeued(self, claim: str, namespace: str, delay: float, requeues: int) -> None:
        self.queue_retries_total.labels(namespace=namespace).inc()
        self.queue_retry_delay_seconds.labels(namespace=namespace).observe(delay)

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(self, claim: str, namespace: str) -> Optional[Dict[str, Any]]:
        """Record reconciliation start time."""
        return {'start_time': time.time()}

    def on_reconcile_complete(
        self,
        claim: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        outcome: str,
        error: Optional[Exception] = None,
    ) -> None:
        """Record reconciliation duration and result."""
        result = 'success' if success else 'failure'
        if state:
            duration = time.time() - state['start_time']
            self.reconcile_duration.labels(namespace=namespace, result=result).observe(duration)

        self.reconcile_total.labels(namespace=namespace, result=result, outcome=outcome).inc()

        if error:
            self.reconcile_errors.labels(
                namespace=namespace, error_type=error.__class__.__name__
            ).inc()

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
        self.scale_total.labels(
            namespace=namespace,
            workload_kind=workload_kind,
            direction='down' if replicas == 0 else 'up',
            result='success' if success else 'failure',
        ).inc()

    def on_resize_wait_complete(
        self, claim: str, namespace: str, observed: bool, duration: float
    ) -> None:
        self.resize_wait_seconds.labels(
            namespace=namespace, result='observed' if observed else 'timeout'
        ).observe(duration)
