"""Base sensor classes for operator monitoring.

This module defines the base ExpansionSensor class that provides lifecycle
hooks for monitoring the volume expansion controller. All hooks are no-ops by
default, allowing subclasses to override only the events they care about.

The hook pattern follows Faust's sensor design:
- Hooks come in pairs: on_X_start() and on_X_complete()
- Start hooks return an optional state dict for tracking multi-phase operations
- Complete hooks receive the state dict from their corresponding start hook
- All hooks are optional - sensors only implement what they need
"""

from typing import Dict, Optional, Any
import logging

logger = logging.getLogger(__name__)


class ExpansionSensor:
    """Base sensor class for volume expansion monitoring.

    This class defines lifecycle hooks for three main categories:
    1. Work queue (enqueue, dequeue, requeue)
    2. Reconciliation lifecycle (one pass over a claim key)
    3. Workload operations (scale calls and the resize wait)

    All methods are no-ops by default. Subclasses override only the hooks
    they need to monitor.

    Example:
        class LoggingSensor(ExpansionSensor):
            def on_reconcile_start(self, claim: str, namespace: str) -> Dict:
                return {'start_time': time.time()}

            def on_reconcile_complete(self, claim, namespace, state, success, outcome, error=None):
                duration = time.time() - state['start_time']
                logger.info(f"Reconciled {claim} in {duration}s")
    """

    # =============================================================================
    # Work Queue Hooks
    # =============================================================================

    def on_enqueued(
        self,
        claim: str,
        namespace: str,
        trigger: str,
        queue_depth: int,
    ) -> None:
        """Called when a claim key is added to the work queue.

        Args:
            claim: Claim name
            namespace: Kubernetes namespace
            trigger: Watch event that caused the enqueue (add, update, delete)
            queue_depth: Number of keys waiting after the add
        """
        pass

    def on_dequeued(
        self,
        claim: str,
        namespace: str,
        queue_depth: int,
    ) -> None:
        """Called when a worker picks a claim key from the work queue."""
        pass

    def on_requeued(
        self,
        claim: str,
        namespace: str,
        delay: float,
        requeues: int,
    ) -> None:
        """Called when a failed claim key is scheduled for another attempt.

        Args:
            claim: Claim name
            namespace: Kubernetes namespace
            delay: Backoff delay before the key is queued again (seconds)
            requeues: Number of consecutive failures for this key
        """
        pass

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        claim: str,
        namespace: str,
    ) -> Optional[Dict[str, Any]]:
        """Called when a worker starts processing a claim key.

        Returns:
            Optional state dict passed to on_reconcile_complete
        """
        pass

    def on_reconcile_complete(
        self,
        claim: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        outcome: str,
        error: Optional[Exception] = None,
    ) -> None:
        """Called when a worker finishes processing a claim key.

        Args:
            claim: Claim name
            namespace: Kubernetes namespace
            state: State dict returned from on_reconcile_start
            success: Whether processing finished without error
            outcome: Short description of how processing ended
            error: Exception if processing failed
        """
        pass

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
        """Called after a scale subresource update."""
        pass

    def on_resize_wait_complete(
        self,
        claim: str,
        namespace: str,
        observed: bool,
        duration: float,
    ) -> None:
        """Called when waiting for the resize pending condition ends.

        Args:
            claim: Claim name
            namespace: Kubernetes namespace
            observed: True if the condition was seen, False on timeout
            duration: Time spent waiting (seconds)
        """
        pass
