"""Volume expansion controller.

Some CSI drivers only grow the filesystem of an expanded volume once the pod
using it is recreated. For every bound claim whose requested size exceeds its
capacity, the controller finds the single Deployment or StatefulSet mounting
it, scales it to zero, waits for the claim to report
``FileSystemResizePending`` and scales the workload back up.

Work is driven by a deduplicating queue of ``namespace/name`` claim keys and
processed by a fixed pool of worker tasks. Each pass over a key is
idempotent: a claim that is no longer expanding is left alone.
"""

import asyncio
import logging
import time
from typing import List, Optional
from reattach.common.events import (
    EventRecorder,
    REATTACH_FAILED,
    RESIZE_WAIT_TIMEOUT,
    SCALED_DOWN,
    SCALED_UP,
)
from reattach.controller.filters import (
    is_candidate,
    should_enqueue_on_add,
    should_enqueue_on_delete,
    should_enqueue_on_update,
    storage_class_supports_expansion,
)
from reattach.controller.queue import ItemExponentialFailureRateLimiter, RateLimitingQueue
from reattach.controller.resolver import OwnerResolver
from reattach.resources.cluster import ClusterClient
from reattach.resources.workload import Workload
from reattach.sensors.base import ExpansionSensor
from reattach.types.models import Claim
from reattach.types.settings import Settings
from reattach.utils.backoff import Backoff, Sleep, retry_until
from reattach.utils.errors import describe_error
from reattach.utils.helpers import split_meta_namespace_key

logger = logging.getLogger(__name__)

CONTROLLER_NAME = "expansion-controller"

# Outcomes reported to sensors
OUTCOME_REATTACHED = "reattached"
OUTCOME_CLAIM_GONE = "claim_gone"
OUTCOME_NOT_ELIGIBLE = "not_eligible"
OUTCOME_NO_WORKLOAD = "no_workload"
OUTCOME_UNSUPPORTED = "unsupported_workload"
OUTCOME_INVALID_KEY = "invalid_key"
OUTCOME_ERROR = "error"


def handle_error(message: str) -> None:
    """Report an error that is not returned to any caller."""
    logger.error(message)


class VolumeExpansionController:
    """Reattach workloads to claims whose volumes were expanded."""

    def __init__(
        self,
        client: ClusterClient,
        settings: Settings = None,
        queue: RateLimitingQueue = None,
        sensor: ExpansionSensor = None,
        recorder: EventRecorder = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.settings = settings or Settings()
        self.queue = queue or RateLimitingQueue(
            CONTROLLER_NAME,
            ItemExponentialFailureRateLimiter(
                self.settings.requeue_base_delay_seconds,
                self.settings.requeue_max_delay_seconds,
            ),
        )
        self.sensor = sensor or ExpansionSensor()
        self.recorder = recorder or EventRecorder()
        self.resolver = OwnerResolver(client)
        self.resize_backoff = Backoff(
            duration=self.settings.resize_wait_initial_delay_seconds,
            factor=self.settings.resize_wait_factor,
            steps=self.settings.resize_wait_steps,
        )
        self._sleep = sleep
        self._stop: Optional[asyncio.Event] = None

    # -----------------------------------------------------------------
    # Watch callbacks: filter and enqueue only
    # -----------------------------------------------------------------

    async def on_add(self, claim: Claim) -> bool:
        if not should_enqueue_on_add(claim):
            return False
        await self.enqueue(claim, trigger="add")
        return True

    async def on_update(self, old: Optional[Claim], new: Claim) -> bool:
        if not should_enqueue_on_update(old, new):
            return False
        if not await self.storage_class_eligible(new):
            return False
        await self.enqueue(new, trigger="update")
        return True

    async def on_delete(self, claim: Claim) -> bool:
        if not should_enqueue_on_delete(claim):
            return False
        await self.enqueue(claim, trigger="delete")
        return True

    async def enqueue(self, claim: Claim, trigger: str) -> None:
        logger.debug(f"Enqueue claim {claim.key} ({trigger})")
        await self.queue.add(claim.key)
        self.sensor.on_enqueued(claim.name, claim.namespace, trigger, len(self.queue))

    async def storage_class_eligible(self, claim: Claim) -> bool:
        """Check the storage class of a claim.

        Failing to read the storage class drops the claim without a retry.
        """
        class_name = claim.storage_class_name
        if not class_name:
            logger.debug(f"Volume expansion is disabled for claim without storage class: {claim.key}")
            return False
        try:
            storage_class = await self.client.get_storage_class(class_name)
        except Exception as e:
            logger.warning(
                f"Failed to get storage class {class_name} of claim {claim.key}: {describe_error(e)}"
            )
            return False
        return storage_class_supports_expansion(
            claim, storage_class, self.settings.supported_provisioners
        )

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    async def start(self, stop: asyncio.Event) -> None:
        """Run with the configured number of workers until ``stop`` is set."""
        await self.run(self.settings.expansion_workers, stop)

    async def run(self, workers: int, stop: asyncio.Event) -> None:
        """Run ``workers`` worker tasks until ``stop`` is set.

        Once stopped, no new keys are handed out; workers finish the key
        they are processing before this coroutine returns.
        """
        self._stop = stop
        logger.info(f"Starting volume expansion controller with {workers} worker(s)")
        tasks: List[asyncio.Task] = [
            asyncio.create_task(self._run_worker(), name=f"{CONTROLLER_NAME}-worker-{i}")
            for i in range(workers)
        ]
        logger.info("Started workers")
        try:
            await stop.wait()
        finally:
            logger.info("Shutting down workers")
            await self.queue.shut_down()
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    handle_error(describe_error(result))
            logger.info("Volume expansion controller stopped")

    async def _run_worker(self) -> None:
        while await self.process_next_work_item():
            pass

    async def process_next_work_item(self) -> bool:
        """Process one key from the queue. Returns False once the queue is shut down."""
        key = await self.queue.get()
        if key is None:
            return False

        namespace, name = _key_parts(key)
        self.sensor.on_dequeued(name, namespace, len(self.queue))
        state = self.sensor.on_reconcile_start(name, namespace)
        try:
            outcome = await self.sync(key)
        except Exception as e:
            delay = self.queue.add_rate_limited(key)
            requeues = self.queue.num_requeues(key)
            self.sensor.on_requeued(name, namespace, delay, requeues)
            self.sensor.on_reconcile_complete(name, namespace, state, False, OUTCOME_ERROR, e)
            handle_error(
                f"error syncing '{key}': {describe_error(e)}, requeuing "
                f"in {delay:.3f}s (attempt {requeues})"
            )
        else:
            self.queue.forget(key)
            self.sensor.on_reconcile_complete(name, namespace, state, True, outcome)
            logger.info(f"Successfully synced '{key}' ({outcome})")
        finally:
            await self.queue.done(key)
        return True

    # -----------------------------------------------------------------
    # Reconciliation
    # -----------------------------------------------------------------

    async def sync(self, key: str) -> str:
        """Reattach the workload mounting the claim identified by ``key``.

        1. Look up the claim and confirm it is still an expansion candidate.
        2. Find the Deployment or StatefulSet mounting it.
        3. Scale the workload down to zero.
        4. Wait for the claim to report a pending filesystem resize.
        5. Scale the workload back to the replica count found in step 2.

        Returns the outcome of the pass. Errors are raised so the key is
        retried.
        """
        logger.debug(f"sync: handle {key}")
        try:
            namespace, name = split_meta_namespace_key(key)
        except ValueError as e:
            handle_error(str(e))
            return OUTCOME_INVALID_KEY

        claim = await self.client.get_claim(namespace, name)
        if claim is None:
            logger.info(f"Claim '{key}' in work queue no longer exists")
            return OUTCOME_CLAIM_GONE

        if not is_candidate(claim):
            logger.debug(f"Claim {key} is not waiting for an expansion")
            return OUTCOME_NOT_ELIGIBLE
        if not await self.storage_class_eligible(claim):
            return OUTCOME_NOT_ELIGIBLE

        workload = await self.resolver.resolve(name, namespace)
        if workload is None:
            logger.info(f"Cannot find a single workload mounting claim {key}")
            return OUTCOME_NO_WORKLOAD
        logger.debug(f"Found {workload.identity} for claim {key}")

        if not workload.scalable:
            logger.error(f"Unsupported workload type {workload.kind.value} for claim {key}")
            return OUTCOME_UNSUPPORTED

        await self.scale(claim, workload, 0)
        logger.info(f"Scaled down {workload.identity} mounting claim {key}")

        observed = await self.wait_for_resize_pending(claim)
        if not observed:
            message = (
                f"Timed out waiting for filesystem resize of claim {key}, "
                f"scaling {workload.identity} back up"
            )
            logger.error(message)
            self.recorder.warning(claim, RESIZE_WAIT_TIMEOUT, message)

        await self.scale(claim, workload, workload.replicas)
        logger.info(f"Scaled up {workload.identity} mounting claim {key} to {workload.replicas} replicas")
        return OUTCOME_REATTACHED

    async def scale(self, claim: Claim, workload: Workload, replicas: int) -> None:
        reason = SCALED_DOWN if replicas == 0 else SCALED_UP
        try:
            await workload.scale(self.client, replicas)
        except Exception as e:
            self.sensor.on_scale(
                workload.kind.value, workload.name, workload.namespace, replicas, False, e
            )
            self.recorder.warning(
                claim,
                REATTACH_FAILED,
                f"Failed to scale {workload.identity} to {replicas}: {describe_error(e)}",
            )
            raise
        self.sensor.on_scale(workload.kind.value, workload.name, workload.namespace, replicas, True)
        self.recorder.normal(claim, reason, f"Scaled {workload.identity} to {replicas} replicas")

    async def wait_for_resize_pending(self, claim: Claim) -> bool:
        """Poll the claim until it reports a pending filesystem resize.

        Returns False if the backoff runs out first.
        """
        start = time.monotonic()
        observed = await retry_until(
            lambda: self.is_waiting_scale_up(claim.namespace, claim.name),
            self.resize_backoff,
            sleep=self._sleep,
            stopped=self._stop,
        )
        self.sensor.on_resize_wait_complete(
            claim.name, claim.namespace, observed, time.monotonic() - start
        )
        return observed

    async def is_waiting_scale_up(self, namespace: str, name: str) -> bool:
        logger.debug(f"Waiting for filesystem expansion of claim {namespace}/{name}")
        try:
            claim = await self.client.get_claim(namespace, name)
        except Exception as e:
            logger.error(f"Get claim {namespace}/{name} error: {describe_error(e)}")
            return False
        if claim is None:
            return False
        return claim.resize_pending


def _key_parts(key: str):
    try:
        return split_meta_namespace_key(key)
    except ValueError:
        return "", key
