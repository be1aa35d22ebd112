import logging
import kopf
from reattach.types.models import Claim

logger = logging.getLogger(__name__)

EVENT_NORMAL = "Normal"
EVENT_WARNING = "Warning"

SCALED_DOWN = "ScaledDown"
SCALED_UP = "ScaledUp"
RESIZE_WAIT_TIMEOUT = "ResizeWaitTimeout"
REATTACH_FAILED = "ReattachFailed"


def claim_reference(claim: Claim) -> dict:
    """Minimal object body kopf needs to address an event at a claim."""
    metadata = {"name": claim.name, "namespace": claim.namespace}
    if getattr(claim.metadata, "uid", None):
        metadata["uid"] = claim.metadata.uid
    return {
        "apiVersion": "v1",
        "kind": "PersistentVolumeClaim",
        "metadata": metadata,
    }


class EventRecorder:
    """Records Kubernetes events about claims. Base class records nothing."""

    def normal(self, claim: Claim, reason: str, message: str) -> None:
        pass

    def warning(self, claim: Claim, reason: str, message: str) -> None:
        pass


class KopfEventRecorder(EventRecorder):
    """Posts events through kopf's event queue.

    kopf only accepts events from tasks spawned inside the operator, so a
    recorder used elsewhere logs the event instead.
    """

    def normal(self, claim: Claim, reason: str, message: str) -> None:
        self._post(claim, EVENT_NORMAL, reason, message)

    def warning(self, claim: Claim, reason: str, message: str) -> None:
        self._post(claim, EVENT_WARNING, reason, message)

    def _post(self, claim: Claim, type: str, reason: str, message: str) -> None:
        try:
            kopf.event(claim_reference(claim), type=type, reason=reason, message=message)
        except LookupError:
            logger.debug(f"Event {reason} for {claim.key} not posted outside operator: {message}")
