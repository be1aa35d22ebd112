import kopf
from logging import Logger
from reattach.controller.tracker import ClaimEventTracker

CLAIM_RESOURCE = "persistentvolumeclaims"


@kopf.on.event("", "v1", CLAIM_RESOURCE)
async def on_claim_event(event, body, memo: kopf.Memo, logger: Logger, **kwargs):
    """Feed claim watch events to the expansion controller.

    Only filtering and enqueueing happen here; the reattach itself runs on
    the controller's workers.
    """
    tracker: ClaimEventTracker = getattr(memo, "claim_tracker", None)
    if tracker is None:
        logger.warning("Claim event received before the controller was started")
        return
    await tracker.dispatch(event.get("type"), body)
