import kopf
from reattach.utils.helpers import now


@kopf.on.probe(id='now')
def get_current_timestamp(**kwargs):
    return now()


@kopf.on.probe(id='expansion_queue_depth')
def get_expansion_queue_depth(memo: kopf.Memo, **kwargs):
    controller = getattr(memo, "controller", None)
    return len(controller.queue) if controller is not None else 0
