from .queue import ItemExponentialFailureRateLimiter, RateLimitingQueue
from .resolver import OwnerResolver
from .tracker import ClaimEventTracker
from .expansion import VolumeExpansionController, CONTROLLER_NAME

__all__ = [
    "ItemExponentialFailureRateLimiter",
    "RateLimitingQueue",
    "OwnerResolver",
    "ClaimEventTracker",
    "VolumeExpansionController",
    "CONTROLLER_NAME",
]
