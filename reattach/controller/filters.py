"""Decide whether a claim change is worth a reattach attempt."""

import logging
from typing import Iterable, Optional
from kubernetes_asyncio.client import V1StorageClass
from reattach.types.models import Claim

logger = logging.getLogger(__name__)


def is_candidate(claim: Optional[Claim]) -> bool:
    """A bound claim asking for more storage than it currently has."""
    if claim is None:
        return False
    return claim.is_bound and claim.is_expanding


def should_enqueue_on_add(claim: Claim) -> bool:
    return is_candidate(claim)


def should_enqueue_on_delete(claim: Claim) -> bool:
    return is_candidate(claim)


def should_enqueue_on_update(old: Optional[Claim], new: Claim) -> bool:
    """Only react to a strict increase of the requested size.

    An update that merely reports a capacity which already satisfies the
    request does not qualify.
    """
    if old is None or new is None:
        return False
    old_size, new_size = old.requested_size, new.requested_size
    if old_size is None or new_size is None:
        return False
    if new_size <= old_size:
        return False
    return is_candidate(new)


def storage_class_supports_expansion(
    claim: Claim,
    storage_class: Optional[V1StorageClass],
    provisioners: Iterable[str],
) -> bool:
    """Storage class allows expansion and its provisioner needs a pod restart."""
    if storage_class is None:
        logger.debug(f"No storage class found for claim {claim.key}")
        return False
    if storage_class.allow_volume_expansion is not True:
        logger.debug(
            f"Storage class {storage_class.metadata.name} does not allow volume expansion"
        )
        return False
    if storage_class.provisioner not in set(provisioners):
        logger.debug(
            f"Provisioner {storage_class.provisioner} of claim {claim.key} is not supported"
        )
        return False
    return True
