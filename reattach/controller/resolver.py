import logging
from typing import List, Optional
from kubernetes_asyncio.client import V1OwnerReference, V1Pod
from reattach.resources.cluster import ClusterClient
from reattach.resources.workload import (
    DeploymentWorkload,
    PodWorkload,
    StatefulSetWorkload,
    Workload,
    WorkloadKind,
)

logger = logging.getLogger(__name__)

REPLICA_SET_KIND = "ReplicaSet"


def controller_of(obj) -> Optional[V1OwnerReference]:
    """Return the owner reference flagged as controller, if any."""
    metadata = getattr(obj, "metadata", None)
    for ref in getattr(metadata, "owner_references", None) or []:
        if ref.controller:
            return ref
    return None


def pods_mounting_claim(pods: List[V1Pod], claim_name: str) -> List[V1Pod]:
    """Pods with a volume sourced from the named claim."""
    mounting = []
    for pod in pods:
        volumes = (pod.spec.volumes if pod.spec else None) or []
        for volume in volumes:
            source = volume.persistent_volume_claim
            if source is not None and source.claim_name == claim_name:
                mounting.append(pod)
                break
    return mounting


class OwnerResolver:
    """Find the single workload owning the pod that mounts a claim."""

    def __init__(self, client: ClusterClient):
        self.client = client

    async def resolve(self, claim_name: str, namespace: str) -> Optional[Workload]:
        """Resolve the workload for a claim.

        Returns ``None`` when zero or several pods mount the claim, when the
        pod's owner is not a Deployment or StatefulSet chain, or when the
        owning object no longer exists. API errors propagate.
        """
        pods = await self.client.list_pods(namespace)
        mounting = pods_mounting_claim(pods, claim_name)
        logger.debug(f"Found {len(mounting)} pod(s) mounting claim {namespace}/{claim_name}")
        # Only a claim mounted by exactly one pod is handled
        if len(mounting) != 1:
            return None

        pod = mounting[0]
        owner = await self.find_pod_parent(pod)
        if owner is None:
            return PodWorkload.from_object(pod)

        logger.debug(f"Pod {namespace}/{pod.metadata.name} is owned by {owner.kind} {owner.name}")
        if owner.kind == WorkloadKind.STATEFUL_SET.value:
            stateful_set = await self.client.get_stateful_set(namespace, owner.name)
            if stateful_set is None:
                return None
            return StatefulSetWorkload.from_object(stateful_set)
        if owner.kind == WorkloadKind.DEPLOYMENT.value:
            deployment = await self.client.get_deployment(namespace, owner.name)
            if deployment is None:
                return None
            return DeploymentWorkload.from_object(deployment)
        return None

    async def find_pod_parent(self, pod: V1Pod) -> Optional[V1OwnerReference]:
        """Walk the controller chain of a pod one or two levels up.

        Returns ``None`` for an unmanaged pod. A pod owned by a kind other
        than ReplicaSet or StatefulSet yields an empty reference, which
        callers treat as not actionable.
        """
        owner = controller_of(pod)
        if owner is None:
            return None
        if owner.kind == REPLICA_SET_KIND:
            replica_set = await self.client.get_replica_set(
                pod.metadata.namespace, owner.name
            )
            if replica_set is None:
                # Gone mid-rollout, nothing left to act on
                return V1OwnerReference(api_version="", kind="", name="", uid="")
            return controller_of(replica_set) or owner
        if owner.kind == WorkloadKind.STATEFUL_SET.value:
            return owner
        return V1OwnerReference(api_version="", kind="", name="", uid="")
