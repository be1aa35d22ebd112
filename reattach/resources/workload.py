"""Workloads whose pods mount an expanding claim.

A workload is one of a small closed set of kinds. Each kind knows how to
report its desired replica count, how to identify itself in logs and
events, and how to change its replica count through the scale subresource.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional
from kubernetes_asyncio.client import V1Deployment, V1Pod, V1StatefulSet
from reattach.utils.errors import UnsupportedWorkloadError

if TYPE_CHECKING:
    from reattach.resources.cluster import ClusterClient


class WorkloadKind(str, Enum):
    DEPLOYMENT = "Deployment"
    STATEFUL_SET = "StatefulSet"
    POD = "Pod"

    @property
    def scalable(self) -> bool:
        return self in (WorkloadKind.DEPLOYMENT, WorkloadKind.STATEFUL_SET)


class Workload:
    """Base workload model."""

    kind: WorkloadKind

    _name: str
    _namespace: str
    _replicas: int

    def __init__(self, name: str, namespace: str, replicas: int):
        self._name = name
        self._namespace = namespace
        self._replicas = replicas

    @property
    def name(self) -> str:
        return self._name

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def replicas(self) -> int:
        """Desired replica count captured when the workload was resolved."""
        return self._replicas

    @property
    def identity(self) -> str:
        return f"{self.kind.value} {self.namespace}/{self.name}"

    @property
    def scalable(self) -> bool:
        return self.kind.scalable

    async def scale(self, client: "ClusterClient", replicas: int) -> None:
        """Set the replica count through the scale subresource."""
        await client.update_scale(self.kind, self.namespace, self.name, replicas)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Workload):
            return NotImplemented
        return (self.kind, self.namespace, self.name, self.replicas) == (
            other.kind,
            other.namespace,
            other.name,
            other.replicas,
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.namespace, self.name))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.namespace}/{self.name} replicas={self.replicas}>"


class DeploymentWorkload(Workload):
    kind = WorkloadKind.DEPLOYMENT

    @classmethod
    def from_object(cls, deployment: V1Deployment) -> "DeploymentWorkload":
        return cls(
            deployment.metadata.name,
            deployment.metadata.namespace,
            _desired_replicas(deployment.spec.replicas if deployment.spec else None),
        )


class StatefulSetWorkload(Workload):
    kind = WorkloadKind.STATEFUL_SET

    @classmethod
    def from_object(cls, stateful_set: V1StatefulSet) -> "StatefulSetWorkload":
        return cls(
            stateful_set.metadata.name,
            stateful_set.metadata.namespace,
            _desired_replicas(stateful_set.spec.replicas if stateful_set.spec else None),
        )


class PodWorkload(Workload):
    """A pod with no controlling owner. It cannot be scaled."""

    kind = WorkloadKind.POD

    @classmethod
    def from_object(cls, pod: V1Pod) -> "PodWorkload":
        return cls(pod.metadata.name, pod.metadata.namespace, 1)

    async def scale(self, client: "ClusterClient", replicas: int) -> None:
        raise UnsupportedWorkloadError(self.kind.value, self.name)


def _desired_replicas(replicas: Optional[int]) -> int:
    # API server defaults spec.replicas to 1 when omitted
    return 1 if replicas is None else replicas
