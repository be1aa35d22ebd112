"""Builders for the kubernetes objects used in controller unit tests."""

from typing import Dict, List, Optional
from kubernetes_asyncio.client import (
    ApiException,
    V1Container,
    V1Deployment,
    V1DeploymentSpec,
    V1LabelSelector,
    V1ObjectMeta,
    V1OwnerReference,
    V1PersistentVolumeClaimVolumeSource,
    V1Pod,
    V1PodSpec,
    V1PodTemplateSpec,
    V1ReplicaSet,
    V1StatefulSet,
    V1StatefulSetSpec,
    V1StorageClass,
    V1Volume,
)
from reattach.resources.workload import WorkloadKind
from reattach.types.schemas import ClaimSchema
from reattach.utils.errors import UnsupportedWorkloadError


def claim_body(
    name: str = "data-pvc",
    namespace: str = "default",
    requested: Optional[str] = "20Gi",
    capacity: Optional[str] = "10Gi",
    phase: str = "Bound",
    storage_class: Optional[str] = "qingcloud-disk",
    conditions: List[str] = (),
    annotations: Dict[str, str] = None,
) -> dict:
    body = {
        "apiVersion": "v1",
        "kind": "PersistentVolumeClaim",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"uid-{name}",
            "resourceVersion": "1",
        },
        "spec": {
            "accessModes": ["ReadWriteOnce"],
            "resources": {"requests": {"storage": requested} if requested else {}},
            "volumeName": f"pvc-{name}",
        },
        "status": {
            "phase": phase,
            "accessModes": ["ReadWriteOnce"],
            "capacity": {"storage": capacity} if capacity else {},
            "conditions": [{"type": c, "status": "True"} for c in conditions],
        },
    }
    if storage_class:
        body["spec"]["storageClassName"] = storage_class
    if annotations:
        body["metadata"]["annotations"] = annotations
    return body


def make_claim(**kwargs):
    return ClaimSchema().load(claim_body(**kwargs))


def owner_ref(kind: str, name: str, controller: bool = True) -> V1OwnerReference:
    api_version = "v1" if kind == "Node" else "apps/v1"
    return V1OwnerReference(
        api_version=api_version, kind=kind, name=name, uid=f"uid-{name}", controller=controller
    )


def make_pod(
    name: str,
    namespace: str = "default",
    claims: List[str] = ("data-pvc",),
    owner: V1OwnerReference = None,
) -> V1Pod:
    volumes = [
        V1Volume(
            name=f"vol-{i}",
            persistent_volume_claim=V1PersistentVolumeClaimVolumeSource(claim_name=claim),
        )
        for i, claim in enumerate(claims)
    ]
    volumes.append(V1Volume(name="config"))
    return V1Pod(
        metadata=V1ObjectMeta(
            name=name,
            namespace=namespace,
            owner_references=[owner] if owner else None,
        ),
        spec=V1PodSpec(containers=[V1Container(name="app")], volumes=volumes),
    )


def make_replica_set(
    name: str, namespace: str = "default", owner: V1OwnerReference = None
) -> V1ReplicaSet:
    return V1ReplicaSet(
        metadata=V1ObjectMeta(
            name=name, namespace=namespace, owner_references=[owner] if owner else None
        )
    )


def make_deployment(name: str, namespace: str = "default", replicas: Optional[int] = 3) -> V1Deployment:
    return V1Deployment(
        metadata=V1ObjectMeta(name=name, namespace=namespace),
        spec=V1DeploymentSpec(
            replicas=replicas,
            selector=V1LabelSelector(match_labels={"app": name}),
            template=V1PodTemplateSpec(),
        ),
    )


def make_stateful_set(name: str, namespace: str = "default", replicas: Optional[int] = 1) -> V1StatefulSet:
    return V1StatefulSet(
        metadata=V1ObjectMeta(name=name, namespace=namespace),
        spec=V1StatefulSetSpec(
            replicas=replicas,
            service_name=name,
            selector=V1LabelSelector(match_labels={"app": name}),
            template=V1PodTemplateSpec(),
        ),
    )


def make_storage_class(
    name: str = "qingcloud-disk",
    provisioner: str = "disk.csi.qingcloud.com",
    allow_volume_expansion: Optional[bool] = True,
) -> V1StorageClass:
    return V1StorageClass(
        metadata=V1ObjectMeta(name=name),
        provisioner=provisioner,
        allow_volume_expansion=allow_volume_expansion,
    )


class FakeClusterClient:
    """In-memory stand-in for ClusterClient.

    ``claims`` maps a key to a list of revisions; every read returns the
    next revision and then keeps returning the last one.
    """

    def __init__(self):
        self.claims: Dict[str, list] = {}
        self.pods: List[V1Pod] = []
        self.replica_sets: Dict[str, V1ReplicaSet] = {}
        self.deployments: Dict[str, V1Deployment] = {}
        self.stateful_sets: Dict[str, V1StatefulSet] = {}
        self.storage_classes: Dict[str, V1StorageClass] = {}
        self.scale_calls: List[tuple] = []
        self.scale_errors: List[Exception] = []
        self.claim_reads = 0

    def set_claim(self, *revisions):
        self.claims[revisions[0].key] = list(revisions)

    async def get_claim(self, namespace, name):
        self.claim_reads += 1
        revisions = self.claims.get(f"{namespace}/{name}")
        if not revisions:
            return None
        if len(revisions) > 1:
            return revisions.pop(0)
        return revisions[0]

    async def list_pods(self, namespace, label_selector=None):
        return [p for p in self.pods if p.metadata.namespace == namespace]

    async def get_replica_set(self, namespace, name):
        return self.replica_sets.get(f"{namespace}/{name}")

    async def get_deployment(self, namespace, name):
        return self.deployments.get(f"{namespace}/{name}")

    async def get_stateful_set(self, namespace, name):
        return self.stateful_sets.get(f"{namespace}/{name}")

    async def get_storage_class(self, name):
        return self.storage_classes.get(name)

    async def update_scale(self, kind, namespace, name, replicas):
        if self.scale_errors:
            raise self.scale_errors.pop(0)
        if kind not in (WorkloadKind.DEPLOYMENT, WorkloadKind.STATEFUL_SET):
            raise UnsupportedWorkloadError(str(kind), name)
        self.scale_calls.append((kind, namespace, name, replicas))


def conflict() -> ApiException:
    return ApiException(status=409, reason="Conflict")
