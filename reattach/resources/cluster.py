import logging
from typing import List, Optional
from kubernetes_asyncio.client import (
    ApiClient,
    ApiException,
    AppsV1Api,
    CoreV1Api,
    StorageV1Api,
    V1Deployment,
    V1PersistentVolumeClaim,
    V1Pod,
    V1ReplicaSet,
    V1StatefulSet,
    V1StorageClass,
)
from reattach.resources.workload import WorkloadKind
from reattach.types.models import Claim
from reattach.types.schemas import ClaimSchema
from reattach.utils.errors import UnsupportedWorkloadError, not_found_error

logger = logging.getLogger(__name__)


class ClusterClient:
    """Read and scale the cluster objects the expansion controller works with.

    Reads return ``None`` when the object does not exist; every other API
    error propagates to the caller.
    """

    _api_client: ApiClient
    _core_v1_api: CoreV1Api
    _apps_v1_api: AppsV1Api
    _storage_v1_api: StorageV1Api

    def __init__(self, api_client: ApiClient):
        self._api_client = api_client
        self._core_v1_api = CoreV1Api(api_client)
        self._apps_v1_api = AppsV1Api(api_client)
        self._storage_v1_api = StorageV1Api(api_client)

    @property
    def api_client(self) -> ApiClient:
        return self._api_client

    @property
    def core_v1_api(self) -> CoreV1Api:
        return self._core_v1_api

    @property
    def apps_v1_api(self) -> AppsV1Api:
        return self._apps_v1_api

    @property
    def storage_v1_api(self) -> StorageV1Api:
        return self._storage_v1_api

    def claim_from_object(self, pvc: V1PersistentVolumeClaim) -> Claim:
        """Convert an API model into a claim."""
        return ClaimSchema().load(self.api_client.sanitize_for_serialization(pvc))

    async def get_claim(self, namespace: str, name: str) -> Optional[Claim]:
        """Retrieve the latest state of a persistent volume claim"""
        try:
            pvc = await self.core_v1_api.read_namespaced_persistent_volume_claim(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise
        return self.claim_from_object(pvc)

    async def list_pods(self, namespace: str, label_selector: dict = None) -> List[V1Pod]:
        """List pods in namespace, optionally filtered by label selector.

        Args:
            namespace: Namespace to list pods in
            label_selector: Dictionary of label key-value pairs to filter pods

        Returns:
            List of matching pods
        """
        label_selector_str = None
        if label_selector:
            label_selector_str = ",".join([f"{k}={v}" for k, v in label_selector.items()])

        pod_list = await self.core_v1_api.list_namespaced_pod(
            namespace=namespace, label_selector=label_selector_str
        )
        return list(pod_list.items or [])

    async def get_replica_set(self, namespace: str, name: str) -> Optional[V1ReplicaSet]:
        try:
            return await self.apps_v1_api.read_namespaced_replica_set(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise

    async def get_deployment(self, namespace: str, name: str) -> Optional[V1Deployment]:
        try:
            return await self.apps_v1_api.read_namespaced_deployment(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise

    async def get_stateful_set(self, namespace: str, name: str) -> Optional[V1StatefulSet]:
        try:
            return await self.apps_v1_api.read_namespaced_stateful_set(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise

    async def get_storage_class(self, name: str) -> Optional[V1StorageClass]:
        try:
            return await self.storage_v1_api.read_storage_class(name=name)
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise

    async def update_scale(
        self, kind: WorkloadKind, namespace: str, name: str, replicas: int
    ) -> None:
        """Patch the scale subresource of a workload.

        Only ``spec.replicas`` is sent, so the rest of the workload spec is
        left alone.
        """
        body = {"spec": {"replicas": replicas}}
        if kind == WorkloadKind.DEPLOYMENT:
            await self.apps_v1_api.patch_namespaced_deployment_scale(
                name=name, namespace=namespace, body=body
            )
        elif kind == WorkloadKind.STATEFUL_SET:
            await self.apps_v1_api.patch_namespaced_stateful_set_scale(
                name=name, namespace=namespace, body=body
            )
        else:
            raise UnsupportedWorkloadError(str(getattr(kind, "value", kind)), name)
        logger.debug(f"Scaled {kind.value} {namespace}/{name} to {replicas} replicas")
