"""Unit tests for resolving the workload that mounts a claim."""

import pytest
from unittest.mock import AsyncMock
from kubernetes_asyncio.client import ApiException
from builders import (
    make_deployment,
    make_pod,
    make_replica_set,
    make_stateful_set,
    owner_ref,
)
from reattach.controller.resolver import (
    OwnerResolver,
    controller_of,
    pods_mounting_claim,
)
from reattach.resources.workload import (
    DeploymentWorkload,
    PodWorkload,
    StatefulSetWorkload,
    WorkloadKind,
)


class TestPodsMountingClaim:
    def test_filters_by_claim_name(self):
        pods = [
            make_pod("a", claims=["data-pvc"]),
            make_pod("b", claims=["other-pvc"]),
            make_pod("c", claims=["other-pvc", "data-pvc"]),
            make_pod("d", claims=[]),
        ]
        names = [p.metadata.name for p in pods_mounting_claim(pods, "data-pvc")]
        assert names == ["a", "c"]


class TestControllerOf:
    def test_ignores_non_controller_owner(self):
        pod = make_pod("a", owner=owner_ref("ReplicaSet", "rs", controller=False))
        assert controller_of(pod) is None

    def test_returns_controller(self):
        pod = make_pod("a", owner=owner_ref("StatefulSet", "db"))
        assert controller_of(pod).name == "db"


class TestOwnerResolver:
    @pytest.mark.asyncio
    async def test_pod_replica_set_deployment_resolves_deployment(self, deployment_chain):
        workload = await OwnerResolver(deployment_chain).resolve("data-pvc", "default")

        assert isinstance(workload, DeploymentWorkload)
        assert workload.kind == WorkloadKind.DEPLOYMENT
        assert workload.name == "web"
        assert workload.replicas == 3

    @pytest.mark.asyncio
    async def test_stateful_set(self, cluster):
        cluster.pods.append(make_pod("db-0", owner=owner_ref("StatefulSet", "db")))
        cluster.stateful_sets["default/db"] = make_stateful_set("db", replicas=1)

        workload = await OwnerResolver(cluster).resolve("data-pvc", "default")

        assert isinstance(workload, StatefulSetWorkload)
        assert workload.identity == "StatefulSet default/db"
        assert workload.replicas == 1

    @pytest.mark.asyncio
    async def test_no_pods(self, cluster):
        assert await OwnerResolver(cluster).resolve("data-pvc", "default") is None

    @pytest.mark.asyncio
    async def test_two_pods_is_ambiguous(self, deployment_chain):
        deployment_chain.pods.append(
            make_pod("web-6d4cf56db6-fghij", owner=owner_ref("ReplicaSet", "web-6d4cf56db6"))
        )
        assert await OwnerResolver(deployment_chain).resolve("data-pvc", "default") is None

    @pytest.mark.asyncio
    async def test_pods_in_other_namespaces_ignored(self, deployment_chain):
        deployment_chain.pods.append(make_pod("web-x", namespace="staging"))
        workload = await OwnerResolver(deployment_chain).resolve("data-pvc", "default")
        assert workload.name == "web"

    @pytest.mark.asyncio
    async def test_bare_pod(self, cluster):
        cluster.pods.append(make_pod("standalone"))

        workload = await OwnerResolver(cluster).resolve("data-pvc", "default")

        assert isinstance(workload, PodWorkload)
        assert workload.name == "standalone"
        assert not workload.scalable

    @pytest.mark.asyncio
    async def test_daemon_set_owner(self, cluster):
        cluster.pods.append(make_pod("agent-xyz", owner=owner_ref("DaemonSet", "agent")))
        assert await OwnerResolver(cluster).resolve("data-pvc", "default") is None

    @pytest.mark.asyncio
    async def test_replica_set_without_owner(self, cluster):
        cluster.pods.append(make_pod("rs-pod", owner=owner_ref("ReplicaSet", "orphan")))
        cluster.replica_sets["default/orphan"] = make_replica_set("orphan")

        assert await OwnerResolver(cluster).resolve("data-pvc", "default") is None

    @pytest.mark.asyncio
    async def test_replica_set_owned_by_other_kind(self, cluster):
        cluster.pods.append(make_pod("ro-pod", owner=owner_ref("ReplicaSet", "ro-rs")))
        cluster.replica_sets["default/ro-rs"] = make_replica_set(
            "ro-rs", owner=owner_ref("Rollout", "ro")
        )
        assert await OwnerResolver(cluster).resolve("data-pvc", "default") is None

    @pytest.mark.asyncio
    async def test_missing_replica_set(self, cluster):
        cluster.pods.append(make_pod("rs-pod", owner=owner_ref("ReplicaSet", "gone")))
        assert await OwnerResolver(cluster).resolve("data-pvc", "default") is None

    @pytest.mark.asyncio
    async def test_missing_deployment(self, deployment_chain):
        del deployment_chain.deployments["default/web"]
        assert await OwnerResolver(deployment_chain).resolve("data-pvc", "default") is None

    @pytest.mark.asyncio
    async def test_deployment_without_replicas_defaults_to_one(self, deployment_chain):
        deployment_chain.deployments["default/web"] = make_deployment("web", replicas=None)
        workload = await OwnerResolver(deployment_chain).resolve("data-pvc", "default")
        assert workload.replicas == 1

    @pytest.mark.asyncio
    async def test_api_errors_propagate(self, deployment_chain):
        deployment_chain.get_deployment = AsyncMock(
            side_effect=ApiException(status=500, reason="Internal Server Error")
        )
        with pytest.raises(ApiException):
            await OwnerResolver(deployment_chain).resolve("data-pvc", "default")
