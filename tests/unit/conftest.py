import pytest
from builders import (
    FakeClusterClient,
    make_deployment,
    make_pod,
    make_replica_set,
    make_storage_class,
    owner_ref,
)


@pytest.fixture
def cluster():
    client = FakeClusterClient()
    client.storage_classes["qingcloud-disk"] = make_storage_class()
    return client


@pytest.fixture
def deployment_chain(cluster):
    """Claim default/data-pvc mounted by one pod of Deployment web (3 replicas)."""
    cluster.pods.append(
        make_pod("web-6d4cf56db6-abcde", owner=owner_ref("ReplicaSet", "web-6d4cf56db6"))
    )
    cluster.replica_sets["default/web-6d4cf56db6"] = make_replica_set(
        "web-6d4cf56db6", owner=owner_ref("Deployment", "web")
    )
    cluster.deployments["default/web"] = make_deployment("web", replicas=3)
    return cluster
