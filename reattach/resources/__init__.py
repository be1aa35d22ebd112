from .workload import (
    WorkloadKind,
    Workload,
    DeploymentWorkload,
    StatefulSetWorkload,
    PodWorkload,
)
from .cluster import ClusterClient

__all__ = [
    "WorkloadKind",
    "Workload",
    "DeploymentWorkload",
    "StatefulSetWorkload",
    "PodWorkload",
    "ClusterClient",
]
