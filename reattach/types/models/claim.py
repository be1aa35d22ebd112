from decimal import Decimal
from typing import Dict, List, Optional
from reattach.types.base import BaseModel
from reattach.utils.helpers import meta_namespace_key
from reattach.utils.quantity import parse_optional_quantity

CLAIM_BOUND = "Bound"
FILE_SYSTEM_RESIZE_PENDING = "FileSystemResizePending"
BETA_STORAGE_CLASS_ANNOTATION = "volume.beta.kubernetes.io/storage-class"
RESOURCE_STORAGE = "storage"


class ObjectMeta(BaseModel):
    """Subset of object metadata the operator relies on."""

    name: str
    namespace: str
    uid: Optional[str]
    annotations: Optional[Dict[str, str]]
    resource_version: Optional[str]


class ClaimCondition(BaseModel):
    type: str
    status: Optional[str]
    reason: Optional[str]
    message: Optional[str]


class ClaimResources(BaseModel):
    requests: Optional[Dict[str, str]]


class ClaimSpec(BaseModel):
    storage_class_name: Optional[str]
    volume_name: Optional[str]
    resources: Optional[ClaimResources]


class ClaimStatus(BaseModel):
    phase: Optional[str]
    capacity: Optional[Dict[str, str]]
    conditions: Optional[List[ClaimCondition]]


class Claim(BaseModel):
    """A PersistentVolumeClaim as seen by the expansion controller."""

    metadata: ObjectMeta
    spec: Optional[ClaimSpec]
    status: Optional[ClaimStatus]

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def key(self) -> str:
        return meta_namespace_key(self.namespace, self.name)

    @property
    def requested_size(self) -> Optional[Decimal]:
        resources = getattr(self.spec, "resources", None)
        requests = getattr(resources, "requests", None) or {}
        return parse_optional_quantity(requests.get(RESOURCE_STORAGE))

    @property
    def capacity(self) -> Optional[Decimal]:
        capacity = getattr(self.status, "capacity", None) or {}
        return parse_optional_quantity(capacity.get(RESOURCE_STORAGE))

    @property
    def phase(self) -> Optional[str]:
        return getattr(self.status, "phase", None)

    @property
    def conditions(self) -> List[ClaimCondition]:
        return getattr(self.status, "conditions", None) or []

    @property
    def storage_class_name(self) -> str:
        """Storage class of the claim, honouring the legacy beta annotation.

        Returns an empty string when the claim has no storage class.
        """
        annotations = getattr(self.metadata, "annotations", None) or {}
        if BETA_STORAGE_CLASS_ANNOTATION in annotations:
            return annotations[BETA_STORAGE_CLASS_ANNOTATION] or ""
        return getattr(self.spec, "storage_class_name", None) or ""

    @property
    def is_bound(self) -> bool:
        return self.phase == CLAIM_BOUND

    @property
    def is_expanding(self) -> bool:
        """Requested size exceeds the capacity last reported by the storage layer."""
        requested = self.requested_size
        if requested is None:
            return False
        capacity = self.capacity
        if capacity is None:
            capacity = Decimal(0)
        return requested > capacity

    @property
    def resize_pending(self) -> bool:
        return self.has_condition(FILE_SYSTEM_RESIZE_PENDING)

    def has_condition(self, condition_type: str) -> bool:
        return any(c.type == condition_type for c in self.conditions)
