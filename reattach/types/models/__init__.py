from .claim import (
    ObjectMeta,
    ClaimCondition,
    ClaimResources,
    ClaimSpec,
    ClaimStatus,
    Claim,
    CLAIM_BOUND,
    FILE_SYSTEM_RESIZE_PENDING,
    BETA_STORAGE_CLASS_ANNOTATION,
)

__all__ = [
    "ObjectMeta",
    "ClaimCondition",
    "ClaimResources",
    "ClaimSpec",
    "ClaimStatus",
    "Claim",
    "CLAIM_BOUND",
    "FILE_SYSTEM_RESIZE_PENDING",
    "BETA_STORAGE_CLASS_ANNOTATION",
]
