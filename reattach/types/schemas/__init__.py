from .claim import (
    ObjectMetaSchema,
    ClaimConditionSchema,
    ClaimResourcesSchema,
    ClaimSpecSchema,
    ClaimStatusSchema,
    ClaimSchema,
)

__all__ = [
    "ObjectMetaSchema",
    "ClaimConditionSchema",
    "ClaimResourcesSchema",
    "ClaimSpecSchema",
    "ClaimStatusSchema",
    "ClaimSchema",
]
