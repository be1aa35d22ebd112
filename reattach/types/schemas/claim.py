from marshmallow import fields
from reattach.types.base import BaseSchema
from reattach.types.models.claim import (
    Claim,
    ClaimCondition,
    ClaimResources,
    ClaimSpec,
    ClaimStatus,
    ObjectMeta,
)


class ObjectMetaSchema(BaseSchema):
    __model__ = ObjectMeta

    name = fields.Str(data_key="name", required=True)
    namespace = fields.Str(data_key="namespace", load_default="")
    annotations = fields.Dict(
        keys=fields.Str(),
        values=fields.Str(allow_none=True),
        data_key="annotations",
        allow_none=True,
        load_default=None,
    )
    uid = fields.Str(data_key="uid", allow_none=True, load_default=None)
    resource_version = fields.Str(
        data_key="resourceVersion", allow_none=True, load_default=None
    )


class ClaimConditionSchema(BaseSchema):
    __model__ = ClaimCondition

    type = fields.Str(data_key="type", required=True)
    status = fields.Str(data_key="status", allow_none=True, load_default=None)
    reason = fields.Str(data_key="reason", allow_none=True, load_default=None)
    message = fields.Str(data_key="message", allow_none=True, load_default=None)


class ClaimResourcesSchema(BaseSchema):
    __model__ = ClaimResources

    requests = fields.Dict(
        keys=fields.Str(),
        values=fields.Raw(),
        data_key="requests",
        allow_none=True,
        load_default=None,
    )


class ClaimSpecSchema(BaseSchema):
    __model__ = ClaimSpec

    storage_class_name = fields.Str(
        data_key="storageClassName", allow_none=True, load_default=None
    )
    volume_name = fields.Str(data_key="volumeName", allow_none=True, load_default=None)
    resources = fields.Nested(
        ClaimResourcesSchema(), data_key="resources", allow_none=True, load_default=None
    )


class ClaimStatusSchema(BaseSchema):
    __model__ = ClaimStatus

    phase = fields.Str(data_key="phase", allow_none=True, load_default=None)
    capacity = fields.Dict(
        keys=fields.Str(),
        values=fields.Raw(),
        data_key="capacity",
        allow_none=True,
        load_default=None,
    )
    conditions = fields.List(
        fields.Nested(ClaimConditionSchema()),
        data_key="conditions",
        allow_none=True,
        load_default=None,
    )


class ClaimSchema(BaseSchema):
    """PersistentVolumeClaim body, as delivered by kopf or the API."""

    __model__ = Claim

    metadata = fields.Nested(ObjectMetaSchema(), data_key="metadata", required=True)
    spec = fields.Nested(ClaimSpecSchema(), data_key="spec", allow_none=True, load_default=None)
    status = fields.Nested(
        ClaimStatusSchema(), data_key="status", allow_none=True, load_default=None
    )
