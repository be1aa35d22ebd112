"""Unit tests for loading claims from watch bodies."""

import pytest
from marshmallow import ValidationError
from builders import claim_body, make_claim
from reattach.types.models import Claim, BETA_STORAGE_CLASS_ANNOTATION
from reattach.types.schemas import ClaimSchema


class TestClaimSchema:
    def test_load_full_body(self):
        claim = ClaimSchema().load(claim_body(conditions=["Resizing"]))

        assert isinstance(claim, Claim)
        assert claim.name == "data-pvc"
        assert claim.namespace == "default"
        assert claim.key == "default/data-pvc"
        assert claim.metadata.uid == "uid-data-pvc"
        assert claim.phase == "Bound"
        assert claim.storage_class_name == "qingcloud-disk"
        assert claim.requested_size == 20 * 1024**3
        assert claim.capacity == 10 * 1024**3
        assert [c.type for c in claim.conditions] == ["Resizing"]

    def test_unknown_fields_are_dropped(self):
        body = claim_body()
        body["metadata"]["managedFields"] = [{"manager": "kubectl"}]
        claim = ClaimSchema().load(body)

        assert not hasattr(claim.metadata, "managed_fields")
        assert not hasattr(claim.metadata, "managedFields")

    def test_missing_metadata_raises(self):
        with pytest.raises(ValidationError):
            ClaimSchema().load({"spec": {}})

    def test_missing_spec_and_status(self):
        claim = ClaimSchema().load({"metadata": {"name": "bare", "namespace": "ns"}})

        assert claim.requested_size is None
        assert claim.capacity is None
        assert claim.phase is None
        assert claim.conditions == []
        assert claim.storage_class_name == ""
        assert not claim.is_expanding


class TestClaimProperties:
    def test_expanding(self):
        assert make_claim(requested="20Gi", capacity="10Gi").is_expanding

    def test_not_expanding_when_satisfied(self):
        assert not make_claim(requested="20Gi", capacity="20Gi").is_expanding

    def test_not_expanding_when_capacity_larger(self):
        # Provisioners may round capacity up
        assert not make_claim(requested="10G", capacity="10Gi").is_expanding

    def test_missing_capacity_counts_as_zero(self):
        assert make_claim(requested="1Gi", capacity=None).is_expanding

    def test_is_bound(self):
        assert make_claim(phase="Bound").is_bound
        assert not make_claim(phase="Pending").is_bound

    def test_resize_pending(self):
        assert make_claim(conditions=["FileSystemResizePending"]).resize_pending
        assert not make_claim(conditions=["Resizing"]).resize_pending

    def test_beta_annotation_wins_over_spec(self):
        claim = make_claim(
            storage_class="other",
            annotations={BETA_STORAGE_CLASS_ANNOTATION: "legacy-class"},
        )
        assert claim.storage_class_name == "legacy-class"

    def test_no_storage_class(self):
        assert make_claim(storage_class=None).storage_class_name == ""
