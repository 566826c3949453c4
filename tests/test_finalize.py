"""Sealing a fully signed lease."""
import logging

import pytest

from conftest import LANDLORD, STRANGER, TENANT
from models import AuditAction, Lease, LeaseStatus
from services import audit_service
from services.artifact_store import ArtifactStore, ArtifactStoreError
from services.document_hash import compute_document_hash, generate_document_id
from services.errors import ForbiddenError, SignaturesIncompleteError, StorageFailureError
from services.lease_service import LeaseService


class FailingStore(ArtifactStore):
    def put(self, data, name):
        raise ArtifactStoreError("storage offline")

    def get(self, url):
        raise ArtifactStoreError("storage offline")


def _failing_renderer(snapshot):
    raise RuntimeError("renderer crashed")


class TestFinalizePreconditions:

    def test_missing_owner_signature(self, service, db, lease):
        service.submit_tenant_signature(lease.id, TENANT, consent_given=True)
        with pytest.raises(SignaturesIncompleteError) as exc:
            service.finalize(lease.id, LANDLORD)
        assert exc.value.code == "VALIDATION"
        assert lease.status is LeaseStatus.TENANT_SIGNED
        assert lease.document_id is None

    def test_no_signatures(self, service, lease):
        with pytest.raises(SignaturesIncompleteError):
            service.finalize(lease.id, TENANT)

    def test_stranger_cannot_finalize(self, service, signed_lease):
        with pytest.raises(ForbiddenError):
            service.finalize(signed_lease.id, STRANGER)


class TestFinalizeSeal:

    def test_seal_writes_every_descriptor(self, service, db, store, signed_lease):
        result = service.finalize(signed_lease.id, LANDLORD)

        assert result.already_finalized is False
        assert signed_lease.status is LeaseStatus.FINALIZED
        assert signed_lease.document_id == result.document_id
        assert signed_lease.document_hash == result.document_hash
        assert signed_lease.pdf_url == result.pdf_url
        assert signed_lease.finalized_at is not None
        assert signed_lease.has_consistent_seal

        stored = store.get(result.pdf_url)
        assert stored.startswith(b"%PDF")
        assert compute_document_hash(stored) == result.document_hash
        assert result.document_id == generate_document_id(
            signed_lease.id, signed_lease.pdf_version, signed_lease.created_at
        )
        assert audit_service.count_actions(db, signed_lease.id, AuditAction.LEASE_FINALIZED) == 1
        assert audit_service.count_actions(db, signed_lease.id, AuditAction.PDF_GENERATED) == 1

    def test_finalize_is_idempotent(self, service, db, signed_lease):
        first = service.finalize(signed_lease.id, LANDLORD)
        second = service.finalize(signed_lease.id, TENANT)

        assert second.already_finalized is True
        assert second.document_id == first.document_id
        assert second.document_hash == first.document_hash
        assert second.pdf_url == first.pdf_url
        assert audit_service.count_actions(db, signed_lease.id, AuditAction.LEASE_FINALIZED) == 1
        assert audit_service.count_actions(db, signed_lease.id, AuditAction.PDF_GENERATED) == 1

    def test_storage_failure_leaves_lease_unsealed_and_retriable(self, db, store, signed_lease):
        with pytest.raises(StorageFailureError) as exc:
            LeaseService(db, FailingStore()).finalize(signed_lease.id, LANDLORD)
        assert exc.value.status_code == 503
        assert signed_lease.document_id is None
        assert signed_lease.document_hash is None
        assert signed_lease.pdf_url is None
        assert audit_service.count_actions(db, signed_lease.id, AuditAction.LEASE_FINALIZED) == 0

        retried = LeaseService(db, store).finalize(signed_lease.id, LANDLORD)
        assert retried.already_finalized is False
        assert retried.document_id == generate_document_id(
            signed_lease.id, signed_lease.pdf_version, signed_lease.created_at
        )

    def test_seal_written_concurrently_wins(self, db, store, signed_lease):
        class RacingStore(ArtifactStore):
            """Seals the row from another finalize while this one stores its document."""

            def put(self, data, name):
                db.query(Lease).filter(Lease.id == signed_lease.id).update(
                    Lease.seal_values("LEASE-OTHER", "0" * 64, "/leases/other.pdf"),
                    synchronize_session=False,
                )
                return store.put(data, name)

            def get(self, url):
                return store.get(url)

        result = LeaseService(db, RacingStore()).finalize(signed_lease.id, LANDLORD)

        assert result.already_finalized is True
        assert result.document_id == "LEASE-OTHER"
        assert signed_lease.pdf_url == "/leases/other.pdf"
        assert audit_service.count_actions(db, signed_lease.id, AuditAction.LEASE_FINALIZED) == 0

    def test_render_failure_leaves_lease_unsealed(self, db, store, signed_lease):
        with pytest.raises(StorageFailureError):
            LeaseService(db, store, renderer=_failing_renderer).finalize(signed_lease.id, LANDLORD)
        assert not signed_lease.is_sealed
        assert audit_service.count_actions(db, signed_lease.id, AuditAction.PDF_GENERATED) == 0


class TestAutoFinalize:

    def test_second_signature_seals_the_lease(self, db, store, lease):
        service = LeaseService(db, store, auto_finalize=True)
        service.submit_tenant_signature(lease.id, TENANT, consent_given=True)
        result = service.submit_owner_signature(lease.id, LANDLORD, consent_given=True)

        assert result.status is LeaseStatus.FINALIZED
        assert result.finalization is not None
        assert result.finalization.document_id == lease.document_id
        assert lease.is_sealed

    def test_chained_failure_keeps_the_signature(self, db, lease, caplog):
        service = LeaseService(db, FailingStore(), auto_finalize=True)
        service.submit_tenant_signature(lease.id, TENANT, consent_given=True)
        with caplog.at_level(logging.ERROR, logger="services.lease_service"):
            result = service.submit_owner_signature(lease.id, LANDLORD, consent_given=True)

        assert result.status is LeaseStatus.FINALIZED
        assert result.finalization is None
        assert not lease.is_sealed
        assert "Automatic finalization" in caplog.text
        assert audit_service.count_actions(db, lease.id, AuditAction.LEASE_OWNER_SIGNED) == 1
