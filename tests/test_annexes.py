"""Annex documents: idempotent creation and per-signer signatures."""
import pytest

from conftest import LANDLORD, STRANGER, TENANT
from models import AnnexDocument, AnnexSignature, AnnexType, AuditAction, AuditLog, SignerRole
from services.annex_service import DEFAULT_ANNEXES, AnnexService
from services.errors import AlreadySignedError, ForbiddenError, LeaseValidationError, NotFoundError


@pytest.fixture
def annex_service(db):
    return AnnexService(db)


class TestCreateAnnexes:

    def test_creates_the_default_set_at_version_one(self, annex_service, db, lease):
        annexes = annex_service.create_for_lease(lease.id, LANDLORD)

        assert [a.type for a in annexes] == [t for t, _, _ in DEFAULT_ANNEXES]
        assert {a.type for a in annexes} == set(AnnexType)
        assert all(a.version == 1 for a in annexes)
        created = db.query(AuditLog).filter(AuditLog.action == AuditAction.ANNEX_CREATED).all()
        assert sorted(entry.annex_id for entry in created) == sorted(a.id for a in annexes)

    def test_second_call_returns_the_original_set(self, annex_service, db, lease):
        first = annex_service.create_for_lease(lease.id, LANDLORD)
        second = annex_service.create_for_lease(lease.id, LANDLORD)

        assert [a.id for a in second] == [a.id for a in first]
        assert db.query(AnnexDocument).filter(AnnexDocument.lease_id == lease.id).count() == 3
        assert db.query(AuditLog).filter(AuditLog.action == AuditAction.ANNEX_CREATED).count() == 3

    def test_only_the_landlord_creates_annexes(self, annex_service, lease):
        with pytest.raises(ForbiddenError):
            annex_service.create_for_lease(lease.id, TENANT)

    def test_unknown_lease(self, annex_service):
        with pytest.raises(NotFoundError):
            annex_service.create_for_lease(9999, LANDLORD)


class TestSignAnnex:

    @pytest.fixture
    def annex(self, annex_service, lease):
        return annex_service.create_for_lease(lease.id, LANDLORD)[0]

    def test_tenant_and_landlord_sign_independently(self, annex_service, db, annex):
        tenant_sig = annex_service.sign_annex(annex.id, TENANT, consent_given=True, ip_address="198.51.100.7")
        owner_sig = annex_service.sign_annex(annex.id, LANDLORD, consent_given=True)

        assert tenant_sig.signer_role is SignerRole.TENANT
        assert owner_sig.signer_role is SignerRole.OWNER
        db.expire(tenant_sig)
        assert tenant_sig.signer_role is SignerRole.TENANT
        assert tenant_sig.document_version == annex.version
        assert db.query(AnnexSignature).filter(AnnexSignature.annex_id == annex.id).count() == 2
        signed = db.query(AuditLog).filter(AuditLog.action == AuditAction.ANNEX_SIGNED).all()
        assert len(signed) == 2
        assert all(entry.annex_id == annex.id for entry in signed)

    def test_same_signer_twice(self, annex_service, annex):
        annex_service.sign_annex(annex.id, TENANT, consent_given=True)
        with pytest.raises(AlreadySignedError):
            annex_service.sign_annex(annex.id, TENANT, consent_given=True)

    def test_consent_is_required(self, annex_service, annex):
        with pytest.raises(LeaseValidationError):
            annex_service.sign_annex(annex.id, TENANT, consent_given=False)

    def test_stranger_is_refused(self, annex_service, annex):
        with pytest.raises(ForbiddenError):
            annex_service.sign_annex(annex.id, STRANGER, consent_given=True)

    def test_unknown_annex(self, annex_service):
        with pytest.raises(NotFoundError):
            annex_service.sign_annex(9999, TENANT, consent_given=True)

    def test_listing_includes_signatures(self, annex_service, annex, lease):
        annex_service.sign_annex(annex.id, TENANT, consent_given=True)
        listed = annex_service.list_annexes(lease.id, TENANT)
        assert len(listed) == 3
        first = next(a for a in listed if a.id == annex.id)
        assert [s.signer_id for s in first.signatures] == [TENANT.id]
