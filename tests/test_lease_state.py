"""Status derivation and the signing transition table."""
import pytest

from models import LeaseStatus, SignerRole
from services.errors import AlreadyFinalizedError, AlreadySignedError, IntegrityFailureError
from services.lease_state import derive_status, ensure_forward, transition


class TestDeriveStatus:

    @pytest.mark.parametrize(
        "has_tenant, has_owner, expected",
        [
            (False, False, LeaseStatus.DRAFT),
            (True, False, LeaseStatus.TENANT_SIGNED),
            (False, True, LeaseStatus.OWNER_SIGNED),
            (True, True, LeaseStatus.FINALIZED),
        ],
    )
    def test_status_follows_signature_rows(self, has_tenant, has_owner, expected):
        assert derive_status(has_tenant, has_owner) is expected


class TestTransition:

    def test_first_signature_from_draft(self):
        assert transition(LeaseStatus.DRAFT, SignerRole.TENANT) is LeaseStatus.TENANT_SIGNED
        assert transition(LeaseStatus.DRAFT, SignerRole.OWNER) is LeaseStatus.OWNER_SIGNED

    def test_second_signature_completes_either_order(self):
        assert transition(LeaseStatus.TENANT_SIGNED, SignerRole.OWNER) is LeaseStatus.FINALIZED
        assert transition(LeaseStatus.OWNER_SIGNED, SignerRole.TENANT) is LeaseStatus.FINALIZED

    def test_same_role_cannot_sign_twice(self):
        with pytest.raises(AlreadySignedError) as exc:
            transition(LeaseStatus.TENANT_SIGNED, SignerRole.TENANT)
        assert "tenant" in exc.value.message

        with pytest.raises(AlreadySignedError) as exc:
            transition(LeaseStatus.OWNER_SIGNED, SignerRole.OWNER)
        assert "owner" in exc.value.message

    @pytest.mark.parametrize("role", list(SignerRole))
    def test_finalized_is_terminal(self, role):
        with pytest.raises(AlreadyFinalizedError) as exc:
            transition(LeaseStatus.FINALIZED, role)
        assert exc.value.code == "ALREADY_FINALIZED"
        assert exc.value.status_code == 409


class TestEnsureForward:

    def test_forward_moves_are_allowed(self):
        ensure_forward(LeaseStatus.DRAFT, LeaseStatus.TENANT_SIGNED)
        ensure_forward(LeaseStatus.OWNER_SIGNED, LeaseStatus.FINALIZED)
        ensure_forward(LeaseStatus.FINALIZED, LeaseStatus.FINALIZED)

    def test_regression_is_an_integrity_failure(self):
        with pytest.raises(IntegrityFailureError):
            ensure_forward(LeaseStatus.FINALIZED, LeaseStatus.TENANT_SIGNED)

    def test_sideways_move_is_an_integrity_failure(self):
        with pytest.raises(IntegrityFailureError):
            ensure_forward(LeaseStatus.TENANT_SIGNED, LeaseStatus.OWNER_SIGNED)
