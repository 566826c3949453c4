import re
from datetime import date, datetime
from decimal import Decimal

from services.document_renderer import LeaseSnapshot, SignatureSnapshot, render_lease_document


def _snapshot(**overrides):
    values = dict(
        lease_id=7,
        document_id="LEASE-7-V1-0A1B2C3D",
        document_version=1,
        tenant_name="Jane Tenant",
        tenant_email="tenant@example.com",
        start_date=date(2026, 7, 1),
        end_date=date(2027, 7, 1),
        monthly_rent=Decimal("1450.00"),
        deposit=Decimal("1450.00"),
        terms="12-month lease.",
        landlord_info={"name": "Omar Owner", "email": "owner@example.com"},
        property_info={"address": "123 Maple Street", "city": "Montreal", "postalCode": "H2T 1A1"},
        lease_terms={"utilities": "Heating included", "pets": False},
        additional_conditions="No smoking on the balcony.",
        tenant_signature=SignatureSnapshot(
            role="TENANT",
            signer_name="Jane Tenant",
            signer_email="tenant@example.com",
            initials="JT",
            consent_given=True,
            signed_at=datetime(2026, 6, 1, 9, 0, 0),
            document_version=1,
        ),
        owner_signature=SignatureSnapshot(
            role="OWNER",
            signer_name="Omar Owner",
            signer_email="owner@example.com",
            initials="OO",
            consent_given=True,
            signed_at=datetime(2026, 6, 2, 10, 0, 0),
            document_version=1,
        ),
    )
    values.update(overrides)
    return LeaseSnapshot(**values)


class TestRenderLeaseDocument:

    def test_output_is_a_pdf(self):
        data = render_lease_document(_snapshot())
        assert data.startswith(b"%PDF")
        assert b"%%EOF" in data[-32:]

    def test_identical_snapshots_render_identical_bytes(self):
        assert render_lease_document(_snapshot()) == render_lease_document(_snapshot())

    def test_content_change_changes_bytes(self):
        assert render_lease_document(_snapshot()) != render_lease_document(
            _snapshot(monthly_rent=Decimal("1500.00"))
        )

    def test_document_id_is_printed(self):
        # page streams are left uncompressed
        assert b"LEASE-7-V1-0A1B2C3D" in render_lease_document(_snapshot())

    def test_long_terms_span_pages(self):
        long_terms = " ".join(["The tenant keeps the premises in good order."] * 400)
        data = render_lease_document(_snapshot(terms=long_terms))
        page_count = max(int(n) for n in re.findall(rb"/Count (\d+)", data))
        assert page_count >= 2
