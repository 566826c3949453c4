"""Create lease lifecycle tables

Revision ID: 20261017_000001
Revises:
Create Date: 2026-10-17

Listings and applications (read model), leases with their seal columns,
lease and annex signatures, and the append-only audit log.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261017_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

APPLICATION_STATUS = sa.Enum(
    "DRAFT", "SUBMITTED", "ACCEPTED", "REJECTED",
    name="application_status", create_constraint=True,
)
LEASE_ORIGIN = sa.Enum("APPLICATION", "MANUAL", name="lease_origin", create_constraint=True)
LEASE_STATUS = sa.Enum(
    "DRAFT", "TENANT_SIGNED", "OWNER_SIGNED", "FINALIZED",
    name="lease_status", create_constraint=True,
)
SIGNER_ROLE = sa.Enum("TENANT", "OWNER", name="signer_role", create_constraint=True)
ANNEX_SIGNER_ROLE = sa.Enum("TENANT", "OWNER", name="annex_signer_role", create_constraint=True)
ANNEX_TYPE = sa.Enum(
    "PAYMENT_CONSENT", "CREDIT_CHECK_AUTH", "ELECTRONIC_COMMS",
    name="annex_type", create_constraint=True,
)
AUDIT_ACTION = sa.Enum(
    "LEASE_CREATED", "LEASE_TENANT_SIGNED", "LEASE_OWNER_SIGNED", "LEASE_FINALIZED",
    "PDF_GENERATED", "PDF_VIEWED", "PDF_DOWNLOADED", "ANNEX_CREATED", "ANNEX_SIGNED",
    name="audit_action", create_constraint=True,
)
AUDIT_ENTITY = sa.Enum("LEASE", "ANNEX", name="audit_entity", create_constraint=True)


def upgrade() -> None:
    op.create_table(
        "listings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("landlord_user_id", sa.Integer(), nullable=False),
        sa.Column("landlord_name", sa.String(200), nullable=True),
        sa.Column("landlord_email", sa.String(255), nullable=False),
        sa.Column("landlord_phone", sa.String(50), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("area", sa.String(100), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit", sa.Numeric(12, 2), nullable=True),
        sa.Column("min_term_months", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_listings_landlord_user_id", "listings", ["landlord_user_id"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("tenant_user_id", sa.Integer(), nullable=False),
        sa.Column("tenant_name", sa.String(200), nullable=True),
        sa.Column("tenant_email", sa.String(255), nullable=False),
        sa.Column("status", APPLICATION_STATUS, nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["listing_id"], ["listings.id"], name="fk_applications_listing_id"),
    )
    op.create_index("ix_applications_listing_id", "applications", ["listing_id"])
    op.create_index("ix_applications_tenant_user_id", "applications", ["tenant_user_id"])

    op.create_table(
        "leases",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("origin", LEASE_ORIGIN, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=True),
        sa.Column("listing_id", sa.Integer(), nullable=True),
        sa.Column("tenant_user_id", sa.Integer(), nullable=False),
        sa.Column("tenant_email", sa.String(255), nullable=False),
        sa.Column("tenant_name", sa.String(200), nullable=True),
        sa.Column("landlord_user_id", sa.Integer(), nullable=False),
        sa.Column("landlord_email", sa.String(255), nullable=False),
        sa.Column("landlord_name", sa.String(200), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("monthly_rent", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit", sa.Numeric(12, 2), nullable=False),
        sa.Column("terms", sa.Text(), nullable=True),
        sa.Column("landlord_info", sa.JSON(), nullable=True),
        sa.Column("property_info", sa.JSON(), nullable=True),
        sa.Column("lease_terms", sa.JSON(), nullable=True),
        sa.Column("additional_conditions", sa.JSON(), nullable=True),
        sa.Column("status", LEASE_STATUS, nullable=False),
        sa.Column("pdf_version", sa.Integer(), server_default="1", nullable=False),
        sa.Column("document_id", sa.String(64), nullable=True),
        sa.Column("document_hash", sa.String(64), nullable=True),
        sa.Column("pdf_url", sa.String(500), nullable=True),
        sa.Column("finalized_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], name="fk_leases_application_id"),
        sa.ForeignKeyConstraint(["listing_id"], ["listings.id"], name="fk_leases_listing_id"),
        sa.UniqueConstraint("application_id", name="uq_leases_application_id"),
        sa.UniqueConstraint("document_id", name="uq_leases_document_id"),
        sa.CheckConstraint(
            "(document_id IS NULL AND document_hash IS NULL AND pdf_url IS NULL) OR "
            "(document_id IS NOT NULL AND document_hash IS NOT NULL AND pdf_url IS NOT NULL)",
            name="ck_leases_seal_all_or_nothing",
        ),
        sa.CheckConstraint(
            "(origin = 'APPLICATION' AND application_id IS NOT NULL) OR "
            "(origin = 'MANUAL' AND application_id IS NULL)",
            name="ck_leases_origin_application",
        ),
    )
    op.create_index("ix_leases_listing_id", "leases", ["listing_id"])
    op.create_index("ix_leases_tenant_user_id", "leases", ["tenant_user_id"])
    op.create_index("ix_leases_landlord_user_id", "leases", ["landlord_user_id"])
    op.create_index("ix_leases_status", "leases", ["status"])

    op.create_table(
        "lease_signatures",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("lease_id", sa.Integer(), nullable=False),
        sa.Column("signer_role", SIGNER_ROLE, nullable=False),
        sa.Column("signer_id", sa.Integer(), nullable=False),
        sa.Column("signer_email", sa.String(255), nullable=False),
        sa.Column("signer_name", sa.String(200), nullable=True),
        sa.Column("initials", sa.String(10), nullable=True),
        sa.Column("consent_given", sa.Boolean(), nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("document_version", sa.Integer(), nullable=False),
        sa.Column("signed_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["lease_id"],
            ["leases.id"],
            name="fk_lease_signatures_lease_id",
            ondelete="RESTRICT",
        ),
        sa.UniqueConstraint("lease_id", "signer_role", name="uq_lease_signatures_lease_role"),
    )
    op.create_index("ix_lease_signatures_lease_id", "lease_signatures", ["lease_id"])

    op.create_table(
        "annex_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("lease_id", sa.Integer(), nullable=False),
        sa.Column("type", ANNEX_TYPE, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["lease_id"],
            ["leases.id"],
            name="fk_annex_documents_lease_id",
            ondelete="RESTRICT",
        ),
        sa.UniqueConstraint("lease_id", "type", name="uq_annex_documents_lease_type"),
    )
    op.create_index("ix_annex_documents_lease_id", "annex_documents", ["lease_id"])

    op.create_table(
        "annex_signatures",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("annex_id", sa.Integer(), nullable=False),
        sa.Column("signer_id", sa.Integer(), nullable=False),
        sa.Column("signer_email", sa.String(255), nullable=False),
        sa.Column("signer_name", sa.String(200), nullable=True),
        sa.Column("signer_role", ANNEX_SIGNER_ROLE, nullable=False),
        sa.Column("consent_given", sa.Boolean(), nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("document_version", sa.Integer(), nullable=False),
        sa.Column("signed_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["annex_id"],
            ["annex_documents.id"],
            name="fk_annex_signatures_annex_id",
            ondelete="RESTRICT",
        ),
        sa.UniqueConstraint("annex_id", "signer_id", name="uq_annex_signatures_annex_signer"),
    )
    op.create_index("ix_annex_signatures_annex_id", "annex_signatures", ["annex_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("action", AUDIT_ACTION, nullable=False),
        sa.Column("entity", AUDIT_ENTITY, nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("lease_id", sa.Integer(), nullable=True),
        sa.Column("annex_id", sa.Integer(), nullable=True),
        sa.Column("entity_id", sa.String(64), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["lease_id"],
            ["leases.id"],
            name="fk_audit_logs_lease_id",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["annex_id"],
            ["annex_documents.id"],
            name="fk_audit_logs_annex_id",
            ondelete="RESTRICT",
        ),
    )
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_lease_id", "audit_logs", ["lease_id"])
    op.create_index("ix_audit_logs_annex_id", "audit_logs", ["annex_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("annex_signatures")
    op.drop_table("annex_documents")
    op.drop_table("lease_signatures")
    op.drop_table("leases")
    op.drop_table("applications")
    op.drop_table("listings")
