"""
Shared fixtures: an in-memory SQLite database built from the models, a
temporary-directory artifact store, JWTs for both parties, and factories
for listings, applications and leases.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LEASE_AUTO_FINALIZE", "false")

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import config
from database import enable_sqlite_savepoints, get_session
from main import app
from models import (
    Application,
    ApplicationStatus,
    Base,
    Lease,
    LeaseOrigin,
    LeaseStatus,
    Listing,
)
from services.artifact_store import LocalArtifactStore, get_artifact_store
from services.lease_service import LeaseService, Principal

TENANT_ID = 101
LANDLORD_ID = 202
STRANGER_ID = 303

TENANT = Principal(id=TENANT_ID, role="tenant", email="tenant@example.com", name="Jane Tenant")
LANDLORD = Principal(id=LANDLORD_ID, role="landlord", email="owner@example.com", name="Omar Owner")
STRANGER = Principal(id=STRANGER_ID, role="tenant", email="other@example.com", name="Sam Stranger")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def store(tmp_path):
    return LocalArtifactStore(str(tmp_path / "leases"), public_prefix="/leases")


@pytest.fixture
def service(db, store):
    return LeaseService(db, store)


@pytest.fixture
def client(db, store):
    def _session_override():
        # each request sees fresh state, as with a new session
        db.expire_all()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_artifact_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_token(principal: Principal) -> str:
    payload = {
        "id": principal.id,
        "role": principal.role,
        "email": principal.email,
        "name": principal.name,
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def auth_headers(principal: Principal) -> dict:
    return {"Authorization": f"Bearer {make_token(principal)}"}


@pytest.fixture
def tenant_headers():
    return auth_headers(TENANT)


@pytest.fixture
def landlord_headers():
    return auth_headers(LANDLORD)


@pytest.fixture
def stranger_headers():
    return auth_headers(STRANGER)


@pytest.fixture
def listing(db):
    listing = Listing(
        landlord_user_id=LANDLORD_ID,
        landlord_name="Omar Owner",
        landlord_email="owner@example.com",
        landlord_phone="514-555-0100",
        address="123 Maple Street, Apt 4",
        city="Montreal",
        area="Plateau",
        postal_code="H2T 1A1",
        price=Decimal("1450.00"),
        deposit=None,
        min_term_months=12,
    )
    db.add(listing)
    db.commit()
    return listing


@pytest.fixture
def make_application(db, listing):
    def _make(status=ApplicationStatus.SUBMITTED, tenant=TENANT):
        application = Application(
            listing_id=listing.id,
            tenant_user_id=tenant.id,
            tenant_name=tenant.name,
            tenant_email=tenant.email,
            status=status,
        )
        db.add(application)
        db.commit()
        return application

    return _make


@pytest.fixture
def make_lease(db, listing):
    def _make(**overrides):
        start = date.today() + timedelta(days=30)
        values = dict(
            origin=LeaseOrigin.MANUAL,
            listing_id=listing.id,
            tenant_user_id=TENANT_ID,
            tenant_email=TENANT.email,
            tenant_name=TENANT.name,
            landlord_user_id=LANDLORD_ID,
            landlord_email=LANDLORD.email,
            landlord_name=LANDLORD.name,
            start_date=start,
            end_date=start + timedelta(days=365),
            monthly_rent=Decimal("1450.00"),
            deposit=Decimal("1450.00"),
            terms="12-month lease. Standard residential rental conditions.",
            landlord_info=listing.landlord_snapshot(),
            property_info=listing.property_snapshot(),
            lease_terms={"utilities": "Heating included"},
            status=LeaseStatus.DRAFT,
        )
        values.update(overrides)
        lease = Lease(**values)
        db.add(lease)
        db.commit()
        return lease

    return _make


@pytest.fixture
def lease(make_lease):
    return make_lease()


@pytest.fixture
def signed_lease(service, lease):
    """Lease carrying both signatures, not sealed yet."""
    service.submit_tenant_signature(lease.id, TENANT, consent_given=True, initials="JT")
    service.submit_owner_signature(lease.id, LANDLORD, consent_given=True, initials="OO")
    service.db.commit()
    return lease


@pytest.fixture
def sealed_lease(service, signed_lease):
    service.finalize(signed_lease.id, LANDLORD)
    service.db.commit()
    return signed_lease
