import os
import uuid
from datetime import date
from decimal import Decimal

# must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient

from shared.core.auth import validate_current_token
from shared.core.database import Base, LeaseSessionLocal, get_lease_db, lease_engine
from shared.core.schemas import UserToken
from lease_service.app.main import app
from lease_service.app.crud.lease_builder.lease_renderer import get_lease_renderer
from lease_service.app.models.property_safe.properties_safe import PropertySafe
from lease_service.app.models.property_safe.tenants_safe import TenantSafe
from lease_service.app.models.property_safe.units_safe import UnitSafe
from lease_service.app.schemas.lease_builder.lease_builder_schemas import (
    Customizations, LeaseGenerateRequest, LeaseTermInput
)

ORG_ID = uuid.UUID("00000000-0000-0000-0000-0000000000aa")

ADMIN = UserToken(user_id="admin-1", org_id=ORG_ID, name="Pat Owner",
                  account_type="organization", status="active")

TENANT_USER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000bb")

TENANT_USER = UserToken(user_id=str(TENANT_USER_ID), org_id=ORG_ID, name="Jamie Renter",
                        account_type="tenant", status="active")


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=lease_engine)
    Base.metadata.create_all(bind=lease_engine)
    yield


@pytest.fixture
def db():
    session = LeaseSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    """A pre-1978 California property with one unit and one tenant, plus a second property."""
    prop = PropertySafe(
        org_id=ORG_ID, name="Maple Court", street="12 Maple St", city="Oakland",
        state="CA", zip_code="94607", year_built=1965, amenities=["Laundry room"],
        landlord_name="Pat Owner", landlord_email="owner@example.com",
    )
    other = PropertySafe(
        org_id=ORG_ID, name="Birch House", street="4 Birch Rd", city="Austin",
        state="TX", zip_code="73301", year_built=2005,
    )
    db.add_all([prop, other])
    db.flush()
    unit = UnitSafe(property_id=prop.id, name="2B", unit_type="Apartment",
                    rent_amount=Decimal("1500.00"))
    tenant = TenantSafe(org_id=ORG_ID, user_id=TENANT_USER_ID, name="Jamie Renter",
                        email="jamie@example.com")
    db.add_all([unit, tenant])
    db.commit()
    return {
        "property_id": prop.id,
        "other_property_id": other.id,
        "unit_id": unit.id,
        "tenant_id": tenant.id,
    }


@pytest.fixture
def lease_request(seed):
    def build(**overrides):
        data = {
            "property_id": seed["property_id"],
            "unit_id": seed["unit_id"],
            "tenant_id": seed["tenant_id"],
            "lease_terms": LeaseTermInput(start_date=date(2025, 1, 1), end_date=date(2025, 12, 31)),
            "customizations": Customizations(),
        }
        data.update(overrides)
        return LeaseGenerateRequest(**data)
    return build


@pytest.fixture
def client(seed):
    def override_get_db():
        session = LeaseSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_lease_db] = override_get_db
    app.dependency_overrides[validate_current_token] = lambda: ADMIN
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def renderer():
    return get_lease_renderer()


@pytest.fixture
def lease_payload(seed):
    def build(**overrides):
        payload = {
            "propertyId": str(seed["property_id"]),
            "unitId": str(seed["unit_id"]),
            "tenantId": str(seed["tenant_id"]),
            "leaseTerms": {"startDate": "2025-01-01", "endDate": "2025-12-31"},
            "customizations": {},
        }
        payload.update(overrides)
        return payload
    return build


@pytest.fixture
def act_as(client):
    """Switch the bearer the client's requests are authenticated as."""
    def switch(user):
        app.dependency_overrides[validate_current_token] = lambda: user
    return switch


@pytest.fixture
def users():
    return {
        "admin": ADMIN,
        "tenant": TENANT_USER,
        "outsider": UserToken(user_id="intruder-1", org_id=uuid.uuid4(), name="Lee Outsider",
                              account_type="tenant", status="active"),
        "other_org_admin": UserToken(user_id="admin-9", org_id=uuid.uuid4(), name="Sam Rival",
                                     account_type="organization", status="active"),
        "stranger_tenant": UserToken(user_id=str(uuid.uuid4()), org_id=ORG_ID, name="Robin Stranger",
                                     account_type="tenant", status="active"),
    }
