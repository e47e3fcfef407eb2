from lease_service.app.crud.lease_builder.lease_renderer import BaseLeaseRenderer, get_lease_renderer
from lease_service.app.main import app
from lease_service.app.models.lease_documents.lease_documents import LeaseDocument
from lease_service.app.models.lease_documents.signature_requests import SignatureRequest
from lease_service.app.models.lease_templates.lease_templates import LeaseTemplate


class ExplodingRenderer(BaseLeaseRenderer):
    def render_markup(self, resolved):
        raise RuntimeError("template engine unavailable")


def test_preview_returns_html(client, lease_payload):
    response = client.post("/api/lease-builder/preview", json=lease_payload())

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Residential Lease Agreement" in response.text
    assert "Maple Court" in response.text


def test_preview_accepts_snake_case(client, seed):
    payload = {
        "property_id": str(seed["property_id"]),
        "rent_amount": "1200",
        "unit_name": "Garden Suite",
        "lease_terms": {"start_date": "2025-03-01", "is_month_to_month": True},
    }
    response = client.post("/api/lease-builder/preview", json=payload)

    assert response.status_code == 200
    assert "Garden Suite" in response.text
    assert "Month-to-Month" in response.text


def test_preview_surfaces_warnings(client, lease_payload):
    payload = lease_payload(customizations={"tenantPaysUtilities": ["Electric"],
                                            "landlordPaysUtilities": ["Water"]})
    response = client.post("/api/lease-builder/preview", json=payload)
    assert "UTILITY_UNASSIGNED" in response.headers["x-lease-warnings"]


def test_preview_and_generate_render_the_same_document(client, lease_payload, db):
    preview = client.post("/api/lease-builder/preview", json=lease_payload())
    generated = client.post("/api/lease-builder/generate", json=lease_payload())

    assert generated.status_code == 200
    body = generated.json()
    ref = body["data"]["document"]
    assert body["status_code"] == "101"
    assert ref["status"] == "pending_signature"
    assert ref["document_hash"] == preview.headers["x-document-hash"]

    html = client.get(f"/api/lease-documents/{ref['id']}/html")
    assert html.text == preview.text


def test_generate_validation_error(client, lease_payload):
    payload = lease_payload(customizations={"tenantPaysUtilities": ["Water"],
                                            "landlordPaysUtilities": ["Water"]})
    response = client.post("/api/lease-builder/generate", json=payload)

    assert response.status_code == 422
    body = response.json()
    assert body["status"] == "Failure"
    assert body["status_code"] == "400"
    assert body["data"][0]["field"] == "utilities"


def test_missing_rent_without_unit(client, lease_payload):
    payload = lease_payload(unitId=None)
    payload.pop("unitId")
    response = client.post("/api/lease-builder/generate", json=payload)
    assert response.status_code == 422
    assert response.json()["data"][0]["field"] == "rent_amount"


def test_unknown_property(client, lease_payload):
    payload = lease_payload(propertyId="7b7c3c1e-51a4-4c3c-9a4e-000000000000")
    response = client.post("/api/lease-builder/generate", json=payload)
    assert response.status_code == 404


def test_render_failure_rolls_back(client, lease_payload, db):
    app.dependency_overrides[get_lease_renderer] = lambda: ExplodingRenderer()

    response = client.post("/api/lease-builder/generate",
                           json=lease_payload(saveAsTemplate=True))

    assert response.status_code == 502
    assert response.json()["status_code"] == "402"
    assert db.query(LeaseDocument).count() == 0
    assert db.query(SignatureRequest).count() == 0
    assert db.query(LeaseTemplate).count() == 0


def test_signing_through_links(client, lease_payload, db):
    ref = client.post("/api/lease-builder/generate", json=lease_payload()).json()["data"]["document"]
    tokens = {r.role: r.token for r in db.query(SignatureRequest).all()}

    first = client.post(f"/api/sign/{tokens['tenant']}", json={"signerName": "Jamie Renter"})
    assert first.json()["data"]["status"] == "pending_signature"

    second = client.post(f"/api/sign/{tokens['landlord']}", json={})
    assert second.json()["data"]["status"] == "active"

    doc = client.get(f"/api/lease-documents/{ref['id']}").json()["data"]
    assert doc["status"] == "active"
    assert {r["status"] for r in doc["signature_requests"]} == {"signed"}

    audit = client.get(f"/api/lease-documents/{ref['id']}/audit").json()["data"]
    assert "executed" in [e["event_type"] for e in audit]


def test_decline_then_sign_conflicts(client, lease_payload, act_as, users):
    ref = client.post("/api/lease-builder/generate", json=lease_payload()).json()["data"]["document"]

    act_as(users["tenant"])
    declined = client.post(f"/api/lease-documents/{ref['id']}/signatures",
                           json={"role": "tenant", "outcome": "declined"})
    assert declined.json()["data"]["status"] == "declined"

    act_as(users["admin"])
    conflict = client.post(f"/api/lease-documents/{ref['id']}/signatures",
                           json={"role": "landlord", "outcome": "signed"})
    assert conflict.status_code == 409
    assert conflict.json()["status_code"] == "403"

    regenerated = client.post(f"/api/lease-documents/{ref['id']}/regenerate")
    assert regenerated.status_code == 200
    assert regenerated.json()["data"]["document"]["status"] == "pending_signature"


def test_terminate_endpoint(client, lease_payload, seed):
    ref = client.post("/api/lease-builder/generate", json=lease_payload()).json()["data"]["document"]

    response = client.post(f"/api/lease-documents/{ref['id']}/terminate",
                           json={"reason": "non_renewal", "terminationDate": "2025-06-30"})
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "terminated"

    again = client.post(f"/api/lease-documents/{ref['id']}/terminate", json={"reason": "eviction"})
    assert again.status_code == 409

    listed = client.get(f"/api/lease-documents/property/{seed['property_id']}",
                        params={"status": "terminated"})
    assert [d["id"] for d in listed.json()["data"]] == [ref["id"]]


def test_set_default_and_delete_templates(client, seed):
    pid = str(seed["property_id"])
    created = client.post("/api/lease-templates/", json={
        "name": "Standard", "propertyIds": [pid], "isDefault": True,
        "builderConfig": {"gracePeriodDays": 3},
    }).json()["data"]
    other = client.post("/api/lease-templates/", json={
        "name": "Other", "propertyIds": [pid],
    }).json()["data"]

    swapped = client.post("/api/lease-templates/set-default",
                          json={"templateId": other["id"], "propertyId": pid})
    assert swapped.status_code == 200
    assert swapped.json()["data"]["is_default"] is True

    default = client.get(f"/api/lease-templates/property/{pid}/default").json()["data"]
    assert default["id"] == other["id"]

    deleted = client.delete(f"/api/lease-templates/{other['id']}")
    assert deleted.status_code == 200
    assert client.get(f"/api/lease-templates/property/{pid}/default").json()["data"] is None

    listed = client.get(f"/api/lease-templates/property/{pid}").json()["data"]
    assert [t["id"] for t in listed] == [created["id"]]
    assert listed[0]["is_default"] is False


def test_set_default_unassociated_template(client, seed):
    template = client.post("/api/lease-templates/", json={
        "name": "Elsewhere", "propertyIds": [str(seed["other_property_id"])],
    }).json()["data"]

    response = client.post("/api/lease-templates/set-default", json={
        "templateId": template["id"], "propertyId": str(seed["property_id"])})

    assert response.status_code == 409
    assert response.json()["status_code"] == "401"
