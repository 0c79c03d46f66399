"""Financial, inspection, contract and document endpoints."""

import io

import pytest


@pytest.fixture
def seeded(backend):
    backend.add_request(full_name="Ana Souza", user_id="uid-1", estimated_cost=500,
                        payment_status="pending", payment_amount=None, payment_notes="")
    backend.add_request(full_name="Bruno Lima", user_id="uid-2", estimated_cost=900)
    return backend


# ---------- financial ----------
def test_financial_update_requires_request_id(client, seeded, login_as):
    login_as("financial_inspector")
    r = client.post("/api/financial", json={"payment_status": "paid"})
    assert r.status_code == 400
    assert r.get_json()["message"] == "Missing rental_request_id"


def test_financial_update_with_no_fields(client, seeded, login_as):
    login_as("manager")
    r = client.post("/api/financial", json={"rental_request_id": "1"})
    assert r.status_code == 400
    assert r.get_json()["message"] == "No fields to update"


def test_financial_update_applies_fields(client, seeded, login_as):
    login_as("financial_inspector")
    r = client.post("/api/financial", json={"rental_request_id": "1", "payment_status": "paid",
                                            "payment_amount": 0})
    assert r.status_code == 200
    assert r.get_json()["message"] == "Financial information updated successfully"
    assert seeded.rental_requests["1"]["payment_status"] == "paid"
    assert seeded.rental_requests["1"]["payment_amount"] == 0


def test_financial_update_rejects_unknown_payment_status(client, seeded, login_as):
    login_as("financial_inspector")
    r = client.post("/api/financial", json={"rental_request_id": "1", "payment_status": "refunded"})
    assert r.status_code == 400
    assert r.get_json()["message"] == "Invalid payment status"
    assert seeded.calls_named("update_rental_request") == []
    assert seeded.rental_requests["1"]["payment_status"] == "pending"


def test_financial_update_forbidden_for_equipment_inspector(client, seeded, login_as):
    login_as("equipment_inspector")
    r = client.post("/api/financial", json={"rental_request_id": "1", "payment_status": "paid"})
    assert r.status_code == 403


def test_client_reads_only_own_financials_with_basic_fields(client, seeded, login_as):
    login_as("client", user_id="uid-1")
    r = client.get("/api/financial?rental_request_id=1")
    assert r.status_code == 200
    assert "payment_notes" not in r.get_json()["data"]

    r = client.get("/api/financial?rental_request_id=2")
    assert r.status_code == 403


def test_manager_reads_full_financials(client, seeded, login_as):
    login_as("manager")
    r = client.get("/api/financial?rental_request_id=2")
    assert r.status_code == 200
    assert "payment_notes" in r.get_json()["data"]


def test_financial_read_requires_id(client, seeded, login_as):
    login_as("manager")
    r = client.get("/api/financial")
    assert r.status_code == 400


# ---------- inspections ----------
def test_inspection_submit_marks_request(client, seeded, login_as):
    login_as("equipment_inspector", user_id="insp-1")
    r = client.post("/api/inspections", json={
        "rental_request_id": "1", "equipment_id": "cam-1", "inspection_type": "initial", "notes": "ok",
    })
    assert r.status_code == 200
    assert seeded.inspections[0]["inspector_id"] == "insp-1"
    assert seeded.rental_requests["1"]["initial_inspection_status"] == "completed"


def test_inspection_submit_requires_fields(client, seeded, login_as):
    login_as("manager")
    r = client.post("/api/inspections", json={"rental_request_id": "1"})
    assert r.status_code == 400
    assert r.get_json()["message"] == "Missing required fields"
    assert seeded.calls_named("insert_inspection") == []


def test_client_sees_only_inspections_of_own_requests(client, seeded, login_as):
    seeded.inspections = [
        {"rental_request_id": "1", "inspection_type": "initial"},
        {"rental_request_id": "2", "inspection_type": "initial"},
    ]
    login_as("client", user_id="uid-1")
    data = client.get("/api/inspections").get_json()["data"]
    assert [i["rental_request_id"] for i in data] == ["1"]


def test_client_without_requests_gets_empty_inspection_list(client, seeded, login_as):
    seeded.inspections = [{"rental_request_id": "1", "inspection_type": "final"}]
    login_as("client", user_id="nobody")
    assert client.get("/api/inspections").get_json()["data"] == []


def test_financial_inspector_cannot_list_inspections(client, seeded, login_as):
    login_as("financial_inspector")
    assert client.get("/api/inspections").status_code == 403


# ---------- contracts ----------
def test_generate_contract(client, seeded, login_as):
    login_as("manager")
    r = client.post("/api/contracts", json={"rental_request_id": "1"})
    assert r.status_code == 200
    url = r.get_json()["data"]["contractUrl"]
    assert url.startswith("https://example.com/contracts/RNT-100001_contract_") and url.endswith(".pdf")
    assert seeded.rental_requests["1"]["contract_status"] == "generated"


def test_generate_contract_unknown_request(client, seeded, login_as):
    login_as("manager")
    r = client.post("/api/contracts", json={"rental_request_id": "99"})
    assert r.status_code == 500
    assert r.get_json()["message"] == "Failed to fetch rental request data"


def test_contract_status_validation(client, seeded, login_as):
    login_as("manager")
    r = client.patch("/api/contracts", json={"rental_request_id": "1", "contract_status": "lost"})
    assert r.status_code == 400
    assert r.get_json()["message"] == "Invalid contract status"

    r = client.patch("/api/contracts", json={"rental_request_id": "1", "contract_status": "signed"})
    assert r.status_code == 200
    assert seeded.rental_requests["1"]["contract_status"] == "signed"


def test_contracts_are_manager_only(client, seeded, login_as):
    login_as("financial_inspector")
    r = client.post("/api/contracts", json={"rental_request_id": "1"})
    assert r.status_code == 403
    assert r.get_json()["message"] == "Only managers can generate contracts"


# ---------- documents ----------
def _upload(client, request_id, document_type, name="id card.pdf"):
    return client.post("/api/documents", data={
        "rental_request_id": request_id,
        "document_type": document_type,
        "files": (io.BytesIO(b"%PDF-1.4"), name),
    }, content_type="multipart/form-data")


def test_client_uploads_own_documents(client, seeded, login_as):
    login_as("client", user_id="uid-1")
    r = _upload(client, "1", "client-documents")
    assert r.status_code == 200
    urls = seeded.rental_requests["1"]["document_urls"]
    assert len(urls) == 1 and urls[0].endswith("_id_card.pdf")
    assert any(path.startswith("1/client-documents/") for path in seeded.uploads)


def test_client_cannot_upload_to_foreign_request(client, seeded, login_as):
    login_as("client", user_id="uid-1")
    r = _upload(client, "2", "client-documents")
    assert r.status_code == 403
    assert seeded.uploads == {}


def test_document_type_permissions(client, seeded, login_as):
    login_as("client", user_id="uid-1")
    r = _upload(client, "1", "contracts")
    assert r.status_code == 403
    assert r.get_json()["message"] == "You do not have permission to upload this document type"


def test_upload_requires_files(client, seeded, login_as):
    login_as("manager")
    r = client.post("/api/documents", data={"rental_request_id": "1", "document_type": "contracts"},
                    content_type="multipart/form-data")
    assert r.status_code == 400
