"""
Route tests through the FastAPI app with in-memory stores
"""

import pytest
from unittest.mock import AsyncMock

from PartsCatalogue.clients.exceptions import ServerError


def submit(test_client, png_bytes, **overrides):
    form = {
        "requested_by": "Dana Smith",
        "department": "Maintenance",
        "priority": "medium",
        "specifications": "M10 stainless hex bolt",
        "supplier": "Acme Fasteners",
        "standard_price": "0.35",
        "notes": "",
        "justification": "Corrosion",
    }
    form.update(overrides)
    return test_client.post(
        "/api/applications",
        data=form,
        files={"image": ("photo.png", png_bytes, "image/png")},
    )


class TestHealth:

    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestPartsRoutes:

    def test_search(self, test_client):
        response = test_client.get("/api/parts/search", params={"q": "acme"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert list(body["data"]) == ["10001", "10002"]
        assert body["data"]["10001"]["SPRAS_EN"] == "Hex bolt M8 zinc"

    def test_page_with_cursor(self, test_client):
        first = test_client.get("/api/parts/page", params={"limit": 2}).json()
        assert list(first["data"]) == ["10001", "20001"]
        assert first["page_size"] == 2
        assert first["next_cursor"] == "20001"

        second = test_client.get("/api/parts/page", params={"limit": 2, "cursor": first["next_cursor"]}).json()
        assert list(second["data"]) == ["40001"]
        assert second["next_cursor"] is None

    def test_all(self, test_client):
        body = test_client.get("/api/parts/all").json()
        assert len(body["data"]) == 5

    def test_get_part_and_not_found(self, test_client):
        found = test_client.get("/api/parts/20001")
        missing = test_client.get("/api/parts/99999")

        assert found.status_code == 200
        assert found.json()["data"]["material"] == "20001"
        assert missing.status_code == 404
        assert missing.json()["status"] == "error"

    def test_read_fault_degrades_to_empty(self, test_client, document_store):
        document_store.get = AsyncMock(side_effect=ServerError("down"))

        response = test_client.get("/api/parts/all")

        assert response.status_code == 200
        assert response.json()["data"] == {}

    def test_patch_and_hide(self, test_client, document_store):
        patched = test_client.patch("/api/parts/10002", json={"notes": "Check stock", "year": "2025"})
        hidden = test_client.post("/api/parts/10002/hide")

        assert patched.status_code == 200
        assert patched.json()["data"]["notes"] == "Check stock"
        assert hidden.json()["data"]["visible"] is False
        assert document_store.data["Parts"]["10002"] == {"notes": "Check stock", "year": "2025", "visible": False}

    def test_patch_rejects_unknown_field(self, test_client):
        response = test_client.patch("/api/parts/10002", json={"SPRAS_EN": "renamed"})
        assert response.status_code == 422

    def test_patch_write_fault_is_service_unavailable(self, test_client, document_store):
        document_store.set = AsyncMock(side_effect=ServerError("down"))

        response = test_client.patch("/api/parts/10002", json={"notes": "x"})

        assert response.status_code == 503
        assert response.json()["status"] == "error"

    def test_upload_image_and_urls(self, test_client, blob_store, png_bytes):
        uploaded = test_client.post("/api/parts/10001/image", files={"image": ("p.png", png_bytes, "image/png")})
        rejected = test_client.post("/api/parts/10001/image", files={"image": ("p.txt", b"text", "text/plain")})
        urls = test_client.get("/api/parts/10001/image-urls").json()["data"]

        assert uploaded.status_code == 200
        assert "10001.png" in blob_store.objects
        assert rejected.status_code == 422
        assert [url.split("?")[0].rsplit(".", 1)[1] for url in urls] == ["png", "jpg", "webp"]


class TestBomRoutes:

    def test_models_and_components(self, test_client):
        models = test_client.get("/api/bom/models").json()["data"]
        components = test_client.get("/api/bom/models/TX200_2024/components").json()["data"]

        assert sorted(models) == ["TX200_2024", "TX300_2025"]
        assert components["20001"] == {
            "Component_Material": "20001",
            "Component_Description": "Pump",
            "Standard_Price": 0,
            "Supplier": "",
        }


class TestApplicationRoutes:

    def test_submit_list_and_get(self, test_client, png_bytes):
        response = submit(test_client, png_bytes)

        assert response.status_code == 200
        application_id = response.json()["data"]["id"]

        listed = test_client.get("/api/applications").json()["data"]
        fetched = test_client.get(f"/api/applications/{application_id}").json()["data"]

        assert [item["id"] for item in listed] == [application_id]
        assert fetched["status"] == "pending"
        assert fetched["requestedBy"] == "Dana Smith"

    def test_submit_missing_field(self, test_client, png_bytes, blob_store):
        response = submit(test_client, png_bytes, supplier="")

        assert response.status_code == 422
        assert response.json()["message"] == "Missing required field: supplier"
        assert blob_store.objects == {}

    def test_submit_without_image(self, test_client):
        response = test_client.post("/api/applications", data={
            "requested_by": "Dana", "department": "Ops", "specifications": "s",
            "supplier": "x", "standard_price": "1",
        })

        assert response.status_code == 422
        assert response.json()["data"]["missing_fields"] == ["image"]

    def test_approve_rehomes_image_in_background(self, test_client, png_bytes, blob_store, document_store):
        application_id = submit(test_client, png_bytes).json()["data"]["id"]

        response = test_client.post(f"/api/applications/{application_id}/approve", json={"part_code": "P-100"})

        assert response.status_code == 200
        assert response.json()["data"]["partCode"] == "P-100"
        # TestClient runs background tasks before returning
        assert "P-100.png" in blob_store.objects
        assert f"{application_id}.png" not in blob_store.objects
        record = document_store.data["PartApplications"][application_id]
        assert record["imageUrl"].startswith("memory://local-bucket/o/P-100.png")

    def test_approve_twice_conflicts(self, test_client, png_bytes):
        application_id = submit(test_client, png_bytes).json()["data"]["id"]
        test_client.post(f"/api/applications/{application_id}/approve", json={"part_code": "P-100"})

        again = test_client.post(f"/api/applications/{application_id}/approve", json={"part_code": "P-200"})

        assert again.status_code == 409

    def test_reject(self, test_client, png_bytes):
        application_id = submit(test_client, png_bytes).json()["data"]["id"]

        response = test_client.post(f"/api/applications/{application_id}/reject", json={"reason": "Duplicate"})

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "rejected"
        assert response.json()["data"]["rejectionReason"] == "Duplicate"

    @pytest.mark.parametrize("path", ["", "/approve", "/reject", "/pdf"])
    def test_missing_application(self, test_client, path):
        if path in ("/approve", "/reject"):
            response = test_client.post(f"/api/applications/missing{path}", json={"part_code": "P-1"})
        else:
            response = test_client.get(f"/api/applications/missing{path}")
        assert response.status_code == 404

    def test_pdf_download(self, test_client, png_bytes):
        application_id = submit(test_client, png_bytes).json()["data"]["id"]

        response = test_client.get(f"/api/applications/{application_id}/pdf")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert f"{application_id}_application.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")
