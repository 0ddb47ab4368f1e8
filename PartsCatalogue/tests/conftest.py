"""
Test configuration

Every test runs against fresh in-memory hosted stores seeded with a small
catalogue; nothing talks to the network.
"""

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from PartsCatalogue.clients.memory_store import InMemoryBlobStore, InMemoryDocumentStore
from PartsCatalogue.dependencies import get_blob_store, get_document_store
from PartsCatalogue.main import app
from PartsCatalogue.repositories import ApplicationRepository, BoMRepository, PartsRepository
from PartsCatalogue.services.application_pdf_service import ApplicationPdfService
from PartsCatalogue.services.application_service import ApplicationService
from PartsCatalogue.services.bom_service import BomService
from PartsCatalogue.services.image_rehoming_service import ImageRehomingService
from PartsCatalogue.services.part_service import PartService

SEED_DATA = {
    "material_summary_2025": {
        "10001": {"SPRAS_EN": "Hex bolt M8", "Supplier_Name": "Acme Fasteners", "Standard_Price": 0.12},
        "10002": {"SPRAS_EN": "Washer M8", "Supplier_Name": "Acme Fasteners", "Standard_Price": 0.02},
        "20001": {"SPRAS_EN": "Hydraulic pump", "Supplier_Name": "Fluidworks", "Standard_Price": 420.0},
        "30001": {"SPRAS_EN": "Cable tie", "Supplier_Name": "Binders Ltd", "Standard_Price": 0.01},
    },
    "Parts": {
        "10001": {"SPRAS_EN": "Hex bolt M8 zinc", "visible": True, "notes": "Preferred"},
        "20001": {"SPRAS_EN": "Hydraulic pump", "Supplier_Name": "Fluidworks", "Standard_Price": 420.0},
        "40001": {"SPRAS_EN": "Override only bracket", "Supplier_Name": "Bracketeers"},
    },
    "BoM": {
        "TX200_2024": {
            "10001": {"Component_Description": "Hex bolt", "Standard_Price": 0.12, "Supplier": "Acme"},
            "20001": {"Component_Description": "Pump"},
            "legacy_flag": True,
        },
        "TX300_2025": {
            "30001": {"Component_Description": "Cable tie", "Standard_Price": 0.01, "Supplier": "Binders"},
        },
    },
}


def make_png(size=(8, 6), color=(200, 30, 30, 255)) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def document_store():
    return InMemoryDocumentStore(SEED_DATA)


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def parts_repository(document_store):
    return PartsRepository(document_store)


@pytest.fixture
def part_service(parts_repository, blob_store):
    return PartService(parts_repository, blob_store)


@pytest.fixture
def bom_service(document_store):
    return BomService(BoMRepository(document_store))


@pytest.fixture
def application_repository(document_store):
    return ApplicationRepository(document_store)


@pytest.fixture
def rehoming_service(blob_store, application_repository):
    return ImageRehomingService(blob_store, application_repository)


@pytest.fixture
def application_service(application_repository, blob_store, rehoming_service):
    return ApplicationService(application_repository, blob_store, rehoming_service)


@pytest.fixture
def pdf_service(blob_store):
    return ApplicationPdfService(blob_store)


@pytest.fixture
def test_client(document_store, blob_store):
    """Client whose requests all share this test's in-memory stores"""
    app.dependency_overrides[get_document_store] = lambda: document_store
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    yield TestClient(app)
    app.dependency_overrides.clear()
