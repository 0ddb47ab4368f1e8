"""
Unit tests for the parts repository and part service

Run against the seeded in-memory document store; faults are injected by
replacing store methods with failing AsyncMocks.
"""

import pytest
from unittest.mock import AsyncMock

from PartsCatalogue.clients.exceptions import ServerError
from PartsCatalogue.exceptions import DocumentStoreError, ValidationError
from PartsCatalogue.repositories.parts_repository import merge_part_records


class TestMergePartRecords:

    def test_override_wins_per_field(self):
        base = {"A": {"SPRAS_EN": "base", "Supplier_Name": "S1", "Standard_Price": 1}}
        overrides = {"A": {"SPRAS_EN": "override", "notes": "n"}}

        merged = merge_part_records(base, overrides)

        assert merged["A"] == {"SPRAS_EN": "override", "Supplier_Name": "S1", "Standard_Price": 1, "notes": "n"}

    def test_keys_from_both_sides_are_kept(self):
        merged = merge_part_records({"A": {"x": 1}, "B": {"x": 2}}, {"C": {"x": 3}})
        assert list(merged) == ["A", "B", "C"]

    def test_none_inputs_and_scalar_children(self):
        assert merge_part_records(None, None) == {}
        assert merge_part_records({"A": "junk", "B": {"x": 1}}, {"B": 5}) == {"B": {"x": 1}}

    def test_inputs_are_not_mutated(self):
        base = {"A": {"x": 1}}
        merge_part_records(base, {"A": {"x": 2}})
        assert base == {"A": {"x": 1}}


class TestPartsRepository:

    @pytest.mark.asyncio
    async def test_fetch_all_merges_overrides(self, parts_repository):
        parts = await parts_repository.fetch_all()

        assert parts["10001"]["SPRAS_EN"] == "Hex bolt M8 zinc"
        assert parts["10001"]["Supplier_Name"] == "Acme Fasteners"
        assert parts["10001"]["notes"] == "Preferred"
        assert "40001" in parts
        assert len(parts) == 5

    @pytest.mark.asyncio
    async def test_fetch_all_returns_empty_on_fault(self, parts_repository, document_store):
        document_store.get = AsyncMock(side_effect=ServerError("down"))
        assert await parts_repository.fetch_all() == {}

    @pytest.mark.asyncio
    async def test_empty_search_lists_base_catalogue_only(self, parts_repository):
        results = await parts_repository.search("", limit=2)

        assert list(results) == ["10001", "10002"]
        # Overrides are not applied on the empty-term path
        assert results["10001"]["SPRAS_EN"] == "Hex bolt M8"

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_across_fields(self, parts_repository):
        by_supplier = await parts_repository.search("ACME")
        by_description = await parts_repository.search("pump")
        by_code = await parts_repository.search("4000")

        assert list(by_supplier) == ["10001", "10002"]
        assert list(by_description) == ["20001"]
        assert list(by_code) == ["40001"]

    @pytest.mark.asyncio
    async def test_search_matches_overridden_values(self, parts_repository):
        results = await parts_repository.search("zinc")
        assert list(results) == ["10001"]

    @pytest.mark.asyncio
    async def test_search_stops_at_limit(self, parts_repository):
        results = await parts_repository.search("acme", limit=1)
        assert list(results) == ["10001"]

    @pytest.mark.asyncio
    async def test_search_returns_empty_on_fault(self, parts_repository, document_store):
        document_store.get = AsyncMock(side_effect=ServerError("down"))
        assert await parts_repository.search("acme") == {}
        assert await parts_repository.search("") == {}

    @pytest.mark.asyncio
    async def test_paginate_first_page(self, parts_repository):
        page, next_cursor = await parts_repository.paginate(limit=2)
        assert list(page) == ["10001", "20001"]
        assert next_cursor == "20001"

    @pytest.mark.asyncio
    async def test_paginate_drops_cursor_row(self, parts_repository):
        page, next_cursor = await parts_repository.paginate(limit=2, cursor="20001")
        assert list(page) == ["40001"]
        assert next_cursor is None

    @pytest.mark.asyncio
    async def test_paginate_with_cursor_between_keys(self, parts_repository):
        page, next_cursor = await parts_repository.paginate(limit=1, cursor="15000")
        assert list(page) == ["20001"]
        assert next_cursor == "20001"

    @pytest.mark.asyncio
    async def test_paginate_returns_empty_on_fault(self, parts_repository, document_store):
        document_store.get = AsyncMock(side_effect=ServerError("down"))
        assert await parts_repository.paginate(limit=2) == ({}, None)

    @pytest.mark.asyncio
    async def test_paginate_skips_scalar_children(self, parts_repository, document_store):
        document_store.data["Parts"] = {"A": {"SPRAS_EN": "a"}, "B": "junk", "C": {"SPRAS_EN": "c"}}

        page, next_cursor = await parts_repository.paginate(limit=2)

        assert list(page) == ["A"]
        assert next_cursor == "B"

    @pytest.mark.asyncio
    async def test_get_by_key_merges_both_sources(self, parts_repository):
        part = await parts_repository.get_by_key("10001")
        assert part == {
            "SPRAS_EN": "Hex bolt M8 zinc",
            "Supplier_Name": "Acme Fasteners",
            "Standard_Price": 0.12,
            "visible": True,
            "notes": "Preferred",
        }

    @pytest.mark.asyncio
    async def test_get_by_key_single_source_and_absent(self, parts_repository):
        assert (await parts_repository.get_by_key("10002"))["SPRAS_EN"] == "Washer M8"
        assert (await parts_repository.get_by_key("40001"))["Supplier_Name"] == "Bracketeers"
        assert await parts_repository.get_by_key("99999") is None

    @pytest.mark.asyncio
    async def test_get_by_key_returns_none_on_fault(self, parts_repository, document_store):
        document_store.get = AsyncMock(side_effect=ServerError("down"))
        assert await parts_repository.get_by_key("10001") is None

    @pytest.mark.asyncio
    async def test_update_part_data_merges_into_override(self, parts_repository, document_store):
        record = await parts_repository.update_part_data("10001", {"year": "2025", "notes": "Updated"})

        stored = await document_store.get("Parts/10001")
        assert stored == record
        assert stored["SPRAS_EN"] == "Hex bolt M8 zinc"
        assert stored["notes"] == "Updated"
        assert stored["year"] == "2025"

    @pytest.mark.asyncio
    async def test_update_part_data_creates_override_for_base_only_part(self, parts_repository, document_store):
        await parts_repository.update_part_data("30001", {"visible": False})

        assert await document_store.get("Parts/30001") == {"visible": False}
        merged = await parts_repository.get_by_key("30001")
        assert merged["visible"] is False
        assert merged["SPRAS_EN"] == "Cable tie"

    @pytest.mark.asyncio
    async def test_update_part_data_rejects_unknown_fields(self, parts_repository, document_store):
        with pytest.raises(ValidationError) as exc_info:
            await parts_repository.update_part_data("10001", {"SPRAS_EN": "renamed"})

        assert "SPRAS_EN" in exc_info.value.field_errors
        assert (await document_store.get("Parts/10001"))["SPRAS_EN"] == "Hex bolt M8 zinc"

    @pytest.mark.asyncio
    async def test_update_part_data_write_fault_propagates(self, parts_repository, document_store):
        document_store.set = AsyncMock(side_effect=ServerError("down"))

        with pytest.raises(DocumentStoreError) as exc_info:
            await parts_repository.update_part_data("10001", {"notes": "x"})
        assert exc_info.value.path == "Parts/10001"


class TestPartService:

    @pytest.mark.asyncio
    async def test_fetch_all_returns_models(self, part_service):
        parts = await part_service.fetch_all()

        assert parts["10001"].description == "Hex bolt M8 zinc"
        assert parts["10001"].supplier_name == "Acme Fasteners"
        assert parts["10002"].visible is True

    @pytest.mark.asyncio
    async def test_paginate_reports_next_cursor_when_page_full(self, part_service):
        first = await part_service.paginate(limit=2)
        assert list(first.items) == ["10001", "20001"]
        assert first.next_cursor == "20001"

        second = await part_service.paginate(limit=2, cursor=first.next_cursor)
        assert list(second.items) == ["40001"]
        assert second.next_cursor is None

    @pytest.mark.asyncio
    async def test_paginate_walks_past_junk_and_loosely_typed_rows(self, part_service, document_store):
        document_store.data["Parts"] = {
            "A": {"SPRAS_EN": "a"},
            "B": {"visible": "maybe"},
            "C": "junk",
            "D": {"SPRAS_EN": "d", "visible": "false"},
        }

        first = await part_service.paginate(limit=2)
        assert list(first.items) == ["A", "B"]
        assert first.items["B"].visible is True
        assert first.next_cursor == "B"

        second = await part_service.paginate(limit=2, cursor=first.next_cursor)
        assert list(second.items) == ["D"]
        assert second.items["D"].visible is False
        assert second.next_cursor == "D"

        third = await part_service.paginate(limit=2, cursor=second.next_cursor)
        assert third.items == {}
        assert third.next_cursor is None

    @pytest.mark.asyncio
    async def test_search_keeps_parts_with_numeric_override_fields(self, part_service, document_store):
        document_store.data["Parts"]["10001"]["year"] = 2024

        results = await part_service.search("bolt")

        assert list(results) == ["10001"]
        assert results["10001"].year == "2024"

    @pytest.mark.asyncio
    async def test_paginate_rejects_non_positive_limit(self, part_service):
        with pytest.raises(ValidationError):
            await part_service.paginate(limit=0)

    @pytest.mark.asyncio
    async def test_get_by_key(self, part_service):
        part = await part_service.get_by_key("20001")
        assert part.material == "20001"
        assert part.standard_price == 420.0
        assert await part_service.get_by_key("nope") is None

    @pytest.mark.asyncio
    async def test_hide_part_writes_visible_false(self, part_service, document_store):
        part = await part_service.hide_part("10002")

        assert part.visible is False
        assert (await document_store.get("Parts/10002"))["visible"] is False
        # Hidden parts are never deleted
        assert (await part_service.get_by_key("10002")).description == "Washer M8"

    @pytest.mark.asyncio
    async def test_upload_part_image(self, part_service, blob_store, png_bytes):
        url = await part_service.upload_part_image("10001", png_bytes, "image/png")

        assert "10001.png" in url
        assert blob_store.objects["10001.png"][0] == png_bytes

    @pytest.mark.asyncio
    async def test_upload_part_image_validation(self, part_service, blob_store, png_bytes):
        with pytest.raises(ValidationError):
            await part_service.upload_part_image("", png_bytes, "image/png")
        with pytest.raises(ValidationError):
            await part_service.upload_part_image("10001", png_bytes, "application/pdf")
        with pytest.raises(ValidationError):
            await part_service.upload_part_image("10001", b"", "image/png")
        assert blob_store.objects == {}

    def test_get_part_image_urls_fallback_chain(self, part_service):
        urls = part_service.get_part_image_urls("10001")

        assert urls == [
            "memory://local-bucket/o/10001.png?alt=media",
            "memory://local-bucket/o/10001.jpg?alt=media",
            "memory://local-bucket/o/10001.webp?alt=media",
        ]
