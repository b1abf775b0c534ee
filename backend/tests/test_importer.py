"""Tests for the bulk import orchestrator.

A small in-memory FakeCatalog stands in for the remote service so the
tests can count category/product calls and inject per-row failures.
"""
import asyncio

import pytest

from catalog_import.schemas.imports import RowStatus
from catalog_import.services.errors import CategoryResolutionError, NoRowsError, SubmissionError
from catalog_import.services.importer import ProductImporter, build_product_payload, run_import
from catalog_import.services.normalizer import normalize_row
from catalog_import.services.row_parser import parse_rows


# ─── Helpers ──────────────────────────────────────────────────────────────────

class FakeCatalog:
    """In-memory catalog recording every call the importer makes."""

    def __init__(self, categories=None, fail_products=(), fail_categories=()):
        self.categories = list(categories or [])
        self.fail_products = set(fail_products)
        self.fail_categories = set(fail_categories)
        self.list_calls = 0
        self.category_posts: list[dict] = []
        self.product_posts: list[dict] = []
        self._next_id = 1

    async def list_categories(self):
        self.list_calls += 1
        return list(self.categories)

    async def create_category(self, name, description=None):
        self.category_posts.append({"name": name, "description": description})
        if name in self.fail_categories:
            raise CategoryResolutionError("category service down", status_code=500)
        category = {"id": f"cat-{len(self.category_posts)}", "name": name}
        self.categories.append(category)
        return category

    async def create_product(self, payload):
        self.product_posts.append(payload)
        if payload["name"] in self.fail_products:
            raise SubmissionError("Barcode already exists", status_code=409)
        product_id = self._next_id
        self._next_id += 1
        return product_id


def _rows(*names, category=""):
    return [{"A": "", "B": name, "C": "10", "E": "20", "I": category} for name in names]


# ─── Payload ──────────────────────────────────────────────────────────────────

def test_payload_omits_blank_barcode_and_applies_defaults():
    [raw] = parse_rows([{"B": "Cola 330ml", "C": "100.9", "E": "15", "F": "", "O": ""}])
    payload = build_product_payload(normalize_row(raw), None)

    assert "barcode" not in payload
    assert "categoryId" not in payload
    assert payload["stock"] == 100
    assert payload["taxRate"] == 18.0
    assert payload["minStock"] == 5
    assert payload["unit"] == "ADET"
    assert payload["price"] == 15.0


def test_payload_keeps_explicit_values():
    [raw] = parse_rows([{
        "A": "'8690000000001", "B": "Süt", "D": "LT", "E": "30", "F": "8", "G": "22",
        "K": "STK-7", "O": "12",
    }])
    payload = build_product_payload(normalize_row(raw), "cat-9")

    assert payload["barcode"] == "8690000000001"
    assert payload["taxRate"] == 8.0
    assert payload["minStock"] == 12
    assert payload["cost"] == 22.0
    assert payload["unit"] == "LT"
    assert payload["description"] == "STK-7"
    assert payload["categoryId"] == "cat-9"


# ─── Orchestration ────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_end_to_end_cola_drinks():
    catalog = FakeCatalog()
    rows = [
        {"A": "Barkod", "B": "Ürün Adı"},
        {"A": "", "B": "Cola 330ml", "C": "100", "E": "15", "I": "Drinks"},
        {"A": "", "B": "", "C": "5"},
    ]

    report = await run_import(rows, catalog)

    assert report.total_rows == 1
    assert report.succeeded == 1
    assert report.failed == 0
    assert [c["name"] for c in catalog.category_posts] == ["Drinks"]
    assert catalog.list_calls == 1
    assert catalog.product_posts[0]["categoryId"] == "cat-1"
    assert catalog.product_posts[0]["stock"] == 100
    assert report.message == "All 1 products imported"


@pytest.mark.asyncio
async def test_same_unseen_category_created_exactly_once():
    catalog = FakeCatalog()

    report = await run_import(_rows("Cola", "Fanta", "Sprite", "Ayran", category="Beverages"), catalog)

    assert report.succeeded == 4
    assert len(catalog.category_posts) == 1
    assert {p["categoryId"] for p in catalog.product_posts} == {"cat-1"}
    assert report.categories_created == 1


@pytest.mark.asyncio
async def test_existing_category_reused_without_creation():
    catalog = FakeCatalog(categories=[{"id": 42, "name": "beverages"}])

    await run_import(_rows("Cola", "Fanta", category="Beverages"), catalog)

    assert catalog.category_posts == []
    assert [p["categoryId"] for p in catalog.product_posts] == [42, 42]


@pytest.mark.asyncio
async def test_one_failing_row_does_not_stop_the_run():
    """Row 5 of 10 fails submission; the other nine still go in."""
    names = [f"Product {i}" for i in range(1, 11)]
    catalog = FakeCatalog(fail_products={"Product 5"})

    report = await run_import(_rows(*names), catalog)

    assert report.total_rows == 10
    assert report.succeeded == 9
    assert report.failed == 1
    assert report.partial_success is True
    assert len(catalog.product_posts) == 10

    failed = [o for o in report.outcomes if o.status == RowStatus.FAILED]
    assert len(failed) == 1
    assert failed[0].product_name == "Product 5"
    assert failed[0].row_number == 5
    assert failed[0].reason == "Barcode already exists"
    assert [o.product_name for o in report.outcomes] == names
    assert report.message.startswith("Partial import")


@pytest.mark.asyncio
async def test_row_without_name_is_never_submitted():
    catalog = FakeCatalog()
    rows = [{"A": "8690000000009", "B": "", "E": "5"}, {"A": "", "B": "Su", "E": "3"}]

    report = await run_import(rows, catalog)

    assert report.failed == 1
    assert report.succeeded == 1
    assert [p["name"] for p in catalog.product_posts] == ["Su"]
    assert report.outcomes[0].status == RowStatus.FAILED
    assert report.outcomes[0].reason == "missing name"


@pytest.mark.asyncio
async def test_category_failure_submits_product_uncategorized():
    catalog = FakeCatalog(fail_categories={"Broken"})

    report = await run_import(_rows("Cola", "Fanta", category="Broken"), catalog)

    assert report.succeeded == 2
    assert len(catalog.category_posts) == 1
    assert all("categoryId" not in p for p in catalog.product_posts)


@pytest.mark.asyncio
async def test_unexpected_error_is_recorded_per_row():
    catalog = FakeCatalog()
    original = catalog.create_product

    async def flaky(payload):
        if payload["name"] == "Bozuk":
            raise RuntimeError("connection reset")
        return await original(payload)

    catalog.create_product = flaky

    report = await run_import(_rows("Cola", "Bozuk", "Su"), catalog)

    assert report.succeeded == 2
    assert report.failed == 1
    assert report.outcomes[1].reason == "connection reset"


@pytest.mark.asyncio
async def test_zero_parsed_rows_raises_before_any_remote_call():
    catalog = FakeCatalog()

    with pytest.raises(NoRowsError):
        await run_import([{"A": "Barkod", "B": "Ürün Adı"}, {"A": "", "B": ""}], catalog)

    assert catalog.list_calls == 0


@pytest.mark.asyncio
async def test_cancellation_marks_remaining_rows_not_attempted():
    catalog = FakeCatalog()
    cancel = asyncio.Event()
    original = catalog.create_product

    async def cancel_after_second(payload):
        product_id = await original(payload)
        if len(catalog.product_posts) == 2:
            cancel.set()
        return product_id

    catalog.create_product = cancel_after_second
    rows = parse_rows(_rows("A1", "A2", "A3", "A4"))

    report = await ProductImporter(catalog).run(rows, cancel_event=cancel)

    assert report.succeeded == 2
    assert report.failed == 0
    assert report.not_attempted == 2
    assert report.cancelled is True
    assert [o.status for o in report.outcomes] == [
        RowStatus.SUCCEEDED, RowStatus.SUCCEEDED, RowStatus.NOT_ATTEMPTED, RowStatus.NOT_ATTEMPTED,
    ]
    assert len(catalog.product_posts) == 2


@pytest.mark.asyncio
async def test_low_confidence_cells_surface_as_report_warnings():
    catalog = FakeCatalog()
    rows = [{"B": "Çay", "E": "on beş"}]

    report = await run_import(rows, catalog)

    assert report.succeeded == 1
    assert catalog.product_posts[0]["price"] == 0.0
    assert report.outcomes[0].warnings
    assert report.warnings[0].startswith("Row 1:")
