"""Bulk product import orchestrator.

Rows go through a single worker task fed by a queue, strictly in input
order. Category resolution mutates the per-run CategoryCache, so rows are
never submitted in parallel: two rows naming the same unseen category would
otherwise both try to create it.

Per-row errors never abort the run; each row ends up succeeded, failed, or
(after cancellation) not attempted.
"""
import asyncio
import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from catalog_import.schemas.imports import ImportReport, NormalizedProductRecord, RawProductRow
from catalog_import.services.catalog_client import CatalogClient
from catalog_import.services.category_resolver import CategoryCache, CategoryResolver
from catalog_import.services.errors import NoRowsError, RowValidationError, SubmissionError
from catalog_import.services.normalizer import normalize_row
from catalog_import.services.report import ResultAggregator
from catalog_import.services.row_parser import parse_rows

logger = logging.getLogger(__name__)

MISSING_NAME = "missing name"
GENERIC_SUBMIT_ERROR = "Product could not be created"


def build_product_payload(record: NormalizedProductRecord, category_id: Any | None) -> dict[str, Any]:
    """Build the POST /products body. Barcode and categoryId are omitted when absent."""
    payload: dict[str, Any] = {
        "name": record.name,
        "price": record.price,
        "cost": record.cost,
        "stock": math.floor(record.stock),
        "unit": record.unit,
        "taxRate": record.tax_rate,
        "minStock": math.floor(record.min_stock),
        "description": record.description or "",
    }
    if record.barcode:
        payload["barcode"] = record.barcode
    if category_id is not None:
        payload["categoryId"] = category_id
    return payload


class ProductImporter:
    """Runs one import. Create a new instance per run; its CategoryCache dies with it."""

    def __init__(self, client: CatalogClient, cache: CategoryCache | None = None):
        self.client = client
        self.cache = cache if cache is not None else CategoryCache()
        self.resolver = CategoryResolver(client, self.cache)

    async def run(
        self,
        rows: Sequence[RawProductRow],
        cancel_event: asyncio.Event | None = None,
    ) -> ImportReport:
        aggregator = ResultAggregator(total_rows=len(rows))
        logger.info("Import started: %d rows", len(rows))

        await self.resolver.prime()

        queue: asyncio.Queue[RawProductRow | None] = asyncio.Queue()
        for row in rows:
            queue.put_nowait(row)
        queue.put_nowait(None)

        await asyncio.create_task(self._worker(queue, aggregator, cancel_event))

        aggregator.categories_created = self.cache.created
        report = aggregator.finalize()
        logger.info(
            "Import finished: %d succeeded, %d failed, %d not attempted, %d categories created",
            report.succeeded, report.failed, report.not_attempted, report.categories_created,
        )
        return report

    async def _worker(
        self,
        queue: "asyncio.Queue[RawProductRow | None]",
        aggregator: ResultAggregator,
        cancel_event: asyncio.Event | None,
    ) -> None:
        while True:
            row = await queue.get()
            if row is None:
                return
            if cancel_event is not None and cancel_event.is_set():
                aggregator.record_not_attempted(row)
                continue
            await self._process_row(row, aggregator)

    async def _process_row(self, row: RawProductRow, aggregator: ResultAggregator) -> None:
        record = normalize_row(row)
        try:
            if not record.name:
                raise RowValidationError(MISSING_NAME)
            category_id = await self.resolver.resolve(record.category_name, record.parent_category_name)
            payload = build_product_payload(record, category_id)
            product_id = await self.client.create_product(payload)
        except RowValidationError as exc:
            logger.info("Row %d skipped: %s", row.row_number, exc)
            aggregator.record_failure(row, str(exc), record.warnings)
        except SubmissionError as exc:
            reason = exc.message or GENERIC_SUBMIT_ERROR
            logger.warning("Row %d (%s) failed: %s", row.row_number, row.name, reason)
            aggregator.record_failure(row, reason, record.warnings)
        except Exception as exc:
            logger.error("Row %d (%s) failed unexpectedly: %s", row.row_number, row.name, exc, exc_info=True)
            aggregator.record_failure(row, str(exc) or GENERIC_SUBMIT_ERROR, record.warnings)
        else:
            aggregator.record_success(row, product_id, category_id, record.warnings)


async def run_import(
    rows: Iterable[Mapping[str, Any] | Sequence[Any]],
    client: CatalogClient,
    *,
    cancel_event: asyncio.Event | None = None,
) -> ImportReport:
    """Parse decoded spreadsheet rows and import them into the catalog.

    Args:
        rows: Decoded rows, each a mapping of column letter (A–O) to cell value
            or a positional list of cells.
        client: Catalog REST client.
        cancel_event: Checked between rows; once set, remaining rows are
            recorded as not attempted.

    Raises:
        NoRowsError: nothing parseable was found. Raised before any remote call.
    """
    parsed = parse_rows(rows)
    if not parsed:
        raise NoRowsError("No product rows could be parsed")
    return await ProductImporter(client).run(parsed, cancel_event)
