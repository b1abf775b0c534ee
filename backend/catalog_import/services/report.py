"""Result aggregation for import runs and the pre-commit preview."""
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from catalog_import.core.config import settings
from catalog_import.schemas.imports import (
    ImportPreview,
    ImportReport,
    RawProductRow,
    RowOutcome,
    RowStatus,
)
from catalog_import.services.normalizer import normalize_row
from catalog_import.services.row_parser import parse_rows


class ResultAggregator:
    """Collects row outcomes in the order they are recorded and builds the final report."""

    def __init__(self, total_rows: int):
        self.total_rows = total_rows
        self.succeeded = 0
        self.failed = 0
        self.not_attempted = 0
        self.categories_created = 0
        self._outcomes: list[RowOutcome] = []
        self._report: ImportReport | None = None

    def _record(self, outcome: RowOutcome) -> None:
        if self._report is not None:
            raise RuntimeError("Import report already finalized")
        self._outcomes.append(outcome)

    def record_success(
        self,
        row: RawProductRow,
        product_id: Any,
        category_id: Any | None = None,
        warnings: Sequence[str] = (),
    ) -> None:
        self.succeeded += 1
        self._record(RowOutcome(
            row_number=row.row_number,
            status=RowStatus.SUCCEEDED,
            product_name=row.name,
            product_id=product_id,
            category_id=category_id,
            warnings=tuple(warnings),
        ))

    def record_failure(self, row: RawProductRow, reason: str, warnings: Sequence[str] = ()) -> None:
        self.failed += 1
        self._record(RowOutcome(
            row_number=row.row_number,
            status=RowStatus.FAILED,
            product_name=row.name,
            reason=reason,
            warnings=tuple(warnings),
        ))

    def record_not_attempted(self, row: RawProductRow) -> None:
        self.not_attempted += 1
        self._record(RowOutcome(
            row_number=row.row_number,
            status=RowStatus.NOT_ATTEMPTED,
            product_name=row.name,
            reason="not attempted: import cancelled",
        ))

    def finalize(self) -> ImportReport:
        if self._report is None:
            warnings = tuple(
                f"Row {o.row_number}: {w}" for o in self._outcomes for w in o.warnings
            )
            self._report = ImportReport(
                total_rows=self.total_rows,
                succeeded=self.succeeded,
                failed=self.failed,
                not_attempted=self.not_attempted,
                outcomes=tuple(self._outcomes),
                categories_created=self.categories_created,
                warnings=warnings,
            )
        return self._report


def build_preview(
    rows: Iterable[Mapping[str, Any] | Sequence[Any]],
    limit: int | None = None,
) -> ImportPreview:
    """Parse and normalize rows for display only; nothing is resolved or submitted."""
    limit = settings.IMPORT_PREVIEW_LIMIT if limit is None else limit
    parsed = parse_rows(rows)
    records = [normalize_row(raw) for raw in parsed[:limit]]
    return ImportPreview(total_rows=len(parsed), records=records)
