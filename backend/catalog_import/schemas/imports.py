"""Pydantic schemas for bulk catalog import: rows, outcomes and the run report."""
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field


class RawProductRow(BaseModel):
    """One retained spreadsheet row, columns A–O as cleaned text."""
    row_number: int
    barcode: str = ""
    name: str = ""
    stock: str = ""
    unit: str = ""
    price: str = ""
    tax_rate: str = ""
    cost: str = ""
    parent_category_name: str = ""
    category_name: str = ""
    alt_price: str = ""
    stock_code: str = ""
    description: str = ""
    quick_sale_group: str = ""
    quick_sale_order: str = ""
    min_stock: str = ""


class NormalizedProductRecord(BaseModel):
    row_number: int
    barcode: str | None = None
    name: str
    price: float = 0.0
    cost: float = 0.0
    stock: float = 0.0
    min_stock: float = 0.0
    unit: str
    tax_rate: float
    alt_price: float = 0.0
    stock_code: str | None = None
    category_name: str | None = None
    parent_category_name: str | None = None
    description: str | None = None
    warnings: list[str] = []


class RowStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NOT_ATTEMPTED = "not_attempted"


class RowOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    row_number: int
    status: RowStatus
    product_name: str
    product_id: Any | None = None
    category_id: Any | None = None
    reason: str | None = None
    warnings: tuple[str, ...] = ()


class ImportReport(BaseModel):
    """Final result of one import run. Built once by the aggregator, never mutated."""
    model_config = ConfigDict(frozen=True)

    total_rows: int
    succeeded: int
    failed: int
    not_attempted: int = 0
    outcomes: tuple[RowOutcome, ...] = ()
    categories_created: int = 0
    warnings: tuple[str, ...] = ()

    @computed_field
    @property
    def partial_success(self) -> bool:
        return self.succeeded > 0 and self.failed > 0

    @computed_field
    @property
    def cancelled(self) -> bool:
        return self.not_attempted > 0

    @computed_field
    @property
    def message(self) -> str:
        if self.total_rows == 0:
            return "No product rows to import"
        if self.failed == 0 and self.not_attempted == 0:
            return f"All {self.succeeded} products imported"
        if self.succeeded == 0 and self.not_attempted == 0:
            return f"Import failed for all {self.failed} rows"
        parts = [f"{self.succeeded} imported", f"{self.failed} failed"]
        if self.not_attempted:
            parts.append(f"{self.not_attempted} not attempted")
        return "Partial import: " + ", ".join(parts)


class ImportPreview(BaseModel):
    total_rows: int
    records: list[NormalizedProductRecord]


class ImportRowsRequest(BaseModel):
    """Already-decoded spreadsheet rows: column-letter mappings or positional lists."""
    rows: list[dict[str, Any] | list[Any]] = Field(default_factory=list)
