"""Positional spreadsheet rows (columns A–O) → RawProductRow."""
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from catalog_import.schemas.imports import RawProductRow
from catalog_import.services.normalizer import clean_text

# Fixed 15-column layout shared with the downloadable template
COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("A", "barcode", "Barkod"),
    ("B", "name", "Ürün Adı"),
    ("C", "stock", "Adet"),
    ("D", "unit", "Birim"),
    ("E", "price", "Fiyat 1"),
    ("F", "tax_rate", "KDV"),
    ("G", "cost", "Alış Fiyatı"),
    ("H", "parent_category_name", "Üst Grup"),
    ("I", "category_name", "Ürün Grubu"),
    ("J", "alt_price", "Fiyat 2"),
    ("K", "stock_code", "Stok Kodu"),
    ("L", "description", "Ürün Detayı"),
    ("M", "quick_sale_group", "Hızlı Grup"),
    ("N", "quick_sale_order", "Sıra"),
    ("O", "min_stock", "Kritik Stok"),
)

COLUMN_LETTERS = tuple(letter for letter, _, _ in COLUMNS)

HEADER_MARKERS = ("barkod", "ürün", "urun")


def _as_letter_map(row: Mapping[str, Any] | Sequence[Any]) -> dict[str, Any]:
    if isinstance(row, Mapping):
        return {str(k).strip().upper(): v for k, v in row.items()}
    return dict(zip(COLUMN_LETTERS, row))


def is_header_row(row: Mapping[str, Any] | Sequence[Any]) -> bool:
    cells = _as_letter_map(row)
    for letter in ("A", "B"):
        text = clean_text(cells.get(letter)).lower()
        if any(marker in text for marker in HEADER_MARKERS):
            return True
    return False


def parse_rows(rows: Iterable[Mapping[str, Any] | Sequence[Any]]) -> list[RawProductRow]:
    """Map decoded rows onto RawProductRow, skipping a header row and blank rows.

    Only the first row is checked for a header. A row is dropped without trace
    when both barcode (A) and name (B) are empty after cleaning. row_number is
    the 1-based spreadsheet row, so it still points at the right line when a
    header or blank rows were skipped.
    """
    parsed: list[RawProductRow] = []
    for idx, row in enumerate(rows, start=1):
        if idx == 1 and is_header_row(row):
            continue
        cells = _as_letter_map(row)
        fields = {attr: clean_text(cells.get(letter)) for letter, attr, _ in COLUMNS}
        if not fields["barcode"] and not fields["name"]:
            continue
        parsed.append(RawProductRow(row_number=idx, **fields))
    return parsed
