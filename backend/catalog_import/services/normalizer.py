"""Cell cleaning and typed projection of spreadsheet rows.

Spreadsheet exports from other POS systems arrive with stray quoting
(`'8690000000001`, `"Cola"`), trailing semicolons from CSV round-trips and
thousand separators in numeric cells. Everything here is pure and never raises.
"""
import math
import re
from typing import Any

from catalog_import.core.config import settings
from catalog_import.schemas.imports import NormalizedProductRecord, RawProductRow

QUOTE_CHARS = "\"';`´"

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def clean_text(value: Any) -> str:
    """Return the cell as a trimmed string with surrounding quote/punctuation runs removed."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value)
    while True:
        stripped = text.strip().strip(QUOTE_CHARS)
        if stripped == text:
            return text
        text = stripped


def _parse_number(value: Any) -> float | None:
    """Parse a cell as a number. None when the cell is non-empty but unparseable."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    text = clean_text(value)
    if not text:
        return 0.0
    digits = _NON_NUMERIC.sub("", text)
    try:
        number = float(digits)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def clean_numeric(value: Any) -> float:
    """Coerce a numeric-looking cell to float; 0 for blank or garbled input."""
    number = _parse_number(value)
    return 0.0 if number is None else number


def _numeric_field(raw: str, label: str, warnings: list[str]) -> float:
    number = _parse_number(raw)
    if number is None:
        warnings.append(f"{label} value '{raw}' is not a number, using 0")
        return 0.0
    if number < 0:
        warnings.append(f"{label} value '{raw}' is negative, using 0")
        return 0.0
    text = clean_text(raw)
    if _NON_NUMERIC.sub("", text) != text:
        warnings.append(f"{label} value '{raw}' has non-numeric characters, read as {number:g}")
    return number


def normalize_row(raw: RawProductRow) -> NormalizedProductRecord:
    """Project a cleaned row onto typed catalog fields, applying the catalog defaults.

    Garbled numeric cells silently become 0 (or the field default); each such
    cell adds a warning to the record so the report can flag it.
    """
    warnings: list[str] = []

    price = _numeric_field(raw.price, "price", warnings)
    cost = _numeric_field(raw.cost, "cost", warnings)
    stock = _numeric_field(raw.stock, "stock", warnings)
    min_stock = _numeric_field(raw.min_stock, "min_stock", warnings)
    alt_price = _numeric_field(raw.alt_price, "alt_price", warnings)
    tax_rate = _numeric_field(raw.tax_rate, "tax_rate", warnings)

    return NormalizedProductRecord(
        row_number=raw.row_number,
        barcode=raw.barcode or None,
        name=raw.name,
        price=price,
        cost=cost,
        stock=stock,
        min_stock=math.floor(min_stock) or settings.DEFAULT_MIN_STOCK,
        unit=raw.unit or settings.DEFAULT_UNIT,
        tax_rate=tax_rate or settings.DEFAULT_TAX_RATE,
        alt_price=alt_price,
        stock_code=raw.stock_code or None,
        category_name=raw.category_name or None,
        parent_category_name=raw.parent_category_name or None,
        description=raw.description or raw.stock_code or None,
        warnings=warnings,
    )
