"""Downloadable import template in the fixed A–O column layout."""
import csv
import io

from catalog_import.services.row_parser import COLUMNS

TEMPLATE_FILENAME = "urun-sablonu.csv"

EXAMPLE_ROWS: list[dict[str, str]] = [
    {
        "barcode": "8690000000001", "name": "Örnek Ürün 1", "stock": "50", "unit": "ADET",
        "price": "100", "tax_rate": "18", "cost": "70", "parent_category_name": "Gıda",
        "category_name": "İçecek", "alt_price": "95", "stock_code": "STK-001",
        "description": "Örnek açıklama", "quick_sale_group": "", "quick_sale_order": "",
        "min_stock": "5",
    },
    {
        "barcode": "", "name": "Örnek Ürün 2", "stock": "30", "unit": "KG",
        "price": "200", "tax_rate": "8", "cost": "140", "parent_category_name": "",
        "category_name": "Atıştırmalık", "alt_price": "", "stock_code": "STK-002",
        "description": "", "quick_sale_group": "Hızlı", "quick_sale_order": "1",
        "min_stock": "",
    },
]


def template_rows() -> list[list[str]]:
    """Header row followed by the example rows, in column order A–O."""
    header = [label for _, _, label in COLUMNS]
    body = [[example[attr] for _, attr, _ in COLUMNS] for example in EXAMPLE_ROWS]
    return [header, *body]


def render_template_csv() -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerows(template_rows())
    return buf.getvalue()
