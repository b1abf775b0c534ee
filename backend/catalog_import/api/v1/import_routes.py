"""Bulk product import endpoints: preview, import (JSON rows or CSV upload), template."""
import csv
import io
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import Response

from catalog_import.core.config import settings
from catalog_import.core.deps import get_catalog_client
from catalog_import.core.limiter import limiter
from catalog_import.schemas.imports import ImportPreview, ImportReport, ImportRowsRequest
from catalog_import.services.catalog_client import CatalogClient
from catalog_import.services.errors import NoRowsError
from catalog_import.services.importer import run_import
from catalog_import.services.report import build_preview
from catalog_import.services.template import TEMPLATE_FILENAME, render_template_csv

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Helpers ───

def _parse_csv(content: bytes) -> list[list[str]]:
    """Decode a CSV upload into positional rows (A, B, C, ...)."""
    text = content.decode("utf-8-sig", errors="replace")
    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=",;\t")
    except csv.Error:
        dialect = csv.excel
    # only the delimiter is sniffed; quoting stays on '"'
    return list(csv.reader(io.StringIO(text), delimiter=dialect.delimiter))


def _check_rows(rows: list[Any], empty_detail: str) -> None:
    if not rows:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=empty_detail)
    if len(rows) > settings.IMPORT_MAX_ROWS:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Too many rows: {len(rows)} (max {settings.IMPORT_MAX_ROWS})",
        )


async def _read_upload(file: UploadFile) -> list[list[str]]:
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    rows = _parse_csv(content)
    _check_rows(rows, "No file provided")
    return rows


async def _import(rows: list[Any], client: CatalogClient) -> ImportReport:
    try:
        report = await run_import(rows, client)
    except NoRowsError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if report.failed:
        logger.warning("Product import finished with failures: %s", report.message)
    return report


def _preview(rows: list[Any]) -> ImportPreview:
    preview = build_preview(rows)
    if preview.total_rows == 0:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No product rows could be parsed",
        )
    return preview


# ─── Preview (no remote calls) ───

@router.post("/products/preview", response_model=ImportPreview, summary="Preview the first normalized rows")
async def preview_products(body: ImportRowsRequest):
    _check_rows(body.rows, "No rows provided")
    return _preview(body.rows)


@router.post("/products/csv/preview", response_model=ImportPreview, summary="Preview a CSV upload")
async def preview_products_csv(file: UploadFile = File(...)):
    return _preview(await _read_upload(file))


# ─── Import ───

@router.post("/products", response_model=ImportReport, summary="Bulk import products from decoded rows")
@limiter.limit(settings.IMPORT_RATE_LIMIT)
async def import_products(
    request: Request,
    body: ImportRowsRequest,
    client: Annotated[CatalogClient, Depends(get_catalog_client)],
):
    _check_rows(body.rows, "No rows provided")
    return await _import(body.rows, client)


@router.post("/products/csv", response_model=ImportReport, summary="Bulk import products from a CSV upload")
@limiter.limit(settings.IMPORT_RATE_LIMIT)
async def import_products_csv(
    request: Request,
    client: Annotated[CatalogClient, Depends(get_catalog_client)],
    file: UploadFile = File(...),
):
    rows = await _read_upload(file)
    logger.info("CSV upload '%s': %d raw rows", file.filename, len(rows))
    return await _import(rows, client)


# ─── Template ───

@router.get("/products/template", summary="Download the import template (CSV)")
async def download_template():
    return Response(
        content=render_template_csv().encode("utf-8-sig"),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )
