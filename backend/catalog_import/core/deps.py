from collections.abc import AsyncGenerator

from catalog_import.services.catalog_client import CatalogClient


async def get_catalog_client() -> AsyncGenerator[CatalogClient, None]:
    """One catalog client per request; closed when the response is done."""
    client = CatalogClient.from_settings()
    try:
        yield client
    finally:
        await client.aclose()
