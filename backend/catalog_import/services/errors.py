"""Exception types raised by the catalog import pipeline."""


class CatalogImportError(Exception):
    """Base class for import pipeline errors."""


class NoRowsError(CatalogImportError):
    """The upload produced zero product rows; raised before any row is processed."""


class RowValidationError(CatalogImportError):
    """A required field is missing; the row is never sent to the catalog."""


class CatalogError(CatalogImportError):
    """The remote catalog rejected a call or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CategoryResolutionError(CatalogError):
    """Category lookup or creation failed. Non-fatal: the row goes in uncategorized."""


class SubmissionError(CatalogError):
    """Product creation failed for one row."""
