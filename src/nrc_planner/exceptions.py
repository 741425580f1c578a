"""Custom exceptions for catalog ingestion.

The conflict graph, selection and generator never raise for bad data;
these exceptions only cover reading catalog files.
"""


class CatalogError(Exception):
    """Base exception for catalog loading errors."""

    pass


class CatalogFileNotFoundError(CatalogError):
    """A catalog file or directory does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Catalog file not found: {path}")


class SheetNotFoundError(CatalogError):
    """Sheet not found in workbook."""

    def __init__(self, sheet_name: str, available_sheets: list[str] | None = None):
        self.sheet_name = sheet_name
        self.available_sheets = available_sheets or []
        message = f"Sheet '{sheet_name}' not found in workbook"
        if self.available_sheets:
            message += f". Available sheets: {', '.join(self.available_sheets)}"
        super().__init__(message)


class UnsupportedCatalogFormatError(CatalogError):
    """The catalog path has an unknown format."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Unsupported catalog source: {path}. "
            "Expected a directory of JSON files, a .json file or an .xlsx workbook."
        )


class InvalidCatalogDataError(CatalogError):
    """Catalog file content has the wrong shape."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        location = f" in {path}" if path else ""
        super().__init__(f"Invalid catalog data{location}: {message}")
