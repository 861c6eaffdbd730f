"""Project-wide custom exception types."""


class IngestionError(ValueError):
    """Raised when uploaded or pasted content cannot be turned into comments."""


class UnsupportedFileTypeError(IngestionError):
    """Raised when a file extension is not one of the supported comment formats."""

    def __init__(self, filename: str) -> None:  # noqa: D401 – simple constructor
        super().__init__(
            f"Unsupported file type for '{filename}'. Use .csv, .txt or .text files."
        )
        self.filename = filename


class UnsupportedExportFormatError(ValueError):
    """Raised when an export is requested in an unknown format."""
