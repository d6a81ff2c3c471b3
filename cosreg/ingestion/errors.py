"""Ingestion exceptions."""


class IngestionError(ValueError):
    """Fatal configuration problem that stops a run before any work."""


class ColumnDetectionError(IngestionError):
    """Raised when no identifier column can be found or was given."""
