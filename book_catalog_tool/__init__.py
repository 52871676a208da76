"""book-catalog-tool: colon-delimited book catalog with validated ingestion and search."""

__version__ = "0.1.0"
