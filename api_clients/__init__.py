"""API clients for external services."""

from .records_client import RECORDS_ENDPOINT, RecordsClient

__all__ = [
    "RECORDS_ENDPOINT",
    "RecordsClient",
]
