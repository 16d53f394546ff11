# src/client/__init__.py
from .folio import (
    DEFAULT_BASE_URL,
    DEFAULT_EXPIRATION_DAYS,
    AsyncFolioGateway,
    FolioClient,
    SaleGateway,
    max_expiration_date,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_EXPIRATION_DAYS",
    "AsyncFolioGateway",
    "FolioClient",
    "SaleGateway",
    "max_expiration_date",
]
