from typing import Optional


class ProductImporterError(Exception):
    """Base class for every error raised by the importer."""


# ---------- REMOTE CATALOG ----------

class CatalogError(ProductImporterError):
    # shown to the UI as-is
    user_message = "The product catalog could not be loaded."


class RemoteUnavailable(CatalogError):
    user_message = "The product catalog service is unreachable."


class RemoteBadStatus(CatalogError):
    user_message = "The product catalog service returned an error."

    def __init__(self, status_code: int, url: str = ""):
        super().__init__(f"Catalog request to {url} failed with HTTP {status_code}")
        self.status_code = status_code
        self.url = url


class RemoteMalformedPayload(CatalogError):
    user_message = "The product catalog returned data in an unexpected format."


class NotFound(CatalogError):
    user_message = "Product not found in the catalog."

    def __init__(self, item_id: str):
        super().__init__(f"Catalog item {item_id!r} not found")
        self.item_id = item_id


# ---------- IMPORT / BACKUP ----------

class ValidationSkipped(ProductImporterError):
    """A single selected item was rejected; the rest of the batch continues."""

    def __init__(self, reason: str, item_id: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.item_id = item_id


class StorageWriteFailure(ProductImporterError):
    user_message = "The import could not be saved. No products were changed."


class ChunkFailure(ProductImporterError):
    """One backup chunk could not be written; other chunks are unaffected."""

    def __init__(self, chunk_index: int, size: int, reason: str):
        super().__init__(f"Backup chunk {chunk_index} ({size} products) failed: {reason}")
        self.chunk_index = chunk_index
        self.size = size
        self.reason = reason
