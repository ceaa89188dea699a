"""Service layer for contentvault."""

from typing import Optional

from contentvault.services.clipboard_service import ClipboardService
from contentvault.services.config import RedisConfig, VaultConfig
from contentvault.services.ingestion import IngestionPipeline, IngestResult, IngestStatus, classify
from contentvault.services.persistent_store import DurableSlot, PersistentStore
from contentvault.services.search import filter_items
from contentvault.services.vault_service import ContentVault


def open_vault(config: Optional[VaultConfig] = None) -> ContentVault:
    config = config or VaultConfig.from_env()
    return ContentVault(PersistentStore(config.create_backend()))


__all__ = [
    "ClipboardService",
    "ContentVault",
    "DurableSlot",
    "IngestResult",
    "IngestStatus",
    "IngestionPipeline",
    "PersistentStore",
    "RedisConfig",
    "VaultConfig",
    "classify",
    "filter_items",
    "open_vault",
]
