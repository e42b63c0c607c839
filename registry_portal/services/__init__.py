"""Services package."""

from registry_portal.services.registry import (
    AuditStorageInterface,
    FileNotFoundInRegistryError,
    InMemoryAuditStorage,
    InMemoryRegistryStore,
    RegistryError,
    RegistryLoadError,
    RegistryStoreInterface,
    normalize_cnic,
)

__all__ = [
    "AuditStorageInterface",
    "FileNotFoundInRegistryError",
    "InMemoryAuditStorage",
    "InMemoryRegistryStore",
    "RegistryError",
    "RegistryLoadError",
    "RegistryStoreInterface",
    "normalize_cnic",
]
