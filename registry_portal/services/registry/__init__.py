"""
Registry Services Package

Provides the abstract registry interface and the in-memory implementation
backed by the ERP's JSON export.
"""

from registry_portal.services.registry.interface import (
    AuditStorageInterface,
    FileNotFoundInRegistryError,
    RegistryError,
    RegistryLoadError,
    RegistryStoreInterface,
    normalize_cnic,
)
from registry_portal.services.registry.memory import (
    InMemoryAuditStorage,
    InMemoryRegistryStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RegistryStoreInterface",
    # Exceptions
    "FileNotFoundInRegistryError",
    "RegistryError",
    "RegistryLoadError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryRegistryStore",
    "normalize_cnic",
]
