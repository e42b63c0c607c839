"""
Abstract Registry Interface

DESIGN DECISION: Registry access goes through an abstract interface.
This allows us to:
1. Serve the mock JSON export today
2. Swap in the live ERP sync later without touching the ledger engine
3. Use in-memory fixtures for testing

Registry data is read-only from the portal's point of view. The interface
only exposes lookups; the ERP remains the source of truth.
"""

import re
from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from registry_portal.models.audit import AuditEvent
from registry_portal.models.ledger import PropertyFile
from registry_portal.models.portal import User


def normalize_cnic(cnic: str) -> str:
    """Strip dashes and spaces from a CNIC so formatted and bare forms match."""
    return re.sub(r"[^0-9X]", "", (cnic or "").upper())


class RegistryStoreInterface(ABC):
    """
    Abstract interface for registry lookups.

    Any data source (mock export, ERP sync, database)
    must implement these methods.
    """

    @abstractmethod
    async def list_files(self) -> list[PropertyFile]:
        """
        List every property file in the registry.

        Returns:
            Files in registry order
        """
        pass

    @abstractmethod
    async def get_file(self, file_no: str) -> Optional[PropertyFile]:
        """
        Retrieve a file by its file number.

        Returns:
            The file if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_users(self) -> list[User]:
        """List every portal user."""
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        pass

    async def files_for_user(self, user: User) -> list[PropertyFile]:
        """
        Files visible to a user.

        Admins see the whole registry. Clients see the files whose
        owner CNIC matches their own.
        """
        files = await self.list_files()
        if user.is_admin:
            return files
        cnic = normalize_cnic(user.cnic)
        if not cnic:
            return []
        return [f for f in files if normalize_cnic(f.owner_cnic) == cnic]


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events of one render pass or user action.

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class RegistryError(Exception):
    """Base exception for registry operations."""
    pass


class FileNotFoundInRegistryError(RegistryError):
    """File does not exist, or is not visible to the requesting user."""

    def __init__(self, file_no: str):
        self.file_no = file_no
        super().__init__(f"Property file {file_no} not found in registry")


class RegistryLoadError(RegistryError):
    """The registry export could not be read or did not validate."""
    pass
