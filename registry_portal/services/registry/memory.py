"""
In-Memory Registry

Serves the registry from a JSON export of the ERP:

    {"users": [...], "files": [{"fileNo": ..., "transactions": [...]}, ...]}

The whole export is validated up front, so a malformed record fails the
load loudly instead of surfacing later as a half-rendered statement.

The audit store here keeps recent events in memory for the portal's
activity panel; it is not a persistence layer.
"""

import json
from collections import deque
from pathlib import Path
from typing import Iterable, Optional, Union
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from registry_portal.models.audit import AuditEvent
from registry_portal.models.ledger import PropertyFile
from registry_portal.models.portal import User
from registry_portal.services.registry.interface import (
    AuditStorageInterface,
    RegistryLoadError,
    RegistryStoreInterface,
)

_FILES = TypeAdapter(list[PropertyFile])
_USERS = TypeAdapter(list[User])


class InMemoryRegistryStore(RegistryStoreInterface):
    """Registry held entirely in memory, in export order."""

    def __init__(
        self,
        files: Iterable[PropertyFile] = (),
        users: Iterable[User] = (),
    ):
        self._files: dict[str, PropertyFile] = {}
        for file in files:
            if file.file_no in self._files:
                raise RegistryLoadError(f"Duplicate file number: {file.file_no}")
            self._files[file.file_no] = file
        self._users = {user.id: user for user in users}

    @classmethod
    def from_dict(cls, data: dict) -> "InMemoryRegistryStore":
        """Build a store from an already-decoded export."""
        try:
            files = _FILES.validate_python(data.get("files", []))
            users = _USERS.validate_python(data.get("users", []))
        except ValidationError as e:
            raise RegistryLoadError(f"Registry export failed validation: {e}") from e
        return cls(files=files, users=users)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "InMemoryRegistryStore":
        """Load a registry export from disk."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise RegistryLoadError(f"Could not read registry export {path}: {e}") from e
        if not isinstance(data, dict):
            raise RegistryLoadError(f"Registry export {path} must be a JSON object")
        return cls.from_dict(data)

    @property
    def file_count(self) -> int:
        return len(self._files)

    @property
    def user_count(self) -> int:
        return len(self._users)

    async def list_files(self) -> list[PropertyFile]:
        return list(self._files.values())

    async def get_file(self, file_no: str) -> Optional[PropertyFile]:
        return self._files.get(file_no)

    async def list_users(self) -> list[User]:
        return list(self._users.values())

    async def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)


class InMemoryAuditStorage(AuditStorageInterface):
    """Bounded, append-only buffer of recent audit events."""

    def __init__(self, max_events: int = 500):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
