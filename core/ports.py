"""Protocols for the collaborators Labelled delegates persistence to.

``EntityStore``, ``ObjectStore`` and ``SessionProvider`` are the seams
between the catalog/labeling logic and the backing services. The sqlite,
local-directory and in-process adapters in this package satisfy them in
production; tests substitute in-memory fakes.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from core.models import EntityKind, Identity

Record = dict[str, Any]
Order = tuple[str, bool]


class EntityStore(Protocol):
    """Table-like store holding profiles, projects, dataset items and labels."""

    def select(
        self,
        kind: EntityKind,
        filters: Optional[dict[str, Any]] = None,
        order: Optional[Order] = None,
    ) -> list[Record]:
        """Return records matching all equality ``filters``, sorted by ``order``."""
        ...

    def insert(self, kind: EntityKind, record: Record) -> Record:
        """Insert a record and return it as stored (with id and timestamps)."""
        ...

    def upsert(self, kind: EntityKind, record: Record, conflict_key: str = "id") -> Record:
        """Insert a record, or update the existing one sharing ``conflict_key``."""
        ...

    def delete(self, kind: EntityKind, id: str) -> None:
        """Delete a record by id. Children are removed by the store's cascade rules."""
        ...


class ObjectStore(Protocol):
    """Blob store returning a durable public URL for each upload."""

    def upload(self, bucket: str, path: str, data: bytes, content_type: str = "") -> str:
        """Store ``data`` and return its URL. Raises ``UploadFailure``."""
        ...


class SessionProvider(Protocol):
    """Exposes the current identity and notifies subscribers when it changes."""

    def current_identity(self) -> Optional[Identity]:
        ...

    def on_change(self, callback: Callable[[Optional[Identity]], None]) -> Callable[[], None]:
        """Subscribe to identity changes. Returns an unsubscribe function."""
        ...

    def sign_in(self, email: str, password: str) -> Identity:
        ...

    def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> Identity:
        ...

    def sign_out(self) -> None:
        ...
