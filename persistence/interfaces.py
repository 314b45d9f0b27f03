from __future__ import annotations

from typing import Any, Protocol


class KeyValueDocumentStore(Protocol):
    """
    A single JSON-like document persisted under a key.
    """

    def load(self) -> dict[str, Any] | None:
        """Return the stored document, or None when nothing has been written."""
        ...

    def save(self, doc: dict[str, Any]) -> None:
        """Persist the full document atomically. Failures raise."""
        ...


class ConfigStorage(Protocol):
    """
    Durable home of configuration snapshots, addressed by (kind, id).

    Retry and durability guarantees belong to the implementation.
    """

    def store(self, kind: str, instance_id: str, snapshot: dict[str, Any]) -> None: ...

    def load(self, kind: str, instance_id: str) -> dict[str, Any] | None: ...
