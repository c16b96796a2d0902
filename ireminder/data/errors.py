"""Store errors — every store operation either applies fully or raises one of these."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for rejected store operations. State is left unchanged."""


class ValidationError(StoreError, ValueError):
    """Raised when input is rejected before any mutation (e.g. a blank title)."""


class NotFoundError(StoreError, LookupError):
    """Raised when an update/delete targets an id the store does not hold."""

    def __init__(self, kind: str, item_id: str) -> None:
        super().__init__(f"{kind} {item_id} not found")
        self.kind = kind
        self.item_id = item_id
