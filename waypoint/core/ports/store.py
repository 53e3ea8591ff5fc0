"""
Item store interface.

Durable keyed storage for content items. Reads go straight to storage, so
they always reflect the latest write.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from waypoint.core.entities import Item


class StorePort(Protocol):
    """
    Item store.

    Invariants:
    - update() replaces the given fields atomically; readers never see a
      partial edit
    - soft-deleted items are no longer returned by get()
    """

    def get(self, item_id: UUID) -> Item | None:
        """Get a live item by ID."""
        ...

    def create(
        self,
        parent_id: UUID,
        name: str,
        template_id: UUID,
        fields: dict[str, str],
    ) -> UUID:
        """Create a child item and return its new ID."""
        ...

    def update(self, item_id: UUID, fields: dict[str, str]) -> None:
        """Replace field values in one atomic edit."""
        ...

    def soft_delete(self, item_id: UUID) -> None:
        """Move item (and descendants) to the recycle bin."""
        ...

    def hard_delete(self, item_id: UUID) -> None:
        """Remove item (and descendants) permanently."""
        ...

    def delete_children(self, parent_id: UUID) -> None:
        """Permanently remove every child of an item."""
        ...
