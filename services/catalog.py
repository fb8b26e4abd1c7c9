"""Category/brand lookups used by the product workflow."""
from __future__ import annotations

from models.db_storage import DBStorage
from services.errors import NotFound


class NameResolver:
    """Resolves a category or brand id to its display name."""

    def __init__(self, storage: DBStorage, model):
        self.storage = storage
        self.model = model

    def get_name_by_id(self, id: int) -> str:
        row = self.storage.get(self.model, id)
        if row is None:
            raise NotFound(f"{self.model.__name__} {id} not found")
        return row.name
