from abc import ABC, abstractmethod
from typing import Any, Optional

from catalog.schemas.product import ProductResponse


class StoreError(Exception):
    """Exception raised for any failure reported by the persistence layer."""
    pass


class ProductStore(ABC):
    """
    Persistence capability required by the product service.

    Field dictionaries passed in use the snake_case names of
    ProductResponse (is_active, not isActive). Every method raises
    StoreError when the underlying database fails; lookups by an unknown
    id return None instead of raising.
    """

    async def open(self) -> None:
        """Connect to the database and prepare the collection/table."""

    async def close(self) -> None:
        """Release connections."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise StoreError if the database is unreachable."""

    @abstractmethod
    async def insert(self, fields: dict[str, Any]) -> ProductResponse:
        """Persist a new product and return it with its assigned id."""

    @abstractmethod
    async def find_active(self) -> list[ProductResponse]:
        """Return every product whose is_active flag is true."""

    @abstractmethod
    async def get(self, product_id: str) -> Optional[ProductResponse]:
        """Return one product by id, active or not."""

    @abstractmethod
    async def update(self, product_id: str, changes: dict[str, Any]) -> Optional[ProductResponse]:
        """Apply changes atomically and return the post-update product."""

    @abstractmethod
    async def delete(self, product_id: str) -> Optional[ProductResponse]:
        """Remove a product permanently and return its last state."""

    @abstractmethod
    async def search(self, term: str) -> list[ProductResponse]:
        """
        Case-insensitive substring match of term against name,
        description and category (any of the three).
        """
