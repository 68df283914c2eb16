import logging
from typing import Any, List

from catalog.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from catalog.stores.base import ProductStore

logger = logging.getLogger(__name__)


class ProductValidationError(Exception):
    """Exception raised when required input is missing or invalid."""
    pass


class ProductNotFoundError(Exception):
    """Exception raised when the requested product doesn't exist."""
    pass


class ProductService:
    """
    Service class for Product CRUD operations.

    This service handles:
    - Creating products (required field checks)
    - Listing active products
    - Reading a single product
    - Partial updates with the field merge rules below
    - Hard deletes
    - Substring search

    MERGE RULES FOR UPDATES:
    ========================
    name, price, category and sku are applied only when the incoming value
    is truthy, so "" and 0 leave the stored value untouched. description,
    quantity and is_active are applied whenever the key is present in the
    request body, including "", 0, false and null.

    Store failures are not caught here; StoreError propagates to the API
    layer unchanged.
    """

    REQUIRED_FIELDS = ("name", "price", "category", "sku")
    TRUTHY_UPDATE_FIELDS = ("name", "price", "category", "sku")
    PRESENT_UPDATE_FIELDS = ("description", "quantity", "is_active")

    def __init__(self, store: ProductStore):
        self.store = store

    async def create(self, product_data: ProductCreate) -> ProductResponse:
        """
        Create a new product.

        Args:
            product_data: Product creation data

        Returns:
            Created product including its store-assigned id

        Raises:
            ProductValidationError: If name, price, category or sku is missing
                or falsy (a price of 0 counts as missing)
        """
        if not all(getattr(product_data, field) for field in self.REQUIRED_FIELDS):
            raise ProductValidationError("Missing required fields")

        product = await self.store.insert({
            "name": product_data.name,
            "description": product_data.description,
            "price": product_data.price,
            "quantity": product_data.quantity if product_data.quantity is not None else 0,
            "category": product_data.category,
            "sku": product_data.sku,
            "is_active": True,
        })

        logger.info(f"Product {product.id} created (sku={product.sku})")
        return product

    async def get_all(self) -> List[ProductResponse]:
        """Get every active product in store order."""
        return await self.store.find_active()

    async def get_by_id(self, product_id: str) -> ProductResponse:
        """
        Get a product by ID, whether active or not.

        Raises:
            ProductNotFoundError: If no product has this id
        """
        product = await self.store.get(product_id)
        if not product:
            raise ProductNotFoundError("Product not found")
        return product

    async def update(self, product_id: str, product_data: ProductUpdate) -> ProductResponse:
        """
        Update an existing product with the merge rules of this class.

        Args:
            product_id: ID of product to update
            product_data: Partial update data

        Returns:
            The product after the update

        Raises:
            ProductNotFoundError: If no product has this id
        """
        changes = self.build_changes(product_data)
        product = await self.store.update(product_id, changes)
        if not product:
            raise ProductNotFoundError("Product not found")

        logger.info(f"Product {product_id} updated (fields={sorted(changes)})")
        return product

    async def delete(self, product_id: str) -> ProductResponse:
        """
        Delete a product permanently.

        Returns:
            The product as it was before removal

        Raises:
            ProductNotFoundError: If no product has this id
        """
        product = await self.store.delete(product_id)
        if not product:
            raise ProductNotFoundError("Product not found")

        logger.info(f"Product {product_id} deleted")
        return product

    async def search(self, query: str) -> List[ProductResponse]:
        """
        Search name, description and category for a case-insensitive
        substring. Inactive products are included.

        Raises:
            ProductValidationError: If the query is missing or empty
        """
        if not query:
            raise ProductValidationError("Search query is required")
        return await self.store.search(query)

    @classmethod
    def build_changes(cls, product_data: ProductUpdate) -> dict[str, Any]:
        """Select the fields of an update request that will be written."""
        changes = {}
        for field in cls.TRUTHY_UPDATE_FIELDS:
            value = getattr(product_data, field)
            if value:
                changes[field] = value
        for field in cls.PRESENT_UPDATE_FIELDS:
            if field in product_data.model_fields_set:
                changes[field] = getattr(product_data, field)
        return changes
