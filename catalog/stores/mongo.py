import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic.alias_generators import to_camel
from pymongo import AsyncMongoClient, ReturnDocument
from pymongo.errors import CollectionInvalid, PyMongoError

from catalog.schemas.product import ProductResponse
from catalog.stores.base import ProductStore, StoreError

logger = logging.getLogger(__name__)

COLLECTION_NAME = "products"

SEARCH_FIELDS = ("name", "description", "category")

ACTIVE_FILTER = {"isActive": True}

# Server-side schema, checked on insert and on every update
PRODUCT_VALIDATOR = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["name", "price", "quantity", "category", "sku", "isActive"],
        "properties": {
            "name": {"bsonType": "string"},
            "description": {"bsonType": ["string", "null"]},
            "price": {"bsonType": ["double", "int", "long", "decimal"], "minimum": 0},
            "quantity": {"bsonType": ["int", "long"], "minimum": 0},
            "category": {"bsonType": "string"},
            "sku": {"bsonType": "string"},
            "isActive": {"bsonType": "bool"},
            "createdAt": {"bsonType": "date"},
            "updatedAt": {"bsonType": "date"},
        },
    }
}


def parse_object_id(product_id: str) -> ObjectId:
    """Convert a path id into an ObjectId, raising StoreError if malformed."""
    try:
        return ObjectId(product_id)
    except (InvalidId, TypeError) as e:
        raise StoreError(str(e)) from e


def build_search_filter(term: str) -> dict[str, Any]:
    """Build an $or of case-insensitive literal substring matches."""
    pattern = re.escape(term)
    return {
        "$or": [
            {field: {"$regex": pattern, "$options": "i"}}
            for field in SEARCH_FIELDS
        ]
    }


def to_document(fields: dict[str, Any]) -> dict[str, Any]:
    """Map snake_case field names onto the camelCase keys stored in MongoDB."""
    return {to_camel(field): value for field, value in fields.items()}


def utcnow() -> datetime:
    """Current UTC time truncated to the millisecond precision of BSON dates."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def from_document(document: dict[str, Any]) -> ProductResponse:
    data = dict(document)
    data["id"] = str(data.pop("_id"))
    return ProductResponse.model_validate(data)


class MongoProductStore(ProductStore):
    """
    Product store backed by a MongoDB collection.

    Uses PyMongo's asyncio client. Field types are enforced by a $jsonSchema
    validator installed on the collection and sku uniqueness by a unique
    index, both created on open().
    """

    def __init__(self, url: str, default_database: str = "product-db"):
        self.url = url
        self.default_database = default_database
        self.client = None
        self.collection = None

    async def open(self) -> None:
        self.client = AsyncMongoClient(self.url, tz_aware=True)
        db = self.client.get_default_database(self.default_database)
        try:
            if COLLECTION_NAME not in await db.list_collection_names():
                try:
                    await db.create_collection(COLLECTION_NAME, validator=PRODUCT_VALIDATOR)
                except CollectionInvalid:
                    logger.info(f"Collection '{COLLECTION_NAME}' created concurrently")
            self.collection = db[COLLECTION_NAME]
            await self.collection.create_index("sku", unique=True)
        except PyMongoError as e:
            raise self._fail("preparing collection", e)

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None

    async def ping(self) -> None:
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            raise self._fail("pinging database", e)

    async def insert(self, fields: dict[str, Any]) -> ProductResponse:
        now = utcnow()
        document = to_document({**fields, "created_at": now, "updated_at": now})
        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as e:
            raise self._fail("creating product", e)
        document["_id"] = result.inserted_id
        return from_document(document)

    async def find_active(self) -> list[ProductResponse]:
        return await self._fetch(ACTIVE_FILTER, "listing products")

    async def get(self, product_id: str) -> Optional[ProductResponse]:
        object_id = parse_object_id(product_id)
        try:
            document = await self.collection.find_one({"_id": object_id})
        except PyMongoError as e:
            raise self._fail("fetching product", e)
        return from_document(document) if document else None

    async def update(self, product_id: str, changes: dict[str, Any]) -> Optional[ProductResponse]:
        object_id = parse_object_id(product_id)
        update = to_document({**changes, "updated_at": utcnow()})
        try:
            document = await self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._fail("updating product", e)
        return from_document(document) if document else None

    async def delete(self, product_id: str) -> Optional[ProductResponse]:
        object_id = parse_object_id(product_id)
        try:
            document = await self.collection.find_one_and_delete({"_id": object_id})
        except PyMongoError as e:
            raise self._fail("deleting product", e)
        return from_document(document) if document else None

    async def search(self, term: str) -> list[ProductResponse]:
        return await self._fetch(build_search_filter(term), "searching products")

    async def _fetch(self, query: dict[str, Any], action: str) -> list[ProductResponse]:
        try:
            return [from_document(document) async for document in self.collection.find(query)]
        except PyMongoError as e:
            raise self._fail(action, e)

    def _fail(self, action: str, error: PyMongoError) -> StoreError:
        logger.error(f"Store error {action}: {error}")
        return StoreError(str(error))
