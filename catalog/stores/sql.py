import logging
from typing import Any, Optional

from sqlalchemy import or_, select, text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from catalog.database import Base
from catalog.models.product import Product
from catalog.schemas.product import ProductResponse
from catalog.stores.base import ProductStore, StoreError

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"

SEARCH_COLUMNS = (Product.name, Product.description, Product.category)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def to_response(product: Product) -> ProductResponse:
    """Convert a Product row into the API schema."""
    return ProductResponse.model_validate(
        {column.key: getattr(product, column.key) for column in Product.__table__.columns}
    )


class SqlProductStore(ProductStore):
    """
    Product store backed by a relational database through SQLAlchemy's
    asyncio engine.

    Each operation runs in its own session and transaction, so a single
    insert/update/delete is atomic. Driver errors are rolled back and
    re-raised as StoreError carrying the database's own message.
    """

    def __init__(self, url: str, **engine_options: Any):
        self.url = url
        self.engine_options = engine_options
        self.engine = None
        self.session_factory = None

    async def open(self) -> None:
        self.engine = create_async_engine(self.url, **self.engine_options)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise self._fail("creating tables", e)

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None

    async def ping(self) -> None:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise self._fail("pinging database", e)

    async def insert(self, fields: dict[str, Any]) -> ProductResponse:
        async with self.session_factory() as session:
            try:
                product = Product(**fields)
                session.add(product)
                await session.commit()
                await session.refresh(product)
                return to_response(product)
            except SQLAlchemyError as e:
                await session.rollback()
                raise self._fail("creating product", e)

    async def find_active(self) -> list[ProductResponse]:
        query = select(Product).where(Product.is_active.is_(True)).order_by(Product.created_at)
        return await self._fetch(query, "listing products")

    async def get(self, product_id: str) -> Optional[ProductResponse]:
        async with self.session_factory() as session:
            try:
                product = await session.get(Product, product_id)
            except SQLAlchemyError as e:
                raise self._fail("fetching product", e)
            return to_response(product) if product else None

    async def update(self, product_id: str, changes: dict[str, Any]) -> Optional[ProductResponse]:
        async with self.session_factory() as session:
            try:
                product = await session.get(Product, product_id)
                if not product:
                    return None

                for field, value in changes.items():
                    setattr(product, field, value)

                await session.commit()
                await session.refresh(product)
                return to_response(product)
            except SQLAlchemyError as e:
                await session.rollback()
                raise self._fail("updating product", e)

    async def delete(self, product_id: str) -> Optional[ProductResponse]:
        async with self.session_factory() as session:
            try:
                product = await session.get(Product, product_id)
                if not product:
                    return None

                removed = to_response(product)
                await session.delete(product)
                await session.commit()
                return removed
            except SQLAlchemyError as e:
                await session.rollback()
                raise self._fail("deleting product", e)

    async def search(self, term: str) -> list[ProductResponse]:
        pattern = f"%{escape_like(term)}%"
        query = (
            select(Product)
            .where(or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in SEARCH_COLUMNS)))
            .order_by(Product.created_at)
        )
        return await self._fetch(query, "searching products")

    async def _fetch(self, query, action: str) -> list[ProductResponse]:
        async with self.session_factory() as session:
            try:
                result = await session.scalars(query)
                return [to_response(product) for product in result]
            except SQLAlchemyError as e:
                raise self._fail(action, e)

    def _fail(self, action: str, error: SQLAlchemyError) -> StoreError:
        message = str(error.orig) if isinstance(error, DBAPIError) and error.orig else str(error)
        logger.error(f"Store error {action}: {message}")
        return StoreError(message)
