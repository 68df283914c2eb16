from sqlalchemy.pool import StaticPool

from catalog.stores.base import ProductStore
from catalog.stores.mongo import MongoProductStore
from catalog.stores.sql import SqlProductStore

MONGODB_SCHEMES = ("mongodb://", "mongodb+srv://")


def create_store(url: str, database_name: str = "product-db") -> ProductStore:
    """
    Pick a store implementation from the connection URL.

    mongodb:// and mongodb+srv:// go to MongoDB; anything else is treated as
    a SQLAlchemy async URL.
    """
    if url.startswith(MONGODB_SCHEMES):
        return MongoProductStore(url, default_database=database_name)

    if url.startswith("sqlite"):
        if ":memory:" in url:
            # One shared connection, otherwise each connection gets its own empty database
            return SqlProductStore(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return SqlProductStore(url)

    return SqlProductStore(url, pool_size=10, max_overflow=20, pool_pre_ping=True)
