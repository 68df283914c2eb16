from fastapi import Request
from sqlalchemy.orm import declarative_base

from catalog.stores.base import ProductStore

# Base class for SQL models
Base = declarative_base()


def get_store(request: Request) -> ProductStore:
    """
    Dependency to get the product store.
    The store is opened and closed by the application lifespan.
    """
    return request.app.state.store
