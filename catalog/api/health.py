from fastapi import APIRouter, Depends

from catalog.database import get_store
from catalog.stores.base import ProductStore, StoreError

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "/",
    summary="Health check",
    description="Basic health check endpoint."
)
async def health_check():
    """Simple health check."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if the product store is reachable."
)
async def readiness_check(store: ProductStore = Depends(get_store)):
    """
    Readiness check for the product store.

    Returns the store backend and whether a ping succeeded.
    """
    checks = {
        "store": False,
        "backend": type(store).__name__
    }

    try:
        await store.ping()
        checks["store"] = True
    except StoreError as e:
        checks["store_error"] = str(e)

    return {
        "status": "ready" if checks["store"] else "not_ready",
        "checks": checks
    }
