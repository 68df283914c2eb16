from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging

import uvicorn

from catalog.config import get_settings
from catalog.stores.base import StoreError
from catalog.stores.factory import create_store
from catalog.api import products, health

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager: the product store is opened here, shared
    through app.state and closed on shutdown.
    """
    current = get_settings()
    store = create_store(current.MONGODB_URI, current.DATABASE_NAME)

    try:
        # Startup
        logger.info(f"Opening {type(store).__name__}...")
        await store.open()
        app.state.store = store
        logger.info("Product store ready")

        yield
    finally:
        # Shutdown
        logger.info("Closing product store...")
        await store.close()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Product catalog API with CRUD operations and search.

    - **Create**: name, price, category and sku are required
    - **List**: only products with isActive = true
    - **Search**: case-insensitive substring match on name, description and category
    - **Update**: partial merge of the fields sent
    - **Delete**: permanent removal

    Every error is returned as `{"error": "<message>"}`.
    """,
    version=settings.VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(health.router, prefix="/api")
app.include_router(products.router, prefix="/api")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    # Values that cannot be cast to the field type fail like a store type check
    logger.error(f"Rejected body on {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": message}
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)}
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint identifying the API."""
    return {"message": "Product Database API - CRUD Operations"}


def run():
    """Serve the application with uvicorn on the configured host and port."""
    current = get_settings()
    uvicorn.run("catalog.main:app", host=current.HOST, port=current.PORT)
