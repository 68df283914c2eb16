from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from catalog.database import get_store
from catalog.services.product_service import (
    ProductService,
    ProductNotFoundError,
    ProductValidationError
)
from catalog.schemas.product import (
    ErrorResponse,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ProductMessageResponse
)
from catalog.stores.base import ProductStore

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    responses={500: {"model": ErrorResponse, "description": "Store error"}}
)


@router.post("", include_in_schema=False, status_code=status.HTTP_201_CREATED)
@router.post(
    "/",
    response_model=ProductMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a new product. name, price, category and sku are required.",
    responses={400: {"model": ErrorResponse}}
)
async def create_product(
    product_data: Optional[ProductCreate] = None,
    store: ProductStore = Depends(get_store)
):
    """
    Create a new product.

    - **name**: Product name (required)
    - **price**: Product price (required, 0 counts as missing)
    - **category**: Catalog category (required)
    - **sku**: Stock keeping unit (required, unique)
    - **description**, **quantity**: optional
    """
    service = ProductService(store)

    try:
        product = await service.create(product_data or ProductCreate())
    except ProductValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return ProductMessageResponse(message="Product created successfully", product=product)


@router.get("", include_in_schema=False)
@router.get(
    "/",
    response_model=ProductListResponse,
    summary="List active products",
    description="Get every product whose isActive flag is true."
)
async def list_products(store: ProductStore = Depends(get_store)):
    """Get all active products."""
    service = ProductService(store)
    products = await service.get_all()

    return ProductListResponse(count=len(products), products=products)


@router.get(
    "/search",
    response_model=ProductListResponse,
    summary="Search products",
    description="Case-insensitive substring search over name, description and category. "
                "Inactive products are included. The query is matched as literal text: "
                "regular expression syntax such as ^ or .* and SQL wildcards such as % "
                "are not interpreted.",
    responses={400: {"model": ErrorResponse}}
)
async def search_products(
    query: Optional[str] = Query(None, description="Text to look for"),
    store: ProductStore = Depends(get_store)
):
    """Search products; an empty result is not an error."""
    service = ProductService(store)

    try:
        products = await service.search(query)
    except ProductValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return ProductListResponse(count=len(products), products=products)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="Get a single product, active or not.",
    responses={404: {"model": ErrorResponse}}
)
async def get_product(
    product_id: str,
    store: ProductStore = Depends(get_store)
):
    """Get a product by ID."""
    service = ProductService(store)

    try:
        return await service.get_by_id(product_id)
    except ProductNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


@router.put(
    "/{product_id}",
    response_model=ProductMessageResponse,
    summary="Update a product",
    description="Partial update. name, price, category and sku are only applied when non-empty; "
                "description, quantity and isActive whenever they are sent.",
    responses={404: {"model": ErrorResponse}}
)
async def update_product(
    product_id: str,
    product_data: Optional[ProductUpdate] = None,
    store: ProductStore = Depends(get_store)
):
    """Update a product."""
    service = ProductService(store)

    try:
        product = await service.update(product_id, product_data or ProductUpdate())
    except ProductNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return ProductMessageResponse(message="Product updated successfully", product=product)


@router.delete(
    "/{product_id}",
    response_model=ProductMessageResponse,
    summary="Delete a product",
    description="Permanently remove a product and return its last state.",
    responses={404: {"model": ErrorResponse}}
)
async def delete_product(
    product_id: str,
    store: ProductStore = Depends(get_store)
):
    """Delete a product."""
    service = ProductService(store)

    try:
        product = await service.delete(product_id)
    except ProductNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return ProductMessageResponse(message="Product deleted successfully", product=product)
