from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional


class CamelModel(BaseModel):
    """
    Base schema exposing snake_case fields under camelCase JSON names.

    Numbers sent for text fields are stored as their string form.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True
    )


class ProductCreate(CamelModel):
    """
    Schema for creating a new product.

    Every field is optional at the parsing level; presence of the required
    fields (name, price, category, sku) is checked by the service so that a
    missing field answers 400. Values that cannot be cast to the field type
    answer 500, the same as any other store type check.
    """
    name: Optional[str] = Field(None, description="Product name (required)")
    description: Optional[str] = Field(None, description="Free text description")
    price: Optional[float] = Field(None, description="Product price (required)")
    quantity: Optional[int] = Field(None, description="Units in stock, defaults to 0")
    category: Optional[str] = Field(None, description="Catalog category (required)")
    sku: Optional[str] = Field(None, description="Stock keeping unit (required)")


class ProductUpdate(CamelModel):
    """Schema for updating an existing product. All fields are optional."""
    name: Optional[str] = Field(None, description="Applied only when non-empty")
    description: Optional[str] = Field(None, description="Applied whenever present")
    price: Optional[float] = Field(None, description="Applied only when non-zero")
    quantity: Optional[int] = Field(None, description="Applied whenever present")
    category: Optional[str] = Field(None, description="Applied only when non-empty")
    sku: Optional[str] = Field(None, description="Applied only when non-empty")
    is_active: Optional[bool] = Field(None, description="Applied whenever present")


class ProductResponse(CamelModel):
    """Schema for a stored product, as returned by every store."""
    id: str
    name: str
    description: Optional[str] = None
    price: float
    quantity: int = 0
    category: str
    sku: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for list and search responses."""
    count: int
    products: list[ProductResponse]


class ProductMessageResponse(BaseModel):
    """Schema for mutation responses carrying a confirmation message."""
    message: str
    product: ProductResponse


class ErrorResponse(BaseModel):
    """Schema for every error body."""
    error: str
