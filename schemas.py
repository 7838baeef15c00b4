"""
Schemas for the Storefront API

Products and decorations are static catalog data loaded from JSON files.
Orders are stored as documents in a single collection:
- Order -> "order" collection (or the "orders" list of the JSON store)

Field names on the wire and on disk are camelCase; attributes are snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal, get_args

DesignType = Literal["premade", "custom"]
OrderStatus = Literal["pending", "processing", "completed", "cancelled"]

DESIGN_TYPES = get_args(DesignType)
ORDER_STATUSES = get_args(OrderStatus)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Vendor(CamelModel):
    name: str = Field(..., description="Vendor name")
    address: str
    phone: str
    email: str
    timeline: str = Field("", description="Free-text delivery estimate")
    rating: float = Field(0, ge=0, le=5)
    specializations: List[str] = Field(default_factory=list)


class Product(CamelModel):
    name: str = Field(..., description="Product name, unique")
    type: str
    quantity: int = Field(..., ge=0, description="Units in stock")
    base_price: float = Field(..., ge=0)
    bulk_price: float = Field(..., ge=0)
    bulk_threshold: int = Field(..., ge=1, description="Minimum quantity for bulk pricing")
    color: List[str] = Field(default_factory=list)
    brand: str = ""
    material: str = ""
    vendor: Vendor

    @model_validator(mode="after")
    def check_bulk_price(self):
        if self.bulk_price > self.base_price:
            raise ValueError("bulkPrice must not exceed basePrice")
        return self


class Decoration(CamelModel):
    name: str = Field(..., description="Decoration name, unique")
    type: str
    color_palette: List[str] = Field(default_factory=list)
    style: str = ""
    size: str = ""
    placement: str = ""
    file_format: str = ""
    vendor: Vendor


class Order(CamelModel):
    id: str
    # product orders only
    product_name: Optional[str] = None
    product_type: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=1)
    base_price: Optional[float] = Field(None, ge=0)
    unit_price: Optional[float] = Field(None, ge=0)
    total_price: Optional[float] = Field(None, ge=0)

    decoration_name: Optional[str] = None

    design_type: DesignType
    selected_design: Optional[str] = None
    custom_design_file: Optional[str] = Field(None, description="Public path of the uploaded design")
    is_custom_design: bool = False

    customer_name: str
    customer_email: str
    order_date: str = Field(..., description="ISO 8601 timestamp")
    status: OrderStatus = "pending"
    vendor: Optional[Vendor] = None
    notes: Optional[str] = None

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class PriceQuote(CamelModel):
    product_name: str
    quantity: int
    unit_price: float
    total_price: float
    bulk_applied: bool
    savings: float = Field(0, description="Saved against the base price")
    units_to_bulk: int = Field(0, description="Units still needed for bulk pricing")


class CreateOrderResponse(BaseModel):
    message: str
    order: dict


class UploadResponse(BaseModel):
    message: str
    filename: str
    filepath: str
