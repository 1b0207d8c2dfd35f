"""
Pydantic schemas for request/response validation.
"""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field, validator

from catalog_shared.constants import (
    MAX_PRICE,
    MAX_TAX_PERCENTAGE,
    MIN_TAX_PERCENTAGE,
    TIME_PATTERN,
    BookingStatus,
    PricingType,
)


def _check_pricing_type(v):
    if v not in PricingType.all_values():
        allowed = ", ".join(sorted(PricingType.all_values()))
        raise ValueError(f"Invalid pricing type. Allowed values: {allowed}")
    return v


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = Field(None, max_length=255)
    tax_applicable: bool = Field(default=False)
    tax_percentage: Decimal = Field(
        default=Decimal("0"), ge=MIN_TAX_PERCENTAGE, le=MAX_TAX_PERCENTAGE
    )
    is_active: bool = Field(default=True)

    @validator("name")
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = Field(None, max_length=255)
    tax_applicable: bool | None = None
    tax_percentage: Decimal | None = Field(None, ge=MIN_TAX_PERCENTAGE, le=MAX_TAX_PERCENTAGE)
    is_active: bool | None = None

    @validator("name")
    def strip_name(cls, v):
        return v.strip() if v is not None else v


class CreateSubcategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = Field(None, max_length=255)
    category_id: int = Field(..., ge=1)
    tax_applicable: bool | None = None
    tax_percentage: Decimal | None = Field(None, ge=MIN_TAX_PERCENTAGE, le=MAX_TAX_PERCENTAGE)
    is_active: bool = Field(default=True)


class UpdateSubcategoryRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = Field(None, max_length=255)
    category_id: int | None = Field(None, ge=1)
    tax_applicable: bool | None = None
    tax_percentage: Decimal | None = Field(None, ge=MIN_TAX_PERCENTAGE, le=MAX_TAX_PERCENTAGE)
    is_active: bool | None = None


class CreateItemRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str | None = None
    image_url: str | None = Field(None, max_length=255)
    subcategory_id: int = Field(..., ge=1)
    pricing_type: str
    pricing_details: dict = Field(default_factory=dict)
    is_bookable: bool = Field(default=False)
    availability: dict | None = None
    is_active: bool = Field(default=True)

    @validator("pricing_type")
    def validate_pricing_type(cls, v):
        return _check_pricing_type(v)


class UpdateItemRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    description: str | None = None
    image_url: str | None = Field(None, max_length=255)
    subcategory_id: int | None = Field(None, ge=1)
    pricing_type: str | None = None
    pricing_details: dict | None = None
    is_bookable: bool | None = None
    availability: dict | None = None
    is_active: bool | None = None

    @validator("pricing_type")
    def validate_pricing_type(cls, v):
        if v is not None:
            _check_pricing_type(v)
        return v


class CreateAddonRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    price: Decimal = Field(..., ge=0, le=MAX_PRICE)
    item_id: int = Field(..., ge=1)
    is_mandatory: bool = Field(default=False)
    group_id: str | None = Field(None, max_length=64)
    group_name: str | None = Field(None, max_length=100)
    is_active: bool = Field(default=True)


class UpdateAddonRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    price: Decimal | None = Field(None, ge=0, le=MAX_PRICE)
    item_id: int | None = Field(None, ge=1)
    is_mandatory: bool | None = None
    group_id: str | None = Field(None, max_length=64)
    group_name: str | None = Field(None, max_length=100)
    is_active: bool | None = None


class CreateBookingRequest(BaseModel):
    item_id: int = Field(..., ge=1)
    user_email: EmailStr
    user_name: str | None = Field(None, max_length=120)
    user_phone: str | None = Field(None, max_length=32)
    date: date_type
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    status: str | None = None
    addon_ids: list[int] = Field(default_factory=list)
    notes: str | None = None

    @validator("user_email")
    def normalize_email(cls, v):
        return str(v).strip().lower()

    @validator("end_time")
    def validate_time_order(cls, v, values):
        start = values.get("start_time")
        if start is not None and v <= start:
            raise ValueError("end_time must be after start_time")
        return v


class UpdateBookingRequest(BaseModel):
    status: str | None = None
    notes: str | None = None
    user_name: str | None = Field(None, max_length=120)
    user_phone: str | None = Field(None, max_length=32)

    @validator("status")
    def validate_status(cls, v):
        if v is not None and v not in {s.value for s in BookingStatus}:
            allowed = ", ".join(s.value for s in BookingStatus)
            raise ValueError(f"Invalid booking status. Allowed values: {allowed}")
        return v


class ListQueryParams(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int | None = Field(None, ge=1)
    sort_by: str = Field(default="created_at")
    sort_order: str = Field(default="desc")
    search: str | None = None


class PriceQueryParams(BaseModel):
    quantity: int = Field(default=1)
    addon_ids: list[int] = Field(default_factory=list)
    at: datetime | None = None

    @validator("addon_ids", pre=True)
    def split_addon_ids(cls, v):
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v or []


class TaxImpactQueryParams(BaseModel):
    tax_percentage: Decimal = Field(..., ge=MIN_TAX_PERCENTAGE, le=MAX_TAX_PERCENTAGE)


class AvailabilityQueryParams(BaseModel):
    date: date_type


class CategoryFilterParams(BaseModel):
    is_active: bool = Field(default=True)


class SubcategoryFilterParams(BaseModel):
    category_id: int | None = None
    is_active: bool = Field(default=True)


class ItemFilterParams(BaseModel):
    subcategory_id: int | None = None
    category_id: int | None = None
    pricing_type: str | None = None
    is_bookable: bool | None = None
    is_active: bool = Field(default=True)

    @validator("pricing_type")
    def validate_pricing_type(cls, v):
        if v is not None:
            _check_pricing_type(v)
        return v


class AddonFilterParams(BaseModel):
    item_id: int | None = None
    is_mandatory: bool | None = None
    is_active: bool = Field(default=True)


class BookingFilterParams(BaseModel):
    item_id: int | None = None
    user_email: str | None = None
    status: str | None = None
    date_from: date_type | None = None
    date_to: date_type | None = None

    @validator("user_email")
    def normalize_email(cls, v):
        return v.strip().lower() if v is not None else v
