"""Product Schemas — admin write bodies and the public product shape.

Invariants:
    - price 0.01-999999 with at most 2 decimal places
    - stock non-negative
    - category lower-cased on input
    - ProductUpdate: every field optional; only provided fields are written
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    price: Decimal = Field(ge=Decimal("0.01"), le=Decimal("999999"), decimal_places=2)
    stock: int = Field(ge=0)
    brand: str = Field(min_length=1, max_length=100)
    category: str = Field(min_length=1, max_length=50)
    thumbnail: str | None = Field(None, max_length=500)
    is_active: bool = Field(True, alias="isActive")

    @field_validator("title", "description", "brand")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty or whitespace")
        return v

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("category cannot be empty or whitespace")
        return v


class ProductUpdate(BaseModel):
    """Partial update: unset fields are left untouched."""
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(None, min_length=3, max_length=200)
    description: str | None = Field(None, min_length=10, max_length=2000)
    price: Decimal | None = Field(
        None, ge=Decimal("0.01"), le=Decimal("999999"), decimal_places=2,
    )
    stock: int | None = Field(None, ge=0)
    brand: str | None = Field(None, min_length=1, max_length=100)
    category: str | None = Field(None, min_length=1, max_length=50)
    thumbnail: str | None = Field(None, max_length=500)
    is_active: bool | None = Field(None, alias="isActive")

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str | None) -> str | None:
        return v.strip().lower() if v is not None else v
