"""Review Schemas — rating bodies.

Invariants:
    - rating 1-5 on create; optional on update
    - comment optional, at most 1000 characters, stripped
"""

from pydantic import BaseModel, Field, field_validator

from storefront.core.ratings import MAX_RATING, MIN_RATING


class ReviewCreate(BaseModel):
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)
    comment: str | None = Field(None, max_length=1000)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class ReviewUpdate(BaseModel):
    """Partial update: unset fields are left untouched."""
    rating: int | None = Field(None, ge=MIN_RATING, le=MAX_RATING)
    comment: str | None = Field(None, max_length=1000)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v
