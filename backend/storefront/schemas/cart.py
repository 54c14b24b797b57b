"""Cart Schemas — request bodies for cart mutations.

Invariants:
    - AddItemRequest.productId: positive integer
    - AddItemRequest.quantity: 1-100, defaults to 1
    - QuantityUpdate.quantity: 0-100; 0 removes the line (removal shortcut)
"""

from pydantic import BaseModel, ConfigDict, Field

MAX_LINE_QUANTITY = 100


class AddItemRequest(BaseModel):
    """Add-to-cart body: merges into an existing line for the same product."""
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="productId", ge=1)
    quantity: int = Field(1, ge=1, le=MAX_LINE_QUANTITY)


class QuantityUpdate(BaseModel):
    quantity: int = Field(ge=0, le=MAX_LINE_QUANTITY)
