"""Pydantic request/response schemas for the Marketplace API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class CreateCatalogItemRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Kain Ihram Premium",
                    "description": "Two-piece cotton ihram cloth, white.",
                    "price": 150000,
                    "stock": 25,
                    "category": "equipment",
                }
            ]
        }
    }

    name: str = Field(..., max_length=200)
    description: str | None = None
    price: int = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    category: str | None = None
    status: str | None = None


class UpdateCatalogItemRequest(BaseModel):
    name: str | None = Field(None, max_length=200)
    description: str | None = None
    price: int | None = Field(None, ge=0)
    stock: int | None = Field(None, ge=0)
    category: str | None = None


class ChangeItemStatusRequest(BaseModel):
    status: str


class CatalogItemResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: int
    stock: int
    category: str
    status: str
    image: str | None = None


class CatalogItemListResponse(BaseModel):
    items: list[CatalogItemResponse]


class ItemIdResponse(BaseModel):
    item_id: str


# ---------------------------------------------------------------------------
# Cart and checkout
# ---------------------------------------------------------------------------


class CartRequest(BaseModel):
    """A client-held cart: catalog item id -> requested quantity."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "owner_id": "jamaah-001",
                    "items": {"item-ihram": 2, "item-sajadah": 1},
                }
            ]
        }
    }

    owner_id: str | None = None
    items: dict[str, int] = Field(default_factory=dict)


class CartLineResponse(BaseModel):
    item_id: str
    name: str
    price: int
    quantity: int
    subtotal: int
    stock: int
    can_add: bool


class CartAdjustmentResponse(BaseModel):
    item_id: str
    requested: int
    accepted: int
    reason: str


class CartQuoteResponse(BaseModel):
    lines: list[CartLineResponse]
    total_amount: int
    total_item_count: int
    adjustments: list[CartAdjustmentResponse]


class CheckoutResponse(BaseModel):
    checkout_id: str
    checkout: dict
    adjustments: list[CartAdjustmentResponse]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class SubmitOrderResponse(BaseModel):
    order_id: str
    order_number: str
    total_amount: int
    status: str = "pending"
    proof_original_size: int
    proof_final_size: int
    proof_reduction_percent: int
    proof_compressed: bool


class OrderListResponse(BaseModel):
    orders: list[dict]


class PendingCountResponse(BaseModel):
    count: int


class ReviewOrderRequest(BaseModel):
    reviewer_id: str
    reviewer_name: str | None = None
    admin_notes: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"
