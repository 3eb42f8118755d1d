"""FastAPI routes for the Marketplace — catalog, cart, checkout and orders."""

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.api.schemas import (
    CartAdjustmentResponse,
    CartLineResponse,
    CartQuoteResponse,
    CartRequest,
    CatalogItemListResponse,
    CatalogItemResponse,
    ChangeItemStatusRequest,
    CheckoutResponse,
    CreateCatalogItemRequest,
    ItemIdResponse,
    OrderListResponse,
    PendingCountResponse,
    ReviewOrderRequest,
    StatusResponse,
    SubmitOrderResponse,
    UpdateCatalogItemRequest,
)
from marketplace.cart.session import ShoppingSession
from marketplace.catalog.management import (
    AddCatalogItem,
    ChangeCatalogItemImage,
    ChangeCatalogItemStatus,
    RemoveCatalogItem,
    UpdateCatalogItem,
)
from marketplace.catalog.reader import catalog_snapshot, get_item, list_active_items
from marketplace.checkout.transition import CheckoutRedirect, begin_checkout, get_handoffs
from marketplace.imaging.processor import EvidenceReadError, ImageUpload, process_image
from marketplace.imaging.profiles import CATALOG_PHOTO, PAYMENT_PROOF, ImageProfile
from marketplace.order.documents import to_document
from marketplace.order.order import Order
from marketplace.order.review import ApproveOrder, RejectOrder
from marketplace.order.submission import OrderSubmissionError, Shopper, submit_order
from marketplace.utils.logging import add_context

RETRY_MESSAGE = "Order could not be submitted, please try again"


def _item_response(item) -> CatalogItemResponse:
    return CatalogItemResponse(
        id=str(item.id),
        name=item.name,
        description=item.description,
        price=item.price,
        stock=item.stock,
        category=item.category,
        status=item.status,
        image=item.image,
    )


def _adjustment_responses(adjustments) -> list[CartAdjustmentResponse]:
    return [
        CartAdjustmentResponse(
            item_id=adjustment.item_id,
            requested=adjustment.requested if isinstance(adjustment.requested, int) else 0,
            accepted=adjustment.accepted,
            reason=adjustment.reason,
        )
        for adjustment in adjustments
    ]


def _read_upload(upload: UploadFile | None, profile: ImageProfile) -> ImageUpload | None:
    if upload is None:
        return None
    return ImageUpload.read(upload.filename, upload.content_type, upload.file, max_bytes=profile.max_upload_bytes)


# ---------------------------------------------------------------------------
# Catalog (shopper)
# ---------------------------------------------------------------------------
catalog_router = APIRouter(prefix="/marketplace/items", tags=["marketplace"])


@catalog_router.get("", response_model=CatalogItemListResponse)
async def list_items(category: str | None = None, q: str | None = None) -> CatalogItemListResponse:
    items = list_active_items(category=category, search=q)
    return CatalogItemListResponse(items=[_item_response(item) for item in items])


@catalog_router.get("/{item_id}", response_model=CatalogItemResponse)
async def get_catalog_item(item_id: str) -> CatalogItemResponse:
    return _item_response(get_item(item_id))


# ---------------------------------------------------------------------------
# Catalog (admin)
# ---------------------------------------------------------------------------
catalog_admin_router = APIRouter(prefix="/admin/marketplace/items", tags=["marketplace-admin"])


@catalog_admin_router.post("", status_code=201, response_model=ItemIdResponse)
async def add_item(body: CreateCatalogItemRequest) -> ItemIdResponse:
    command = AddCatalogItem(
        name=body.name,
        description=body.description,
        price=body.price,
        stock=body.stock,
        category=body.category,
        status=body.status,
    )
    result = current_domain.process(command, asynchronous=False)
    return ItemIdResponse(item_id=result)


@catalog_admin_router.put("/{item_id}", response_model=StatusResponse)
async def update_item(item_id: str, body: UpdateCatalogItemRequest) -> StatusResponse:
    command = UpdateCatalogItem(
        item_id=item_id,
        name=body.name,
        description=body.description,
        price=body.price,
        stock=body.stock,
        category=body.category,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@catalog_admin_router.put("/{item_id}/status", response_model=StatusResponse)
async def change_item_status(item_id: str, body: ChangeItemStatusRequest) -> StatusResponse:
    command = ChangeCatalogItemStatus(item_id=item_id, status=body.status)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@catalog_admin_router.post("/{item_id}/image", response_model=StatusResponse)
async def upload_item_image(item_id: str, image: UploadFile | None = File(None)) -> StatusResponse:
    add_context(item_id=item_id)
    # Pillow work is CPU bound; keep it off the event loop
    processed = await run_in_threadpool(process_image, _read_upload(image, CATALOG_PHOTO), CATALOG_PHOTO)
    command = ChangeCatalogItemImage(item_id=item_id, image=processed.encoded)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@catalog_admin_router.delete("/{item_id}", response_model=StatusResponse)
async def remove_item(item_id: str) -> StatusResponse:
    current_domain.process(RemoveCatalogItem(item_id=item_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Cart and checkout
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/marketplace", tags=["cart"])


@cart_router.post("/cart/quote", response_model=CartQuoteResponse)
async def quote_cart(body: CartRequest) -> CartQuoteResponse:
    session, adjustments = ShoppingSession.restore(catalog_snapshot(), body.items, owner_id=body.owner_id)
    lines = [
        CartLineResponse(
            item_id=str(item.id),
            name=item.name,
            price=item.price,
            quantity=quantity,
            subtotal=item.price * quantity,
            stock=item.stock,
            can_add=session.can_add(item.id),
        )
        for item, quantity in session.lines()
    ]
    return CartQuoteResponse(
        lines=lines,
        total_amount=session.total_amount(),
        total_item_count=session.total_item_count(),
        adjustments=_adjustment_responses(adjustments),
    )


@cart_router.post("/checkout", response_model=CheckoutResponse)
async def checkout(body: CartRequest) -> CheckoutResponse:
    session, adjustments = ShoppingSession.restore(catalog_snapshot(), body.items, owner_id=body.owner_id)
    payload = begin_checkout(session)
    checkout_id = get_handoffs().open(payload)
    return CheckoutResponse(
        checkout_id=checkout_id,
        checkout=payload.to_dict(),
        adjustments=_adjustment_responses(adjustments),
    )


# ---------------------------------------------------------------------------
# Orders (shopper)
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/marketplace/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=SubmitOrderResponse)
async def submit(
    checkout_id: str = Form(""),
    owner_id: str = Form(""),
    owner_email: str = Form(""),
    owner_name: str = Form(""),
    phone_number: str = Form(""),
    delivery_address: str = Form(""),
    notes: str = Form(""),
    payment_proof: UploadFile | None = File(None),
) -> SubmitOrderResponse:
    add_context(checkout_id=checkout_id, owner_id=owner_id)
    handoffs = get_handoffs()
    result = await run_in_threadpool(
        submit_order,
        handoffs.get(checkout_id),
        Shopper(user_id=owner_id, email=owner_email, name=owner_name, phone_number=phone_number),
        _read_upload(payment_proof, PAYMENT_PROOF),
        notes=notes,
        delivery_address=delivery_address,
    )
    handoffs.discard(checkout_id)

    return SubmitOrderResponse(
        order_id=result.order_id,
        order_number=result.order_number,
        total_amount=result.total_amount,
        proof_original_size=result.proof.original_size,
        proof_final_size=result.proof.final_size,
        proof_reduction_percent=result.proof.reduction_percent,
        proof_compressed=result.proof.compressed,
    )


@order_router.get("", response_model=OrderListResponse)
async def order_history(owner_id: str) -> OrderListResponse:
    orders = current_domain.repository_for(Order).find_for_owner(owner_id)
    return OrderListResponse(orders=[to_document(order) for order in orders])


@order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    return to_document(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Orders (admin review)
# ---------------------------------------------------------------------------
order_admin_router = APIRouter(prefix="/admin/marketplace/orders", tags=["marketplace-admin"])


@order_admin_router.get("", response_model=OrderListResponse)
async def list_orders(status: str | None = None) -> OrderListResponse:
    orders = current_domain.repository_for(Order).find_by_status(status)
    return OrderListResponse(orders=[to_document(order) for order in orders])


@order_admin_router.get("/pending/count", response_model=PendingCountResponse)
async def pending_count() -> PendingCountResponse:
    return PendingCountResponse(count=current_domain.repository_for(Order).pending_count())


@order_admin_router.put("/{order_id}/approve", response_model=StatusResponse)
async def approve_order(order_id: str, body: ReviewOrderRequest) -> StatusResponse:
    command = ApproveOrder(
        order_id=order_id,
        reviewer_id=body.reviewer_id,
        reviewer_name=body.reviewer_name,
        admin_notes=body.admin_notes,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_admin_router.put("/{order_id}/reject", response_model=StatusResponse)
async def reject_order(order_id: str, body: ReviewOrderRequest) -> StatusResponse:
    command = RejectOrder(
        order_id=order_id,
        reviewer_id=body.reviewer_id,
        reviewer_name=body.reviewer_name,
        admin_notes=body.admin_notes,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------
async def _checkout_redirect(request: Request, exc: CheckoutRedirect):
    return RedirectResponse(url=exc.location, status_code=303)


async def _retryable_failure(request: Request, exc: Exception):
    return JSONResponse(status_code=503, content={"error": RETRY_MESSAGE})


async def _not_found(request: Request, exc: ObjectNotFoundError):
    return JSONResponse(status_code=404, content={"error": "Not found"})


def register_marketplace_exception_handlers(app) -> None:
    app.add_exception_handler(CheckoutRedirect, _checkout_redirect)
    app.add_exception_handler(OrderSubmissionError, _retryable_failure)
    app.add_exception_handler(EvidenceReadError, _retryable_failure)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
