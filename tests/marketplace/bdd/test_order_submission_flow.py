"""BDD tests for order submission."""

from unittest.mock import patch

from marketplace.imaging.processor import ImageUpload
from marketplace.order.order import Order, OrderStatus
from marketplace.order.submission import Shopper, submit_order
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/order_submission.feature")

SHOPPER = Shopper(user_id="jamaah-001", email="siti@example.com", name="Siti Aminah")


def _submit(context, upload):
    try:
        context["result"] = submit_order(context["handoff"], SHOPPER, upload)
    except ValidationError as exc:
        context["error"] = exc


def _orders():
    return current_domain.repository_for(Order).find_by_status()


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("the jamaah submits the order with a {width:d}x{height:d} proof image"))
def submit_with_image(context, make_image, width, height):
    _submit(context, ImageUpload("bukti.jpg", "image/jpeg", make_image(width, height)))


@when("the jamaah submits the order without a proof")
def submit_without_proof(context):
    _submit(context, None)


@when(parsers.cfparse("the jamaah submits the order with a {size:d} MiB proof file"))
def submit_oversized(context, size):
    upload = ImageUpload("huge.jpg", "image/jpeg", b"\xff" * (size * 1024 * 1024))
    with patch("marketplace.imaging.processor.compress_image") as compress:
        _submit(context, upload)
    context["compress"] = compress


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("one pending order exists with total {total:d}"))
def one_pending_order(context, total):
    orders = _orders()
    assert len(orders) == 1
    assert orders[0].status == OrderStatus.PENDING.value
    assert orders[0].total_amount == total


@then(parsers.cfparse("the order lines have subtotals {first:d} and {second:d}"))
def order_line_subtotals(first, second):
    order = _orders()[0]
    assert sorted(line.subtotal for line in order.items) == sorted([first, second])


@then("the checkout payload is cleared")
def payload_cleared(context):
    assert context["handoff"].payload is None


@then("the checkout payload is kept")
def payload_kept(context):
    assert context["handoff"].payload is not None


@then("the submission is rejected")
def submission_rejected(context):
    assert isinstance(context["error"], ValidationError)


@then("no compression was attempted")
def no_compression(context):
    context["compress"].assert_not_called()


@then("no order exists")
def no_order():
    assert _orders() == []
