"""Shared BDD fixtures and step definitions for the Marketplace."""

import pytest
from marketplace.cart.session import ShoppingSession
from marketplace.catalog.management import AddCatalogItem
from marketplace.checkout.transition import CheckoutHandoff, CheckoutRedirect, begin_checkout
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when

OWNER_ID = "jamaah-001"


@pytest.fixture()
def context():
    """Mutable scenario state shared between steps."""
    return {
        "items": {},
        "session": None,
        "handoff": CheckoutHandoff(),
        "error": None,
        "redirect": None,
    }


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the catalog lists "{name}" at {price:d} with stock {stock:d}'))
def catalog_lists(context, name, price, stock):
    command = AddCatalogItem(name=name, price=price, stock=stock, category="other")
    context["items"][name] = current_domain.process(command, asynchronous=False)
    # The shopper's session caches the catalog as it stands now
    context["session"] = ShoppingSession.open(owner_id=OWNER_ID)


@given(parsers.re(r'the jamaah adds "(?P<name>[^"]+)" (?P<count>\d+) times?$'), converters={"count": int})
@when(parsers.re(r'the jamaah adds "(?P<name>[^"]+)" (?P<count>\d+) times?$'), converters={"count": int})
def jamaah_adds(context, name, count):
    for _ in range(count):
        context["session"].add_item(context["items"][name])


@given("the jamaah has checked out")
@when("the jamaah checks out")
def jamaah_checks_out(context):
    try:
        begin_checkout(context["session"], context["handoff"])
    except CheckoutRedirect as exc:
        context["redirect"] = exc.location


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the jamaah is redirected to "{location}"'))
def jamaah_is_redirected(context, location):
    assert context["redirect"] == location


@then("the add is rejected")
def add_is_rejected(context):
    assert isinstance(context["error"], ValidationError)
