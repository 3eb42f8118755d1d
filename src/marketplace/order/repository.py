"""Repository for the marketplace Order aggregate."""

from marketplace.domain import marketplace
from marketplace.order.order import Order, OrderStatus


def _newest_first(orders):
    return sorted(orders, key=lambda order: order.created_at, reverse=True)


@marketplace.repository(part_of=Order)
class OrderRepository:
    def find_for_owner(self, owner_id) -> list[Order]:
        """A shopper's order history, newest first."""
        return _newest_first(self._dao.query.filter(owner_id=str(owner_id)).all().items)

    def find_by_status(self, status=None) -> list[Order]:
        """Orders in ``status`` (all orders when omitted), newest first."""
        if status:
            orders = self._dao.query.filter(status=status).all().items
        else:
            orders = self._dao.query.all().items
        return _newest_first(orders)

    def pending_count(self) -> int:
        return self._dao.query.filter(status=OrderStatus.PENDING.value).all().total

    def find_by_order_number(self, order_number) -> Order | None:
        """The newest order carrying ``order_number``. Numbers are not guaranteed unique."""
        orders = _newest_first(self._dao.query.filter(order_number=order_number).all().items)
        return orders[0] if orders else None
