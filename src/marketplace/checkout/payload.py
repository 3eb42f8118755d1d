"""Checkout payload — the immutable snapshot handed from the cart to order submission.

Prices, names and images are copied from the catalog cache when checkout begins and
are never refreshed afterwards. An order placed from this payload records exactly
what the shopper saw.
"""

from dataclasses import dataclass

from protean.exceptions import ValidationError


@dataclass(frozen=True)
class CheckoutLine:
    item_id: str
    name: str
    price: int
    quantity: int
    image: str | None = None

    @property
    def subtotal(self) -> int:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return {
            "itemId": self.item_id,
            "itemName": self.name,
            "image": self.image,
            "price": self.price,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
        }


@dataclass(frozen=True)
class CheckoutPayload:
    lines: tuple[CheckoutLine, ...]
    total_amount: int

    def __post_init__(self):
        if not self.lines:
            raise ValidationError({"items": ["Checkout requires at least one item"]})
        expected = sum(line.subtotal for line in self.lines)
        if self.total_amount != expected:
            raise ValidationError({"total_amount": [f"Total {self.total_amount} does not match items ({expected})"]})

    @classmethod
    def from_session(cls, session):
        lines = tuple(
            CheckoutLine(
                item_id=str(item.id),
                name=item.name,
                price=item.price,
                quantity=quantity,
                image=item.image,
            )
            for item, quantity in session.lines()
        )
        return cls(lines=lines, total_amount=sum(line.subtotal for line in lines))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "items": [line.to_dict() for line in self.lines],
            "totalAmount": self.total_amount,
        }

    @classmethod
    def from_dict(cls, data):
        """Rebuild a payload from its transport form, rejecting anything inconsistent."""
        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            raise ValidationError({"items": ["Checkout items are missing"]})

        lines = []
        for raw in data["items"]:
            if not isinstance(raw, dict):
                raise ValidationError({"items": ["Malformed checkout item"]})
            price = raw.get("price")
            quantity = raw.get("quantity")
            if not isinstance(price, int) or price < 0:
                raise ValidationError({"price": ["Price must be a non-negative integer"]})
            if not isinstance(quantity, int) or quantity < 1:
                raise ValidationError({"quantity": ["Quantity must be a positive integer"]})
            lines.append(
                CheckoutLine(
                    item_id=str(raw.get("itemId") or ""),
                    name=raw.get("itemName") or "",
                    price=price,
                    quantity=quantity,
                    image=raw.get("image"),
                )
            )

        total = data.get("totalAmount", sum(line.subtotal for line in lines))
        return cls(lines=tuple(lines), total_amount=total)
