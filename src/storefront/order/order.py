"""Order aggregate: a priced snapshot of a cart plus its status history.

State machine:
    PENDING → ACCEPTED → OUT_FOR_DELIVERY → DELIVERED
    CANCELED (from PENDING, ACCEPTED, OUT_FOR_DELIVERY)

The status history is an append-only list of OrderEvent rows. The current
status is the event with the greatest (created_at, sequence); `status` on the
order row caches it and is written in the same aggregate save as the append.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.order.events import OrderCanceled, OrderPlaced, OrderStatusChanged
from storefront.shared.money import format_amount, sum_lines


class OrderStatus(Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELED = "CANCELED"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.ACCEPTED, OrderStatus.CANCELED},
    OrderStatus.ACCEPTED: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELED},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED, OrderStatus.CANCELED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """A product and quantity, with the name and unit price captured at placement."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    product_name = String(required=True, max_length=255)
    unit_price = String(required=True, max_length=32)


@storefront.entity(part_of="Order")
class OrderEvent:
    status = String(required=True, choices=OrderStatus)
    sequence = Integer(required=True, min_value=1)
    created_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    net_amount = String(required=True, max_length=32)
    address = String(required=True, max_length=1000)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    lines = HasMany(OrderLine)
    status_events = HasMany(OrderEvent)
    created_at = DateTime()

    @invariant.post
    def cached_status_matches_history(self):
        if not self.status_events:
            return
        if self.status != self.current_status().value:
            raise ValidationError({"status": ["Status must match the latest status event"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, address, lines_data):
        """Create a PENDING order from priced cart lines.

        Args:
            user_id: The user placing the order.
            address: Formatted shipping address snapshot.
            lines_data: List of dicts with product_id, quantity, product_name
                        and unit_price (decimal text).
        """
        now = datetime.now(UTC)
        net_amount = format_amount(sum_lines((line["quantity"], line["unit_price"]) for line in lines_data))

        order = cls(
            user_id=user_id,
            net_amount=net_amount,
            address=address,
            status=OrderStatus.PENDING.value,
            created_at=now,
        )
        with atomic_change(order):
            for line in lines_data:
                order.add_lines(
                    OrderLine(
                        product_id=line["product_id"],
                        quantity=line["quantity"],
                        product_name=line["product_name"],
                        unit_price=format_amount(line["unit_price"]),
                    )
                )
            order._append_status(OrderStatus.PENDING, now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                net_amount=net_amount,
                line_count=len(lines_data),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status history
    # -------------------------------------------------------------------
    def history(self) -> list[OrderEvent]:
        """Status events oldest first."""
        return sorted(self.status_events, key=lambda e: (e.created_at, e.sequence))

    def current_status(self) -> OrderStatus:
        return OrderStatus(self.history()[-1].status)

    def _append_status(self, status, at=None):
        at = at or datetime.now(UTC)
        if self.status_events:
            # Never sort ahead of the latest event, even if the clock stepped back
            at = max(at, self.history()[-1].created_at)

        next_sequence = max((e.sequence for e in self.status_events), default=0) + 1
        self.add_status_events(OrderEvent(status=status.value, sequence=next_sequence, created_at=at))
        self.status = status.value

    def _assert_can_transition(self, target_status):
        current = self.current_status()
        if target_status not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def cancel(self):
        current = self.current_status()
        if OrderStatus.CANCELED not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot cancel order with status: {current.value}"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self._append_status(OrderStatus.CANCELED, now)

        self.raise_(
            OrderCanceled(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_status=current.value,
                canceled_at=now,
            )
        )

    def change_status(self, new_status):
        """Move to `new_status` if the transition table allows it."""
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Invalid status: {new_status}"]}) from None

        current = self.current_status()
        self._assert_can_transition(target)

        now = datetime.now(UTC)
        with atomic_change(self):
            self._append_status(target, now)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )
