"""Unit tests for the Order aggregate and its business rules."""

import pytest

from ordercore.domain.exceptions import IntegrityError, ValidationError
from ordercore.domain.model.catalog import CurrentItemRef, LegacyItemRef
from ordercore.domain.model.identity import PUBLIC, Authenticated, Guest
from ordercore.domain.model.order import Order, OrderLineItem, OrderStatus
from ordercore.domain.model.value_objects import ContactInfo, Money, Quantity

ADDRESS = {"line1": "1 Main St", "city": "Springfield"}
CONTACT = ContactInfo(email="ann@example.com", name="Ann")


def _make_item(qty: int = 1, price: str = "10.00", legacy: bool = False) -> OrderLineItem:
    """Helper to build a valid line item."""
    ref = LegacyItemRef("d1") if legacy else CurrentItemRef("m1")
    return OrderLineItem(ref, Quantity(qty), Money.of(price), item_name="Thing")


def _place(identity=None, items=None, subtotal="20.00", discount="0", **overrides) -> Order:
    fields = dict(
        identity=identity or Authenticated("u1"),
        contact=CONTACT,
        shipping_address=ADDRESS,
        items=items if items is not None else [_make_item(qty=2)],
        subtotal=Money.of(subtotal),
        discount_amount=Money.of(discount),
    )
    fields.update(overrides)
    return Order.place(**fields)


class TestOrderPlacement:

    def test_happy_path(self):
        order = _place()
        assert order.status == OrderStatus.PENDING
        assert order.order_total == Money.of("20.00")
        assert order.id is None  # assigned by repository

    def test_line_total(self):
        assert _make_item(qty=3, price="5.50").line_total == Money.of("16.50")

    def test_total_subtracts_discount(self):
        order = _place(discount="5.00")
        assert order.order_total == Money.of("15.00")

    def test_total_never_negative(self):
        order = _place(discount="50.00")
        assert order.order_total == Money.zero()

    def test_subtotal_must_match_lines(self):
        with pytest.raises(IntegrityError, match="does not match"):
            _place(subtotal="19.00")

    def test_contact_is_trimmed(self):
        order = _place(contact=ContactInfo(email=" ann@example.com ", name=" Ann "))
        assert order.customer_email == "ann@example.com"
        assert order.customer_name == "Ann"


class TestOrderValidationOrder:

    def test_email_checked_first(self):
        with pytest.raises(ValidationError, match="customer_email is required"):
            _place(contact=ContactInfo(email="", name=""), shipping_address={})

    def test_name_before_address(self):
        with pytest.raises(ValidationError, match="customer_name is required"):
            _place(contact=ContactInfo(email="a@b.c", name=" "), shipping_address={})

    def test_address_required(self):
        with pytest.raises(ValidationError, match="shipping_address is required"):
            _place(shipping_address={})

    def test_items_required(self):
        with pytest.raises(ValidationError, match="items array cannot be empty"):
            _place(items=[])


class TestOrderOwnership:

    def test_authenticated_owner(self):
        order = _place(identity=Authenticated("u1"))
        assert (order.user_id, order.guest_session_id, order.is_guest) == ("u1", None, False)

    def test_guest_owner(self):
        order = _place(identity=Guest("sess-1"))
        assert (order.user_id, order.guest_session_id, order.is_guest) == (None, "sess-1", True)

    def test_public_cannot_place(self):
        with pytest.raises(IntegrityError, match="guest session id"):
            _place(identity=PUBLIC)

    def test_both_owners_violate_invariant(self):
        order = _place()
        order.guest_session_id = "sess-1"
        with pytest.raises(IntegrityError, match="both"):
            order.check_ownership_invariant()

    def test_flag_must_agree(self):
        order = _place(identity=Guest("sess-1"))
        order.is_guest = False
        with pytest.raises(IntegrityError, match="is_guest"):
            order.check_ownership_invariant()


class TestOrderTransitions:

    def test_payment_success(self):
        order = _place()
        order.mark_paid()
        assert order.status == OrderStatus.PROCESSING
        assert order.updated_at is not None

    def test_payment_failure(self):
        order = _place()
        order.mark_payment_failed()
        assert order.status == OrderStatus.FAILED
        assert order.is_terminal

    def test_full_happy_flow(self):
        order = _place()
        for status in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            order.transition_to(status)
        assert order.is_terminal

    def test_cannot_skip_to_delivered(self):
        order = _place()
        with pytest.raises(ValidationError, match="from pending to delivered"):
            order.transition_to(OrderStatus.DELIVERED)

    def test_cannot_cancel_after_shipping(self):
        order = _place()
        order.transition_to(OrderStatus.PROCESSING)
        order.transition_to(OrderStatus.SHIPPED)
        with pytest.raises(ValidationError):
            order.transition_to(OrderStatus.CANCELLED)

    def test_terminal_order_is_frozen(self):
        order = _place()
        order.transition_to(OrderStatus.CANCELLED)
        with pytest.raises(ValidationError):
            order.mark_paid()
