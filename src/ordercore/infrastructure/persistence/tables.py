"""SQLAlchemy table definitions.

The catalog tables (``menu_items``, ``dishes``) and ``discount_codes`` are
owned by other parts of the storefront; they are declared here so this core
can read them and so tests can build a complete schema.

Purchase history never depends on the catalog staying put: deleting a
catalog row nulls the line item's reference and keeps the line item.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

MONEY = Numeric(10, 2)


# --- Catalog (read-only here) -------------------------------------------------


class MenuItemRow(Base):
    """Current catalog."""

    __tablename__ = "menu_items"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    price = Column(MONEY, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)


class DishRow(Base):
    """Legacy catalog, still referenced by older carts and orders."""

    __tablename__ = "dishes"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    price = Column(MONEY, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)


class DiscountCodeRow(Base):
    __tablename__ = "discount_codes"

    id = Column(String(36), primary_key=True)
    code = Column(String(64), nullable=False, unique=True)
    discount_type = Column(String(16), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=False)
    min_order_amount = Column(MONEY)
    max_discount_amount = Column(MONEY)
    starts_at = Column(DateTime(timezone=True))
    expires_at = Column(DateTime(timezone=True))
    usage_limit = Column(Integer)
    usage_count = Column(Integer, nullable=False, default=0)
    one_per_customer = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("discount_type IN ('percentage', 'fixed')", name="ck_discount_type"),
        CheckConstraint(
            "usage_limit IS NULL OR usage_count <= usage_limit",
            name="ck_discount_usage_within_limit",
        ),
    )


class DiscountCodeUsageRow(Base):
    """One discounted order.

    ``exclusive_user_id`` repeats ``user_id`` only for one-per-customer
    codes, so the unique constraint stops a second use by the same customer
    and leaves every other code unrestricted (NULLs never collide).
    """

    __tablename__ = "discount_code_usage"

    id = Column(Integer, primary_key=True, autoincrement=True)
    discount_code_id = Column(
        String(36), ForeignKey("discount_codes.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String(36), index=True)
    exclusive_user_id = Column(String(36))
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), index=True)
    discount_amount = Column(MONEY, nullable=False)
    order_total = Column(MONEY, nullable=False)
    used_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "discount_code_id", "exclusive_user_id", name="uq_discount_usage_one_per_customer"
        ),
        Index("ix_discount_usage_code_user", "discount_code_id", "user_id"),
    )


# --- Orders -------------------------------------------------------------------


class OrderRow(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), index=True)
    guest_session_id = Column(String(64), index=True)
    is_guest = Column(Boolean, nullable=False, default=False)

    customer_email = Column(String(255), nullable=False)
    customer_name = Column(String(255), nullable=False)
    shipping_address = Column(JSON, nullable=False)

    subtotal = Column(MONEY, nullable=False)
    discount_code_id = Column(
        String(36), ForeignKey("discount_codes.id", ondelete="SET NULL"), index=True
    )
    discount_amount = Column(MONEY, nullable=False, default=0)
    order_total = Column(MONEY, nullable=False)
    status = Column(String(16), nullable=False, default="pending")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    items = relationship(
        "OrderItemRow",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItemRow.id",
    )

    __table_args__ = (
        CheckConstraint(
            "(user_id IS NOT NULL AND guest_session_id IS NULL AND NOT is_guest)"
            " OR (user_id IS NULL AND guest_session_id IS NOT NULL AND is_guest)",
            name="ck_orders_single_owner",
        ),
        CheckConstraint("subtotal >= 0", name="ck_orders_subtotal"),
        CheckConstraint("discount_amount >= 0", name="ck_orders_discount"),
        CheckConstraint("order_total >= 0", name="ck_orders_total"),
        CheckConstraint(
            "status IN ('pending', 'processing', 'shipped', 'delivered', 'cancelled', 'failed')",
            name="ck_orders_status",
        ),
    )


class OrderItemRow(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_item_id = Column(
        String(36), ForeignKey("menu_items.id", ondelete="SET NULL"), index=True
    )
    product_id = Column(String(36), ForeignKey("dishes.id", ondelete="SET NULL"), index=True)
    item_name = Column(String(255), nullable=False, default="")
    quantity = Column(Integer, nullable=False)
    price_at_purchase = Column(MONEY, nullable=False)
    variant_id = Column(String(36), index=True)
    combination_id = Column(String(36), index=True)
    variant_metadata = Column(JSON)

    order = relationship("OrderRow", back_populates="items")

    __table_args__ = (
        # both may become NULL once catalog rows are deleted, never both set
        CheckConstraint(
            "NOT (menu_item_id IS NOT NULL AND product_id IS NOT NULL)",
            name="ck_order_items_single_catalog",
        ),
        CheckConstraint("quantity > 0", name="ck_order_items_quantity"),
        CheckConstraint("price_at_purchase > 0", name="ck_order_items_price"),
    )


# --- Reservations -------------------------------------------------------------


class ReservationRow(Base):
    __tablename__ = "table_reservations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), index=True)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False, index=True)
    customer_phone = Column(String(64), nullable=False)
    reservation_date = Column(Date, nullable=False)
    reservation_time = Column(Time, nullable=False)
    party_size = Column(Integer, nullable=False)
    table_number = Column(String(32))
    status = Column(String(16), nullable=False, default="pending")
    special_requests = Column(Text)
    admin_notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("party_size > 0 AND party_size <= 20", name="ck_reservations_party"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'declined', 'cancelled', 'completed', 'no_show')",
            name="ck_reservations_status",
        ),
        Index("ix_reservations_datetime", "reservation_date", "reservation_time"),
    )
