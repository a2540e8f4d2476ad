"""SQLAlchemy implementation of DiscountRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ordercore.domain.model.discount import DiscountCode, DiscountType
from ordercore.domain.model.value_objects import Money
from ordercore.domain.repository.discount_repository import DiscountRepository
from ordercore.infrastructure.persistence.tables import DiscountCodeRow, DiscountCodeUsageRow


class SqlDiscountRepository(DiscountRepository):

    def __init__(self, session: Session, currency: str = "USD") -> None:
        self._session = session
        self._currency = currency

    def get_by_code(self, code: str) -> DiscountCode | None:
        row = self._session.execute(
            select(DiscountCodeRow).where(DiscountCodeRow.code == code)
        ).scalar_one_or_none()
        if row is None:
            return None
        return self._to_domain(row)

    def has_been_used_by(self, code_id: str, user_id: str) -> bool:
        found = self._session.execute(
            select(DiscountCodeUsageRow.id)
            .where(
                DiscountCodeUsageRow.discount_code_id == code_id,
                DiscountCodeUsageRow.user_id == user_id,
            )
            .limit(1)
        ).first()
        return found is not None

    def record_usage(
        self,
        code_id: str,
        user_id: str | None,
        order_id: int,
        discount_amount: Money,
        order_total: Money,
    ) -> None:
        one_per_customer = self._session.execute(
            select(DiscountCodeRow.one_per_customer).where(DiscountCodeRow.id == code_id)
        ).scalar_one()
        self._session.add(
            DiscountCodeUsageRow(
                discount_code_id=code_id,
                user_id=user_id,
                exclusive_user_id=user_id if one_per_customer else None,
                order_id=order_id,
                discount_amount=discount_amount.amount,
                order_total=order_total.amount,
            )
        )
        # in-database increment; ck_discount_usage_within_limit rejects a lost race
        self._session.execute(
            update(DiscountCodeRow)
            .where(DiscountCodeRow.id == code_id)
            .values(usage_count=DiscountCodeRow.usage_count + 1)
        )
        self._session.flush()

    def _to_domain(self, row: DiscountCodeRow) -> DiscountCode:
        return DiscountCode(
            id=row.id,
            code=row.code,
            discount_type=DiscountType(row.discount_type),
            discount_value=Decimal(str(row.discount_value)),
            is_active=bool(row.is_active),
            min_order_amount=self._money(row.min_order_amount),
            max_discount_amount=self._money(row.max_discount_amount),
            starts_at=row.starts_at,
            expires_at=row.expires_at,
            usage_limit=row.usage_limit,
            usage_count=row.usage_count or 0,
            one_per_customer=bool(row.one_per_customer),
        )

    def _money(self, raw: Decimal | None) -> Money | None:
        if raw is None:
            return None
        return Money(Decimal(str(raw)), self._currency)
