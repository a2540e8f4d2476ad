"""SQLAlchemy implementation of ReservationRepository."""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ordercore.domain.model.reservation import ACTIVE_STATUSES, Reservation, ReservationStatus
from ordercore.domain.repository.reservation_repository import ReservationRepository
from ordercore.infrastructure.persistence.tables import ReservationRow


class SqlReservationRepository(ReservationRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ReservationRepository interface --------------------------------------

    def add(self, reservation: Reservation) -> None:
        row = ReservationRow(
            user_id=reservation.user_id,
            customer_name=reservation.customer_name,
            customer_email=reservation.customer_email,
            customer_phone=reservation.customer_phone,
            reservation_date=reservation.reservation_date,
            reservation_time=reservation.reservation_time,
            party_size=reservation.party_size,
            table_number=reservation.table_number,
            status=reservation.status.value,
            special_requests=reservation.special_requests,
            admin_notes=reservation.admin_notes,
            created_at=reservation.created_at,
        )
        self._session.add(row)
        self._session.flush()
        reservation.id = row.id

    def get_by_id(self, reservation_id: int) -> Reservation | None:
        row = self._session.get(ReservationRow, reservation_id)
        return self._to_domain(row) if row is not None else None

    def list_active_for_email_on(self, email: str, on: date) -> list[Reservation]:
        return self._list(
            func.lower(ReservationRow.customer_email) == email.strip().lower(),
            ReservationRow.reservation_date == on,
            ReservationRow.status.in_([s.value for s in ACTIVE_STATUSES]),
        )

    def list_by_user(self, user_id: str) -> list[Reservation]:
        return self._list(ReservationRow.user_id == user_id)

    def list_by_email(self, email: str) -> list[Reservation]:
        return self._list(func.lower(ReservationRow.customer_email) == email.strip().lower())

    def list_all(self) -> list[Reservation]:
        return self._list()

    def save(self, reservation: Reservation) -> None:
        row = self._session.get(ReservationRow, reservation.id)
        if row is None:
            raise LookupError(f"Reservation #{reservation.id} vanished during update")
        row.status = reservation.status.value
        row.admin_notes = reservation.admin_notes
        row.table_number = reservation.table_number
        row.updated_at = reservation.updated_at or datetime.now(timezone.utc)
        self._session.flush()

    # --- Helpers --------------------------------------------------------------

    def _list(self, *criteria) -> list[Reservation]:
        stmt = (
            select(ReservationRow)
            .where(*criteria)
            .order_by(ReservationRow.reservation_date, ReservationRow.reservation_time)
        )
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    @staticmethod
    def _to_domain(row: ReservationRow) -> Reservation:
        return Reservation(
            id=row.id,
            user_id=row.user_id,
            customer_name=row.customer_name,
            customer_email=row.customer_email,
            customer_phone=row.customer_phone,
            reservation_date=row.reservation_date,
            reservation_time=row.reservation_time,
            party_size=row.party_size,
            special_requests=row.special_requests,
            status=ReservationStatus(row.status),
            admin_notes=row.admin_notes,
            table_number=row.table_number,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
