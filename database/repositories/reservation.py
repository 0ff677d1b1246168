import logging
from datetime import datetime
from typing import Any, List

from sqlalchemy import select, update

from database.models import CapacityReservation
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ReservationRepository(BaseRepository):
    def record(self, batch_id: str, recruiter_id: Any, amount: int) -> CapacityReservation:
        reservation = CapacityReservation(
            batch_id=batch_id,
            recruiter_id=recruiter_id,
            amount=amount,
            status='reserved',
        )
        self.db.add(reservation)
        return reservation

    def get_outstanding(self, batch_id: str) -> List[CapacityReservation]:
        """Reservations of a batch that were neither committed nor released, locked."""
        stmt = (
            select(CapacityReservation)
            .where(
                CapacityReservation.batch_id == batch_id,
                CapacityReservation.status == 'reserved',
            )
            .order_by(CapacityReservation.recruiter_id)
            .with_for_update()
        )
        return self._all(stmt)

    def mark_committed(self, batch_id: str) -> int:
        stmt = (
            update(CapacityReservation)
            .where(
                CapacityReservation.batch_id == batch_id,
                CapacityReservation.status == 'reserved',
            )
            .values(status='committed')
            .execution_options(synchronize_session=False)
        )
        return self._rowcount(stmt)

    def mark_released(self, reservation: CapacityReservation, at: datetime) -> None:
        reservation.status = 'released'
        reservation.released_at = at
