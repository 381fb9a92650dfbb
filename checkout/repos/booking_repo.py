# checkout/repos/booking_repo.py
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from checkout.data.models.booking import BookingModel
from checkout.domain.status import BookingStatus


class BookingRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_booking(self, booking_id: int) -> BookingModel | None:
        return self.db.get(BookingModel, booking_id, populate_existing=True)

    def lock_booking(self, booking_id: int) -> BookingModel | None:
        """Row-lock the booking so line-derived status updates serialise per booking."""
        return self.db.execute(
            select(BookingModel)
            .where(BookingModel.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_draft_booking(self, user_id: int) -> BookingModel | None:
        return self.db.execute(
            select(BookingModel).where(
                BookingModel.user_id == user_id,
                BookingModel.status == BookingStatus.DRAFT.value,
            ).execution_options(populate_existing=True)
        ).scalars().first()

    def add_booking(self, booking: BookingModel) -> BookingModel:
        self.db.add(booking)
        self.db.flush()
        return booking

    def delete_booking(self, booking: BookingModel) -> None:
        # reload lines so the cascade sees what is in the database now
        self.db.expire(booking, ["lines"])
        self.db.delete(booking)
        self.db.flush()

    def confirm_if_unconfirmed(self, booking_id: int, user_id: int, address_id: int) -> int:
        # update set status = CONFIRMED where id = b and user_id = u and status in (DRAFT, PENDING)
        return (
            self.db.query(BookingModel)
            .filter(
                BookingModel.id == booking_id,
                BookingModel.user_id == user_id,
                BookingModel.status.in_(
                    [BookingStatus.DRAFT.value, BookingStatus.PENDING.value]
                ),
            )
            .update(
                {
                    "address_id": address_id,
                    "status": BookingStatus.CONFIRMED.value,
                    "expires_at": None,
                },
                synchronize_session=False,
            )
        )

    def set_status(self, booking: BookingModel, status: BookingStatus) -> BookingModel:
        booking.status = status.value
        self.db.flush()
        return booking

    def set_amount(self, booking: BookingModel, amount) -> BookingModel:
        booking.amount = amount
        self.db.flush()
        return booking

    def list_for_user(self, user_id: int) -> List[BookingModel]:
        return list(
            self.db.execute(
                select(BookingModel)
                .where(BookingModel.user_id == user_id)
                .order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def list_by_status(
        self,
        statuses: Sequence[BookingStatus],
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[BookingModel]:
        query = (
            select(BookingModel)
            .where(BookingModel.status.in_([s.value for s in statuses]))
            .order_by(BookingModel.id)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        if limit is not None:
            query = query.limit(limit)
        return list(self.db.execute(query).scalars())

    def count_by_status(self, statuses: Sequence[BookingStatus]) -> int:
        return self.db.execute(
            select(func.count(BookingModel.id)).where(
                BookingModel.status.in_([s.value for s in statuses])
            )
        ).scalar_one()

    def expired_pending_ids(self, now: datetime) -> List[int]:
        return list(
            self.db.execute(
                select(BookingModel.id).where(
                    BookingModel.status == BookingStatus.PENDING.value,
                    BookingModel.expires_at.is_not(None),
                    BookingModel.expires_at <= now,
                )
            ).scalars()
        )

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
