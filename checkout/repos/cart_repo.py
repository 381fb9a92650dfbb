# checkout/repos/cart_repo.py
from typing import Iterable, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from checkout.data.models.booking import BookingModel
from checkout.data.models.cart_line import CartLineModel
from checkout.domain.status import BookingStatus


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_line(self, line_id: int) -> CartLineModel | None:
        return self.db.get(CartLineModel, line_id, populate_existing=True)

    def get_lines(self, line_ids: Iterable[int]) -> List[CartLineModel]:
        return list(
            self.db.execute(
                select(CartLineModel)
                .where(CartLineModel.id.in_(list(line_ids)))
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def get_booking_lines(self, booking_id: int) -> List[CartLineModel]:
        return list(
            self.db.execute(
                select(CartLineModel)
                .where(CartLineModel.booking_id == booking_id)
                .order_by(CartLineModel.id)
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def get_lines_for_bookings(self, booking_ids: Iterable[int]) -> List[CartLineModel]:
        return list(
            self.db.execute(
                select(CartLineModel)
                .where(CartLineModel.booking_id.in_(list(booking_ids)))
                .order_by(CartLineModel.id)
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def get_draft_line(self, booking_id: int, variant_id: int) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel).where(
                CartLineModel.booking_id == booking_id,
                CartLineModel.variant_id == variant_id,
                CartLineModel.status == BookingStatus.DRAFT.value,
            ).execution_options(populate_existing=True)
        ).scalars().first()

    def get_user_draft_lines(self, user_id: int) -> List[CartLineModel]:
        """Lines of the user's open (DRAFT) booking, whatever their own status."""
        return list(
            self.db.execute(
                select(CartLineModel)
                .join(BookingModel, BookingModel.id == CartLineModel.booking_id)
                .where(
                    BookingModel.user_id == user_id,
                    BookingModel.status == BookingStatus.DRAFT.value,
                )
                .order_by(CartLineModel.id)
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def add_line(self, line: CartLineModel) -> CartLineModel:
        self.db.add(line)
        self.db.flush()
        return line

    def delete_line(self, line: CartLineModel) -> None:
        self.db.delete(line)
        self.db.flush()

    def count_booking_lines(self, booking_id: int) -> int:
        return self.db.execute(
            select(func.count(CartLineModel.id)).where(CartLineModel.booking_id == booking_id)
        ).scalar_one()

    def update_line_version(self, line_id: int, old_version: int, new_data: dict) -> int:
        # optimistic locking on the version column
        # update set version = 2 where id = 1 and version = 1
        return (
            self.db.query(CartLineModel)
            .filter(
                CartLineModel.id == line_id,
                CartLineModel.version == old_version,
            )
            .update(
                {**new_data, "version": old_version + 1},
                synchronize_session=False,
            )
        )

    def set_status(self, line: CartLineModel, status: BookingStatus) -> CartLineModel:
        line.status = status.value
        line.version = line.version + 1
        self.db.flush()
        return line

    def set_status_bulk(self, line_ids: Iterable[int], status: BookingStatus, only_from: BookingStatus) -> int:
        return (
            self.db.query(CartLineModel)
            .filter(
                CartLineModel.id.in_(list(line_ids)),
                CartLineModel.status == only_from.value,
            )
            .update(
                {
                    "status": status.value,
                    "version": CartLineModel.version + 1,
                },
                synchronize_session=False,
            )
        )

    def refresh(self, line: CartLineModel) -> CartLineModel:
        self.db.refresh(line)
        return line

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
