# order_service/store.py

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from platform_common.errors import NotFound, Unavailable

from .models import Order

logger = logging.getLogger(__name__)

ORDER_NOT_FOUND = "Order not found"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class OrderStore:
    """
    The only writer of order rows.

    Every read and update is scoped by owner: an order belonging to someone
    else is reported exactly like an order that does not exist.
    """

    def __init__(self, db: Session):
        self.db = db

    def _storage_failure(self, operation: str, exc: SQLAlchemyError) -> Unavailable:
        self.db.rollback()
        logger.error(f"Order store {operation} failed: {exc}")
        return Unavailable("Order storage unavailable")

    def create(self, user_id: int, items: List[Any], total_amount: Decimal) -> Order:
        now = _now()
        order = Order(
            userId=user_id,
            items=items,
            totalAmount=total_amount,
            status="pending",
            createdAt=now,
            updatedAt=now,
        )
        try:
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)
        except SQLAlchemyError as e:
            raise self._storage_failure("create", e)
        logger.info(f"Created order {order.id} for user {user_id}")
        return order

    def list_by_user(self, user_id: int) -> List[Order]:
        try:
            return (
                self.db.query(Order)
                .filter(Order.userId == user_id)
                .order_by(Order.createdAt.desc(), Order.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._storage_failure("list", e)

    def get_by_id_for_user(self, order_id: int, user_id: int) -> Order:
        try:
            order = (
                self.db.query(Order)
                .filter(Order.id == order_id, Order.userId == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._storage_failure("get", e)
        if order is None:
            raise NotFound(ORDER_NOT_FOUND)
        return order

    def update_status(self, order_id: int, user_id: int, new_status: str) -> Order:
        # Single conditional UPDATE scoped by id and owner; no version check,
        # so concurrent updates resolve last-writer-wins at the row.
        try:
            matched = (
                self.db.query(Order)
                .filter(Order.id == order_id, Order.userId == user_id)
                .update({Order.status: new_status, Order.updatedAt: _now()}, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_failure("update", e)
        if matched == 0:
            raise NotFound(ORDER_NOT_FOUND)
        self.db.expire_all()
        order = self.get_by_id_for_user(order_id, user_id)
        logger.info(f"Order {order_id} status updated to {new_status}")
        return order

    def ping(self) -> None:
        try:
            self.db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise self._storage_failure("ping", e)
