# app/services/inventory_service.py
import logging
import uuid
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.errors import InsufficientStockError
from app.repositories.product_repo import ProductRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockLine:
    product_id: uuid.UUID
    quantity: int
    product_name: str | None = None


class InventoryLedger:
    """
    Stock primitives shared by checkout and cancellation.

    Responsibilities:
      - atomic conditional decrement (never below zero)
      - unconditional restore of previously taken units
      - all-or-nothing reservation of several lines, with compensation
    """

    def __init__(self, product_repo: ProductRepository):
        self.product_repo = product_repo

    # ---- single-product operations (each commits) ----

    def try_decrement(
        self,
        session: Session,
        product_id: uuid.UUID,
        quantity: int,
    ) -> bool:
        """
        Take `quantity` units if at least that many are in stock.

        Returns False, without writing, when stock is short or the
        product does not exist.
        """
        if quantity < 1:
            raise ValueError("quantity must be >= 1")
        taken = self.product_repo.try_decrement_stock(session, product_id, quantity)
        if taken:
            session.commit()
        else:
            session.rollback()
        return taken

    def increment(
        self,
        session: Session,
        product_id: uuid.UUID,
        quantity: int,
    ) -> None:
        if quantity < 1:
            raise ValueError("quantity must be >= 1")
        if not self.product_repo.increment_stock(session, product_id, quantity):
            logger.warning("Stock restore skipped: product %s no longer exists", product_id)
        session.commit()

    # ---- multi-line operations ----

    def reserve(self, session: Session, lines: Iterable[StockLine]) -> list[StockLine]:
        """
        Decrement every line or none of them.

        Lines are taken in product id order so concurrent checkouts over
        the same products contend in the same sequence. On the first
        short line, every line already taken is restored and
        InsufficientStockError names the short product.
        """
        taken: list[StockLine] = []
        for line in sorted(lines, key=lambda ln: str(ln.product_id)):
            try:
                ok = self.try_decrement(session, line.product_id, line.quantity)
            except SQLAlchemyError:
                session.rollback()
                self.release(session, taken)
                raise
            if not ok:
                self.release(session, taken)
                raise InsufficientStockError(line.product_id, line.product_name)
            taken.append(line)
        return taken

    def release(self, session: Session, lines: Iterable[StockLine]) -> None:
        """
        Compensate a reservation. Each line is restored independently so
        one failure does not strand the others.
        """
        for line in lines:
            try:
                self.increment(session, line.product_id, line.quantity)
            except SQLAlchemyError:
                session.rollback()
                logger.exception(
                    "Compensation failed: %s units of product %s were not restored",
                    line.quantity,
                    line.product_id,
                )
            else:
                logger.info(
                    "Released %s units of product %s", line.quantity, line.product_id
                )

    def restore_lines(self, session: Session, lines: Iterable[StockLine]) -> None:
        """
        Restore ordered quantities inside the caller's transaction
        (no commit). Used by cancellation so the status flip and the
        restore land together.
        """
        for line in lines:
            if not self.product_repo.increment_stock(session, line.product_id, line.quantity):
                logger.warning(
                    "Stock restore skipped: product %s no longer exists", line.product_id
                )

