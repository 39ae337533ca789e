# app/repositories/order_repo.py
from sqlmodel import Session, select

from app.models.order import Order, OrderItem


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; checkout and finalization are multi-step
        transactions. The service is responsible for session.commit().
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: int,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, order_id: int) -> Order | None:
        return session.get(Order, order_id)

    def get_latest_for_user(
        self,
        session: Session,
        user_id: int,
        status: str | None = None,
    ) -> Order | None:
        stmt = select(Order).where(Order.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).limit(1)
        return session.exec(stmt).first()

    def get_by_payment_id(
        self,
        session: Session,
        user_id: int,
        payment_id: str,
    ) -> Order | None:
        stmt = select(Order).where(
            Order.user_id == user_id,
            Order.payment_id == payment_id,
        )
        return session.exec(stmt).first()

    def list_captured_pending(self, session: Session, limit: int = 100) -> list[Order]:
        """Orders whose capture was recorded but finalization never ran."""
        stmt = (
            select(Order)
            .where(Order.status == "pending", Order.captured_at.is_not(None))
            .order_by(Order.id)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        return order

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: int,
    ) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.id)
        )
        return list(session.exec(stmt).all())

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        for item in items:
            session.refresh(item)
        return items
