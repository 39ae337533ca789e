# app/repositories/cart_repo.py
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.errors import ConflictError
from app.models.cart import CartItem
from app.models.course import Course


class CartRepository:

    # Get items for a user
    def list_for_user(self, session: Session, user_id: int) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.id)
        )
        return list(session.exec(stmt).all())

    def list_with_courses(
        self, session: Session, user_id: int
    ) -> list[tuple[CartItem, Course]]:
        """Cart rows joined to their course (name, slug, current price)."""
        stmt = (
            select(CartItem, Course)
            .join(Course, Course.id == CartItem.course_id)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.id)
        )
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, user_id: int, course_id: int
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id, CartItem.course_id == course_id
        )
        return session.exec(stmt).first()

    def get_by_id(self, session: Session, item_id: int) -> CartItem | None:
        return session.get(CartItem, item_id)

    # CRUD
    def create(self, session: Session, item: CartItem) -> CartItem:
        """
        Insert a cart row.

        Raises:
            ConflictError: the (user_id, course_id) pair already exists.
        """
        session.add(item)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ConflictError("course already in cart")
        session.refresh(item)
        return item

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(self, session: Session, user_id: int) -> int:
        """
        Delete every cart row of `user_id` without committing.
        Returns the number of rows removed.
        """
        rows = self.list_for_user(session, user_id)
        for row in rows:
            session.delete(row)
        session.flush()
        return len(rows)
