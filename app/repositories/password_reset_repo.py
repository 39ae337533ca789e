# app/repositories/password_reset_repo.py
from sqlmodel import Session, select

from app.models.user import PasswordResetToken


class PasswordResetRepository:
    """
    Data access layer for PasswordResetToken.

    `create` commits; deletes are flushed only so the caller can commit
    them together with the password change.
    """

    def get_by_token(self, session: Session, token: str) -> PasswordResetToken | None:
        stmt = select(PasswordResetToken).where(PasswordResetToken.token == token)
        return session.exec(stmt).first()

    def create(self, session: Session, reset: PasswordResetToken) -> PasswordResetToken:
        session.add(reset)
        session.commit()
        session.refresh(reset)
        return reset

    def delete_for_user(self, session: Session, user_id: int) -> int:
        stmt = select(PasswordResetToken).where(PasswordResetToken.user_id == user_id)
        rows = session.exec(stmt).all()
        for row in rows:
            session.delete(row)
        session.flush()
        return len(rows)
