"""Split ORM model - one member's owed portion of an expense."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Split(Base, BaseModel):
    """
    Per-member obligation created when an expense is allocated.

    Only ``is_paid`` changes after creation, and only from False to True.
    """

    __tablename__ = "splits"

    expense_id: Mapped[int] = mapped_column(
        ForeignKey("expenses.id"), nullable=False, index=True, comment="Owning expense"
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True, comment="Member who owes this share"
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2), nullable=False, comment="Owed share"
    )
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    expense: Mapped["Expense"] = relationship(  # noqa: F821
        "Expense", back_populates="splits", foreign_keys=[expense_id]
    )
    user: Mapped["User"] = relationship(  # noqa: F821
        "User", back_populates="splits", foreign_keys=[user_id]
    )

    __table_args__ = (Index("idx_split_user_paid", "user_id", "is_paid"),)

    def __repr__(self) -> str:
        return (
            f"<Split(id={self.id}, expense_id={self.expense_id}, user_id={self.user_id}, "
            f"amount={self.amount}, is_paid={self.is_paid})>"
        )


__all__ = ["Split"]
