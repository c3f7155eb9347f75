"""Expense ORM model - a shared cost recorded by one member."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Expense(Base, BaseModel):
    """Shared expense with creator attribution.

    Attributes:
        name: Short label (e.g. "May Rent")
        amount: Total amount in currency units, always positive
        date: When the expense happened
        notes: Free-form notes
        created_by_id: User who recorded (and paid) the expense
        category_id: Category the expense is filed under

    Amount and date are immutable once created; the splits referencing the
    expense must always sum to ``amount``.
    """

    __tablename__ = "expenses"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text(), nullable=True)
    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id"), nullable=False, index=True
    )

    # Relationships
    created_by: Mapped["User"] = relationship("User", foreign_keys=[created_by_id])  # noqa: F821
    category: Mapped["Category"] = relationship("Category", foreign_keys=[category_id])  # noqa: F821
    splits: Mapped[list["Split"]] = relationship(  # noqa: F821
        "Split",
        back_populates="expense",
        order_by="Split.id",
    )

    __table_args__ = (Index("idx_expense_date", "date"),)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Expense(id={self.id}, name={self.name!r}, amount={self.amount})>"


__all__ = ["Expense"]
