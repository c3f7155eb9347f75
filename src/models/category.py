"""Category ORM model - static expense taxonomy."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class Category(Base, BaseModel):
    """Expense category (Rent, Utilities, Groceries, ...)."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str] = mapped_column(String(50), nullable=False, comment="Icon name, e.g. 'home'")
    color: Mapped[str] = mapped_column(String(20), nullable=False, comment="Hex color, e.g. '#6366f1'")

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name!r})>"


__all__ = ["Category"]
