"""Household and roommate-membership ORM models."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Household(Base, BaseModel):
    """A named group of members sharing expenses."""

    __tablename__ = "households"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    created_by: Mapped["User"] = relationship("User", foreign_keys=[created_by_id])  # noqa: F821
    roommates: Mapped[list["Roommate"]] = relationship(
        "Roommate",
        back_populates="household",
        order_by="Roommate.id",
    )

    def __repr__(self) -> str:
        return f"<Household(id={self.id}, name={self.name!r})>"


class Roommate(Base, BaseModel):
    """Membership of a user in a household (join entity)."""

    __tablename__ = "roommates"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    household_id: Mapped[int] = mapped_column(
        ForeignKey("households.id"), nullable=False, index=True
    )

    user: Mapped["User"] = relationship(  # noqa: F821
        "User", back_populates="memberships", foreign_keys=[user_id]
    )
    household: Mapped[Household] = relationship(
        Household, back_populates="roommates", foreign_keys=[household_id]
    )

    __table_args__ = (
        UniqueConstraint("user_id", "household_id", name="uq_roommate_user_household"),
    )

    def __repr__(self) -> str:
        return f"<Roommate(id={self.id}, user_id={self.user_id}, household_id={self.household_id})>"


__all__ = ["Household", "Roommate"]
