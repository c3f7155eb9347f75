"""User ORM model for household members."""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class User(Base, BaseModel):
    """
    A person who records expenses and owes splits.

    The password column is an opaque credential kept only so records round-trip;
    nothing in the application authenticates against it and it is never
    serialized into a response.
    """

    __tablename__ = "users"

    # Identity fields
    username: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login name - unique identifier",
    )
    display_name: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Full name shown in lists and dashboards"
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_initials: Mapped[str] = mapped_column(
        String(8), nullable=False, comment="Initials rendered in the avatar badge"
    )
    password: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Opaque credential (not used by the ledger)"
    )

    __table_args__ = (Index("idx_username_unique", "username", unique=True),)

    # Relationships
    splits: Mapped[list["Split"]] = relationship(  # noqa: F821
        "Split",
        back_populates="user",
        foreign_keys="Split.user_id",
    )
    memberships: Mapped[list["Roommate"]] = relationship(  # noqa: F821
        "Roommate",
        back_populates="user",
        foreign_keys="Roommate.user_id",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r}, display_name={self.display_name!r})>"


__all__ = ["User"]
