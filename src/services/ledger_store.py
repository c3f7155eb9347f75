"""Ledger store: repository interface over users, categories, expenses, splits and households.

Aggregation and allocation code depends only on ``LedgerStore``; the SQLAlchemy
implementation below is the one wired into the API. Swapping storage means
providing another ``LedgerStore`` implementation.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.models import Category, Expense, Household, Roommate, Split, User
from src.services.allocation_service import SplitDraft
from src.services.errors import ConflictError, InternalError, NotFoundError

logger = logging.getLogger(__name__)


class LedgerStore(ABC):
    """
    Abstract interface for ledger storage operations.

    Read methods return ``None`` / empty lists for missing records; callers
    decide whether that is a NotFoundError. Write methods are all-or-nothing.
    """

    # Users
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Return a user by id."""

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        """Return a user by username."""

    @abstractmethod
    def get_users(self, user_ids: Sequence[int]) -> List[User]:
        """Return the users among ``user_ids`` that exist."""

    @abstractmethod
    def create_user(
        self,
        username: str,
        display_name: str,
        email: str,
        avatar_initials: str,
        password: str,
    ) -> User:
        """Create a user.

        Raises:
            ConflictError: If the username is taken
        """

    # Categories
    @abstractmethod
    def list_categories(self) -> List[Category]:
        """Return all categories in creation order."""

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Return a category by id."""

    @abstractmethod
    def create_category(self, name: str, icon: str, color: str) -> Category:
        """Create a category."""

    # Expenses
    @abstractmethod
    def list_expenses(self) -> List[Expense]:
        """Return all expenses in creation order."""

    @abstractmethod
    def get_expense(self, expense_id: int) -> Optional[Expense]:
        """Return an expense by id."""

    @abstractmethod
    def list_expenses_for_user(self, user_id: int) -> List[Expense]:
        """Return expenses created by or split with the user, deduplicated, in creation order."""

    @abstractmethod
    def create_expense_with_splits(
        self,
        name: str,
        amount: Decimal,
        date: datetime,
        created_by_id: int,
        category_id: int,
        splits: Sequence[SplitDraft],
        notes: Optional[str] = None,
    ) -> Expense:
        """Persist an expense and its splits in a single transaction.

        Raises:
            InternalError: If storage fails; nothing is persisted
        """

    # Splits
    @abstractmethod
    def get_split(self, split_id: int) -> Optional[Split]:
        """Return a split by id."""

    @abstractmethod
    def list_splits_by_expense(self, expense_id: int) -> List[Split]:
        """Return the splits of an expense."""

    @abstractmethod
    def list_splits_by_user(self, user_id: int) -> List[Split]:
        """Return the splits owed by a user."""

    @abstractmethod
    def update_split_paid(self, split_id: int, is_paid: bool) -> Split:
        """Set a split's payment flag (last write wins).

        Raises:
            NotFoundError: If the split does not exist
        """

    # Households
    @abstractmethod
    def list_households(self) -> List[Household]:
        """Return all households."""

    @abstractmethod
    def get_household(self, household_id: int) -> Optional[Household]:
        """Return a household by id."""

    @abstractmethod
    def create_household(self, name: str, created_by_id: int) -> Household:
        """Create a household."""

    # Roommates
    @abstractmethod
    def list_roommates(self) -> List[Roommate]:
        """Return all memberships."""

    @abstractmethod
    def list_roommates_by_household(self, household_id: int) -> List[Roommate]:
        """Return memberships of a household in creation order."""

    @abstractmethod
    def list_roommates_by_user(self, user_id: int) -> List[Roommate]:
        """Return memberships of a user in creation order."""

    @abstractmethod
    def create_roommate(self, user_id: int, household_id: int) -> Roommate:
        """Add a user to a household.

        Raises:
            ConflictError: If the user is already a member
        """


class SqlAlchemyLedgerStore(LedgerStore):
    """Ledger store backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        """Initialize with database session.

        Args:
            db: Session for database operations
        """
        self.db = db

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error while trying to {action}: {e.orig}")
            raise ConflictError(f"Cannot {action}: record already exists") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Storage failure while trying to {action}: {e}", exc_info=True)
            raise InternalError(f"Failed to {action}") from e

    def _add(self, record, action: str):
        self.db.add(record)
        self._commit(action)
        self.db.refresh(record)
        return record

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.execute(select(User).filter_by(username=username)).scalar_one_or_none()

    def get_users(self, user_ids: Sequence[int]) -> List[User]:
        if not user_ids:
            return []
        stmt = select(User).filter(User.id.in_(list(user_ids))).order_by(User.id)
        return list(self.db.execute(stmt).scalars().all())

    def create_user(
        self,
        username: str,
        display_name: str,
        email: str,
        avatar_initials: str,
        password: str,
    ) -> User:
        user = User(
            username=username,
            display_name=display_name,
            email=email,
            avatar_initials=avatar_initials,
            password=password,
        )
        user = self._add(user, f"create user '{username}'")
        logger.info(f"Created user: {username} (ID={user.id})")
        return user

    # Categories

    def list_categories(self) -> List[Category]:
        return list(self.db.execute(select(Category).order_by(Category.id)).scalars().all())

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.db.get(Category, category_id)

    def create_category(self, name: str, icon: str, color: str) -> Category:
        category = self._add(Category(name=name, icon=icon, color=color), f"create category '{name}'")
        logger.info(f"Created category: {name} (ID={category.id})")
        return category

    # Expenses

    def list_expenses(self) -> List[Expense]:
        return list(self.db.execute(select(Expense).order_by(Expense.id)).scalars().all())

    def get_expense(self, expense_id: int) -> Optional[Expense]:
        return self.db.get(Expense, expense_id)

    def list_expenses_for_user(self, user_id: int) -> List[Expense]:
        split_expense_ids = select(Split.expense_id).filter(Split.user_id == user_id)
        stmt = (
            select(Expense)
            .filter(or_(Expense.created_by_id == user_id, Expense.id.in_(split_expense_ids)))
            .order_by(Expense.id)
        )
        return list(self.db.execute(stmt).scalars().unique().all())

    def create_expense_with_splits(
        self,
        name: str,
        amount: Decimal,
        date: datetime,
        created_by_id: int,
        category_id: int,
        splits: Sequence[SplitDraft],
        notes: Optional[str] = None,
    ) -> Expense:
        expense = Expense(
            name=name,
            amount=amount,
            date=date,
            notes=notes,
            created_by_id=created_by_id,
            category_id=category_id,
        )
        try:
            self.db.add(expense)
            self.db.flush()
            for draft in splits:
                self.db.add(
                    Split(
                        expense_id=expense.id,
                        user_id=draft.user_id,
                        amount=draft.amount,
                        is_paid=draft.is_paid,
                        due_date=draft.due_date,
                    )
                )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to persist expense '{name}' with splits: {e}", exc_info=True)
            raise InternalError("Failed to create expense") from e

        self.db.refresh(expense)
        logger.info(
            f"Created expense: {name} (ID={expense.id}, amount={amount}, splits={len(splits)})"
        )
        return expense

    # Splits

    def get_split(self, split_id: int) -> Optional[Split]:
        return self.db.get(Split, split_id)

    def list_splits_by_expense(self, expense_id: int) -> List[Split]:
        stmt = select(Split).filter(Split.expense_id == expense_id).order_by(Split.id)
        return list(self.db.execute(stmt).scalars().all())

    def list_splits_by_user(self, user_id: int) -> List[Split]:
        stmt = select(Split).filter(Split.user_id == user_id).order_by(Split.id)
        return list(self.db.execute(stmt).scalars().all())

    def update_split_paid(self, split_id: int, is_paid: bool) -> Split:
        split = self.get_split(split_id)
        if not split:
            raise NotFoundError(f"Split {split_id} not found")
        split.is_paid = is_paid
        self._commit(f"update split {split_id}")
        self.db.refresh(split)
        logger.info(f"Split {split_id} payment status set to is_paid={is_paid}")
        return split

    # Households

    def list_households(self) -> List[Household]:
        return list(self.db.execute(select(Household).order_by(Household.id)).scalars().all())

    def get_household(self, household_id: int) -> Optional[Household]:
        return self.db.get(Household, household_id)

    def create_household(self, name: str, created_by_id: int) -> Household:
        household = self._add(
            Household(name=name, created_by_id=created_by_id), f"create household '{name}'"
        )
        logger.info(f"Created household: {name} (ID={household.id})")
        return household

    # Roommates

    def list_roommates(self) -> List[Roommate]:
        return list(self.db.execute(select(Roommate).order_by(Roommate.id)).scalars().all())

    def list_roommates_by_household(self, household_id: int) -> List[Roommate]:
        stmt = select(Roommate).filter(Roommate.household_id == household_id).order_by(Roommate.id)
        return list(self.db.execute(stmt).scalars().all())

    def list_roommates_by_user(self, user_id: int) -> List[Roommate]:
        stmt = select(Roommate).filter(Roommate.user_id == user_id).order_by(Roommate.id)
        return list(self.db.execute(stmt).scalars().all())

    def create_roommate(self, user_id: int, household_id: int) -> Roommate:
        roommate = self._add(
            Roommate(user_id=user_id, household_id=household_id),
            f"add user {user_id} to household {household_id}",
        )
        logger.info(f"Added user {user_id} to household {household_id} (roommate ID={roommate.id})")
        return roommate


__all__ = ["LedgerStore", "SqlAlchemyLedgerStore"]
