"""Explicit construction of "with details" views from base ledger records."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Mapping

from src.models import Category, Expense, Roommate, Split, User
from src.schemas.views import (
    CategoryView,
    ExpenseView,
    ExpenseWithDetails,
    RoommateWithUser,
    SplitWithDetails,
    SplitWithUser,
    UserView,
)
from src.services.errors import NotFoundError


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values (SQLite round-trips) are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def build_user_view(user: User) -> UserView:
    return UserView.model_validate(user)


def build_split_with_user(split: Split, user: User) -> SplitWithUser:
    if user is None or user.id != split.user_id:
        raise NotFoundError(f"User {split.user_id} for split {split.id} not found")
    return SplitWithUser(
        id=split.id,
        expense_id=split.expense_id,
        user_id=split.user_id,
        amount=split.amount,
        is_paid=split.is_paid,
        due_date=split.due_date,
        user=build_user_view(user),
    )


def build_expense_with_details(
    expense: Expense,
    category: Category,
    created_by: User,
    splits: Iterable[Split],
    users_by_id: Mapping[int, User],
) -> ExpenseWithDetails:
    """Join an expense with its category, creator and splits.

    Args:
        expense: Base expense record
        category: The expense's category
        created_by: The expense's creator
        splits: Splits of the expense
        users_by_id: Users referenced by the splits

    Raises:
        NotFoundError: If the category, creator or a split's user is missing
    """
    if category is None:
        raise NotFoundError(f"Category {expense.category_id} for expense {expense.id} not found")
    if created_by is None:
        raise NotFoundError(f"User {expense.created_by_id} for expense {expense.id} not found")

    return ExpenseWithDetails(
        **ExpenseView.model_validate(expense).model_dump(),
        category=CategoryView.model_validate(category),
        created_by=build_user_view(created_by),
        splits=[build_split_with_user(split, users_by_id.get(split.user_id)) for split in splits],
    )


def build_split_with_details(split: Split, expense: Expense, user: User) -> SplitWithDetails:
    if expense is None:
        raise NotFoundError(f"Expense {split.expense_id} for split {split.id} not found")
    if user is None:
        raise NotFoundError(f"User {split.user_id} for split {split.id} not found")
    return SplitWithDetails(
        id=split.id,
        expense_id=split.expense_id,
        user_id=split.user_id,
        amount=split.amount,
        is_paid=split.is_paid,
        due_date=split.due_date,
        expense=ExpenseView.model_validate(expense),
        user=build_user_view(user),
    )


def build_roommate_with_user(roommate: Roommate, user: User, owed_amount: Decimal) -> RoommateWithUser:
    if user is None:
        raise NotFoundError(f"User {roommate.user_id} for roommate {roommate.id} not found")
    return RoommateWithUser(
        id=roommate.id,
        user_id=roommate.user_id,
        household_id=roommate.household_id,
        user=build_user_view(user),
        owed_amount=owed_amount,
    )


def load_expense_with_details(store, expense_id: int) -> ExpenseWithDetails:
    """Read an expense and everything it references from the store and join them.

    Args:
        store: LedgerStore to read from
        expense_id: Expense to expand

    Raises:
        NotFoundError: If the expense (or anything it references) is missing
    """
    expense = store.get_expense(expense_id)
    if not expense:
        raise NotFoundError(f"Expense {expense_id} not found")

    splits = store.list_splits_by_expense(expense.id)
    users = store.get_users([split.user_id for split in splits])
    return build_expense_with_details(
        expense,
        store.get_category(expense.category_id),
        store.get_user(expense.created_by_id),
        splits,
        {user.id: user for user in users},
    )
