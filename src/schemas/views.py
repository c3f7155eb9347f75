"""Pydantic view models returned by the ledger services and the API."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class UserView(BaseModel):
    """Public user fields (the password is never exposed)."""

    id: int
    username: str
    display_name: str
    email: str
    avatar_initials: str

    model_config = ConfigDict(from_attributes=True)


class CategoryView(BaseModel):
    """Expense category."""

    id: int
    name: str
    icon: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class ExpenseView(BaseModel):
    """Plain expense record."""

    id: int
    name: str
    amount: Decimal
    date: datetime
    notes: str | None = None
    created_by_id: int
    category_id: int

    model_config = ConfigDict(from_attributes=True)


class SplitView(BaseModel):
    """Plain split record."""

    id: int
    expense_id: int
    user_id: int
    amount: Decimal
    is_paid: bool
    due_date: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class SplitWithUser(SplitView):
    """Split joined with the member who owes it."""

    user: UserView


class ExpenseWithDetails(ExpenseView):
    """Expense joined with its category, creator and splits."""

    category: CategoryView
    created_by: UserView
    splits: list[SplitWithUser] = Field(default_factory=list)


class SplitWithDetails(SplitView):
    """Split joined with its expense and member."""

    expense: ExpenseView
    user: UserView


class HouseholdView(BaseModel):
    """Household record."""

    id: int
    name: str
    created_by_id: int

    model_config = ConfigDict(from_attributes=True)


class RoommateView(BaseModel):
    """Membership record."""

    id: int
    user_id: int
    household_id: int

    model_config = ConfigDict(from_attributes=True)


class RoommateWithUser(RoommateView):
    """Membership joined with its user and what they still owe in the household."""

    user: UserView
    owed_amount: Decimal


class OwedAmountView(BaseModel):
    """Outstanding amount of one member within one household."""

    household_id: int
    user_id: int
    owed_amount: Decimal


class CategoryTotal(BaseModel):
    """Spending in one category with its share of the grand total."""

    category: CategoryView
    total: Decimal
    percentage: int


class SummaryView(BaseModel):
    """Dashboard summary for one member."""

    total_expenses: Decimal
    user_share: Decimal
    outstanding_amount: Decimal
    roommate_count: int
    recent_expenses: list[ExpenseWithDetails]
    expenses_by_category: list[CategoryTotal]


class ReportGroup(BaseModel):
    """One group (category, member or month) of a report."""

    key: str
    label: str
    total: Decimal
    percentage: int


class ReportView(BaseModel):
    """Time-windowed spending report for one member."""

    user_id: int
    start: date
    end: date
    group_by: str
    total_expenses: Decimal
    expense_count: int
    groups: list[ReportGroup]
    highest: ReportGroup | None = None
    lowest: ReportGroup | None = None
