"""Dashboard service: read-only summary of a member's shared expenses.

Recomputed from the ledger store on every call; nothing is cached.

Category percentages are rounded independently (half up) and are not forced
to add up to 100.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Sequence

from src.models import Expense
from src.schemas.views import CategoryTotal, CategoryView, ExpenseWithDetails, SummaryView
from src.services.balance_service import outstanding_amount, total_share
from src.services.errors import NotFoundError
from src.services.ledger_store import LedgerStore
from src.services.views import as_utc, load_expense_with_details

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
DEFAULT_RECENT_LIMIT = 5


def percentage_of(total: Decimal, grand_total: Decimal) -> int:
    """round(total / grand_total * 100), half up; 0 when grand_total is 0."""
    if grand_total <= 0:
        return 0
    return int((total / grand_total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def sum_amounts(records: Iterable) -> Decimal:
    return sum((record.amount for record in records), ZERO)


def most_recent(expenses: Sequence[Expense], limit: int) -> List[Expense]:
    """Most recent expenses by date; same-date expenses keep their listing order."""
    return sorted(expenses, key=lambda expense: as_utc(expense.date), reverse=True)[:limit]


class DashboardService:
    """Compose the dashboard summary for one member."""

    def __init__(self, store: LedgerStore, recent_limit: int = DEFAULT_RECENT_LIMIT):
        self.store = store
        self.recent_limit = recent_limit

    def _require_user(self, user_id: int):
        user = self.store.get_user(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def roommate_count(self, user_id: int) -> int:
        """Members of the user's primary household (earliest membership), user included."""
        memberships = self.store.list_roommates_by_user(user_id)
        if not memberships:
            return 0
        return len(self.store.list_roommates_by_household(memberships[0].household_id))

    def recent_expenses(self, expenses: Sequence[Expense]) -> List[ExpenseWithDetails]:
        return [
            load_expense_with_details(self.store, expense.id)
            for expense in most_recent(expenses, self.recent_limit)
        ]

    def expenses_by_category(self, expenses: Sequence[Expense]) -> List[CategoryTotal]:
        """Per-category totals with percentages, largest first, empty categories dropped."""
        grand_total = sum_amounts(expenses)
        totals = []
        for category in self.store.list_categories():
            total = sum_amounts(e for e in expenses if e.category_id == category.id)
            if total > 0:
                totals.append(
                    CategoryTotal(
                        category=CategoryView.model_validate(category),
                        total=total,
                        percentage=percentage_of(total, grand_total),
                    )
                )
        # sorted() is stable: equal totals keep category order
        return sorted(totals, key=lambda item: item.total, reverse=True)

    def summary(self, user_id: int) -> SummaryView:
        """Build the dashboard summary for a member.

        Args:
            user_id: Member to summarize

        Returns:
            SummaryView with totals, outstanding amount, roommate count,
            recent expenses and category breakdown

        Raises:
            NotFoundError: If the user does not exist
        """
        self._require_user(user_id)

        expenses = self.store.list_expenses_for_user(user_id)
        splits = self.store.list_splits_by_user(user_id)

        summary = SummaryView(
            total_expenses=sum_amounts(expenses),
            user_share=total_share(splits),
            outstanding_amount=outstanding_amount(splits),
            roommate_count=self.roommate_count(user_id),
            recent_expenses=self.recent_expenses(expenses),
            expenses_by_category=self.expenses_by_category(expenses),
        )
        logger.debug(
            f"dashboard.summary: user_id={user_id} expenses={len(expenses)} "
            f"splits={len(splits)} outstanding={summary.outstanding_amount}"
        )
        return summary


__all__ = ["DashboardService", "most_recent", "percentage_of", "sum_amounts"]
