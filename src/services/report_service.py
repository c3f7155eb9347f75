"""Report service: time-windowed spending breakdowns.

Same grouping and percentage rules as the dashboard, applied to the member's
expenses whose date falls inside an inclusive date window. Groups:
- CATEGORY: expense amounts per category
- MEMBER: split amounts per member who owes them
- MONTH: expense amounts per calendar month
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from src.models import Expense
from src.schemas.views import ReportGroup, ReportView
from src.services.dashboard_service import percentage_of, sum_amounts
from src.services.errors import NotFoundError, ValidationError
from src.services.ledger_store import LedgerStore
from src.services.views import as_utc

logger = logging.getLogger(__name__)

RANGE_PRESETS = {"1month": 1, "3months": 3, "6months": 6, "12months": 12}


class ReportGroupBy(str, Enum):
    """Grouping key of a report."""

    CATEGORY = "category"
    MEMBER = "member"
    MONTH = "month"


def _shift_months(day: date, months: int) -> date:
    """Move a date back by ``months``, clamping the day to the target month's length."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


@dataclass(frozen=True)
class DateWindow:
    """Inclusive date range [start, end]."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValidationError("report window start must not be after its end")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @classmethod
    def last_months(cls, months: int, today: date) -> "DateWindow":
        """Window covering the ``months`` months up to and including ``today``."""
        if months < 1:
            raise ValidationError("report range must cover at least one month")
        return cls(start=_shift_months(today, months), end=today)

    @classmethod
    def from_preset(cls, preset: str, today: date) -> "DateWindow":
        """Build a window from a range preset ("1month", "3months", "6months", "12months")."""
        if preset not in RANGE_PRESETS:
            raise ValidationError(
                f"unknown report range '{preset}' (expected one of {sorted(RANGE_PRESETS)})"
            )
        return cls.last_months(RANGE_PRESETS[preset], today)


class ReportService:
    """Aggregate a member's expenses over a date window."""

    def __init__(self, store: LedgerStore):
        self.store = store

    def expenses_in_window(self, user_id: int, window: DateWindow) -> List[Expense]:
        return [
            expense
            for expense in self.store.list_expenses_for_user(user_id)
            if window.contains(as_utc(expense.date).date())
        ]

    def _totals_by_category(self, expenses: Sequence[Expense]) -> Dict[str, Tuple[str, Decimal]]:
        names = {category.id: category.name for category in self.store.list_categories()}
        totals: Dict[str, Tuple[str, Decimal]] = {}
        for category_id in names:
            total = sum_amounts(e for e in expenses if e.category_id == category_id)
            totals[str(category_id)] = (names[category_id], total)
        return totals

    def _totals_by_member(self, expenses: Sequence[Expense]) -> Dict[str, Tuple[str, Decimal]]:
        by_member: Dict[int, Decimal] = {}
        for expense in expenses:
            for split in self.store.list_splits_by_expense(expense.id):
                by_member[split.user_id] = by_member.get(split.user_id, Decimal("0.00")) + split.amount
        names = {user.id: user.display_name for user in self.store.get_users(list(by_member))}
        return {
            str(user_id): (names.get(user_id, f"User {user_id}"), total)
            for user_id, total in by_member.items()
        }

    @staticmethod
    def _totals_by_month(expenses: Sequence[Expense]) -> Dict[str, Tuple[str, Decimal]]:
        totals: Dict[str, Tuple[str, Decimal]] = {}
        for expense in sorted(expenses, key=lambda e: as_utc(e.date)):
            day = as_utc(expense.date)
            key = f"{day.year:04d}-{day.month:02d}"
            label, total = totals.get(key, (day.strftime("%b %Y"), Decimal("0.00")))
            totals[key] = (label, total + expense.amount)
        return totals

    def report(self, user_id: int, window: DateWindow, group_by) -> ReportView:
        """Build a grouped report of a member's expenses inside a window.

        Args:
            user_id: Member whose expenses are reported
            window: Inclusive date window
            group_by: ReportGroupBy or its string value

        Returns:
            ReportView with groups sorted by total descending, plus highest/lowest

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If group_by is unknown
        """
        try:
            grouping = ReportGroupBy(group_by)
        except ValueError as e:
            raise ValidationError(f"unknown report grouping: {group_by}") from e

        if not self.store.get_user(user_id):
            raise NotFoundError(f"User {user_id} not found")

        expenses = self.expenses_in_window(user_id, window)
        grand_total = sum_amounts(expenses)

        if grouping == ReportGroupBy.CATEGORY:
            totals = self._totals_by_category(expenses)
        elif grouping == ReportGroupBy.MEMBER:
            totals = self._totals_by_member(expenses)
        else:
            totals = self._totals_by_month(expenses)

        groups = sorted(
            (
                ReportGroup(
                    key=key,
                    label=label,
                    total=total,
                    percentage=percentage_of(total, grand_total),
                )
                for key, (label, total) in totals.items()
                if total > 0
            ),
            key=lambda group: group.total,
            reverse=True,
        )

        highest: Optional[ReportGroup] = groups[0] if groups else None
        lowest: Optional[ReportGroup] = groups[-1] if groups else None

        logger.debug(
            f"report: user_id={user_id} group_by={grouping.value} "
            f"window={window.start}..{window.end} expenses={len(expenses)} groups={len(groups)}"
        )
        return ReportView(
            user_id=user_id,
            start=window.start,
            end=window.end,
            group_by=grouping.value,
            total_expenses=grand_total,
            expense_count=len(expenses),
            groups=groups,
            highest=highest,
            lowest=lowest,
        )


__all__ = ["DateWindow", "RANGE_PRESETS", "ReportGroupBy", "ReportService"]
