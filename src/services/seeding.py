"""Demo data seeding: one household of three roommates with a month of shared bills.

Expenses go through ExpenseService so the seeded splits obey the same
allocation rules as user-entered ones.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from src.models import Category, User
from src.services.balance_service import BalanceCalculationService
from src.services.errors import AppError
from src.services.expense_service import ExpenseService
from src.services.ledger_store import LedgerStore

DEMO_USERS = [
    ("jamie", "Jamie Smith", "jamie@remote.co", "JS"),
    ("kim", "Kim Lee", "kim@example.com", "KL"),
    ("mike", "Mike Rodriguez", "mike@example.com", "MR"),
]

DEMO_CATEGORIES = [
    ("Rent", "home", "#6366f1"),
    ("Utilities", "bolt", "#8b5cf6"),
    ("Groceries", "shopping-basket", "#f97316"),
    ("Internet", "wifi", "#22c55e"),
    ("Subscriptions", "tv", "#ef4444"),
]

# (name, amount, day of month, notes, category name, participant usernames,
#  due day of month (None = last day), usernames who already paid)
DEMO_EXPENSES = [
    ("{month} Rent", "1800.00", 1, "Monthly rent payment", "Rent", ["jamie", "kim", "mike"], None, ["kim"]),
    ("Costco Run", "156.88", 18, "Weekly grocery shopping", "Groceries", ["jamie", "kim"], 25, []),
    ("Electricity Bill", "124.87", 12, "Monthly electricity bill", "Utilities", ["jamie", "kim", "mike"], 20, ["kim", "mike"]),
    ("Internet Service", "79.99", 10, "Monthly internet service", "Internet", ["jamie", "kim", "mike"], 15, ["kim", "mike"]),
]
DEMO_PASSWORD = "password123"
DEMO_HOUSEHOLD = "Our Apartment"


@dataclass
class SeedResult:
    """Outcome of a seeding run."""

    success: bool
    skipped: bool = False
    users_created: int = 0
    categories_created: int = 0
    expenses_created: int = 0
    expense_ids: List[int] = field(default_factory=list)
    error_message: Optional[str] = None  # Error message if success=False

    @property
    def records_created(self) -> int:
        return self.users_created + self.categories_created + self.expenses_created


def _month_day(today: date, day: Optional[int]) -> datetime:
    last_day = calendar.monthrange(today.year, today.month)[1]
    return datetime(today.year, today.month, min(day or last_day, last_day), tzinfo=timezone.utc)


def _is_demo_expense(template: str, name: str) -> bool:
    """Match an expense name against a demo template, whatever month it was seeded in."""
    if "{month}" not in template:
        return name == template
    prefix, _, suffix = template.partition("{month}")
    return len(name) > len(prefix) + len(suffix) and name.startswith(prefix) and name.endswith(suffix)


class DemoSeedService:
    """Populate a ledger with the demo household.

    Every run creates only the demo records that are missing, so a run that
    failed part way is completed by the next one.
    """

    def __init__(self, store: LedgerStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def execute_seed(self, today: Optional[date] = None) -> SeedResult:
        """Seed whatever part of the demo household is not present yet.

        Args:
            today: Reference date for the demo month (defaults to today, UTC)

        Returns:
            SeedResult; ``skipped`` is True when the whole demo household was
            already present, ``success`` is False when a store write failed
        """
        today = today or datetime.now(timezone.utc).date()
        result = SeedResult(success=True)

        try:
            users = self._seed_users(result)
            owner = users[DEMO_USERS[0][0]]
            household_created = self._seed_household(owner, users)
            categories = self._seed_categories(result)
            self._seed_expenses(today, owner, users, categories, result)
        except AppError as e:
            self.logger.error(f"Seeding failed: {e}", exc_info=True)
            result.success = False
            result.error_message = str(e)
            return result

        if result.records_created == 0 and not household_created:
            self.logger.info("Ledger already contains the demo household; skipping seed")
            result.skipped = True
            return result

        self.logger.info(
            f"Seeded demo household: {result.users_created} users, "
            f"{result.categories_created} categories, {result.expenses_created} expenses"
        )
        return result

    def _seed_users(self, result: SeedResult) -> Dict[str, User]:
        users = {}
        for username, display_name, email, initials in DEMO_USERS:
            user = self.store.get_user_by_username(username)
            if user is None:
                user = self.store.create_user(
                    username=username,
                    display_name=display_name,
                    email=email,
                    avatar_initials=initials,
                    password=DEMO_PASSWORD,
                )
                result.users_created += 1
            users[username] = user
        return users

    def _seed_household(self, owner: User, users: Dict[str, User]) -> bool:
        """Ensure the demo household exists with every demo user as a member.

        Returns:
            True if the household or any membership was created
        """
        created = False
        household = next((h for h in self.store.list_households() if h.name == DEMO_HOUSEHOLD), None)
        if household is None:
            household = self.store.create_household(DEMO_HOUSEHOLD, created_by_id=owner.id)
            created = True

        members = {r.user_id for r in self.store.list_roommates_by_household(household.id)}
        for user in users.values():
            if user.id not in members:
                self.store.create_roommate(user_id=user.id, household_id=household.id)
                created = True
        return created

    def _seed_categories(self, result: SeedResult) -> Dict[str, Category]:
        categories = {c.name: c for c in self.store.list_categories()}
        for name, icon, color in DEMO_CATEGORIES:
            if name not in categories:
                categories[name] = self.store.create_category(name=name, icon=icon, color=color)
                result.categories_created += 1
        return categories

    def _seed_expenses(
        self,
        today: date,
        owner: User,
        users: Dict[str, User],
        categories: Dict[str, Category],
        result: SeedResult,
    ) -> None:
        expenses = ExpenseService(self.store)
        balances = BalanceCalculationService(self.store)
        existing = [e for e in self.store.list_expenses_for_user(owner.id) if e.created_by_id == owner.id]

        for name, amount, day, notes, category, members, due_day, paid_by in DEMO_EXPENSES:
            expense = next((e for e in existing if _is_demo_expense(name, e.name)), None)
            if expense is None:
                expense = expenses.create_expense_with_splits(
                    created_by_id=owner.id,
                    name=name.format(month=today.strftime("%B")),
                    amount=Decimal(amount),
                    date=_month_day(today, day),
                    category_id=categories[category].id,
                    allocation_mode="equal",
                    participant_ids=[users[username].id for username in members],
                    notes=notes,
                    due_date=_month_day(today, due_day),
                )
                result.expenses_created += 1
                result.expense_ids.append(expense.id)

            # Re-applied on every run; mark_paid is idempotent
            paid_ids = {users[username].id for username in paid_by}
            for split in self.store.list_splits_by_expense(expense.id):
                if split.user_id in paid_ids:
                    balances.mark_paid(split.id)


__all__ = ["DemoSeedService", "SeedResult", "DEMO_USERS", "DEMO_CATEGORIES", "DEMO_EXPENSES", "DEMO_HOUSEHOLD"]
