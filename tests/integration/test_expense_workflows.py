"""Integration tests for expense workflows across allocation, storage and balances."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.services.balance_service import BalanceCalculationService
from src.services.dashboard_service import DashboardService
from src.services.errors import NotFoundError, ValidationError
from src.services.expense_service import ExpenseService
from src.services.report_service import DateWindow, ReportService
from src.services.views import as_utc


class TestExpenseWorkflows:
    """Test complete expense management workflows."""

    def test_record_equal_rent(self, store, roommates, categories):
        """1800 rent among three: 600 each, creator's share already settled."""
        jamie, kim, mike, household = roommates
        service = ExpenseService(store)

        expense = service.create_expense_with_splits(
            created_by_id=jamie.id,
            name="May Rent",
            amount=Decimal("1800.00"),
            date=datetime(2025, 5, 1, tzinfo=timezone.utc),
            category_id=categories["Rent"].id,
            allocation_mode="equal",
            participant_ids=[jamie.id, kim.id, mike.id],
            notes="Monthly rent payment",
            due_date=datetime(2025, 5, 31, tzinfo=timezone.utc),
        )

        assert expense.id is not None
        assert expense.amount == Decimal("1800.00")
        assert expense.category.name == "Rent"
        assert expense.created_by.username == "jamie"
        assert [(s.user.username, s.amount, s.is_paid) for s in expense.splits] == [
            ("jamie", Decimal("600.00"), True),
            ("kim", Decimal("600.00"), False),
            ("mike", Decimal("600.00"), False),
        ]
        assert all(s.due_date is not None for s in expense.splits)

        balances = BalanceCalculationService(store)
        assert balances.owed_amount_for_member(household.id, kim.id) == Decimal("600.00")
        assert balances.owed_amount_for_member(household.id, jamie.id) == Decimal("0")

    def test_equal_split_residual_lands_on_creator(self, store, roommates, categories):
        """Creator absorbs the rounding cent; split sum equals the amount."""
        jamie, kim, mike, _ = roommates

        expense = ExpenseService(store).create_expense_with_splits(
            created_by_id=mike.id,
            name="Electricity Bill",
            amount=Decimal("124.87"),
            date=datetime(2025, 5, 12, tzinfo=timezone.utc),
            category_id=categories["Utilities"].id,
            allocation_mode="equal",
            participant_ids=[jamie.id, kim.id, mike.id],
        )

        amounts = {s.user_id: s.amount for s in expense.splits}
        assert amounts == {
            jamie.id: Decimal("41.62"),
            kim.id: Decimal("41.62"),
            mike.id: Decimal("41.63"),
        }
        assert sum(amounts.values()) == expense.amount

    def test_custom_split(self, store, roommates, categories):
        """Custom amounts are stored as given."""
        jamie, kim, _, _ = roommates

        expense = ExpenseService(store).create_expense_with_splits(
            created_by_id=kim.id,
            name="Furniture",
            amount=Decimal("100.00"),
            date=datetime(2025, 5, 5, tzinfo=timezone.utc),
            category_id=categories["Groceries"].id,
            allocation_mode="custom",
            participant_ids=[jamie.id, kim.id],
            custom_amounts={jamie.id: Decimal("40.00"), kim.id: Decimal("60.00")},
        )

        assert [(s.user_id, s.amount, s.is_paid) for s in expense.splits] == [
            (jamie.id, Decimal("40.00"), False),
            (kim.id, Decimal("60.00"), True),
        ]

    def test_custom_mismatch_persists_nothing(self, store, roommates, categories):
        """A rejected allocation leaves no expense and no splits."""
        jamie, kim, _, _ = roommates

        with pytest.raises(ValidationError, match="split total mismatch"):
            ExpenseService(store).create_expense_with_splits(
                created_by_id=jamie.id,
                name="Furniture",
                amount=Decimal("100.00"),
                date=datetime(2025, 5, 5, tzinfo=timezone.utc),
                category_id=categories["Groceries"].id,
                allocation_mode="custom",
                participant_ids=[jamie.id, kim.id],
                custom_amounts={jamie.id: Decimal("40.00"), kim.id: Decimal("50.00")},
            )

        assert store.list_expenses() == []
        assert store.list_splits_by_user(kim.id) == []

    def test_unknown_references_rejected(self, store, roommates, categories):
        """Unknown category or participant raises NotFoundError."""
        jamie, kim, _, _ = roommates
        service = ExpenseService(store)
        base = dict(
            created_by_id=jamie.id,
            name="Snacks",
            amount=Decimal("10.00"),
            date=datetime(2025, 5, 5, tzinfo=timezone.utc),
            allocation_mode="equal",
        )

        with pytest.raises(NotFoundError, match="Category"):
            service.create_expense_with_splits(category_id=999, participant_ids=[jamie.id], **base)
        with pytest.raises(NotFoundError, match="Participant"):
            service.create_expense_with_splits(
                category_id=categories["Groceries"].id, participant_ids=[kim.id, 999], **base
            )

    def test_blank_name_rejected(self, store, roommates, categories):
        """Expense names are required."""
        jamie = roommates[0]

        with pytest.raises(ValidationError, match="name is required"):
            ExpenseService(store).create_expense_with_splits(
                created_by_id=jamie.id,
                name="   ",
                amount=Decimal("10.00"),
                date=datetime(2025, 5, 5, tzinfo=timezone.utc),
                category_id=categories["Groceries"].id,
                allocation_mode="equal",
                participant_ids=[jamie.id],
            )

    def test_payment_flow_updates_dashboard(self, store, roommates, categories):
        """Paying a split moves it from outstanding to paid on the dashboard."""
        jamie, kim, _, _ = roommates
        expense = ExpenseService(store).create_expense_with_splits(
            created_by_id=jamie.id,
            name="Costco Run",
            amount=Decimal("156.88"),
            date=datetime(2025, 5, 18, tzinfo=timezone.utc),
            category_id=categories["Groceries"].id,
            allocation_mode="equal",
            participant_ids=[jamie.id, kim.id],
        )
        dashboard = DashboardService(store)
        assert dashboard.summary(kim.id).outstanding_amount == Decimal("78.44")

        kim_split = next(s for s in expense.splits if s.user_id == kim.id)
        BalanceCalculationService(store).mark_paid(kim_split.id)

        summary = dashboard.summary(kim.id)
        assert summary.outstanding_amount == Decimal("0")
        assert summary.user_share == Decimal("78.44")

    def test_offset_dates_are_stored_as_utc(self, store, roommates, categories):
        """Dates sent with a UTC offset order and bucket by their UTC instant."""
        jamie, kim, _, _ = roommates
        service = ExpenseService(store)
        plus_five = timezone(timedelta(hours=5))

        def record(name, when, due_date=None):
            return service.create_expense_with_splits(
                created_by_id=jamie.id,
                name=name,
                amount=Decimal("30.00"),
                date=when,
                category_id=categories["Groceries"].id,
                allocation_mode="equal",
                participant_ids=[jamie.id, kim.id],
                due_date=due_date,
            )

        early = record("Bakery", datetime(2025, 5, 1, 10, 0, tzinfo=plus_five))
        record("Market", datetime(2025, 5, 1, 6, 0, tzinfo=timezone.utc))
        late_may = record(
            "Corner Shop",
            datetime(2025, 6, 1, 2, 0, tzinfo=plus_five),
            due_date=datetime(2025, 6, 10, 1, 0, tzinfo=plus_five),
        )

        assert as_utc(early.date) == datetime(2025, 5, 1, 5, 0, tzinfo=timezone.utc)
        assert as_utc(late_may.splits[0].due_date) == datetime(2025, 6, 9, 20, 0, tzinfo=timezone.utc)

        summary = DashboardService(store).summary(kim.id)
        assert [e.name for e in summary.recent_expenses] == ["Corner Shop", "Market", "Bakery"]

        may = DateWindow(start=date(2025, 5, 1), end=date(2025, 5, 31))
        report = ReportService(store).report(jamie.id, may, "month")
        assert report.expense_count == 3
        assert [(g.key, g.total) for g in report.groups] == [("2025-05", Decimal("90.00"))]
