"""Expense service: record an expense together with its allocated splits."""

import logging
from datetime import datetime
from typing import Mapping, Optional, Sequence

from src.schemas.views import ExpenseWithDetails
from src.services.allocation_service import AllocationService, to_money
from src.services.errors import NotFoundError, ValidationError
from src.services.ledger_store import LedgerStore
from src.services.views import as_utc, load_expense_with_details

logger = logging.getLogger(__name__)


class ExpenseService:
    """Creates expenses; allocation is the gate before anything is persisted."""

    def __init__(self, store: LedgerStore, allocator: Optional[AllocationService] = None):
        """Initialize expense service.

        Args:
            store: LedgerStore for reads and the expense+splits write
            allocator: AllocationService (default tolerance when omitted)
        """
        self.store = store
        self.allocator = allocator or AllocationService()

    def create_expense_with_splits(
        self,
        created_by_id: int,
        name: str,
        amount,
        date: datetime,
        category_id: int,
        allocation_mode,
        participant_ids: Sequence[int],
        custom_amounts: Optional[Mapping[int, object]] = None,
        notes: Optional[str] = None,
        due_date: Optional[datetime] = None,
    ) -> ExpenseWithDetails:
        """Record an expense and divide it among participants.

        The creator settles the equal-split residual and their own split is
        recorded as paid. Either the expense and all its splits are stored, or
        nothing is.

        Args:
            created_by_id: Member recording (and paying) the expense
            name: Expense label
            amount: Expense amount (positive, at most 2 decimal places)
            date: When the expense happened (stored as UTC)
            category_id: Category id
            allocation_mode: "equal" or "custom"
            participant_ids: Members sharing the expense
            custom_amounts: Member id -> amount, required for custom mode
            notes: Optional notes
            due_date: Optional due date copied to every split (stored as UTC)

        Returns:
            ExpenseWithDetails of the stored expense

        Raises:
            ValidationError: Blank name or invalid allocation input
            NotFoundError: Unknown creator, category or participant
            InternalError: Storage failure (nothing persisted)
        """
        if not name or not name.strip():
            raise ValidationError("expense name is required")

        if not self.store.get_user(created_by_id):
            raise NotFoundError(f"User {created_by_id} not found")
        if not self.store.get_category(category_id):
            raise NotFoundError(f"Category {category_id} not found")

        known_ids = {user.id for user in self.store.get_users(list(participant_ids))}
        unknown = [member_id for member_id in participant_ids if member_id not in known_ids]
        if unknown:
            raise NotFoundError(f"Participant(s) not found: {unknown}")

        try:
            allocations = self.allocator.allocate(
                amount,
                allocation_mode,
                participant_ids,
                custom_amounts=custom_amounts,
                settling_id=created_by_id,
            )
        except ValidationError as e:
            logger.warning(f"Expense '{name}' rejected by allocation: {e.message}")
            raise

        if due_date is not None:
            due_date = as_utc(due_date)
        drafts = self.allocator.build_split_drafts(allocations, created_by_id, due_date=due_date)
        expense = self.store.create_expense_with_splits(
            name=name.strip(),
            amount=to_money(amount),
            date=as_utc(date),
            created_by_id=created_by_id,
            category_id=category_id,
            splits=drafts,
            notes=notes,
        )
        return load_expense_with_details(self.store, expense.id)


__all__ = ["ExpenseService"]
