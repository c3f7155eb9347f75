"""Balance calculation service for a member's financial position.

Split partition: every split is either paid or unpaid, so
    outstanding_amount + paid_amount == total_share
for any collection of splits.

Outstanding amounts only ever decrease through explicit payment updates;
reversing a payment is not supported.
"""

import logging
from decimal import Decimal
from typing import Iterable, List

from src.models import Split
from src.schemas.views import RoommateWithUser
from src.services.errors import NotFoundError, ValidationError
from src.services.ledger_store import LedgerStore
from src.services.views import build_roommate_with_user

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def outstanding_amount(splits: Iterable) -> Decimal:
    """Sum of amounts over unpaid splits."""
    return sum((split.amount for split in splits if not split.is_paid), ZERO)


def paid_amount(splits: Iterable) -> Decimal:
    """Sum of amounts over paid splits."""
    return sum((split.amount for split in splits if split.is_paid), ZERO)


def total_share(splits: Iterable) -> Decimal:
    """Outstanding plus paid amount of a split collection."""
    splits = list(splits)
    return outstanding_amount(splits) + paid_amount(splits)


class BalanceCalculationService:
    """Calculate outstanding balances for members and record payments."""

    def __init__(self, store: LedgerStore):
        """Initialize with a ledger store.

        Args:
            store: LedgerStore used for reads and payment updates
        """
        self.store = store

    outstanding_amount = staticmethod(outstanding_amount)
    paid_amount = staticmethod(paid_amount)
    total_share = staticmethod(total_share)

    def _household_member_ids(self, household_id: int) -> List[int]:
        if not self.store.get_household(household_id):
            raise NotFoundError(f"Household {household_id} not found")
        return [roommate.user_id for roommate in self.store.list_roommates_by_household(household_id)]

    def _owed_within(self, member_id: int, member_ids: set) -> Decimal:
        in_household = []
        for split in self.store.list_splits_by_user(member_id):
            expense = self.store.get_expense(split.expense_id)
            if expense and expense.created_by_id in member_ids:
                in_household.append(split)
        return outstanding_amount(in_household)

    def owed_amount_for_member(self, household_id: int, member_id: int) -> Decimal:
        """Outstanding amount a member owes within a household.

        Only splits of expenses created by a member of the same household count.
        A member with nothing outstanding reports 0.

        Args:
            household_id: Household to scope to
            member_id: User id of the member

        Returns:
            Outstanding amount (Decimal, never None)

        Raises:
            NotFoundError: If the household does not exist or the user is not a member
        """
        member_ids = set(self._household_member_ids(household_id))
        if member_id not in member_ids:
            raise NotFoundError(f"User {member_id} is not a member of household {household_id}")
        return self._owed_within(member_id, member_ids)

    def roommates_with_owed(self, household_id: int) -> List[RoommateWithUser]:
        """List a household's memberships, each with the member's outstanding amount.

        Raises:
            NotFoundError: If the household does not exist
        """
        if not self.store.get_household(household_id):
            raise NotFoundError(f"Household {household_id} not found")

        roommates = self.store.list_roommates_by_household(household_id)
        member_ids = {roommate.user_id for roommate in roommates}
        users = {user.id: user for user in self.store.get_users(list(member_ids))}

        return [
            build_roommate_with_user(
                roommate,
                users.get(roommate.user_id),
                self._owed_within(roommate.user_id, member_ids),
            )
            for roommate in roommates
        ]

    def mark_paid(self, split_id: int) -> Split:
        """Mark a split as paid.

        Idempotent: an already-paid split is returned unchanged without a write.

        Raises:
            NotFoundError: If the split does not exist
        """
        split = self.store.get_split(split_id)
        if not split:
            raise NotFoundError(f"Split {split_id} not found")
        if split.is_paid:
            logger.debug(f"Split {split_id} already paid")
            return split
        return self.store.update_split_paid(split_id, True)

    def set_payment_status(self, split_id: int, is_paid: bool) -> Split:
        """Apply a requested payment status; only the paid direction is allowed.

        Raises:
            NotFoundError: If the split does not exist
            ValidationError: If asked to mark a split unpaid
        """
        if is_paid:
            return self.mark_paid(split_id)

        if not self.store.get_split(split_id):
            raise NotFoundError(f"Split {split_id} not found")
        logger.warning(f"Rejected payment reversal for split {split_id}")
        raise ValidationError("reversing a split payment is not supported")


__all__ = [
    "BalanceCalculationService",
    "outstanding_amount",
    "paid_amount",
    "total_share",
]
