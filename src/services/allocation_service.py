"""Allocation service for dividing an expense into per-member splits.

Supports allocation modes:
- EQUAL: Divide the amount evenly; the settling participant absorbs the cent residual
- CUSTOM: Caller supplies each participant's amount; only the total is checked

Both modes guarantee the splits of one expense add up to the expense amount.
"""

import logging
from datetime import datetime
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from enum import Enum
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence

from src.services.errors import ValidationError

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DEFAULT_TOLERANCE = Decimal("0.01")


class AllocationMode(str, Enum):
    """Strategy for dividing an expense among participants."""

    EQUAL = "equal"
    """Even shares, rounding residual assigned to the settling participant"""

    CUSTOM = "custom"
    """Explicit per-participant amounts"""


class SplitDraft(NamedTuple):
    """Allocated share ready to be persisted as a Split."""

    user_id: int
    amount: Decimal
    is_paid: bool
    due_date: Optional[datetime] = None


def to_money(value, field: str = "amount") -> Decimal:
    """Convert a numeric value to a Decimal with at most two decimal places.

    Args:
        value: int, str, float or Decimal
        field: Name used in the error message

    Returns:
        Decimal quantized to cents

    Raises:
        ValidationError: If the value is not a finite number or has sub-cent precision
    """
    try:
        money = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"{field} must be a number") from e

    if not money.is_finite():
        raise ValidationError(f"{field} must be a number")
    if money != money.quantize(CENT):
        raise ValidationError(f"{field} must have at most 2 decimal places")
    return money.quantize(CENT)


class AllocationService:
    """Split allocation engine with equal and custom modes."""

    def __init__(self, tolerance: Decimal = DEFAULT_TOLERANCE):
        """Initialize allocation service.

        Args:
            tolerance: Maximum accepted |sum(custom amounts) - amount|
        """
        self.tolerance = Decimal(str(tolerance))

    @staticmethod
    def _check_amount(amount) -> Decimal:
        total = to_money(amount)
        if total <= 0:
            raise ValidationError("amount must be positive")
        return total

    @staticmethod
    def _check_participants(participant_ids: Sequence[int]) -> List[int]:
        participants = list(participant_ids)
        if not participants:
            raise ValidationError("participant list is empty")
        if len(set(participants)) != len(participants):
            raise ValidationError("participant ids must be unique")
        return participants

    def allocate_equal(
        self,
        amount,
        participant_ids: Sequence[int],
        settling_id: Optional[int] = None,
    ) -> Dict[int, Decimal]:
        """Divide amount evenly between participants.

        Ensures: sum(result) == amount exactly (to the cent)

        Algorithm:
        1. Per-head share = amount / count, truncated to 2 decimal places
        2. Every participant except the settling one gets the per-head share
        3. The settling participant gets amount - sum(other shares), so the
           residual (at most (count - 1) cents) lands on a single member

        Args:
            amount: Total to distribute (positive, at most 2 decimal places)
            participant_ids: Ordered, unique member ids
            settling_id: Member who absorbs the residual (defaults to the first
                participant; ignored when not a participant)

        Returns:
            Dict mapping member id to owed amount, in participant order

        Raises:
            ValidationError: Non-positive amount, empty or duplicate participants
        """
        total = self._check_amount(amount)
        participants = self._check_participants(participant_ids)

        if settling_id not in participants:
            settling_id = participants[0]

        per_head = (total / Decimal(len(participants))).quantize(CENT, rounding=ROUND_DOWN)

        allocations = {member_id: per_head for member_id in participants}
        others_total = per_head * (len(participants) - 1)
        allocations[settling_id] = total - others_total

        logger.debug(
            "Equal allocation: amount=%s participants=%d per_head=%s settling=%s share=%s",
            total,
            len(participants),
            per_head,
            settling_id,
            allocations[settling_id],
        )
        return allocations

    def allocate_custom(
        self,
        amount,
        participant_amounts: Mapping[int, object],
        participant_ids: Optional[Sequence[int]] = None,
    ) -> Dict[int, Decimal]:
        """Accept caller-provided shares after checking they cover the amount.

        No redistribution happens: values that pass the checks are used as-is.

        Args:
            amount: Total expense amount
            participant_amounts: Dict mapping member id to owed amount
            participant_ids: When given, the exact member set that must be covered

        Returns:
            Dict mapping member id to owed amount (participant order when given)

        Raises:
            ValidationError: Missing/extra/negative amounts or "split total mismatch"
        """
        total = self._check_amount(amount)

        if participant_ids is None:
            participants = self._check_participants(list(participant_amounts.keys()))
        else:
            participants = self._check_participants(participant_ids)
            missing = [member_id for member_id in participants if member_id not in participant_amounts]
            if missing:
                raise ValidationError(f"custom amount missing for participant(s) {missing}")
            extra = [member_id for member_id in participant_amounts if member_id not in participants]
            if extra:
                raise ValidationError(f"custom amount given for non-participant(s) {extra}")

        allocations = {}
        for member_id in participants:
            share = to_money(participant_amounts[member_id], field=f"amount for member {member_id}")
            if share < 0:
                raise ValidationError(f"amount for member {member_id} must not be negative")
            allocations[member_id] = share

        allocated_total = sum(allocations.values(), Decimal(0))
        if abs(allocated_total - total) > self.tolerance:
            logger.warning(
                "Custom split rejected: amount=%s allocated=%s tolerance=%s",
                total,
                allocated_total,
                self.tolerance,
            )
            raise ValidationError("split total mismatch")

        return allocations

    def allocate(
        self,
        amount,
        mode,
        participant_ids: Sequence[int],
        custom_amounts: Optional[Mapping[int, object]] = None,
        settling_id: Optional[int] = None,
    ) -> Dict[int, Decimal]:
        """Allocate an expense using the requested mode.

        Args:
            amount: Expense amount
            mode: AllocationMode or its string value
            participant_ids: Ordered member ids sharing the expense
            custom_amounts: Required for CUSTOM mode, rejected for EQUAL mode
            settling_id: Residual holder for EQUAL mode (normally the creator)

        Returns:
            Dict mapping member id to owed amount

        Raises:
            ValidationError: If the mode is unknown or allocation input is invalid
        """
        try:
            allocation_mode = AllocationMode(mode)
        except ValueError as e:
            raise ValidationError(f"unknown allocation mode: {mode}") from e

        if allocation_mode == AllocationMode.EQUAL:
            if custom_amounts is not None:
                raise ValidationError("custom amounts are only accepted for custom allocation")
            return self.allocate_equal(amount, participant_ids, settling_id=settling_id)

        if custom_amounts is None:
            raise ValidationError("custom amounts required for custom allocation")
        return self.allocate_custom(amount, custom_amounts, participant_ids=participant_ids)

    def build_split_drafts(
        self,
        allocations: Mapping[int, Decimal],
        created_by_id: int,
        due_date: Optional[datetime] = None,
    ) -> List[SplitDraft]:
        """Turn allocations into split drafts.

        The creator's own share is settled at creation (they paid the expense);
        every other share starts unpaid.
        """
        return [
            SplitDraft(
                user_id=member_id,
                amount=share,
                is_paid=member_id == created_by_id,
                due_date=due_date,
            )
            for member_id, share in allocations.items()
        ]


__all__ = [
    "AllocationMode",
    "AllocationService",
    "SplitDraft",
    "to_money",
]
