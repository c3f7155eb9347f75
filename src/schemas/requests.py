"""Pydantic request payloads for the ledger API."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.services.allocation_service import AllocationMode


class CreateUserPayload(BaseModel):
    """Request payload for POST /api/users."""

    username: str = Field(..., min_length=1, max_length=255)
    display_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    avatar_initials: str = Field(..., min_length=1, max_length=8)
    password: str = Field(..., min_length=1, description="Opaque credential, stored as given")

    model_config = ConfigDict(str_strip_whitespace=True)


class CreateCategoryPayload(BaseModel):
    """Request payload for POST /api/categories."""

    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(..., min_length=1, max_length=50)
    color: str = Field(..., min_length=1, max_length=20)

    model_config = ConfigDict(str_strip_whitespace=True)


class CreateExpensePayload(BaseModel):
    """Request payload for POST /api/expenses (expense plus its split allocation)."""

    name: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., description="Expense amount, positive, at most 2 decimals")
    date: datetime
    notes: str | None = None
    created_by_id: int
    category_id: int
    allocation_mode: AllocationMode = AllocationMode.EQUAL
    participant_ids: list[int] = Field(..., description="Members sharing the expense, creator first by convention")
    custom_amounts: dict[int, Decimal] | None = Field(
        None, description="Member id -> amount, required when allocation_mode is 'custom' and rejected otherwise"
    )
    due_date: datetime | None = None

    model_config = ConfigDict(str_strip_whitespace=True)


class UpdateSplitPayload(BaseModel):
    """Request payload for PATCH /api/splits/{id}."""

    is_paid: bool


class CreateHouseholdPayload(BaseModel):
    """Request payload for POST /api/households."""

    name: str = Field(..., min_length=1, max_length=255)
    created_by_id: int

    model_config = ConfigDict(str_strip_whitespace=True)


class CreateRoommatePayload(BaseModel):
    """Request payload for POST /api/roommates."""

    user_id: int
    household_id: int
