"""Expense and split API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_balance_service, get_expense_service, get_ledger_store
from src.schemas.requests import CreateExpensePayload, UpdateSplitPayload
from src.schemas.views import ExpenseView, ExpenseWithDetails, SplitView, SplitWithDetails
from src.services.balance_service import BalanceCalculationService
from src.services.errors import AppError, NotFoundError, raise_app_error
from src.services.expense_service import ExpenseService
from src.services.ledger_store import LedgerStore
from src.services.views import build_split_with_details, load_expense_with_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["expenses"])


def _server_error(endpoint: str, e: Exception) -> HTTPException:
    logger.error(f"Error in {endpoint}: {e}", exc_info=True)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error")


@router.get("/expenses", response_model=list[ExpenseView])
def list_expenses(store: LedgerStore = Depends(get_ledger_store)) -> list[ExpenseView]:  # noqa: B008
    """List all expenses in creation order."""
    return [ExpenseView.model_validate(expense) for expense in store.list_expenses()]


@router.get("/expenses/{expense_id}", response_model=ExpenseWithDetails)
def get_expense(
    expense_id: int, store: LedgerStore = Depends(get_ledger_store)  # noqa: B008
) -> ExpenseWithDetails:
    """
    Get an expense with its category, creator and splits.

    Raises:
        404: Expense not found
    """
    try:
        return load_expense_with_details(store, expense_id)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("GET /api/expenses/{id}", e) from e


@router.post("/expenses", response_model=ExpenseWithDetails, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: CreateExpensePayload,
    expenses: ExpenseService = Depends(get_expense_service),  # noqa: B008
) -> ExpenseWithDetails:
    """
    Record an expense and allocate it to participants in one step.

    Returns:
        201: ExpenseWithDetails including the created splits

    Raises:
        400: Allocation rejected (message names the failed rule, e.g. "split total mismatch")
        404: Unknown creator, category or participant
        422: Invalid payload
    """
    try:
        expense = expenses.create_expense_with_splits(
            created_by_id=payload.created_by_id,
            name=payload.name,
            amount=payload.amount,
            date=payload.date,
            category_id=payload.category_id,
            allocation_mode=payload.allocation_mode,
            participant_ids=payload.participant_ids,
            custom_amounts=payload.custom_amounts,
            notes=payload.notes,
            due_date=payload.due_date,
        )
        logger.info(f"Expense {expense.id} recorded by user {payload.created_by_id}")
        return expense
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("POST /api/expenses", e) from e


@router.get("/expenses/{expense_id}/splits", response_model=list[SplitView])
def list_expense_splits(
    expense_id: int, store: LedgerStore = Depends(get_ledger_store)  # noqa: B008
) -> list[SplitView]:
    """
    List the splits of an expense.

    Raises:
        404: Expense not found
    """
    try:
        if not store.get_expense(expense_id):
            raise NotFoundError(f"Expense {expense_id} not found")
        return [SplitView.model_validate(split) for split in store.list_splits_by_expense(expense_id)]
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("GET /api/expenses/{id}/splits", e) from e


@router.get("/users/{user_id}/expenses", response_model=list[ExpenseView])
def list_user_expenses(
    user_id: int, store: LedgerStore = Depends(get_ledger_store)  # noqa: B008
) -> list[ExpenseView]:
    """
    List expenses created by or split with a user.

    Raises:
        404: User not found
    """
    try:
        if not store.get_user(user_id):
            raise NotFoundError(f"User {user_id} not found")
        return [ExpenseView.model_validate(e) for e in store.list_expenses_for_user(user_id)]
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("GET /api/users/{id}/expenses", e) from e


@router.get("/users/{user_id}/splits", response_model=list[SplitWithDetails])
def list_user_splits(
    user_id: int, store: LedgerStore = Depends(get_ledger_store)  # noqa: B008
) -> list[SplitWithDetails]:
    """
    List the splits a user owes, each with its expense.

    Raises:
        404: User not found
    """
    try:
        user = store.get_user(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return [
            build_split_with_details(split, store.get_expense(split.expense_id), user)
            for split in store.list_splits_by_user(user_id)
        ]
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("GET /api/users/{id}/splits", e) from e


@router.patch("/splits/{split_id}", response_model=SplitView)
def update_split(
    split_id: int,
    payload: UpdateSplitPayload,
    balances: BalanceCalculationService = Depends(get_balance_service),  # noqa: B008
) -> SplitView:
    """
    Update a split's payment status. Only marking as paid is supported.

    Raises:
        400: Attempt to mark a split unpaid
        404: Split not found
    """
    try:
        split = balances.set_payment_status(split_id, payload.is_paid)
        return SplitView.model_validate(split)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("PATCH /api/splits/{id}", e) from e
