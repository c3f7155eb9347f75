"""Ledger API endpoints: users, categories, households and roommates."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_balance_service, get_ledger_store
from src.schemas.requests import (
    CreateCategoryPayload,
    CreateHouseholdPayload,
    CreateRoommatePayload,
    CreateUserPayload,
)
from src.schemas.views import (
    CategoryView,
    HouseholdView,
    OwedAmountView,
    RoommateView,
    RoommateWithUser,
    UserView,
)
from src.services.balance_service import BalanceCalculationService
from src.services.errors import AppError, NotFoundError, raise_app_error
from src.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ledger"])


def _server_error(endpoint: str, e: Exception) -> HTTPException:
    logger.error(f"Error in {endpoint}: {e}", exc_info=True)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error")


# Users


@router.get("/users/{user_id}", response_model=UserView)
def get_user(user_id: int, store: LedgerStore = Depends(get_ledger_store)) -> UserView:  # noqa: B008
    """
    Get a user (without the password).

    Raises:
        404: User not found
    """
    try:
        user = store.get_user(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return UserView.model_validate(user)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("GET /api/users/{id}", e) from e


@router.post("/users", response_model=UserView, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: CreateUserPayload, store: LedgerStore = Depends(get_ledger_store)  # noqa: B008
) -> UserView:
    """
    Create a user.

    Raises:
        409: Username already taken
        422: Invalid payload
    """
    try:
        user = store.create_user(
            username=payload.username,
            display_name=payload.display_name,
            email=payload.email,
            avatar_initials=payload.avatar_initials,
            password=payload.password,
        )
        return UserView.model_validate(user)
    except AppError as e:
        logger.warning(f"User creation rejected: {e.message}")
        raise_app_error(e)
    except Exception as e:
        raise _server_error("POST /api/users", e) from e


# Categories


@router.get("/categories", response_model=list[CategoryView])
def list_categories(store: LedgerStore = Depends(get_ledger_store)) -> list[CategoryView]:  # noqa: B008
    """List all categories."""
    return [CategoryView.model_validate(category) for category in store.list_categories()]


@router.post("/categories", response_model=CategoryView, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CreateCategoryPayload, store: LedgerStore = Depends(get_ledger_store)  # noqa: B008
) -> CategoryView:
    """Create a category."""
    try:
        category = store.create_category(name=payload.name, icon=payload.icon, color=payload.color)
        return CategoryView.model_validate(category)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("POST /api/categories", e) from e


# Households


@router.get("/households", response_model=list[HouseholdView])
def list_households(store: LedgerStore = Depends(get_ledger_store)) -> list[HouseholdView]:  # noqa: B008
    """List all households."""
    return [HouseholdView.model_validate(household) for household in store.list_households()]


@router.get("/households/{household_id}", response_model=HouseholdView)
def get_household(
    household_id: int, store: LedgerStore = Depends(get_ledger_store)  # noqa: B008
) -> HouseholdView:
    """
    Get a household.

    Raises:
        404: Household not found
    """
    try:
        household = store.get_household(household_id)
        if not household:
            raise NotFoundError(f"Household {household_id} not found")
        return HouseholdView.model_validate(household)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("GET /api/households/{id}", e) from e


@router.post("/households", response_model=HouseholdView, status_code=status.HTTP_201_CREATED)
def create_household(
    payload: CreateHouseholdPayload, store: LedgerStore = Depends(get_ledger_store)  # noqa: B008
) -> HouseholdView:
    """
    Create a household.

    Raises:
        404: Creator not found
    """
    try:
        if not store.get_user(payload.created_by_id):
            raise NotFoundError(f"User {payload.created_by_id} not found")
        household = store.create_household(name=payload.name, created_by_id=payload.created_by_id)
        return HouseholdView.model_validate(household)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("POST /api/households", e) from e


@router.get("/households/{household_id}/roommates", response_model=list[RoommateWithUser])
def list_household_roommates(
    household_id: int,
    balances: BalanceCalculationService = Depends(get_balance_service),  # noqa: B008
) -> list[RoommateWithUser]:
    """
    List a household's roommates with what each still owes inside the household.

    Raises:
        404: Household not found
    """
    try:
        return balances.roommates_with_owed(household_id)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("GET /api/households/{id}/roommates", e) from e


@router.get("/households/{household_id}/members/{user_id}/owed", response_model=OwedAmountView)
def get_member_owed_amount(
    household_id: int,
    user_id: int,
    balances: BalanceCalculationService = Depends(get_balance_service),  # noqa: B008
) -> OwedAmountView:
    """
    Outstanding amount a member owes inside a household (0 when nothing is owed).

    Raises:
        404: Household not found or user not a member
    """
    try:
        owed = balances.owed_amount_for_member(household_id, user_id)
        return OwedAmountView(household_id=household_id, user_id=user_id, owed_amount=owed)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        raise _server_error("GET /api/households/{id}/members/{user_id}/owed", e) from e


# Roommates


@router.get("/roommates", response_model=list[RoommateView])
def list_roommates(store: LedgerStore = Depends(get_ledger_store)) -> list[RoommateView]:  # noqa: B008
    """List all memberships."""
    return [RoommateView.model_validate(roommate) for roommate in store.list_roommates()]


@router.post("/roommates", response_model=RoommateView, status_code=status.HTTP_201_CREATED)
def create_roommate(
    payload: CreateRoommatePayload, store: LedgerStore = Depends(get_ledger_store)  # noqa: B008
) -> RoommateView:
    """
    Add a user to a household.

    Raises:
        404: User or household not found
        409: User already a member
    """
    try:
        if not store.get_user(payload.user_id):
            raise NotFoundError(f"User {payload.user_id} not found")
        if not store.get_household(payload.household_id):
            raise NotFoundError(f"Household {payload.household_id} not found")
        roommate = store.create_roommate(user_id=payload.user_id, household_id=payload.household_id)
        return RoommateView.model_validate(roommate)
    except AppError as e:
        logger.warning(f"Roommate creation rejected: {e.message}")
        raise_app_error(e)
    except Exception as e:
        raise _server_error("POST /api/roommates", e) from e
