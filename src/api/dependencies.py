"""FastAPI dependencies wiring the ledger store and services into routes."""

from fastapi import Depends
from sqlalchemy.orm import Session

from src.config import settings
from src.services import get_db
from src.services.allocation_service import AllocationService
from src.services.balance_service import BalanceCalculationService
from src.services.dashboard_service import DashboardService
from src.services.expense_service import ExpenseService
from src.services.ledger_store import LedgerStore, SqlAlchemyLedgerStore
from src.services.report_service import ReportService


def get_ledger_store(db: Session = Depends(get_db)) -> LedgerStore:  # noqa: B008
    """Ledger store bound to the request's database session."""
    return SqlAlchemyLedgerStore(db)


def get_expense_service(store: LedgerStore = Depends(get_ledger_store)) -> ExpenseService:  # noqa: B008
    return ExpenseService(store, AllocationService(tolerance=settings.split_tolerance))


def get_balance_service(
    store: LedgerStore = Depends(get_ledger_store),  # noqa: B008
) -> BalanceCalculationService:
    return BalanceCalculationService(store)


def get_dashboard_service(store: LedgerStore = Depends(get_ledger_store)) -> DashboardService:  # noqa: B008
    return DashboardService(store, recent_limit=settings.recent_expenses_limit)


def get_report_service(store: LedgerStore = Depends(get_ledger_store)) -> ReportService:  # noqa: B008
    return ReportService(store)
