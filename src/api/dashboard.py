"""Dashboard and report API endpoints."""

import logging
import time
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import get_dashboard_service, get_report_service
from src.schemas.views import ReportView, SummaryView
from src.services.dashboard_service import DashboardService
from src.services.errors import AppError, ValidationError, raise_app_error
from src.services.report_service import DateWindow, ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["dashboard"])

DEFAULT_REPORT_RANGE = "3months"


@router.get("/users/{user_id}/dashboard", response_model=SummaryView)
def get_dashboard(
    user_id: int,
    dashboard: DashboardService = Depends(get_dashboard_service),  # noqa: B008
) -> SummaryView:
    """
    Dashboard summary: totals, outstanding amount, roommates, recent expenses
    and spending by category.

    Raises:
        404: User not found
    """
    start_time = time.time()
    try:
        summary = dashboard.summary(user_id)
        logger.debug(
            "dashboard: user_id=%d duration_ms=%d", user_id, int((time.time() - start_time) * 1000)
        )
        return summary
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        logger.error(f"Error in /api/users/{user_id}/dashboard: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error") from e


@router.get("/users/{user_id}/reports", response_model=ReportView)
def get_report(
    user_id: int,
    group_by: str = Query("category", description="category, member or month"),
    start: date | None = Query(None, description="Window start (inclusive)"),
    end: date | None = Query(None, description="Window end (inclusive)"),
    range_preset: str | None = Query(
        None, alias="range", description="1month, 3months, 6months or 12months"
    ),
    reports: ReportService = Depends(get_report_service),  # noqa: B008
) -> ReportView:
    """
    Time-windowed report of a user's expenses grouped by category, member or month.

    An explicit start/end pair wins over ``range``; with neither, the last
    three months are reported.

    Raises:
        400: Invalid window or grouping
        404: User not found
    """
    try:
        if start is not None or end is not None:
            if start is None or end is None:
                raise ValidationError("report window needs both start and end")
            window = DateWindow(start=start, end=end)
        else:
            today = datetime.now(timezone.utc).date()
            window = DateWindow.from_preset(range_preset or DEFAULT_REPORT_RANGE, today)
        return reports.report(user_id, window, group_by)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        logger.error(f"Error in /api/users/{user_id}/reports: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error") from e
