"""GET /v1/dashboard/* - dashboard statistics, activity feed and loan status"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from loanlight_admin.api.dependencies import get_dashboard_service
from loanlight_admin.api.v1.schemas import (
    ActivitiesResponse,
    DashboardStatsResponse,
    LoanStatusResponse,
)
from loanlight_admin.config import settings
from loanlight_admin.services.dashboard import DashboardService

router = APIRouter()


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
async def get_stats(service: DashboardService = Depends(get_dashboard_service)):
    """
    Dashboard snapshot for today.

    Always 200: on backend failure the snapshot is zero-valued and the failure
    is reported in `notifications`.
    """
    stats = await service.fetch_stats()
    payload = asdict(stats)
    payload["notifications"] = service.notifier.notifications
    return DashboardStatsResponse.model_validate(payload, from_attributes=True)


@router.get("/dashboard/activities", response_model=ActivitiesResponse)
async def get_activities(
    limit: int = Query(settings.activity_feed_limit, ge=1, le=50),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Most recent activities, newest first"""
    activities = await service.fetch_recent_activities(limit)
    return ActivitiesResponse.model_validate(
        {"activities": activities, "notifications": service.notifier.notifications},
        from_attributes=True,
    )


@router.get("/dashboard/loan-status", response_model=LoanStatusResponse)
async def get_loan_status(service: DashboardService = Depends(get_dashboard_service)):
    """Loan count per status"""
    distribution = await service.fetch_loan_status_distribution()
    return LoanStatusResponse.model_validate(
        {"distribution": distribution, "notifications": service.notifier.notifications},
        from_attributes=True,
    )
