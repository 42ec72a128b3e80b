"""Attendance report routes (admin only)."""
from typing import Annotated

from fastapi import APIRouter, Depends

from studio.core.deps import get_report_service, require_role
from studio.models import Role
from studio.reports.service import ReportService
from studio.schemas.reports import AvailableMonth, MonthlyReport, OverallStats

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    dependencies=[Depends(require_role(Role.admin))],
)

ReportsDep = Annotated[ReportService, Depends(get_report_service)]


@router.get("/monthly/{year}/{month}", response_model=MonthlyReport)
async def monthly_report(year: int, month: int, reports: ReportsDep):
    """
    Attendance for one calendar month.

    Covers active sessions dated in the month. Only "joining" answers count
    as attendance.
    """
    return reports.monthly(year, month)


@router.get("/available-months", response_model=list[AvailableMonth])
async def available_months(reports: ReportsDep):
    """Months that have at least one active session, newest first."""
    return reports.available_months()


@router.get("/stats", response_model=OverallStats)
async def overall_stats(reports: ReportsDep):
    """All-time totals and rates."""
    return reports.overall()
