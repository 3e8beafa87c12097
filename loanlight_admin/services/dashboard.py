"""Dashboard aggregators: statistics snapshot, activity feed, loan status distribution"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, List

from loanlight_admin.config import settings
from loanlight_admin.domain.activity import merge_activities
from loanlight_admin.domain.models import (
    OUTSTANDING_LOAN_STATUSES,
    ActivityItem,
    ClientStatus,
    DashboardStats,
    LoanStatus,
    LoanStatusCount,
)
from loanlight_admin.domain.statistics import build_dashboard_stats, empty_stats
from loanlight_admin.infrastructure.clients.gateway import DataGateway
from loanlight_admin.infrastructure.repositories import (
    BranchRepository,
    ClientRepository,
    LoanRepository,
    RepaymentRepository,
)
from loanlight_admin.services.aggregation import run_bounded
from loanlight_admin.services.notifications import Notifier
from loanlight_admin.utils.date_utils import month_bounds, start_of_day_utc, utc_now


class DashboardService:
    """
    Fans out queries through the gateway and folds them into dashboard data.

    Every aggregation:
    - runs its independent fetches concurrently
    - is bounded by `timeout` seconds
    - fails as a whole: any fetch error yields the safe default plus an error
      notification, never a partial result
    - lets task cancellation propagate to the caller
    """

    def __init__(
        self,
        gateway: DataGateway,
        notifier: Notifier,
        request_id: str = "unknown",
        timeout: float | None = None,
        window_days: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.clients = ClientRepository(gateway)
        self.loans = LoanRepository(gateway)
        self.repayments = RepaymentRepository(gateway)
        self.branches = BranchRepository(gateway)
        self.notifier = notifier
        self.request_id = request_id
        self.timeout = timeout or settings.aggregation_timeout_seconds
        self.window_days = window_days or settings.stats_window_days
        self.clock = clock

    async def _bounded(self, aggregator: str, work):
        return await run_bounded(aggregator, work, self.timeout, self.request_id)

    async def fetch_stats(self) -> DashboardStats:
        """Dashboard snapshot; zero-valued snapshot on any failure"""
        today = self.clock().date()
        try:
            return await self._bounded("stats", self._collect_stats(today))
        except Exception as e:
            logging.error(f"Error fetching dashboard stats: {e}", extra={"request_id": self.request_id})
            self.notifier.error("Error fetching dashboard data", e)
            return empty_stats(today, self.window_days)

    async def _collect_stats(self, today) -> DashboardStats:
        month_start, month_end = month_bounds(today)
        window_start = start_of_day_utc(today - timedelta(days=self.window_days - 1))

        (
            active_clients,
            total_branches,
            active_loans,
            pending_loans,
            outstanding,
            month_repayments,
            recent_disbursements,
        ) = await asyncio.gather(
            self.clients.count_by_status(ClientStatus.ACTIVE),
            self.branches.count(),
            self.loans.count_by_statuses(OUTSTANDING_LOAN_STATUSES),
            self.loans.count_by_status(LoanStatus.PENDING),
            self.loans.with_statuses(OUTSTANDING_LOAN_STATUSES),
            self.repayments.due_between(month_start, month_end),
            self.loans.disbursed_since(window_start),
        )

        return build_dashboard_stats(
            active_clients=active_clients,
            active_loans=active_loans,
            pending_loans=pending_loans,
            total_branches=total_branches,
            outstanding_loans=outstanding,
            month_repayments=month_repayments,
            recent_disbursements=recent_disbursements,
            today=today,
            window_days=self.window_days,
        )

    async def fetch_recent_activities(self, limit: int | None = None) -> List[ActivityItem]:
        """At most `limit` newest activities across loans, repayments and clients"""
        limit = settings.activity_feed_limit if limit is None else limit
        if limit < 1:
            return []
        try:
            return await self._bounded("activities", self._collect_activities(limit))
        except Exception as e:
            logging.error(f"Error fetching recent activities: {e}", extra={"request_id": self.request_id})
            self.notifier.error("Error fetching activities", e)
            return []

    async def _collect_activities(self, limit: int) -> List[ActivityItem]:
        loans, repayments, clients = await asyncio.gather(
            self.loans.recent_applications(limit),
            self.repayments.recent_paid(limit),
            self.clients.recent(limit),
        )

        # Resolve the owners of repaid loans, then every client name in one lookup
        loan_clients = {loan.id: loan.client_id for loan in loans}
        unknown_loans = {r.loan_id for r in repayments} - loan_clients.keys()
        loan_clients.update(await self.loans.client_ids_for(unknown_loans))
        client_names = await self.clients.names_by_id(loan_clients.values())

        return merge_activities(loans, repayments, clients, client_names, loan_clients, limit)

    async def fetch_loan_status_distribution(self) -> List[LoanStatusCount]:
        """One count per loan status, in declaration order; empty list on failure"""
        try:
            return await self._bounded("loan_status", self._collect_status_counts())
        except Exception as e:
            logging.error(f"Error fetching loan status distribution: {e}", extra={"request_id": self.request_id})
            self.notifier.error("Error fetching loan data", e)
            return []

    async def _collect_status_counts(self) -> List[LoanStatusCount]:
        statuses = list(LoanStatus)
        counts = await asyncio.gather(*(self.loans.count_by_status(status) for status in statuses))
        return [LoanStatusCount(status=status, count=count) for status, count in zip(statuses, counts)]
