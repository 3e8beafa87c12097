"""Standard reports, printing and export, with loading state and user notifications"""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Sequence, Set

from starlette.concurrency import run_in_threadpool

from loanlight_admin.config import settings
from loanlight_admin.domain.exceptions import EmptyDatasetError, ExportError, ReportError
from loanlight_admin.domain.models import Column, OrganizationProfile
from loanlight_admin.domain.report_summaries import classify_repayments, summarize_branch_performance
from loanlight_admin.infrastructure.clients.gateway import DataGateway
from loanlight_admin.infrastructure.observability.metrics import report_counter
from loanlight_admin.infrastructure.repositories import (
    BranchRepository,
    ClientRepository,
    LoanRepository,
    OrganizationRepository,
    RepaymentRepository,
)
from loanlight_admin.reporting import printing
from loanlight_admin.reporting.datasets import (
    ReportDataset,
    branch_performance_report,
    loan_portfolio_report,
    repayment_status_report,
)
from loanlight_admin.reporting.export import export_csv, export_pdf
from loanlight_admin.reporting.html import ReportData
from loanlight_admin.reporting.printing import PrintSurface
from loanlight_admin.services.aggregation import run_bounded
from loanlight_admin.services.notifications import Notifier
from loanlight_admin.utils.date_utils import utc_now

EXPORT_FORMATS = {
    "csv": "text/csv; charset=utf-8",
    "pdf": "application/pdf",
}


@dataclass
class ExportResult:
    filename: str
    media_type: str
    content: bytes


def report_filename(title: str, extension: str, day: Optional[datetime] = None) -> str:
    """
    Example:
        report_filename("Loan Portfolio", "csv") -> "loan_portfolio_2026-10-18.csv"
    """
    day = day or datetime.now()
    slug = re.sub(r"[^a-z0-9]+", "_", title.lower()).strip("_") or "report"
    return f"{slug}_{day.strftime('%Y-%m-%d')}.{extension}"


class ReportService:
    """
    Builds, prints and exports reports on behalf of one request.

    The standard reports (loan portfolio, branch performance, repayment status)
    aggregate like the dashboard: concurrent fetches under a timeout, and on any
    failure an empty dataset plus an error notification.

    While a report is being printed or exported its id sits in `generating`; the
    id is released whether the report succeeds or fails. Outcomes are published
    to the notifier and failures re-raised for the caller to translate.
    """

    def __init__(
        self,
        gateway: DataGateway,
        notifier: Notifier,
        surface: PrintSurface,
        request_id: str = "unknown",
        timeout: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.organizations = OrganizationRepository(gateway)
        self.clients = ClientRepository(gateway)
        self.loans = LoanRepository(gateway)
        self.repayments = RepaymentRepository(gateway)
        self.branches = BranchRepository(gateway)
        self.notifier = notifier
        self.surface = surface
        self.request_id = request_id
        self.timeout = timeout or settings.aggregation_timeout_seconds
        self.clock = clock
        self.generating: Set[str] = set()

    async def _aggregate(self, aggregator: str, work, failure_title: str, fallback: ReportDataset) -> ReportDataset:
        try:
            return await run_bounded(aggregator, work, self.timeout, self.request_id)
        except Exception as e:
            logging.error(f"Error building {aggregator} report: {e}", extra={"request_id": self.request_id})
            self.notifier.error(failure_title, e)
            return fallback

    async def loan_portfolio(self) -> ReportDataset:
        """Every loan, newest first, with portfolio totals"""
        today = self.clock().date()
        return await self._aggregate(
            "loan_portfolio",
            self._collect_loan_portfolio(today),
            "Error fetching loan data",
            loan_portfolio_report([], {}, today),
        )

    async def _collect_loan_portfolio(self, today: date) -> ReportDataset:
        loans = await self.loans.list_all()
        client_names = await self.clients.names_by_id(loan.client_id for loan in loans)
        return loan_portfolio_report(loans, client_names, today)

    async def branch_performance(self) -> ReportDataset:
        """Clients, active loans and loan volume per branch"""
        return await self._aggregate(
            "branch_performance",
            self._collect_branch_performance(),
            "Error fetching branch data",
            branch_performance_report([]),
        )

    async def _collect_branch_performance(self) -> ReportDataset:
        branches, clients, loans = await asyncio.gather(
            self.branches.list_all(),
            self.clients.list_all(),
            self.loans.list_all(),
        )
        return branch_performance_report(summarize_branch_performance(branches, clients, loans))

    async def repayment_status(self) -> ReportDataset:
        """Every scheduled repayment, latest due first, classified as paid, pending or overdue"""
        today = self.clock().date()
        return await self._aggregate(
            "repayment_status",
            self._collect_repayment_status(today),
            "Error fetching repayment data",
            repayment_status_report([]),
        )

    async def _collect_repayment_status(self, today: date) -> ReportDataset:
        repayments = await self.repayments.list_all()
        loan_clients = await self.loans.client_ids_for(r.loan_id for r in repayments)
        client_names = await self.clients.names_by_id(loan_clients.values())
        return repayment_status_report(classify_repayments(repayments, loan_clients, client_names, today))

    async def organization_profile(self) -> OrganizationProfile:
        """Organization name and logo, falling back to the configured name"""
        try:
            profile = await self.organizations.get_profile()
        except Exception as e:
            logging.error(f"Error fetching organization details: {e}", extra={"request_id": self.request_id})
            profile = None
        return profile or OrganizationProfile(name=settings.organization_name)

    async def print_report(
        self,
        title: str,
        data: ReportData,
        columns: Optional[Sequence[Column]] = None,
        summary: Optional[Mapping[str, Any]] = None,
        subtitle: Optional[str] = None,
        report_id: Optional[str] = None,
    ) -> str:
        """Render a printable document and open it on the print surface"""
        report_id = report_id or title
        self.generating.add(report_id)
        try:
            profile = await self.organization_profile()
            document = printing.print_report(
                self.surface,
                title,
                data,
                columns=columns,
                summary=summary,
                subtitle=subtitle,
                organization_name=profile.name,
                logo=profile.logo,
            )
        except Exception as e:
            logging.error(f"Error printing report: {e}", extra={"request_id": self.request_id, "report": title})
            report_counter.labels(format="html", outcome="failed").inc()
            self.notifier.error("Error", "Failed to generate report. Please try again.")
            raise
        finally:
            self.generating.discard(report_id)

        report_counter.labels(format="html", outcome="ok").inc()
        self.notifier.success("Report Prepared", "Your report has been generated and is ready to print.")
        return document

    async def export(
        self,
        title: str,
        rows: Sequence[Mapping[str, Any]],
        export_format: str = "csv",
        columns: Optional[Sequence[Column]] = None,
        report_id: Optional[str] = None,
    ) -> ExportResult:
        """Serialize rows to a downloadable CSV or PDF file"""
        if export_format not in EXPORT_FORMATS:
            raise ExportError(f"Unsupported export format: {export_format}")

        report_id = report_id or f"{title}:{export_format}"
        self.generating.add(report_id)
        try:
            if not rows:
                raise EmptyDatasetError("No data to export")
            if export_format == "csv":
                text = await run_in_threadpool(export_csv, rows, columns)
                content = text.encode("utf-8")
            else:
                profile = await self.organization_profile()
                content = await run_in_threadpool(
                    export_pdf, title, rows, columns, organization_name=profile.name
                )
        except EmptyDatasetError:
            report_counter.labels(format=export_format, outcome="failed").inc()
            self.notifier.error("Nothing to Export", "There is no data to include in this report.")
            raise
        except ReportError as e:
            logging.error(f"Error downloading report: {e}", extra={"request_id": self.request_id, "report": title})
            report_counter.labels(format=export_format, outcome="failed").inc()
            self.notifier.error("Download Failed", "There was an error generating your report.")
            raise
        except Exception as e:
            logging.error(f"Error downloading report: {e}", extra={"request_id": self.request_id, "report": title})
            report_counter.labels(format=export_format, outcome="failed").inc()
            self.notifier.error("Download Failed", "There was an error generating your report.")
            raise ExportError(str(e)) from e
        finally:
            self.generating.discard(report_id)

        report_counter.labels(format=export_format, outcome="ok").inc()
        self.notifier.success("Report Downloaded", f"{title} has been downloaded successfully.")
        return ExportResult(
            filename=report_filename(title, export_format),
            media_type=EXPORT_FORMATS[export_format],
            content=content,
        )
