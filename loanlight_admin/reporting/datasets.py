"""Tabular datasets for the standard reports: rows, columns and a labelled summary panel"""

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Sequence

from loanlight_admin.domain.formatters import format_currency, format_short_date
from loanlight_admin.domain.models import BranchPerformance, Column, Loan, RepaymentStanding
from loanlight_admin.domain.report_summaries import (
    UNKNOWN_CLIENT,
    summarize_loan_portfolio,
    summarize_repayment_status,
)


@dataclass
class ReportDataset:
    """
    A report ready to print or export.

    `figures` are the raw aggregate numbers; `summary` is the same information
    labelled and formatted for the printed summary panel.
    """

    title: str
    rows: List[Dict[str, Any]]
    columns: List[Column]
    figures: Dict[str, float] = field(default_factory=dict)
    summary: Dict[str, str] = field(default_factory=dict)


def plain_columns(columns: Sequence[Column]) -> List[Column]:
    """Same columns without display formatters (CSV keeps raw numbers and ISO dates)"""
    return [Column(key=column.key, label=column.label) for column in columns]


LOAN_PORTFOLIO_COLUMNS = [
    Column(key="client", label="Client"),
    Column(key="amount", label="Amount", formatter=format_currency),
    Column(key="interest_rate", label="Interest Rate (%)"),
    Column(key="term", label="Term (months)"),
    Column(key="status", label="Status"),
    Column(key="start_date", label="Start Date", formatter=format_short_date),
    Column(key="end_date", label="End Date", formatter=format_short_date),
]

BRANCH_PERFORMANCE_COLUMNS = [
    Column(key="branch", label="Branch"),
    Column(key="clients", label="Clients"),
    Column(key="active_loans", label="Active Loans"),
    Column(key="total_disbursed", label="Total Disbursed", formatter=format_currency),
    Column(key="employees", label="Employees"),
]

REPAYMENT_STATUS_COLUMNS = [
    Column(key="client", label="Client"),
    Column(key="loan", label="Loan"),
    Column(key="amount", label="Amount", formatter=format_currency),
    Column(key="due_date", label="Due Date", formatter=format_short_date),
    Column(key="status", label="Status"),
    Column(key="days_overdue", label="Days Overdue"),
]


def loan_portfolio_report(loans: Sequence[Loan], client_names: Mapping[str, str], today: date) -> ReportDataset:
    summary = summarize_loan_portfolio(loans, today)
    rows = [
        {
            "client": client_names.get(loan.client_id, UNKNOWN_CLIENT),
            "amount": loan.amount,
            "interest_rate": loan.interest_rate,
            "term": loan.term,
            "status": loan.status.value,
            "start_date": loan.start_date,
            "end_date": loan.end_date,
        }
        for loan in loans
    ]
    return ReportDataset(
        title="Loan Portfolio Report",
        rows=rows,
        columns=LOAN_PORTFOLIO_COLUMNS,
        figures=asdict(summary),
        summary={
            "Total Loans": str(summary.total_loans),
            "Active Loans": str(summary.active_loans),
            "Total Portfolio Value": format_currency(summary.total_value),
            "Active Portfolio Value": format_currency(summary.active_value),
            "Disbursed This Month": format_currency(summary.disbursed_this_month),
        },
    )


def branch_performance_report(lines: Sequence[BranchPerformance]) -> ReportDataset:
    rows = [
        {
            "branch": line.name,
            "clients": line.client_count,
            "active_loans": line.active_loans,
            "total_disbursed": line.total_disbursed,
            "employees": line.employee_count,
        }
        for line in lines
    ]
    figures = {
        "branches": len(lines),
        "total_clients": sum(line.client_count for line in lines),
        "active_loans": sum(line.active_loans for line in lines),
        "total_disbursed": sum(line.total_disbursed for line in lines),
    }
    return ReportDataset(
        title="Branch Performance Report",
        rows=rows,
        columns=BRANCH_PERFORMANCE_COLUMNS,
        figures=figures,
        summary={
            "Branches": str(figures["branches"]),
            "Total Clients": str(figures["total_clients"]),
            "Active Loans": str(figures["active_loans"]),
            "Total Disbursed": format_currency(figures["total_disbursed"]),
        },
    )


def repayment_status_report(standings: Sequence[RepaymentStanding]) -> ReportDataset:
    summary = summarize_repayment_status(standings)
    rows = [
        {
            "client": standing.client_name,
            "loan": standing.repayment.loan_id[:8],
            "amount": standing.repayment.amount,
            "due_date": standing.repayment.due_date,
            "status": standing.label,
            "days_overdue": standing.days_past_due,
        }
        for standing in standings
    ]
    return ReportDataset(
        title="Repayment Status Report",
        rows=rows,
        columns=REPAYMENT_STATUS_COLUMNS,
        figures=asdict(summary),
        summary={
            "Total Repayments": str(summary.total_repayments),
            "Paid On Time": str(summary.paid_on_time),
            "Paid Late": str(summary.paid_late),
            "Overdue": str(summary.overdue),
            "Total Expected": format_currency(summary.total_amount),
            "Total Collected": format_currency(summary.collected_amount),
            "Overdue Amount": format_currency(summary.overdue_amount),
            "Collection Rate": f"{summary.collection_rate:.1f}%",
        },
    )
