"""Report aggregations - pure folds behind the portfolio, branch and repayment reports"""

from collections import Counter, defaultdict
from datetime import date
from typing import Dict, Iterable, List, Mapping, Sequence

from loanlight_admin.domain.activity import UNKNOWN_CLIENT
from loanlight_admin.domain.models import (
    Branch,
    BranchPerformance,
    Client,
    Loan,
    LoanPortfolioSummary,
    LoanRepayment,
    LoanStatus,
    RepaymentStanding,
    RepaymentStatusSummary,
)
from loanlight_admin.domain.statistics import total_amount


def summarize_loan_portfolio(loans: Sequence[Loan], today: date) -> LoanPortfolioSummary:
    """
    Count and value the whole book and its ACTIVE part.

    Disbursed this month sums loans whose disbursed_at falls on or after the
    first day of `today`'s month (UTC).
    """
    month_start = today.replace(day=1)
    active = [loan for loan in loans if loan.status is LoanStatus.ACTIVE]
    disbursed = [
        loan for loan in loans if loan.disbursed_at is not None and loan.disbursed_at.date() >= month_start
    ]
    return LoanPortfolioSummary(
        total_loans=len(loans),
        active_loans=len(active),
        total_value=total_amount(loans),
        active_value=total_amount(active),
        disbursed_this_month=total_amount(disbursed),
    )


def summarize_branch_performance(
    branches: Iterable[Branch],
    clients: Iterable[Client],
    loans: Iterable[Loan],
) -> List[BranchPerformance]:
    """
    One line per branch, in the order the branches are given.

    total_disbursed is the sum of every loan booked at the branch, whatever its
    status. Clients and loans without a known branch are not counted.
    """
    client_counts = Counter(client.branch_id for client in clients)
    active_loans: Dict[str, int] = defaultdict(int)
    disbursed: Dict[str, float] = defaultdict(float)
    for loan in loans:
        disbursed[loan.branch_id] += loan.amount
        if loan.status is LoanStatus.ACTIVE:
            active_loans[loan.branch_id] += 1

    return [
        BranchPerformance(
            branch_id=branch.id,
            name=branch.name,
            client_count=client_counts.get(branch.id, 0),
            active_loans=active_loans.get(branch.id, 0),
            total_disbursed=disbursed.get(branch.id, 0.0),
            employee_count=branch.employee_count,
        )
        for branch in branches
    ]


def repayment_standing(repayment: LoanRepayment, client_name: str, today: date) -> RepaymentStanding:
    """An unpaid repayment is overdue from the day after its due date"""
    is_overdue = not repayment.is_paid and today > repayment.due_date
    return RepaymentStanding(
        repayment=repayment,
        client_name=client_name,
        amount_paid=repayment.amount if repayment.is_paid else 0.0,
        is_overdue=is_overdue,
        days_past_due=(today - repayment.due_date).days if is_overdue else None,
    )


def classify_repayments(
    repayments: Iterable[LoanRepayment],
    loan_clients: Mapping[str, str],
    client_names: Mapping[str, str],
    today: date,
) -> List[RepaymentStanding]:
    """Attach owner names and overdue state, keeping the input order"""
    return [
        repayment_standing(
            repayment,
            client_names.get(loan_clients.get(repayment.loan_id, ""), UNKNOWN_CLIENT),
            today,
        )
        for repayment in repayments
    ]


def collection_rate(total: float, collected: float) -> float:
    """Collected as a percentage of everything scheduled; 0.0 when nothing is scheduled"""
    if total <= 0:
        return 0.0
    return collected / total * 100


def summarize_repayment_status(standings: Sequence[RepaymentStanding]) -> RepaymentStatusSummary:
    """
    Fold classified repayments into collection figures.

    A repayment paid on its due date (UTC day) is on time. Paid repayments
    without a paid_date count as collected but neither on time nor late.
    """
    paid_on_time = 0
    paid_late = 0
    total = 0.0
    collected = 0.0
    overdue_amount = 0.0
    overdue = 0
    for standing in standings:
        repayment = standing.repayment
        total += repayment.amount
        collected += standing.amount_paid
        if standing.is_overdue:
            overdue += 1
            overdue_amount += repayment.amount
        if repayment.is_paid and repayment.paid_date is not None:
            if repayment.paid_date.date() <= repayment.due_date:
                paid_on_time += 1
            else:
                paid_late += 1

    return RepaymentStatusSummary(
        total_repayments=len(standings),
        paid_on_time=paid_on_time,
        paid_late=paid_late,
        overdue=overdue,
        total_amount=total,
        collected_amount=collected,
        overdue_amount=overdue_amount,
        collection_rate=collection_rate(total, collected),
    )
