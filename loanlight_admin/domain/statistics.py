"""Dashboard statistics - pure folds over already-fetched loan and repayment rows"""

from datetime import date
from typing import Dict, Iterable, List

from loanlight_admin.domain.models import DailyStatPoint, DashboardStats, Loan, LoanRepayment
from loanlight_admin.utils.date_utils import trailing_window


def loan_profit(amount: float, interest_rate: float) -> float:
    """
    Expected interest earned on a loan: amount * rate / 100.

    The full (not monthly pro-rated) rate is used, so a 1000 loan at 12% yields 120.
    """
    return amount * interest_rate / 100


def total_amount(loans: Iterable[Loan]) -> float:
    return sum(loan.amount for loan in loans)


def repayment_totals(repayments: Iterable[LoanRepayment]) -> tuple[float, float]:
    """Return (expected, received) for a set of scheduled repayments"""
    expected = 0.0
    received = 0.0
    for repayment in repayments:
        expected += repayment.amount
        if repayment.is_paid:
            received += repayment.amount
    return expected, received


def repayment_rate(expected: float, received: float) -> float:
    """Received as a percentage of expected; nothing expected counts as 100%"""
    if expected <= 0:
        return 100.0
    return received / expected * 100


def build_daily_series(loans: Iterable[Loan], today: date, window_days: int = 30) -> List[DailyStatPoint]:
    """
    Fold disbursed loans into one point per calendar day of the trailing window.

    Requirements:
    - Exactly `window_days` contiguous days ending at `today`, ascending
    - Days without disbursements are zero-filled
    - Loans are bucketed by the UTC calendar day of disbursed_at; loans without
      disbursed_at or outside the window are ignored
    """
    days = trailing_window(today, window_days)
    buckets: Dict[date, List[float]] = {day: [0.0, 0.0] for day in days}

    for loan in loans:
        if loan.disbursed_at is None:
            continue
        bucket = buckets.get(loan.disbursed_at.date())
        if bucket is None:
            continue
        bucket[0] += loan.amount
        bucket[1] += loan_profit(loan.amount, loan.interest_rate)

    return [DailyStatPoint(date=day, disbursement=buckets[day][0], profit=buckets[day][1]) for day in days]


def empty_daily_series(today: date, window_days: int = 30) -> List[DailyStatPoint]:
    return [DailyStatPoint(date=day, disbursement=0.0, profit=0.0) for day in trailing_window(today, window_days)]


def empty_stats(today: date, window_days: int = 30) -> DashboardStats:
    """Zero-valued snapshot returned when the aggregation fails"""
    return DashboardStats(
        active_clients=0,
        active_loans=0,
        pending_loans=0,
        total_branches=0,
        total_amount_disbursed=0.0,
        total_expected_this_month=0.0,
        total_received_this_month=0.0,
        repayment_rate=0.0,
        daily_data=empty_daily_series(today, window_days),
    )


def build_dashboard_stats(
    *,
    active_clients: int,
    active_loans: int,
    pending_loans: int,
    total_branches: int,
    outstanding_loans: Iterable[Loan],
    month_repayments: Iterable[LoanRepayment],
    recent_disbursements: Iterable[Loan],
    today: date,
    window_days: int = 30,
) -> DashboardStats:
    """Main entry point: combine counts and fetched rows into a dashboard snapshot"""
    expected, received = repayment_totals(month_repayments)

    return DashboardStats(
        active_clients=active_clients,
        active_loans=active_loans,
        pending_loans=pending_loans,
        total_branches=total_branches,
        total_amount_disbursed=total_amount(outstanding_loans),
        total_expected_this_month=expected,
        total_received_this_month=received,
        repayment_rate=repayment_rate(expected, received),
        daily_data=build_daily_series(recent_disbursements, today, window_days),
    )
