"""Unit tests for the loan portfolio, branch performance and repayment status folds"""

from datetime import date, datetime, timezone

import pytest

from loanlight_admin.domain.models import (
    Branch,
    BranchStatus,
    Client,
    ClientStatus,
    Loan,
    LoanRepayment,
    LoanStatus,
)
from loanlight_admin.domain.report_summaries import (
    classify_repayments,
    collection_rate,
    repayment_standing,
    summarize_branch_performance,
    summarize_loan_portfolio,
    summarize_repayment_status,
)
from loanlight_admin.reporting.datasets import (
    branch_performance_report,
    loan_portfolio_report,
    plain_columns,
    repayment_status_report,
)

TODAY = date(2026, 10, 18)
CREATED = datetime(2026, 9, 1, tzinfo=timezone.utc)


def make_loan(
    amount: float,
    status: LoanStatus = LoanStatus.ACTIVE,
    branch_id: str = "branch-1",
    disbursed_at: datetime | None = None,
    **fields,
) -> Loan:
    return Loan(
        id=fields.pop("id", f"loan-{amount}-{status.value}"),
        client_id=fields.pop("client_id", "client-1"),
        amount=amount,
        interest_rate=12,
        term=6,
        purpose="Stock",
        status=status,
        branch_id=branch_id,
        created_at=CREATED,
        updated_at=CREATED,
        disbursed_at=disbursed_at,
        **fields,
    )


def make_client(client_id: str, branch_id: str) -> Client:
    return Client(
        id=client_id,
        first_name="Amina",
        last_name="Otieno",
        phone="+254700000000",
        address="",
        national_id="ID1",
        gender="female",
        occupation="Trader",
        income_source="Business",
        monthly_income=30000,
        branch_id=branch_id,
        status=ClientStatus.ACTIVE,
        created_at=CREATED,
        updated_at=CREATED,
    )


def make_branch(branch_id: str, name: str, employee_count: int = 0) -> Branch:
    return Branch(
        id=branch_id,
        name=name,
        location="Nairobi",
        address="",
        phone="",
        manager_name="",
        manager_id="",
        status=BranchStatus.ACTIVE,
        employee_count=employee_count,
    )


def make_repayment(
    amount: float,
    due_date: date = TODAY,
    is_paid: bool = False,
    paid_date: datetime | None = None,
    loan_id: str = "loan-1",
) -> LoanRepayment:
    return LoanRepayment(
        id=f"r-{amount}-{due_date}",
        loan_id=loan_id,
        amount=amount,
        due_date=due_date,
        is_paid=is_paid,
        paid_date=paid_date,
    )


def test_portfolio_counts_only_active_loans_as_active():
    loans = [
        make_loan(1000),
        make_loan(2000, LoanStatus.PENDING),
        make_loan(3000, LoanStatus.COMPLETED),
        make_loan(4000),
    ]

    summary = summarize_loan_portfolio(loans, TODAY)

    assert summary.total_loans == 4
    assert summary.active_loans == 2
    assert summary.total_value == 10000
    assert summary.active_value == 5000


def test_portfolio_disbursed_this_month_starts_on_the_first():
    loans = [
        make_loan(1000, disbursed_at=datetime(2026, 10, 1, 0, 5, tzinfo=timezone.utc)),
        make_loan(2000, disbursed_at=datetime(2026, 9, 30, 23, 59, tzinfo=timezone.utc)),
        make_loan(4000, LoanStatus.PENDING),
    ]

    assert summarize_loan_portfolio(loans, TODAY).disbursed_this_month == 1000


def test_portfolio_of_nothing():
    summary = summarize_loan_portfolio([], TODAY)

    assert summary.total_loans == 0
    assert summary.total_value == 0
    assert summary.disbursed_this_month == 0


def test_branch_performance_keeps_branch_order_and_sums_every_loan():
    branches = [make_branch("b2", "Mombasa", employee_count=3), make_branch("b1", "Nairobi CBD", employee_count=7)]
    clients = [make_client("c1", "b1"), make_client("c2", "b1"), make_client("c3", "b2"), make_client("c4", "")]
    loans = [
        make_loan(1000, branch_id="b1"),
        make_loan(500, LoanStatus.COMPLETED, branch_id="b1"),
        make_loan(2500, LoanStatus.PENDING, branch_id="b2"),
        make_loan(9999, branch_id="closed-branch"),
    ]

    lines = summarize_branch_performance(branches, clients, loans)

    assert [line.name for line in lines] == ["Mombasa", "Nairobi CBD"]
    mombasa, nairobi = lines
    assert (nairobi.client_count, nairobi.active_loans, nairobi.total_disbursed) == (2, 1, 1500)
    assert (mombasa.client_count, mombasa.active_loans, mombasa.total_disbursed) == (1, 0, 2500)
    assert nairobi.employee_count == 7


def test_branch_without_activity_reports_zeros():
    (line,) = summarize_branch_performance([make_branch("b1", "Kisumu")], [], [])

    assert (line.client_count, line.active_loans, line.total_disbursed) == (0, 0, 0.0)


def test_repayment_due_today_is_not_overdue():
    standing = repayment_standing(make_repayment(500, due_date=TODAY), "Amina Otieno", TODAY)

    assert standing.is_overdue is False
    assert standing.days_past_due is None
    assert standing.label == "Pending"


def test_unpaid_repayment_past_due_is_overdue():
    standing = repayment_standing(make_repayment(500, due_date=date(2026, 10, 11)), "Amina Otieno", TODAY)

    assert standing.is_overdue is True
    assert standing.days_past_due == 7
    assert standing.label == "Overdue"
    assert standing.amount_paid == 0.0


def test_paid_repayment_is_never_overdue():
    repayment = make_repayment(500, due_date=date(2026, 9, 1), is_paid=True)

    standing = repayment_standing(repayment, "Amina Otieno", TODAY)

    assert standing.is_overdue is False
    assert standing.label == "Paid"
    assert standing.amount_paid == 500


def test_classify_repayments_resolves_owner_names():
    repayments = [make_repayment(100, loan_id="loan-1"), make_repayment(200, loan_id="loan-orphan")]

    standings = classify_repayments(repayments, {"loan-1": "c1"}, {"c1": "Amina Otieno"}, TODAY)

    assert [s.client_name for s in standings] == ["Amina Otieno", "Unknown client"]


def test_collection_rate_with_nothing_scheduled():
    assert collection_rate(0, 0) == 0.0


def test_repayment_status_summary():
    standings = classify_repayments(
        [
            # paid on the due day counts as on time
            make_repayment(1000, date(2026, 10, 1), True, datetime(2026, 10, 1, 18, tzinfo=timezone.utc)),
            make_repayment(1000, date(2026, 10, 2), True, datetime(2026, 10, 5, 9, tzinfo=timezone.utc)),
            make_repayment(1000, date(2026, 10, 3), True),
            make_repayment(500, date(2026, 10, 10)),
            make_repayment(500, date(2026, 10, 25)),
        ],
        {},
        {},
        TODAY,
    )

    summary = summarize_repayment_status(standings)

    assert summary.total_repayments == 5
    assert summary.paid_on_time == 1
    assert summary.paid_late == 1
    assert summary.overdue == 1
    assert summary.total_amount == 4000
    assert summary.collected_amount == 3000
    assert summary.overdue_amount == 500
    assert summary.collection_rate == pytest.approx(75.0)


def test_loan_portfolio_dataset_rows_and_summary():
    loan = make_loan(150000, client_id="c1", start_date=date(2026, 10, 1))

    dataset = loan_portfolio_report([loan], {"c1": "Amina Otieno"}, TODAY)

    assert dataset.title == "Loan Portfolio Report"
    assert dataset.rows[0]["client"] == "Amina Otieno"
    assert dataset.rows[0]["status"] == "ACTIVE"
    assert dataset.figures["active_value"] == 150000
    assert dataset.summary["Total Portfolio Value"] == "KES 150,000"


def test_branch_performance_dataset_totals():
    lines = summarize_branch_performance(
        [make_branch("b1", "Nairobi CBD"), make_branch("b2", "Mombasa")],
        [make_client("c1", "b1"), make_client("c2", "b2")],
        [make_loan(1000, branch_id="b1"), make_loan(2000, branch_id="b2")],
    )

    dataset = branch_performance_report(lines)

    assert dataset.figures == {"branches": 2, "total_clients": 2, "active_loans": 2, "total_disbursed": 3000}
    assert [row["branch"] for row in dataset.rows] == ["Nairobi CBD", "Mombasa"]


def test_repayment_status_dataset_shortens_loan_ids():
    repayment = make_repayment(500, date(2026, 10, 11), loan_id="8f14e45f-ceea-467f-a8f6-5d1e0a3c2b11")
    standings = classify_repayments([repayment], {}, {}, TODAY)

    dataset = repayment_status_report(standings)

    assert dataset.rows[0]["loan"] == "8f14e45f"
    assert dataset.rows[0]["days_overdue"] == 7
    assert dataset.summary["Collection Rate"] == "0.0%"


def test_plain_columns_drop_formatters():
    dataset = loan_portfolio_report([], {}, TODAY)

    columns = plain_columns(dataset.columns)

    assert [c.key for c in columns] == [c.key for c in dataset.columns]
    assert all(c.formatter is None for c in columns)
