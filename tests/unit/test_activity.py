"""Unit tests for the activity feed merge"""

from datetime import date, datetime, timedelta, timezone

from loanlight_admin.domain.activity import (
    REGISTRATION_USER,
    UNKNOWN_CLIENT,
    client_activity,
    loan_activity,
    merge_activities,
    repayment_activity,
)
from loanlight_admin.domain.models import (
    ActivityType,
    Client,
    ClientStatus,
    Loan,
    LoanRepayment,
    LoanStatus,
)

BASE = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


def make_client(client_id: str, first: str, last: str, created_at: datetime) -> Client:
    return Client(
        id=client_id,
        first_name=first,
        last_name=last,
        phone="",
        address="",
        national_id="",
        gender="other",
        occupation="",
        income_source="",
        monthly_income=0,
        branch_id="",
        status=ClientStatus.ACTIVE,
        created_at=created_at,
        updated_at=created_at,
    )


def make_loan(loan_id: str, client_id: str, amount: float, created_at: datetime) -> Loan:
    return Loan(
        id=loan_id,
        client_id=client_id,
        amount=amount,
        interest_rate=10,
        term=6,
        purpose="",
        status=LoanStatus.PENDING,
        branch_id="",
        created_at=created_at,
        updated_at=created_at,
    )


def make_repayment(repayment_id: str, loan_id: str, paid_date: datetime | None) -> LoanRepayment:
    return LoanRepayment(
        id=repayment_id,
        loan_id=loan_id,
        amount=250,
        due_date=date(2026, 10, 15),
        is_paid=True,
        paid_date=paid_date,
    )


def test_loan_activity_text():
    item = loan_activity(make_loan("L1", "C1", 50000, BASE), "Jane Doe")

    assert item.id == "loan-L1"
    assert item.type == ActivityType.LOAN_APPLIED
    assert item.description == "Jane Doe applied for a new loan of KES 50,000"
    assert item.user == "Jane Doe"
    assert item.amount == 50000
    assert item.timestamp == BASE


def test_repayment_activity_uses_short_loan_reference():
    item = repayment_activity(make_repayment("R1", "abcdef1234567890", BASE), "Jane Doe")

    assert item.id == "repayment-R1"
    assert item.type == ActivityType.REPAYMENT_RECEIVED
    assert item.description == "Repayment received for Loan #abcdef12"


def test_repayment_activity_falls_back_to_due_date():
    item = repayment_activity(make_repayment("R1", "L1", None), "Jane Doe")

    assert item.timestamp == datetime(2026, 10, 15, tzinfo=timezone.utc)


def test_client_activity_text():
    item = client_activity(make_client("C1", "Jane", "Doe", BASE))

    assert item.id == "client-C1"
    assert item.description == "New client Jane Doe registered"
    assert item.user == REGISTRATION_USER
    assert item.amount is None


def test_merge_sorts_newest_first_and_truncates():
    loans = [make_loan(f"L{i}", "C1", 100 * i, BASE - timedelta(hours=i)) for i in range(3)]
    repayments = [make_repayment("R1", "L9", BASE - timedelta(minutes=30))]
    clients = [make_client("C2", "New", "Person", BASE + timedelta(hours=1))]

    items = merge_activities(loans, repayments, clients, {"C1": "Jane Doe"}, {"L9": "C1"}, limit=3)

    assert [item.id for item in items] == ["client-C2", "loan-L0", "repayment-R1"]
    assert all(a.timestamp >= b.timestamp for a, b in zip(items, items[1:]))


def test_merge_ties_keep_source_order():
    loans = [make_loan("L1", "C1", 100, BASE)]
    repayments = [make_repayment("R1", "L1", BASE)]
    clients = [make_client("C1", "Jane", "Doe", BASE)]

    items = merge_activities(loans, repayments, clients, {"C1": "Jane Doe"}, {"L1": "C1"}, limit=5)

    assert [item.type for item in items] == [
        ActivityType.LOAN_APPLIED,
        ActivityType.REPAYMENT_RECEIVED,
        ActivityType.CLIENT_REGISTERED,
    ]


def test_merge_unknown_client_names():
    items = merge_activities(
        [make_loan("L1", "missing", 100, BASE)],
        [make_repayment("R1", "L-unknown", BASE)],
        [],
        {},
        {},
        limit=5,
    )

    assert {item.user for item in items} == {UNKNOWN_CLIENT}


def test_merge_empty_sources():
    assert merge_activities([], [], [], {}, {}, limit=5) == []
