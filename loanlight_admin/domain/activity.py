"""Activity feed - maps recent loans, repayments and clients to ActivityItems"""

from typing import Iterable, List, Mapping

from loanlight_admin.domain.formatters import format_currency
from loanlight_admin.domain.models import ActivityItem, ActivityType, Client, Loan, LoanRepayment
from loanlight_admin.utils.date_utils import start_of_day_utc

REGISTRATION_USER = "Loan Officer"
UNKNOWN_CLIENT = "Unknown client"


def loan_activity(loan: Loan, client_name: str) -> ActivityItem:
    return ActivityItem(
        id=f"loan-{loan.id}",
        type=ActivityType.LOAN_APPLIED,
        description=f"{client_name} applied for a new loan of {format_currency(loan.amount)}",
        timestamp=loan.created_at,
        user=client_name,
        amount=loan.amount,
    )


def repayment_activity(repayment: LoanRepayment, client_name: str) -> ActivityItem:
    # paid_date can be missing on rows marked paid by hand
    timestamp = repayment.paid_date
    if timestamp is None:
        timestamp = start_of_day_utc(repayment.due_date)

    return ActivityItem(
        id=f"repayment-{repayment.id}",
        type=ActivityType.REPAYMENT_RECEIVED,
        description=f"Repayment received for Loan #{repayment.loan_id[:8]}",
        timestamp=timestamp,
        user=client_name,
        amount=repayment.amount,
    )


def client_activity(client: Client) -> ActivityItem:
    return ActivityItem(
        id=f"client-{client.id}",
        type=ActivityType.CLIENT_REGISTERED,
        description=f"New client {client.full_name} registered",
        timestamp=client.created_at,
        user=REGISTRATION_USER,
    )


def merge_activities(
    loans: Iterable[Loan],
    repayments: Iterable[LoanRepayment],
    clients: Iterable[Client],
    client_names: Mapping[str, str],
    loan_clients: Mapping[str, str],
    limit: int,
) -> List[ActivityItem]:
    """
    Combine the three recent slices into one feed, newest first.

    Args:
        client_names: client id -> display name
        loan_clients: loan id -> client id (resolves repayment owners)
        limit: maximum number of items returned

    Ties on timestamp keep merge order: loans, then repayments, then clients.
    """
    items = [loan_activity(loan, client_names.get(loan.client_id, UNKNOWN_CLIENT)) for loan in loans]
    items += [
        repayment_activity(r, client_names.get(loan_clients.get(r.loan_id, ""), UNKNOWN_CLIENT))
        for r in repayments
    ]
    items += [client_activity(client) for client in clients]

    # sorted() is stable, including with reverse=True
    items = sorted(items, key=lambda item: item.timestamp, reverse=True)
    return items[:limit]
