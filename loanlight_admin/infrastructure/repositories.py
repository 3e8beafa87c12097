"""Data access layer: typed repositories over the Remote Data Gateway"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from loanlight_admin.domain.formatters import to_number
from loanlight_admin.domain.models import (
    Branch,
    BranchStatus,
    Client,
    ClientStatus,
    Loan,
    LoanRepayment,
    LoanStatus,
    OrganizationProfile,
)
from loanlight_admin.infrastructure.clients.gateway import DataGateway, Query, Row, table
from loanlight_admin.utils.date_utils import parse_date, parse_timestamp, utc_now


def client_from_row(row: Row) -> Client:
    """Convert a backend `clients` row into a Client"""
    return Client(
        id=str(row["id"]),
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        email=row.get("email") or None,
        phone=row.get("phone") or "",
        address=row.get("address") or "",
        national_id=row.get("national_id") or "",
        date_of_birth=parse_date(row.get("date_of_birth")),
        gender=row.get("gender") or "other",
        occupation=row.get("occupation") or "",
        income_source=row.get("income_source") or "",
        monthly_income=to_number(row.get("monthly_income")),
        branch_id=row.get("branch_id") or "",
        status=ClientStatus(row.get("status") or ClientStatus.PENDING.value),
        photo=row.get("photo") or None,
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def loan_from_row(row: Row) -> Loan:
    """Convert a backend `loans` row into a Loan"""
    return Loan(
        id=str(row["id"]),
        client_id=str(row.get("client_id") or ""),
        amount=to_number(row.get("amount")),
        interest_rate=to_number(row.get("interest_rate")),
        term=int(to_number(row.get("term"))),
        purpose=row.get("purpose") or "",
        status=LoanStatus(row.get("status") or LoanStatus.PENDING.value),
        branch_id=str(row.get("branch_id") or ""),
        product_id=row.get("product_id") or None,
        approved_by=row.get("approved_by") or None,
        approved_at=parse_timestamp(row.get("approved_at")),
        disbursed_at=parse_timestamp(row.get("disbursed_at")),
        start_date=parse_date(row.get("start_date")),
        end_date=parse_date(row.get("end_date")),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def repayment_from_row(row: Row) -> LoanRepayment:
    """Convert a backend `loan_repayments` row into a LoanRepayment"""
    return LoanRepayment(
        id=str(row["id"]),
        loan_id=str(row.get("loan_id") or ""),
        amount=to_number(row.get("amount")),
        due_date=parse_date(row.get("due_date")),
        is_paid=bool(row.get("is_paid")),
        paid_date=parse_timestamp(row.get("paid_date")),
        payment_method=row.get("payment_method") or None,
        transaction_id=row.get("transaction_id") or None,
    )


def branch_from_row(row: Row) -> Branch:
    """Convert a backend `branches` row into a Branch"""
    return Branch(
        id=str(row["id"]),
        name=row.get("name") or "",
        location=row.get("location") or "",
        address=row.get("address") or "",
        phone=row.get("phone") or "",
        email=row.get("email") or None,
        manager_name=row.get("manager_name") or "",
        manager_id=row.get("manager_id") or "",
        status=BranchStatus(row.get("status") or BranchStatus.ACTIVE.value),
        opening_date=parse_date(row.get("opening_date")),
        employee_count=int(to_number(row.get("employee_count"))),
    )


class ClientRepository:
    """Repository for clients"""

    TABLE = "clients"

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    async def count_by_status(self, status: ClientStatus) -> int:
        return await self.gateway.count(table(self.TABLE).eq("status", status))

    async def list_all(self) -> List[Client]:
        rows = await self.gateway.select(table(self.TABLE).order("created_at", descending=True))
        return [client_from_row(row) for row in rows]

    async def recent(self, limit: int) -> List[Client]:
        """Most recently registered clients"""
        query = table(self.TABLE, "id", "first_name", "last_name", "created_at")
        rows = await self.gateway.select(query.order("created_at", descending=True).limit(limit))
        return [client_from_row(row) for row in rows]

    async def names_by_id(self, client_ids: Iterable[str]) -> Dict[str, str]:
        """Display names for a set of client ids (one round trip)"""
        ids = sorted(set(client_ids))
        if not ids:
            return {}
        rows = await self.gateway.select(table(self.TABLE, "id", "first_name", "last_name").in_("id", ids))
        return {str(row["id"]): f"{row['first_name']} {row['last_name']}" for row in rows}

    async def create(self, values: Row) -> Client:
        return client_from_row(await self.gateway.insert(self.TABLE, values))

    async def update(self, client_id: str, values: Row) -> Client:
        values = {**values, "updated_at": utc_now()}
        return client_from_row(await self.gateway.update(self.TABLE, client_id, values))

    async def delete(self, client_id: str) -> None:
        await self.gateway.delete(self.TABLE, client_id)


class LoanRepository:
    """Repository for loans"""

    TABLE = "loans"

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    async def count_by_statuses(self, statuses: Sequence[LoanStatus]) -> int:
        return await self.gateway.count(table(self.TABLE).in_("status", statuses))

    async def count_by_status(self, status: LoanStatus) -> int:
        return await self.gateway.count(table(self.TABLE).eq("status", status))

    async def with_statuses(self, statuses: Sequence[LoanStatus]) -> List[Loan]:
        rows = await self.gateway.select(table(self.TABLE).in_("status", statuses))
        return [loan_from_row(row) for row in rows]

    async def disbursed_since(self, since: datetime) -> List[Loan]:
        """Loans disbursed at or after `since`, oldest first"""
        query = table(self.TABLE).gte("disbursed_at", since).order("disbursed_at")
        return [loan_from_row(row) for row in await self.gateway.select(query)]

    async def recent_applications(self, limit: int) -> List[Loan]:
        query = table(self.TABLE).order("created_at", descending=True).limit(limit)
        return [loan_from_row(row) for row in await self.gateway.select(query)]

    async def client_ids_for(self, loan_ids: Iterable[str]) -> Dict[str, str]:
        """loan id -> client id for a set of loans"""
        ids = sorted(set(loan_ids))
        if not ids:
            return {}
        rows = await self.gateway.select(table(self.TABLE, "id", "client_id").in_("id", ids))
        return {str(row["id"]): str(row["client_id"]) for row in rows}

    async def list_all(self) -> List[Loan]:
        query = table(self.TABLE).order("created_at", descending=True)
        return [loan_from_row(row) for row in await self.gateway.select(query)]


class RepaymentRepository:
    """Repository for loan repayments"""

    TABLE = "loan_repayments"

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    async def due_between(self, start: date, end: date) -> List[LoanRepayment]:
        """Repayments with due_date in [start, end]"""
        query = table(self.TABLE).gte("due_date", start).lte("due_date", end)
        return [repayment_from_row(row) for row in await self.gateway.select(query)]

    async def recent_paid(self, limit: int) -> List[LoanRepayment]:
        query = table(self.TABLE).eq("is_paid", True).order("paid_date", descending=True).limit(limit)
        return [repayment_from_row(row) for row in await self.gateway.select(query)]

    async def list_all(self) -> List[LoanRepayment]:
        """Every scheduled repayment, latest due date first"""
        query = table(self.TABLE).order("due_date", descending=True)
        return [repayment_from_row(row) for row in await self.gateway.select(query)]


class BranchRepository:
    """Repository for branches"""

    TABLE = "branches"

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    async def count(self) -> int:
        return await self.gateway.count(Query(self.TABLE))

    async def list_all(self) -> List[Branch]:
        rows = await self.gateway.select(table(self.TABLE).order("name"))
        return [branch_from_row(row) for row in rows]


class OrganizationRepository:
    """Repository for the organization profile printed on reports"""

    TABLE = "organization_settings"

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    async def get_profile(self) -> Optional[OrganizationProfile]:
        rows = await self.gateway.select(table(self.TABLE, "name", "logo").limit(1))
        if not rows:
            return None
        return OrganizationProfile(name=rows[0]["name"], logo=rows[0].get("logo") or None)
