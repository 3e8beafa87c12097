"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Callable, List, Optional


class ClientStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BLACKLISTED = "BLACKLISTED"
    PENDING = "PENDING"


class LoanStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DISBURSED = "DISBURSED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    DEFAULTED = "DEFAULTED"
    REJECTED = "REJECTED"


class BranchStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"


class ActivityType(str, Enum):
    LOAN_APPLIED = "loan_applied"
    LOAN_APPROVED = "loan_approved"
    LOAN_DISBURSED = "loan_disbursed"
    CLIENT_REGISTERED = "client_registered"
    REPAYMENT_RECEIVED = "repayment_received"


# Loans counted as outstanding portfolio
OUTSTANDING_LOAN_STATUSES = (LoanStatus.ACTIVE, LoanStatus.DISBURSED)


@dataclass
class Client:
    """Microfinance client record"""

    id: str
    first_name: str
    last_name: str
    phone: str
    address: str
    national_id: str
    gender: str
    occupation: str
    income_source: str
    monthly_income: float
    branch_id: str
    status: ClientStatus
    created_at: datetime
    updated_at: datetime
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    photo: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class Loan:
    """Loan record; interest_rate is a percentage, term is in months"""

    id: str
    client_id: str
    amount: float
    interest_rate: float
    term: int
    purpose: str
    status: LoanStatus
    branch_id: str
    created_at: datetime
    updated_at: datetime
    product_id: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    disbursed_at: Optional[datetime] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass
class LoanRepayment:
    """Scheduled (and possibly paid) repayment of a loan"""

    id: str
    loan_id: str
    amount: float
    due_date: date
    is_paid: bool
    paid_date: Optional[datetime] = None
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None


@dataclass
class Branch:
    """Branch office"""

    id: str
    name: str
    location: str
    address: str
    phone: str
    manager_name: str
    manager_id: str
    status: BranchStatus
    employee_count: int = 0
    email: Optional[str] = None
    opening_date: Optional[date] = None


@dataclass
class OrganizationProfile:
    """Organization details printed on report headers"""

    name: str
    logo: Optional[str] = None


@dataclass
class ActivityItem:
    """One human-readable event in the dashboard activity feed"""

    id: str
    type: ActivityType
    description: str
    timestamp: datetime
    user: str
    amount: Optional[float] = None


@dataclass
class DailyStatPoint:
    """Disbursement and expected profit for a single calendar day"""

    date: date
    disbursement: float
    profit: float


@dataclass
class DashboardStats:
    """Dashboard snapshot"""

    active_clients: int
    active_loans: int
    pending_loans: int
    total_branches: int
    total_amount_disbursed: float
    total_expected_this_month: float
    total_received_this_month: float
    repayment_rate: float
    daily_data: List[DailyStatPoint] = field(default_factory=list)


@dataclass
class LoanStatusCount:
    """Number of loans in one status (for the status pie chart)"""

    status: LoanStatus
    count: int


@dataclass
class Column:
    """Report/export column descriptor"""

    key: str
    label: str
    formatter: Optional[Callable[[object], str]] = None


@dataclass
class LoanPortfolioSummary:
    """Headline figures of the loan portfolio report"""

    total_loans: int
    active_loans: int
    total_value: float
    active_value: float
    disbursed_this_month: float


@dataclass
class BranchPerformance:
    """One branch's line in the branch performance report"""

    branch_id: str
    name: str
    client_count: int
    active_loans: int
    total_disbursed: float
    employee_count: int


@dataclass
class RepaymentStanding:
    """A scheduled repayment classified against the report date"""

    repayment: LoanRepayment
    client_name: str
    amount_paid: float
    is_overdue: bool
    days_past_due: Optional[int] = None

    @property
    def label(self) -> str:
        if self.repayment.is_paid:
            return "Paid"
        return "Overdue" if self.is_overdue else "Pending"


@dataclass
class RepaymentStatusSummary:
    """Collection figures of the repayment status report"""

    total_repayments: int
    paid_on_time: int
    paid_late: int
    overdue: int
    total_amount: float
    collected_amount: float
    overdue_amount: float
    collection_rate: float
