"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from loanlight_admin.domain.auth_session import AuthEventType, SessionState, UserRole
from loanlight_admin.domain.models import ActivityType, BranchStatus, ClientStatus, LoanStatus
from loanlight_admin.services.notifications import Severity


class NotificationSchema(BaseModel):
    """User-visible message raised while serving the request"""

    model_config = ConfigDict(from_attributes=True)

    title: str
    description: str
    severity: Severity


class DailyStatPointSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    disbursement: float
    profit: float


class DashboardStatsResponse(BaseModel):
    """Response for GET /v1/dashboard/stats"""

    model_config = ConfigDict(from_attributes=True)

    active_clients: int
    active_loans: int
    pending_loans: int
    total_branches: int
    total_amount_disbursed: float
    total_expected_this_month: float
    total_received_this_month: float
    repayment_rate: float
    daily_data: List[DailyStatPointSchema]
    notifications: List[NotificationSchema] = []


class ActivityItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: ActivityType
    description: str
    timestamp: datetime
    user: str
    amount: Optional[float] = None


class ActivitiesResponse(BaseModel):
    """Response for GET /v1/dashboard/activities"""

    activities: List[ActivityItemSchema]
    notifications: List[NotificationSchema] = []


class LoanStatusCountSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: LoanStatus
    count: int


class LoanStatusResponse(BaseModel):
    """Response for GET /v1/dashboard/loan-status"""

    distribution: List[LoanStatusCountSchema]
    notifications: List[NotificationSchema] = []


class ColumnSchema(BaseModel):
    key: str = Field(..., min_length=1)
    label: str


class PrintReportRequest(BaseModel):
    """Request body for POST /v1/reports/print"""

    title: str = Field(..., min_length=1)
    data: Union[List[Dict[str, Any]], Dict[str, Any]]
    columns: Optional[List[ColumnSchema]] = None
    summary: Optional[Dict[str, Any]] = None
    subtitle: Optional[str] = None


class ExportReportRequest(BaseModel):
    """Request body for POST /v1/reports/export"""

    title: str = Field(..., min_length=1)
    rows: List[Dict[str, Any]]
    columns: Optional[List[ColumnSchema]] = None


class ReportDatasetResponse(BaseModel):
    """Response for GET /v1/reports/<report>?format=json"""

    title: str
    rows: List[Dict[str, Any]]
    figures: Dict[str, float]
    summary: Dict[str, str]
    notifications: List[NotificationSchema] = []


class ClientSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: str
    address: str
    national_id: str
    date_of_birth: Optional[date] = None
    gender: str
    occupation: str
    income_source: str
    monthly_income: float
    branch_id: str
    status: ClientStatus
    photo: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ClientCreateRequest(BaseModel):
    """Request body for POST /v1/clients"""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: str = Field(..., min_length=1)
    address: str = ""
    national_id: str = Field(..., min_length=1)
    date_of_birth: Optional[date] = None
    gender: str = "other"
    occupation: str = ""
    income_source: str = ""
    monthly_income: float = Field(0, ge=0)
    branch_id: str = Field(..., min_length=1)
    status: ClientStatus = ClientStatus.PENDING
    photo: Optional[str] = None


class ClientUpdateRequest(BaseModel):
    """Request body for PATCH /v1/clients/{client_id}; only supplied fields change"""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    national_id: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    occupation: Optional[str] = None
    income_source: Optional[str] = None
    monthly_income: Optional[float] = Field(None, ge=0)
    branch_id: Optional[str] = None
    status: Optional[ClientStatus] = None
    photo: Optional[str] = None


class BranchSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    location: str
    address: str
    phone: str
    email: Optional[str] = None
    manager_name: str
    manager_id: str
    status: BranchStatus
    opening_date: Optional[date] = None
    employee_count: int


class UploadResponse(BaseModel):
    """Response for POST /v1/uploads/{bucket}"""

    url: str


class EmailRequest(BaseModel):
    """Request body for POST /v1/notify/email; field presence is checked by the dispatcher"""

    model_config = ConfigDict(populate_by_name=True)

    to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    sender: Optional[str] = Field(None, alias="from")
    reply_to: Optional[str] = Field(None, alias="replyTo")


class SmsRequest(BaseModel):
    """Request body for POST /v1/notify/sms"""

    to: Optional[str] = None
    message: Optional[str] = None


class DispatchResponse(BaseModel):
    success: bool = True
    message: str
    id: str
    provider: Optional[str] = None


class AuthUserSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: UserRole
    branch: Optional[str] = None
    avatar: Optional[str] = None


class AuthEventRequest(BaseModel):
    """Request body for POST /v1/auth/events, as forwarded from the auth backend"""

    type: AuthEventType
    user: Optional[AuthUserSchema] = None
    reason: Optional[str] = None


class AuthSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    state: SessionState
    is_authenticated: bool
    is_loading: bool
    user: Optional[AuthUserSchema] = None
    reason: Optional[str] = None
