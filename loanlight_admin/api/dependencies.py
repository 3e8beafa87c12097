"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.orm import sessionmaker

from loanlight_admin.config import settings
from loanlight_admin.domain.auth_session import AuthSession
from loanlight_admin.infrastructure.clients.gateway import DataGateway
from loanlight_admin.infrastructure.clients.rest_gateway import RestGateway
from loanlight_admin.infrastructure.clients.storage import StorageClient
from loanlight_admin.infrastructure.database.session import build_engine, build_session_factory
from loanlight_admin.infrastructure.database.sql_gateway import SqlGateway
from loanlight_admin.reporting.printing import BrowserSurface, CapturedSurface, PrintSurface
from loanlight_admin.services.dashboard import DashboardService
from loanlight_admin.services.messaging import EmailDispatcher, SmsDispatcher
from loanlight_admin.services.notifications import Notifier
from loanlight_admin.services.reports import ReportService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache
def _session_factory() -> sessionmaker:
    return build_session_factory(build_engine(settings.database_url))


def get_gateway() -> DataGateway:
    """Provide the configured Remote Data Gateway"""
    if settings.data_backend == "sql":
        return SqlGateway(_session_factory())
    return RestGateway()


def get_notifier() -> Notifier:
    """Fresh notification collector per request"""
    return Notifier()


def get_storage_client() -> StorageClient:
    return StorageClient()


def get_print_surface() -> PrintSurface:
    """Where printed reports are opened; the captured document is always returned in the response"""
    if settings.print_surface == "browser":
        return BrowserSurface()
    return CapturedSurface()


@lru_cache
def get_auth_session() -> AuthSession:
    """Process-wide auth session of the dashboard"""
    return AuthSession()


def get_dashboard_service(
    request: Request,
    gateway: DataGateway = Depends(get_gateway),
    notifier: Notifier = Depends(get_notifier),
) -> DashboardService:
    return DashboardService(gateway, notifier, request_id=get_request_id(request))


def get_report_service(
    request: Request,
    gateway: DataGateway = Depends(get_gateway),
    notifier: Notifier = Depends(get_notifier),
    surface: PrintSurface = Depends(get_print_surface),
) -> ReportService:
    return ReportService(gateway, notifier, surface, request_id=get_request_id(request))


def get_email_dispatcher() -> EmailDispatcher:
    return EmailDispatcher()


def get_sms_dispatcher() -> SmsDispatcher:
    return SmsDispatcher()
