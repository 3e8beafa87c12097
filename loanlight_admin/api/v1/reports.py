"""/v1/reports/* - standard reports, printable HTML reports and CSV/PDF downloads

Notifications raised while producing a document travel in the X-Notifications
header (a JSON list) on HTML and attachment responses, and in the body of
error responses.
"""

import json
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse, Response

from loanlight_admin.api.dependencies import get_report_service, get_request_id
from loanlight_admin.api.v1.schemas import (
    ColumnSchema,
    ExportReportRequest,
    PrintReportRequest,
    ReportDatasetResponse,
)
from loanlight_admin.domain.exceptions import (
    EmptyDatasetError,
    ExportError,
    PrintSurfaceUnavailableError,
)
from loanlight_admin.domain.models import Column
from loanlight_admin.reporting.datasets import ReportDataset, plain_columns
from loanlight_admin.services.notifications import Notifier
from loanlight_admin.services.reports import ExportResult, ReportService

router = APIRouter()

NOTIFICATIONS_HEADER = "X-Notifications"
REPORT_FORMATS = "^(json|html|csv|pdf)$"


def to_columns(columns: Optional[List[ColumnSchema]]) -> Optional[List[Column]]:
    if not columns:
        return None
    return [Column(key=column.key, label=column.label) for column in columns]


def notification_headers(notifier: Notifier) -> Dict[str, str]:
    # ensure_ascii keeps the header value latin-1 safe
    return {NOTIFICATIONS_HEADER: json.dumps(jsonable_encoder(notifier.notifications))}


def error_response(status_code: int, detail: str, notifier: Notifier) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "notifications": jsonable_encoder(notifier.notifications)},
    )


def attachment(result: ExportResult, notifier: Notifier) -> Response:
    headers = notification_headers(notifier)
    headers["Content-Disposition"] = f'attachment; filename="{result.filename}"'
    return Response(content=result.content, media_type=result.media_type, headers=headers)


async def print_document(service: ReportService, request_id: str, title: str, data, **options) -> Response:
    try:
        document = await service.print_report(title, data, **options)
    except PrintSurfaceUnavailableError as e:
        logging.warning(f"Print surface unavailable: {e}", extra={"request_id": request_id})
        return error_response(503, str(e), service.notifier)

    return HTMLResponse(content=document, headers=notification_headers(service.notifier))


async def export_document(service: ReportService, request_id: str, title: str, rows, **options) -> Response:
    try:
        result = await service.export(title, rows, **options)
    except EmptyDatasetError as e:
        logging.warning(f"Empty export: {e}", extra={"request_id": request_id})
        return error_response(422, str(e), service.notifier)
    except ExportError as e:
        logging.error(f"Export failed: {e}", extra={"request_id": request_id})
        return error_response(500, "Failed to generate report", service.notifier)

    return attachment(result, service.notifier)


async def render_dataset(
    dataset: ReportDataset, report_format: str, service: ReportService, request_id: str
) -> Response:
    """Return a standard report as JSON, a printable page or a download"""
    if report_format == "json":
        body = ReportDatasetResponse.model_validate(
            {
                "title": dataset.title,
                "rows": dataset.rows,
                "figures": dataset.figures,
                "summary": dataset.summary,
                "notifications": service.notifier.notifications,
            },
            from_attributes=True,
        )
        return JSONResponse(content=body.model_dump(mode="json"))

    if report_format == "html":
        return await print_document(
            service, request_id, dataset.title, dataset.rows, columns=dataset.columns, summary=dataset.summary
        )

    # CSV keeps raw amounts and ISO dates; PDF shows them formatted
    columns = plain_columns(dataset.columns) if report_format == "csv" else dataset.columns
    return await export_document(
        service, request_id, dataset.title, dataset.rows, export_format=report_format, columns=columns
    )


@router.get("/reports/loan-portfolio")
async def loan_portfolio(
    request: Request,
    report_format: str = Query("json", alias="format", pattern=REPORT_FORMATS),
    service: ReportService = Depends(get_report_service),
):
    """Every loan with portfolio totals"""
    dataset = await service.loan_portfolio()
    return await render_dataset(dataset, report_format, service, get_request_id(request))


@router.get("/reports/branch-performance")
async def branch_performance(
    request: Request,
    report_format: str = Query("json", alias="format", pattern=REPORT_FORMATS),
    service: ReportService = Depends(get_report_service),
):
    """Clients, active loans and loan volume per branch"""
    dataset = await service.branch_performance()
    return await render_dataset(dataset, report_format, service, get_request_id(request))


@router.get("/reports/repayment-status")
async def repayment_status(
    request: Request,
    report_format: str = Query("json", alias="format", pattern=REPORT_FORMATS),
    service: ReportService = Depends(get_report_service),
):
    """Every scheduled repayment classified as paid, pending or overdue, with collection figures"""
    dataset = await service.repayment_status()
    return await render_dataset(dataset, report_format, service, get_request_id(request))


@router.post("/reports/print", response_class=HTMLResponse)
async def print_report(
    request_body: PrintReportRequest,
    request: Request,
    service: ReportService = Depends(get_report_service),
):
    """Render a printable HTML report (the response body is the document)"""
    return await print_document(
        service,
        get_request_id(request),
        request_body.title,
        request_body.data,
        columns=to_columns(request_body.columns),
        summary=request_body.summary,
        subtitle=request_body.subtitle,
    )


@router.post("/reports/export")
async def export_report(
    request_body: ExportReportRequest,
    request: Request,
    export_format: str = Query("csv", alias="format", pattern="^(csv|pdf)$"),
    service: ReportService = Depends(get_report_service),
):
    """Download rows as a CSV or PDF attachment"""
    return await export_document(
        service,
        get_request_id(request),
        request_body.title,
        request_body.rows,
        export_format=export_format,
        columns=to_columns(request_body.columns),
    )
