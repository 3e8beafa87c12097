"""Client and branch management endpoints"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from loanlight_admin.api.dependencies import get_gateway, get_report_service, get_request_id
from loanlight_admin.api.v1.reports import export_document
from loanlight_admin.api.v1.schemas import (
    BranchSchema,
    ClientCreateRequest,
    ClientSchema,
    ClientUpdateRequest,
)
from loanlight_admin.domain.exceptions import GatewayError, NotFoundError
from loanlight_admin.infrastructure.clients.gateway import DataGateway
from loanlight_admin.infrastructure.repositories import BranchRepository, ClientRepository
from loanlight_admin.reporting.export import (
    CLIENT_PDF_COLUMNS,
    prepare_clients_for_export,
    prepare_clients_for_pdf,
)
from loanlight_admin.services.reports import ReportService

router = APIRouter()


def backend_unavailable(e: GatewayError, request: Request) -> HTTPException:
    logging.error(f"Data backend error: {e}", extra={"request_id": get_request_id(request)})
    return HTTPException(status_code=503, detail="Data backend unavailable")


@router.get("/clients", response_model=List[ClientSchema])
async def list_clients(request: Request, gateway: DataGateway = Depends(get_gateway)):
    """All clients, newest first"""
    try:
        return await ClientRepository(gateway).list_all()
    except GatewayError as e:
        raise backend_unavailable(e, request)


@router.post("/clients", response_model=ClientSchema, status_code=201)
async def create_client(
    request_body: ClientCreateRequest,
    request: Request,
    gateway: DataGateway = Depends(get_gateway),
):
    try:
        return await ClientRepository(gateway).create(request_body.model_dump())
    except GatewayError as e:
        raise backend_unavailable(e, request)


@router.get("/clients/export")
async def export_clients(
    request: Request,
    export_format: str = Query("csv", alias="format", pattern="^(csv|pdf)$"),
    gateway: DataGateway = Depends(get_gateway),
    service: ReportService = Depends(get_report_service),
):
    """Download the client list as CSV or PDF"""
    try:
        clients = await ClientRepository(gateway).list_all()
    except GatewayError as e:
        raise backend_unavailable(e, request)

    request_id = get_request_id(request)
    if export_format == "pdf":
        return await export_document(
            service,
            request_id,
            "Clients",
            prepare_clients_for_pdf(clients),
            export_format="pdf",
            columns=CLIENT_PDF_COLUMNS,
        )
    return await export_document(service, request_id, "Clients", prepare_clients_for_export(clients))


@router.patch("/clients/{client_id}", response_model=ClientSchema)
async def update_client(
    client_id: str,
    request_body: ClientUpdateRequest,
    request: Request,
    gateway: DataGateway = Depends(get_gateway),
):
    """Update only the fields present in the request body"""
    values = request_body.model_dump(exclude_unset=True)
    if not values:
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        return await ClientRepository(gateway).update(client_id, values)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Client not found")
    except GatewayError as e:
        raise backend_unavailable(e, request)


@router.delete("/clients/{client_id}", status_code=204)
async def delete_client(client_id: str, request: Request, gateway: DataGateway = Depends(get_gateway)):
    try:
        await ClientRepository(gateway).delete(client_id)
    except GatewayError as e:
        raise backend_unavailable(e, request)
    return Response(status_code=204)


@router.get("/branches", response_model=List[BranchSchema])
async def list_branches(request: Request, gateway: DataGateway = Depends(get_gateway)):
    """All branches, by name"""
    try:
        return await BranchRepository(gateway).list_all()
    except GatewayError as e:
        raise backend_unavailable(e, request)
