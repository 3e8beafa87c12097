"""POST /v1/notify/* - email and SMS dispatch"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from loanlight_admin.api.dependencies import get_email_dispatcher, get_request_id, get_sms_dispatcher
from loanlight_admin.api.v1.schemas import DispatchResponse, EmailRequest, SmsRequest
from loanlight_admin.domain.exceptions import ConfigurationError, ValidationError
from loanlight_admin.services.messaging import DispatchReceipt, EmailDispatcher, SmsDispatcher

router = APIRouter()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def receipt_response(receipt: DispatchReceipt) -> DispatchResponse:
    return DispatchResponse(
        success=receipt.success,
        message=receipt.message,
        id=receipt.id,
        provider=receipt.provider,
    )


@router.post("/notify/email", response_model=DispatchResponse, response_model_exclude_none=True)
async def send_email(
    request_body: EmailRequest,
    request: Request,
    dispatcher: EmailDispatcher = Depends(get_email_dispatcher),
):
    """
    Validate and acknowledge an outgoing email.

    500 when SMTP is not configured, 400 when to/subject/body are missing.
    """
    try:
        receipt = dispatcher.send(
            request_body.to,
            request_body.subject,
            request_body.body,
            sender=request_body.sender,
            reply_to=request_body.reply_to,
        )
    except ConfigurationError as e:
        return error_response(500, str(e))
    except ValidationError as e:
        logging.warning(f"Rejected email: {e}", extra={"request_id": get_request_id(request)})
        return error_response(400, str(e))
    return receipt_response(receipt)


@router.post("/notify/sms", response_model=DispatchResponse, response_model_exclude_none=True)
async def send_sms(
    request_body: SmsRequest,
    request: Request,
    dispatcher: SmsDispatcher = Depends(get_sms_dispatcher),
):
    """
    Validate and acknowledge an outgoing SMS for the configured provider.

    500 when the provider or its credentials are missing, 400 when to/message are missing.
    """
    try:
        receipt = dispatcher.send(request_body.to, request_body.message)
    except ConfigurationError as e:
        return error_response(500, str(e))
    except ValidationError as e:
        logging.warning(f"Rejected SMS: {e}", extra={"request_id": get_request_id(request)})
        return error_response(400, str(e))
    return receipt_response(receipt)
