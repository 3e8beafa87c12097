"""Email and SMS dispatch stubs: validate configuration and input, log, acknowledge"""

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from loanlight_admin.config import Settings, settings
from loanlight_admin.domain.exceptions import ConfigurationError, ValidationError
from loanlight_admin.infrastructure.observability.metrics import message_counter


@dataclass
class DispatchReceipt:
    message: str
    id: str
    provider: Optional[str] = None
    success: bool = True


def _missing(fields: Dict[str, Optional[str]]) -> list[str]:
    return [name for name, value in fields.items() if not value]


class EmailDispatcher:
    """Accepts outgoing email when SMTP is configured; nothing is transmitted"""

    def __init__(self, config: Settings = settings):
        self.config = config

    def send(
        self,
        to: Optional[str],
        subject: Optional[str],
        body: Optional[str],
        sender: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> DispatchReceipt:
        config = self.config
        if not (config.smtp_host and config.smtp_port and config.smtp_username and config.smtp_password):
            logging.error("SMTP settings are not configured")
            message_counter.labels(channel="email", outcome="rejected").inc()
            raise ConfigurationError("SMTP settings are not configured")

        if _missing({"to": to, "subject": subject, "body": body}):
            message_counter.labels(channel="email", outcome="rejected").inc()
            raise ValidationError(["to", "subject", "body"])

        sender = sender or config.default_from_email
        logging.info(
            "Email accepted",
            extra={
                "to": to,
                "from": sender,
                "reply_to": reply_to or sender,
                "subject": subject,
                "smtp_host": config.smtp_host,
                "smtp_port": config.smtp_port,
                "smtp_secure": config.smtp_port == "465",
            },
        )
        message_counter.labels(channel="email", outcome="accepted").inc()
        return DispatchReceipt(message="Email sent successfully", id=str(uuid.uuid4()))


class SmsDispatcher:
    """Accepts outgoing SMS for the configured provider; nothing is transmitted"""

    def __init__(self, config: Settings = settings):
        self.config = config

    def _check_credentials(self, provider: str) -> None:
        config = self.config
        if provider == "TWILIO":
            required = {"sid": config.sms_account_sid, "token": config.sms_auth_token, "from": config.sms_from_number}
            label = "Twilio"
        elif provider == "AFRICAS_TALKING":
            required = {"key": config.sms_api_key, "from": config.sms_from_number, "username": config.sms_username}
            label = "Africa's Talking"
        elif provider in ("NEXMO", "VONAGE"):
            required = {"key": config.sms_api_key, "secret": config.sms_api_secret, "from": config.sms_from_number}
            label = "Vonage/Nexmo"
        else:
            return

        if _missing(required):
            raise ConfigurationError(f"{label} credentials not configured")

    def send(self, to: Optional[str], message: Optional[str]) -> DispatchReceipt:
        if not self.config.sms_provider:
            logging.error("SMS provider not configured")
            message_counter.labels(channel="sms", outcome="rejected").inc()
            raise ConfigurationError("SMS provider not configured")

        if _missing({"to": to, "message": message}):
            message_counter.labels(channel="sms", outcome="rejected").inc()
            raise ValidationError(["to", "message"])

        provider = self.config.sms_provider.upper()
        try:
            self._check_credentials(provider)
        except ConfigurationError:
            message_counter.labels(channel="sms", outcome="rejected").inc()
            raise

        if provider == "TWILIO":
            text = "SMS sent successfully via Twilio"
        elif provider == "AFRICAS_TALKING":
            text = "Africa's Talking SMS implementation pending"
        elif provider in ("NEXMO", "VONAGE"):
            provider = "NEXMO"
            text = "Vonage/Nexmo SMS implementation pending"
        else:
            logging.info(f"SMS provider not supported: {provider}")
            text = "SMS sent successfully (simulated)"

        logging.info(
            "SMS accepted",
            extra={"to": to, "from": self.config.sms_from_number, "provider": provider, "length": len(message)},
        )
        message_counter.labels(channel="sms", outcome="accepted").inc()
        return DispatchReceipt(message=text, id=str(uuid.uuid4()), provider=provider)
