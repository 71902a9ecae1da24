# =============================================================================
# core/services/email_service.py - Templated Email Delivery
# =============================================================================
# Renders the HTML templates in core/templates/email/ with Jinja2 and sends
# them over SMTP with aiosmtplib. Connection options come from
# settings.smtp_options (plain SMTP or the SendGrid relay).
#
# Called from the Celery email tasks, never directly from request handlers.
# =============================================================================

import logging
from email.message import EmailMessage
from pathlib import Path
from typing import Any

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.config import settings
from core.models.email import (
    SendCertificateIssuedRequest,
    SendEmailRequest,
    SendPasswordResetRequest,
    SendRevocationNoticeRequest,
    SendVerificationRequest,
)
from lib.utils import format_long_date, utc_now

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

TEMPLATE_NAMES = (
    "certificate-issued",
    "verification-email",
    "password-reset",
    "revocation-notice",
)


class EmailTemplateError(ValueError):
    """Raised when an email references a template that doesn't exist."""


class EmailService:
    """
    Render and send transactional emails.

    Example:
        service = EmailService()
        await service.send_verification_email(SendVerificationRequest(
            to="ada@example.com",
            user_name="Ada",
            verification_link="https://stellarcert.com/verify?token=...",
        ))
    """

    def __init__(self, smtp_options: dict[str, Any] | None = None, sender: str | None = None):
        self.smtp_options = smtp_options or settings.smtp_options
        self.sender = sender or settings.EMAIL_FROM
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template: str, data: dict[str, Any] | None = None) -> str:
        """
        Render a named template to HTML.

        Raises:
            EmailTemplateError: If the template name is unknown
        """
        if template not in TEMPLATE_NAMES:
            raise EmailTemplateError(f"Template {template} not found")
        return self.env.get_template(f"{template}.html").render(**(data or {}))

    async def send_email(self, request: SendEmailRequest) -> None:
        """
        Render `request.template` and send it.

        Raises:
            EmailTemplateError: If the template name is unknown
            aiosmtplib.SMTPException: If delivery fails
        """
        html = self.render(request.template, request.data)

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = str(request.to)
        message["Subject"] = request.subject
        message.set_content("This message requires an HTML-capable email client.")
        message.add_alternative(html, subtype="html")

        try:
            response = await aiosmtplib.send(message, **self.smtp_options)
        except aiosmtplib.SMTPException as e:
            logger.error(f"Failed to send email to {request.to}: {e}")
            raise

        logger.info(f"Email sent to {request.to}: {response}")

    async def send_certificate_issued(self, request: SendCertificateIssuedRequest) -> None:
        await self.send_email(SendEmailRequest(
            to=request.to,
            subject=f"Certificate Issued: {request.certificate_name}",
            template="certificate-issued",
            data={
                "recipient_name": request.recipient_name,
                "certificate_name": request.certificate_name,
                "issuer_name": request.issuer_name,
                "certificate_id": request.certificate_id,
                "issued_date": format_long_date(utc_now()),
                "certificate_link": f"{settings.APP_URL.rstrip('/')}/certificates/{request.certificate_id}",
            },
        ))

    async def send_verification_email(self, request: SendVerificationRequest) -> None:
        await self.send_email(SendEmailRequest(
            to=request.to,
            subject="Verify Your Email Address",
            template="verification-email",
            data={
                "user_name": request.user_name,
                "verification_link": str(request.verification_link),
            },
        ))

    async def send_password_reset(self, request: SendPasswordResetRequest) -> None:
        await self.send_email(SendEmailRequest(
            to=request.to,
            subject="Reset Your Password",
            template="password-reset",
            data={
                "user_name": request.user_name,
                "reset_link": str(request.reset_link),
            },
        ))

    async def send_revocation_notice(self, request: SendRevocationNoticeRequest) -> None:
        await self.send_email(SendEmailRequest(
            to=request.to,
            subject=f"Certificate Revoked: {request.certificate_name}",
            template="revocation-notice",
            data={
                "recipient_name": request.recipient_name,
                "certificate_id": request.certificate_id,
                "certificate_name": request.certificate_name,
                "reason": request.reason,
                "revocation_date": format_long_date(request.revocation_date),
            },
        ))

    async def verify_connection(self) -> bool:
        """Connect (and log in, if configured) to the SMTP server."""
        smtp = aiosmtplib.SMTP(**self.smtp_options)
        try:
            await smtp.connect()
            await smtp.quit()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Email service connection failed: {e}")
            return False

        logger.info("Email service connection verified")
        return True
