"""
Email Service - SMTP delivery and client email templates
Low-level SMTP calls are synchronous and run in the default executor
"""
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Dict, Optional, Tuple
from app.config import settings
import asyncio
import logging
import smtplib

logger = logging.getLogger(__name__)


# template -> (subject, body); bodies are str.format templates over the data dict
EMAIL_TEMPLATES: Dict[str, Tuple[str, str]] = {
    "showing-confirmation": (
        "Property Showing Confirmation",
        "Hello {client_name},\n\n"
        "Your showing of {property_address} is confirmed for {showing_date}, {showing_time}.\n\n"
        "Your agent {agent_name} ({agent_email}) will meet you there.",
    ),
    "showing-cancelled": (
        "Property Showing Cancelled",
        "Hello {client_name},\n\n"
        "Your showing of {property_address} on {showing_date}, {showing_time} has been cancelled.\n\n"
        "Please contact {agent_name} ({agent_email}) to reschedule.",
    ),
    "showing-rescheduled": (
        "Property Showing Rescheduled",
        "Hello {client_name},\n\n"
        "Your showing of {property_address} has been moved from {previous_date}, {previous_time} "
        "to {showing_date}, {showing_time}.\n\n"
        "Questions? Contact {agent_name} ({agent_email}).",
    ),
    "offer-confirmation": (
        "Offer Submission Confirmation",
        "Hello {client_name},\n\n"
        "We received your offer of {offer_amount} for {property_address} on {offer_date}. "
        "The offer expires {expiration_date}.\n\n"
        "Your agent {agent_name} ({agent_email}) will keep you updated.",
    ),
    "offer-accepted": (
        "Your Offer Has Been Accepted",
        "Hello {client_name},\n\n"
        "Congratulations! Your offer of {offer_amount} for {property_address} has been accepted.\n\n"
        "{agent_name} ({agent_email}) will contact you about next steps.",
    ),
    "offer-rejected": (
        "Your Offer Status Update",
        "Hello {client_name},\n\n"
        "Your offer of {offer_amount} for {property_address} was not accepted.\n{notes}\n\n"
        "Contact {agent_name} ({agent_email}) to discuss your options.",
    ),
    "offer-countered": (
        "Counter Offer Received",
        "Hello {client_name},\n\n"
        "The seller of {property_address} has countered with {offer_amount}.\n{notes}\n\n"
        "Contact {agent_name} ({agent_email}) to respond.",
    ),
    "offer-withdrawn": (
        "Offer Withdrawn Confirmation",
        "Hello {client_name},\n\n"
        "Your offer of {offer_amount} for {property_address} has been withdrawn.",
    ),
    "offer-deleted": (
        "Offer Deleted",
        "Hello {client_name},\n\n"
        "Your offer of {offer_amount} made on {offer_date} for {property_address} has been removed.\n\n"
        "Contact {agent_name} ({agent_email}) with any questions.",
    ),
    "transaction-created": (
        "Property Sale Transaction Initiated",
        "Hello {client_name},\n\n"
        "The sale of {property_address} for {sale_price} is under way. "
        "Closing is scheduled for {closing_date}.\n\n"
        "Your agent {agent_name} ({agent_email}) will guide you through closing.",
    ),
    "closing-date-updated": (
        "Closing Date Update",
        "Hello {client_name},\n\n"
        "The closing date for {property_address} moved from {previous_closing_date} to {new_closing_date}.\n\n"
        "Questions? Contact {agent_name} ({agent_email}).",
    ),
    "transaction-cancelled": (
        "Property Transaction Cancelled",
        "Hello {client_name},\n\n"
        "The transaction for {property_address} at {sale_price}, closing {closing_date}, has been cancelled.\n\n"
        "Contact {agent_name} ({agent_email}) for details.",
    ),
}


class _SafeDict(dict):
    def __missing__(self, key):
        return ""


def render_template(template: str, data: Dict) -> Tuple[str, str]:
    """Render (subject, text) for a named template"""
    if template not in EMAIL_TEMPLATES:
        raise ValueError(f"Unknown email template '{template}'")
    subject, body = EMAIL_TEMPLATES[template]
    text = body.format_map(_SafeDict(data))
    text += f"\n\nBest regards,\nThe {settings.EMAIL_FROM_NAME} Team"
    return subject, text


def send_email_sync(to: str, subject: str, text: str, html: Optional[str] = None) -> bool:
    """
    Send an email over SMTP (synchronous)
    Returns False when SMTP is not configured; raises on delivery failure
    """
    if not settings.email_enabled:
        logger.info(f"📧 Email not sent (SMTP not configured): to={to}, subject={subject}")
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM}>"
    msg["To"] = to
    msg.attach(MIMEText(text, "plain"))
    if html:
        msg.attach(MIMEText(html, "html"))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USERNAME:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD or "")
            smtp.send_message(msg)
        logger.info(f"✅ Email sent: to={to}, subject={subject}")
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"❌ Error sending email to {to} ({subject}): {str(e)}")
        raise


async def send_email(to: str, subject: str, text: str, html: Optional[str] = None) -> bool:
    """Async wrapper for sending an email"""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, send_email_sync, to, subject, text, html)


async def send_template_email(to: str, template: str, data: Dict) -> bool:
    """Render a named client template and send it"""
    subject, text = render_template(template, data)
    return await send_email(to, subject, text)


async def send_notification_email(
    email: str,
    first_name: str,
    title: str,
    message: str,
    action_url: Optional[str] = None,
) -> bool:
    """Email copy of an in-app notification"""
    text = f"Hello {first_name},\n\n{message}\n"
    if action_url:
        text += f"\nView details: {settings.CLIENT_URL.rstrip('/')}{action_url}\n"
    text += f"\nBest regards,\nThe {settings.EMAIL_FROM_NAME} Team"
    return await send_email(email, title, text)
