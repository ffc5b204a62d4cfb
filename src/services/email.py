"""
Outbound e-mail through MS Graph: OTPs, password notices, reminders, reports.
"""

from pathlib import Path

from msgraph.generated.models.body_type import BodyType
from msgraph.generated.models.email_address import EmailAddress
from msgraph.generated.models.file_attachment import FileAttachment
from msgraph.generated.models.item_body import ItemBody
from msgraph.generated.models.message import Message
from msgraph.generated.models.recipient import Recipient
from msgraph.generated.users.item.send_mail.send_mail_post_request_body import (
    SendMailPostRequestBody,
)

from core.config import FROM_EMAIL, OTP_EXPIRE_MINUTES, PDF_MEDIA_TYPE, XLSX_MEDIA_TYPE
from core.graph_client import get_graph_client
from core.timeutils import combine, format_datetime_display


class MailError(Exception):
    """Raised when a message could not be handed to the mail relay."""


async def send_email(
    to: str,
    subject: str,
    body_text: str,
    attachment_path: Path | None = None,
) -> None:
    """Send a plain-text message, optionally with one file attached."""
    attachments = None
    if attachment_path is not None:
        content_type = PDF_MEDIA_TYPE if attachment_path.suffix == ".pdf" else XLSX_MEDIA_TYPE
        attachments = [
            FileAttachment(
                odata_type="#microsoft.graph.fileAttachment",
                name=attachment_path.name,
                content_type=content_type,
                content_bytes=attachment_path.read_bytes(),
            )
        ]

    message = Message(
        subject=subject,
        body=ItemBody(content_type=BodyType.Text, content=body_text),
        to_recipients=[Recipient(email_address=EmailAddress(address=to))],
        attachments=attachments,
    )
    request_body = SendMailPostRequestBody(message=message, save_to_sent_items=True)

    try:
        graph = get_graph_client()
        await graph.users.by_user_id(FROM_EMAIL).send_mail.post(request_body)
    except Exception as e:
        raise MailError(f"Failed to send '{subject}' to {to}: {e}") from e


def format_reminder(event: dict) -> str:
    """Reminder text for an event about to start."""
    starts = combine(event["start_date"], event["start_time"])
    return (
        f'Reminder: You have an event "{event["program"]}" '
        f"starting at {format_datetime_display(starts)}."
    )


async def send_otp_email(to: str, otp: str) -> None:
    await send_email(
        to,
        "Password Reset OTP",
        f"Your OTP code is {otp}. It will expire in {OTP_EXPIRE_MINUTES} minutes.",
    )


async def send_password_changed_email(to: str) -> None:
    await send_email(to, "Password Changed", "Your password has been changed successfully.")


async def send_reminder_email(to: str, event: dict) -> None:
    await send_email(to, "Event Reminder", format_reminder(event))


async def send_test_email(to: str) -> None:
    await send_email(
        to,
        "Test Email from Calendar App",
        "This is a test email to verify your email notification setup.",
    )


async def send_report_email(to: str, report_path: Path, title: str) -> None:
    """Send a generated report file as an attachment."""
    await send_email(to, title, f"Attached: {report_path.name}", attachment_path=report_path)
