"""
Email Notifications

Sends the admin a notification when a user logs in. Delivery is
best-effort: a disabled relay or an SMTP failure is logged and reported as
False, never raised, so logins never fail because of email.
"""

import asyncio
import logging
import smtplib
import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional

from interviewiq.common.config import NotificationConfig
from interviewiq.common.error_handling import ExternalServiceError, log_error

logger = logging.getLogger(__name__)

SERVICE_NAME = "smtp"


def build_login_message(sender: str, recipient: str, user_name: str, email: str,
                        login_time: datetime.datetime, ip_address: Optional[str] = None) -> MIMEMultipart:
    """Compose the plain-text and HTML login notification."""
    when = login_time.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    ip_text = ip_address or "unknown"

    text = (
        f"User login notification\n\n"
        f"Name: {user_name}\n"
        f"Email: {email}\n"
        f"Login time: {when}\n"
        f"IP address: {ip_text}\n"
    )
    html = (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        "<h2>User Login Notification</h2>"
        f"<p><strong>Name:</strong> {escape(user_name)}</p>"
        f"<p><strong>Email:</strong> {escape(email)}</p>"
        f"<p><strong>Login Time:</strong> {escape(when)}</p>"
        f"<p><strong>IP Address:</strong> {escape(ip_text)}</p>"
        "<p style=\"color: #666; font-size: 14px;\">This user has successfully logged into your platform.</p>"
        "</div>"
    )

    msg = MIMEMultipart("alternative")
    msg["Subject"] = f"User Login: {user_name}"
    msg["From"] = sender
    msg["To"] = recipient
    msg.attach(MIMEText(text, "plain"))
    msg.attach(MIMEText(html, "html"))
    return msg


class EmailNotifier:
    """
    SMTP relay for admin notifications.

    Args:
        config: Notifications section of the application config
    """

    def __init__(self, config: NotificationConfig):
        self.config = config

    @property
    def configured(self) -> bool:
        return bool(
            self.config.enabled
            and self.config.username
            and self.config.password
            and (self.config.admin_email or self.config.username)
        )

    def _deliver(self, msg: MIMEMultipart, recipient: str) -> None:
        sender = self.config.sender or self.config.username
        try:
            if self.config.use_ssl:
                server = smtplib.SMTP_SSL(self.config.smtp_host, self.config.smtp_port, timeout=self.config.timeout)
            else:
                server = smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=self.config.timeout)
            with server:
                if not self.config.use_ssl:
                    server.starttls()
                server.login(self.config.username, self.config.password)
                server.sendmail(sender, [recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise ExternalServiceError(SERVICE_NAME, f"Could not send email to {recipient}: {e}", cause=e)

    async def send_login_notification(
        self,
        user_name: str,
        email: str,
        login_time: datetime.datetime,
        ip_address: Optional[str] = None
    ) -> bool:
        """
        Notify the admin about a login.

        Returns:
            True if the mail was handed to the SMTP server
        """
        if not self.configured:
            logger.info(f"Email notifications disabled, skipping login notification for {email}")
            return False

        recipient = self.config.admin_email or self.config.username
        sender = self.config.sender or self.config.username
        msg = build_login_message(sender, recipient, user_name, email, login_time, ip_address)

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._deliver, msg, recipient)
        except ExternalServiceError as e:
            log_error(e, level=logging.WARNING, include_stack_trace=False, context={"email": email})
            return False

        logger.info(f"Login notification sent for {email}")
        return True
