"""Outbound OTP delivery.

Only "a message was dispatched" matters to the callers, so a notifier exposes a
single ``send_otp`` that either returns or raises ``DependencyError``.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from qr_attendance import config
from qr_attendance.exceptions import DependencyError

logger = logging.getLogger(__name__)


def render_otp_email(otp: str, user_type: str, ttl_minutes: int) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2>Smart Attendance System - OTP Verification</h2>
      <p>Hello {user_type.title()},</p>
      <p>Your one-time passcode is:</p>
      <h1 style="letter-spacing: 5px;">{otp}</h1>
      <p>This OTP is valid for {ttl_minutes} minutes only.</p>
      <p>If you didn't request this, please ignore this email.</p>
    </div>
    """


class EmailNotifier:
    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        *,
        timeout: int = 10,
        ttl_minutes: int = 10,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout
        self.ttl_minutes = ttl_minutes

    def send_otp(self, email: str, otp: str, user_type: str) -> None:
        if not self.username or not self.password:
            raise DependencyError("Email service is not configured")

        message = MIMEMultipart("alternative")
        message["Subject"] = "Smart Attendance System - OTP Verification"
        message["From"] = self.username
        message["To"] = email
        message.attach(MIMEText(render_otp_email(otp, user_type, self.ttl_minutes), "html"))

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.username, self.password)
                server.sendmail(self.username, [email], message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send OTP email to {email}: {e}")
            raise DependencyError("Failed to send OTP email. Please try again later.")

        logger.info(f"OTP email sent to {email}")


class LogNotifier:
    """Development delivery: writes the code to the application log."""

    def send_otp(self, email: str, otp: str, user_type: str) -> None:
        logger.warning(f"[dev] OTP for {user_type} {email}: {otp}")


def get_notifier():
    if config.OTP_DELIVERY == "log":
        return LogNotifier()
    return EmailNotifier(
        config.SMTP_HOST,
        config.SMTP_PORT,
        config.EMAIL_USER,
        config.EMAIL_PASSWORD,
        timeout=config.SMTP_TIMEOUT_SECONDS,
        ttl_minutes=config.OTP_TTL_MINUTES,
    )
