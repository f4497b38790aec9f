"""Service for sending emails."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from ..domain.errors import DeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending one-time codes via SMTP."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "University Choir",
        code_ttl_minutes: int = 15,
    ):
        self.smtp_host = smtp_host or ""
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username or ""
        self.smtp_password = smtp_password or ""
        self.from_email = from_email or ""
        self.from_name = from_name
        self.code_ttl_minutes = code_ttl_minutes
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    def send_verification_email(self, to_email: str, code: str, name: str) -> None:
        """
        Send the email verification code.

        Args:
            to_email: Recipient email
            code: Six-digit verification code
            name: Name used in the greeting

        Raises:
            DeliveryError: If the SMTP server rejects the message
        """
        subject = "Verify your email - University Choir"
        intro = "Thanks for joining the choir. Use the code below to verify your student email:"
        self._send_code(to_email, subject, name, intro, code)

    def send_password_reset_email(self, to_email: str, code: str, name: str) -> None:
        """
        Send the password reset code.

        Args:
            to_email: Recipient email
            code: Six-digit reset code
            name: Name used in the greeting

        Raises:
            DeliveryError: If the SMTP server rejects the message
        """
        subject = "Reset your password - University Choir"
        intro = "We received a request to reset your password. Use the code below to choose a new one:"
        self._send_code(to_email, subject, name, intro, code)

    def _send_code(self, to_email: str, subject: str, name: str, intro: str, code: str) -> None:
        if not self.enabled:
            # Development mode: no SMTP server configured.
            logger.info("[EMAIL] %s for %s: code %s", subject, to_email, code)
            return

        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <div style="background-color: #1e1b4b; padding: 30px; border-radius: 10px; text-align: center;">
                    <h1 style="color: #c4b5fd; margin: 0;">University Choir</h1>
                </div>

                <div style="padding: 30px 0;">
                    <h2 style="color: #1e293b; margin-bottom: 20px;">Hello {name},</h2>

                    <p style="color: #475569; line-height: 1.6; margin-bottom: 20px;">{intro}</p>

                    <div style="text-align: center; margin: 30px 0;">
                        <span style="font-size: 32px; letter-spacing: 8px; font-weight: bold; color: #4338ca;">
                            {code}
                        </span>
                    </div>

                    <p style="color: #64748b; font-size: 14px; margin-top: 20px;">
                        This code expires in {self.code_ttl_minutes} minutes.
                    </p>

                    <p style="color: #64748b; font-size: 14px; margin-top: 20px;">
                        If you did not request this email you can ignore it.
                    </p>
                </div>
            </body>
        </html>
        """

        text_body = f"""
        University Choir

        Hello {name},

        {intro}

        {code}

        This code expires in {self.code_ttl_minutes} minutes.
        """

        self._send_email(to_email, subject, html_body, text_body)

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> None:
        """
        Send an email via SMTP.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_body: HTML body
            text_body: Plain text body

        Raises:
            DeliveryError: If the message could not be delivered
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email

        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            raise DeliveryError("Failed to send email. Please try again later.") from exc
