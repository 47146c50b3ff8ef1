"""Service for sending emails."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: str = "",
        smtp_port: int = 587,
        smtp_username: str = "",
        smtp_password: str = "",
        from_email: str = "",
        from_name: str = "Matchmaker",
        timeout: float = 15.0,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout
        self.enabled = bool(self.smtp_host and self.from_email)

    def send_verification_code(self, to_email: str, code: str, name: Optional[str] = None) -> bool:
        """
        Send the one-time verification code.

        Args:
            to_email: Recipient email
            code: Six digit verification code
            name: Recipient display name, used in the greeting

        Returns:
            True if the message was handed to the SMTP server, False otherwise
        """
        if not self.enabled:
            logger.info("[EMAIL disabled] Verification code for %s: %s", to_email, code)
            return False

        greeting = f"Hi {name}," if name else "Hi,"
        subject = f"Your {self.from_name} verification code"
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h1 style="color: #be185d;">{self.from_name}</h1>
                <p style="color: #475569; line-height: 1.6;">{greeting}</p>
                <p style="color: #475569; line-height: 1.6;">
                    Use the code below to verify your email address and activate your account:
                </p>
                <p style="font-size: 32px; letter-spacing: 8px; font-weight: bold; text-align: center;">
                    {code}
                </p>
                <p style="color: #64748b; font-size: 14px;">
                    If you did not create an account, you can ignore this email.
                </p>
            </body>
        </html>
        """

        text_body = f"""
        {greeting}

        Your {self.from_name} verification code is: {code}

        If you did not create an account, you can ignore this email.
        """

        return self._send_email(to_email, subject, html_body, text_body)

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
        """
        Send an email via SMTP.

        Returns:
            True if sent successfully, False otherwise
        """
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email

            msg.attach(MIMEText(text_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                if self.smtp_username:
                    server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            return True

        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            return False
