"""
Login Passcode Email Service
============================
Delivers one-time login passcodes over SMTP.

USAGE:
    service = OtpEmailService()
    ok, message = service.send_otp('someone@example.com', 'Someone', '123456', ttl_minutes=10)
"""
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
import logging
from typing import Dict, Optional, Tuple

from utils.config import config

logger = logging.getLogger(__name__)


class OtpEmailService:
    """Send login passcodes using the configured SMTP account."""

    def __init__(self, email_config: Optional[Dict] = None):
        email_config = email_config or config.get_email_config()
        self.smtp_host = email_config.get("host") or "smtp.gmail.com"
        self.smtp_port = int(email_config.get("port") or 587)
        self.sender_email = email_config.get("sender")
        self.sender_password = email_config.get("password")

    def _build_body(self, name: str, code: str, ttl_minutes: int) -> str:
        return f"""
        <html>
        <body style="font-family: Arial, sans-serif; color: #333;">
            <p>Hi {name or 'there'},</p>
            <p>Your Performance Dashboard login code is:</p>
            <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px;">{code}</p>
            <p>The code expires in {ttl_minutes} minutes. If you did not try to sign in, ignore this email.</p>
        </body>
        </html>
        """

    def send_otp(self, to_email: str, name: str, code: str, ttl_minutes: int) -> Tuple[bool, str]:
        """Send the passcode email. Returns (success, message); never raises."""
        try:
            if not self.sender_email or not self.sender_password:
                return False, "Email configuration missing"

            msg = MIMEMultipart('alternative')
            msg['Subject'] = "Your login code"
            msg['From'] = self.sender_email
            msg['To'] = to_email
            msg.attach(MIMEText(self._build_body(name, code, ttl_minutes), 'html'))

            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.sender_email, self.sender_password)
                server.sendmail(self.sender_email, [to_email], msg.as_string())

            logger.info(f"Login code sent to {to_email}")
            return True, "Email sent successfully"

        except smtplib.SMTPAuthenticationError:
            logger.error("SMTP authentication failed while sending login code")
            return False, "Email authentication failed"
        except Exception as e:
            logger.error(f"Error sending login code: {e}")
            return False, str(e)
