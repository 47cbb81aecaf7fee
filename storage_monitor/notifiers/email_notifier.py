"""E-mail notification sink for storage alerts."""

import logging
import re
import smtplib
from datetime import datetime
from email.mime.text import MIMEText
from typing import List, Optional

from .base import NotificationSink

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


class EmailNotifier(NotificationSink):
    """Sends each alert as a plain text e-mail over SMTP."""

    def __init__(self, smtp_server: str = None, smtp_port: int = 587, smtp_user: Optional[str] = None,
                 smtp_pass: Optional[str] = None, from_address: str = None,
                 to_addresses: List[str] = None, use_tls: bool = True,
                 subject: str = "Storage Monitor Alert", timeout: float = 30.0):
        """Initialize e-mail notifier.

        Args:
            smtp_server: SMTP server hostname.
            smtp_port: SMTP server port.
            smtp_user: SMTP username, if the server requires login.
            smtp_pass: SMTP password.
            from_address: Sender address.
            to_addresses: Recipient addresses.
            use_tls: Whether to upgrade the connection with STARTTLS.
            subject: Subject line of alert messages.
            timeout: Socket timeout in seconds for the SMTP connection.
        """
        self.smtp_server = smtp_server
        self.smtp_port = int(smtp_port)
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.from_address = from_address
        self.to_addresses = to_addresses or []
        self.use_tls = use_tls
        self.subject = subject
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def deliver(self, message: str) -> None:
        """Send one alert.

        Raises:
            smtplib.SMTPException, OSError: If the message could not be sent.
        """
        self.send(self.subject, message)

    def send(self, subject: str, body: str) -> None:
        """Send a plain text message to every recipient.

        Args:
            subject: Subject line.
            body: Message text.
        """
        if not self.to_addresses:
            raise ValueError("No recipient addresses configured")

        msg = MIMEText(body, 'plain', 'utf-8')
        msg['Subject'] = subject
        msg['From'] = self.from_address
        msg['To'] = ', '.join(self.to_addresses)

        self.logger.debug(f"Connecting to SMTP server {self.smtp_server}:{self.smtp_port}")

        with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()

            if self.smtp_user and self.smtp_pass:
                server.login(self.smtp_user, self.smtp_pass)
                self.logger.debug(f"Authenticated as {self.smtp_user}")

            server.send_message(msg)

        self.logger.info(f"Alert e-mail sent to {len(self.to_addresses)} recipients")

    def send_test_message(self) -> None:
        """Send a test e-mail describing the current configuration."""
        body = (
            "This is a test message from Storage Monitor.\n\n"
            f"SMTP server: {self.smtp_server}:{self.smtp_port}\n"
            f"From: {self.from_address}\n"
            f"Recipients: {', '.join(self.to_addresses)}\n"
            f"TLS enabled: {self.use_tls}\n\n"
            f"Generated at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
        )
        self.send(f"{self.subject} (test)", body)

    def validate_configuration(self) -> List[str]:
        """Validate e-mail configuration.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []

        if not self.smtp_server:
            errors.append("SMTP server not configured")

        if not self.from_address:
            errors.append("From address not configured")
        elif not EMAIL_PATTERN.match(self.from_address):
            errors.append(f"Invalid from address: {self.from_address}")

        if not self.to_addresses:
            errors.append("No recipient addresses configured")

        for addr in self.to_addresses:
            if not EMAIL_PATTERN.match(addr):
                errors.append(f"Invalid recipient address: {addr}")

        return errors
