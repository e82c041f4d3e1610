import logging
import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from lco import settings

from .models import Digest

logger = logging.getLogger(__name__)


class DigestSender(ABC):
    """Delivers a rendered digest."""

    @abstractmethod
    def send(self, digest: Digest) -> bool:
        """Send the digest. Returns True if it was delivered."""


class SmtpDigestSender(DigestSender):
    """Emails digests over SMTP with STARTTLS."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_email: Optional[str] = None,
        to_emails: Optional[list[str]] = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.username = username or settings.SMTP_USERNAME
        self.password = password or settings.SMTP_PASSWORD
        self.from_email = from_email or settings.FROM_EMAIL
        self.to_emails = to_emails if to_emails is not None else settings.TO_EMAILS

    def send(self, digest: Digest) -> bool:
        if not self.from_email:
            logger.info("No sender email configured. Skipping email send.")
            return False

        if not self.to_emails:
            logger.info("No recipient emails configured. Skipping email send.")
            return False

        if not self.host:
            logger.warning("No SMTP host configured. Skipping email send.")
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = digest.subject
        msg["From"] = self.from_email
        msg["To"] = ", ".join(self.to_emails)
        msg.attach(MIMEText(digest.html, "html"))

        try:
            with smtplib.SMTP(self.host, int(self.port)) as server:
                server.ehlo()
                server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(self.from_email, self.to_emails, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                f"Error sending {digest.partition} digest: {e}",
                extra={"partition": digest.partition.value, "error_type": type(e).__name__},
            )
            return False

        logger.info(
            f"Email sent for {digest.record_count} {digest.partition} amendments",
            extra={"partition": digest.partition.value, "recipients": len(self.to_emails)},
        )
        return True
