import logging
import os
import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, NamedTuple, Optional

from dotenv import load_dotenv

from email_report import ComposedEmail

log = logging.getLogger(__name__)


# ---------- Errors ----------
class MailError(Exception):
    """Base for mail failures; message is what the client gets to see."""
    status_code = 500
    public_message = "Failed to send email"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.public_message)
        self.detail = detail


class MailNotConfigured(MailError):
    status_code = 500
    public_message = "Email service is not configured"


class MailVerificationFailed(MailError):
    status_code = 503
    public_message = "Email service is unavailable, please try again later"


class MailSendFailed(MailError):
    status_code = 502
    public_message = "Failed to send email"


# ---------- Settings ----------
class MailSettings(NamedTuple):
    user: str
    password: str
    host: str = "smtp.gmail.com"
    port: int = 465
    business_email: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    @classmethod
    def from_env(cls) -> "MailSettings":
        load_dotenv()
        raw_port = os.getenv("SMTP_PORT", "465")
        try:
            port = int(raw_port)
        except ValueError:
            log.warning("SMTP_PORT=%r is not a number, using 465", raw_port)
            port = 465
        return cls(
            user=os.getenv("EMAIL_USER", ""),
            # Google App Passwords are shown with spaces for readability
            password=os.getenv("EMAIL_PASS", "").replace(" ", ""),
            host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
            port=port,
            business_email=os.getenv("BUSINESS_EMAIL", ""),
        )


def build_message(composed: ComposedEmail, sender: str, to: str, bcc: Optional[str] = None) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = composed.subject
    msg["From"] = sender
    msg["To"] = to
    if bcc:
        msg["Bcc"] = bcc

    msg.set_content(composed.text)
    msg.add_alternative(composed.html, subtype="html")

    # Inline images hang off the HTML part so cid: references resolve
    html_part = msg.get_payload()[-1]
    for att in composed.attachments:
        maintype, _, subtype = att.mime_type.partition("/")
        html_part.add_related(
            att.data,
            maintype=maintype or "image",
            subtype=subtype or "jpeg",
            cid=f"<{att.content_id}>",
            filename=att.filename,
        )
    return msg


class SmtpTransport:
    """
    One SMTP session. Entering logs in and checks the server answers NOOP,
    so a broken setup is reported before anything is sent.
    """

    def __init__(self, settings: MailSettings, smtp_factory: Optional[Callable[..., smtplib.SMTP]] = None):
        self.settings = settings
        self.smtp_factory = smtp_factory
        self.server = None

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.settings.port == 587:
            server = (self.smtp_factory or smtplib.SMTP)(self.settings.host, self.settings.port, timeout=30)
            server.ehlo()
            server.starttls(context=context)
            server.ehlo()
            return server
        return (self.smtp_factory or smtplib.SMTP_SSL)(
            self.settings.host, self.settings.port, context=context, timeout=30
        )

    def __enter__(self) -> "SmtpTransport":
        if not self.settings.configured:
            raise MailNotConfigured("EMAIL_USER / EMAIL_PASS are not set")
        try:
            self.server = self._connect()
            self.server.login(self.settings.user, self.settings.password)
            code, _ = self.server.noop()
        except (smtplib.SMTPException, OSError) as e:
            self.close()
            raise MailVerificationFailed(str(e)) from e
        if code != 250:
            self.close()
            raise MailVerificationFailed(f"NOOP returned {code}")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self) -> None:
        if self.server is None:
            return
        try:
            self.server.quit()
        except (smtplib.SMTPException, OSError):
            pass  # connection already gone
        self.server = None

    def send(self, message: EmailMessage) -> None:
        try:
            self.server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailSendFailed(str(e)) from e


def send_secure_email(composed: ComposedEmail, transport: SmtpTransport, recipient: str,
                      bcc: Optional[str] = None):
    """Send one composed email over an open transport. Returns (True, "Sent") or raises MailSendFailed."""
    message = build_message(composed, transport.settings.user, recipient, bcc=bcc)
    transport.send(message)
    log.info("Sent '%s' to %s (%d inline images)", composed.subject, recipient, len(composed.attachments))
    return True, "Sent"
