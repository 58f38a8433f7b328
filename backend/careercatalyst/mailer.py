import smtplib
import ssl
from email.message import EmailMessage
from email.utils import make_msgid
from pathlib import Path
from typing import Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape, TemplateNotFound

from .exceptions import DeliveryFailedError, ConfigError
from .interview_window import BUFFER_MS
from .logging_config import get_logger

logger = get_logger(__name__, component="mailer")

TEMPLATE_DIR = Path(__file__).parent / "templates"

CONFIRMATION_SUBJECT = "CareerCatalyst Interview Scheduled"
PREPARATION_TIPS = [
    "Test your camera and microphone before the interview",
    "Review the job description and your resume",
    "Prepare questions to ask the interviewer",
    "Find a quiet, well-lit space for the interview",
]


class TemplateEngine:
    """Renders the email templates with Jinja2."""

    def __init__(self, template_dir: Path = TEMPLATE_DIR):
        self.template_dir = Path(template_dir)

        if not self.template_dir.exists():
            raise ConfigError(f"Template directory not found: {template_dir}")

        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            keep_trailing_newline=True,
        )

    def render(self, template_name: str, **context) -> str:
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            raise ConfigError(f"Template not found: {template_name}")
        return template.render(**context)

    def render_confirmation(
        self, *, username: str, interview_date: str, interview_time: str, interview_link: str
    ) -> Tuple[str, str]:
        """Returns (html, text) bodies of the interview confirmation."""
        context = {
            "username": username,
            "interview_date": interview_date,
            "interview_time": interview_time,
            "interview_link": interview_link,
            "buffer_minutes": BUFFER_MS // 60_000,
            "tips": PREPARATION_TIPS,
        }
        html = self.render("interview_confirmation.html", **context)
        text = self.render("interview_confirmation.txt", **context)
        return html, text


class EmailSender:
    """SMTP email sender. One connection per message, no retries."""

    def __init__(self, host: str, port: int, user: str, password: str,
                 sender: Optional[str] = None, timeout: float = 30.0):
        """
        Args:
            host: SMTP server hostname
            port: SMTP server port (465 = implicit TLS, anything else = STARTTLS)
            user: SMTP username
            password: SMTP password/app password
            sender: From address, defaults to the SMTP user
        """
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender_addr = sender or user
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.port == 465:
            smtp = smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout)
        else:
            smtp = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.port != 465:
                smtp.starttls(context=context)
            smtp.login(self.user, self.password)
        except Exception:
            # the socket is already open, don't leak it when the handshake fails
            smtp.close()
            raise
        return smtp

    def send(self, *, to: str, subject: str, html_body: str,
             text_body: Optional[str] = None) -> str:
        """
        Send one email and return its Message-ID.

        Raises:
            DeliveryFailedError: with the transport's own error text
        """
        msg = EmailMessage()
        msg["From"] = self.sender_addr
        msg["To"] = to
        msg["Subject"] = subject
        domain = self.sender_addr.rpartition("@")[2] or None
        msg["Message-ID"] = make_msgid(domain=domain)

        msg.set_content(text_body or "This message requires an HTML capable email client.")
        msg.add_alternative(html_body, subtype="html")

        smtp = None
        try:
            smtp = self._connect()
            smtp.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            raise DeliveryFailedError(f"SMTP authentication failed: {e}")
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryFailedError(str(e) or e.__class__.__name__)
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError):
                    pass

        return msg["Message-ID"]

    def test_connection(self) -> bool:
        """Check that we can connect and log in."""
        try:
            smtp = self._connect()
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email configuration error: %s", e)
            return False
        try:
            smtp.quit()
        except (smtplib.SMTPException, OSError):
            pass
        return True


class ConfirmationMailer:
    """Glues the templates and the SMTP sender for interview confirmations."""

    def __init__(self, sender: Optional[EmailSender], templates: Optional[TemplateEngine] = None):
        self.sender = sender
        self.templates = templates or TemplateEngine()

    def send_confirmation(self, *, to: str, username: str, interview_date: str,
                          interview_time: str, interview_link: str) -> str:
        if self.sender is None:
            raise DeliveryFailedError("Email service is not configured")

        html, text = self.templates.render_confirmation(
            username=username,
            interview_date=interview_date,
            interview_time=interview_time,
            interview_link=interview_link,
        )
        return self.sender.send(to=to, subject=CONFIRMATION_SUBJECT, html_body=html, text_body=text)


def build_mailer(settings) -> ConfirmationMailer:
    if not settings.email_configured:
        return ConfirmationMailer(sender=None)
    sender = EmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.email_user,
        password=settings.email_pass,
        sender=settings.sender_address,
    )
    return ConfirmationMailer(sender=sender)
