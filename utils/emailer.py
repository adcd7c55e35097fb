import logging
import smtplib
from email.message import EmailMessage

from flask import current_app

logger = logging.getLogger(__name__)


class Mailer:
    """
    SMTP transport built once by the app factory and kept in
    ``app.extensions["mailer"]``. Each send opens its own connection.
    """

    def __init__(self, host=None, port=587, username=None, password=None,
                 from_email=None, use_tls=True, timeout=10, enabled=True):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.use_tls = use_tls
        self.timeout = timeout
        self.enabled = enabled

    @classmethod
    def from_config(cls, config):
        return cls(
            host=config.get("SMTP_HOST"),
            port=config.get("SMTP_PORT", 587),
            username=config.get("SMTP_USERNAME"),
            password=config.get("SMTP_PASSWORD"),
            from_email=config.get("SMTP_FROM_EMAIL"),
            use_tls=config.get("SMTP_USE_TLS", True),
            timeout=config.get("SMTP_TIMEOUT_SECONDS", 10),
            enabled=config.get("MAIL_ENABLED", True),
        )

    @property
    def configured(self) -> bool:
        return bool(self.enabled and self.host and self.from_email)

    def send(self, to_email: str, subject: str, body: str):
        if not self.configured:
            return False, "Email not configured"
        if not to_email:
            return False, "No recipient"

        msg = EmailMessage()
        msg["From"] = self.from_email
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
            logger.info("Email sent to %s: %s", to_email, subject)
            return True, None
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Email to %s failed: %s", to_email, exc)
            return False, str(exc)


def init_mailer(app, mailer=None):
    app.extensions["mailer"] = mailer or Mailer.from_config(app.config)
    return app.extensions["mailer"]


def get_mailer() -> Mailer:
    return current_app.extensions["mailer"]
