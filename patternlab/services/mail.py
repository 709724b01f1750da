"""
Outgoing mail: account verification and password reset messages.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List

from fastapi import BackgroundTasks
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import SecretStr

from patternlab.core.config import Settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
jinja_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "xml"])
)


def build_mail_config(settings: Settings) -> ConnectionConfig:
    """SMTP connection settings. ``SUPPRESS_SEND`` turns delivery off entirely."""
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=SecretStr(settings.MAIL_PASSWORD),
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_FROM_NAME=settings.MAIL_FROM_NAME,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_STARTTLS=settings.MAIL_STARTTLS,
        MAIL_SSL_TLS=settings.MAIL_SSL_TLS,
        USE_CREDENTIALS=settings.USE_CREDENTIALS,
        VALIDATE_CERTS=settings.VALIDATE_CERTS,
        SUPPRESS_SEND=settings.SUPPRESS_SEND,
    )


class MailService:
    """Renders HTML templates and hands them to FastMail after the response is sent."""

    def __init__(self, conf: ConnectionConfig):
        self._fm = FastMail(conf)

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        return jinja_env.get_template(template_name).render(**context)

    def send_message_background(
        self,
        background_tasks: BackgroundTasks,
        subject: str,
        recipients: List[str],
        template_name: str,
        context: Dict[str, Any],
    ) -> None:
        message = MessageSchema(
            subject=subject,
            recipients=recipients,
            body=self.render(template_name, context),
            subtype=MessageType.html,
        )
        background_tasks.add_task(self._fm.send_message, message)
        logger.info(f"Queued '{template_name}' mail for {len(recipients)} recipient(s)")
