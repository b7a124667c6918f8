import asyncio, ssl, smtplib
import logging
from email.message import EmailMessage
from typing import Optional

from storefront.config import Settings


class SmtpMailer:
    """
    Plain SMTP sender built from settings.
    - Port 465 → SSL; smtp_use_starttls=True (587) → STARTTLS.
    - Async: the blocking smtplib work runs in the default executor.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def configured(self) -> bool:
        s = self.settings
        return bool(s.smtp_host and s.smtp_port and s.smtp_user and s.smtp_password)

    def _message(self, to: str, subject: str, html: str, from_addr: Optional[str]) -> EmailMessage:
        msg = EmailMessage()
        msg["To"] = to
        msg["From"] = from_addr or self.settings.smtp_from or self.settings.mail_from
        msg["Subject"] = subject
        msg.set_content("View this e-mail as HTML to see its content.")
        msg.add_alternative(html, subtype="html")
        return msg

    def _send_blocking(self, msg: EmailMessage) -> None:
        s = self.settings
        context = ssl.create_default_context()
        if s.smtp_use_starttls:
            # 587 / STARTTLS
            with smtplib.SMTP(s.smtp_host, s.smtp_port) as server:
                server.ehlo()
                server.starttls(context=context)
                server.ehlo()
                server.login(s.smtp_user, s.smtp_password)
                server.send_message(msg)
        else:
            # 465 / SSL
            with smtplib.SMTP_SSL(s.smtp_host, s.smtp_port, context=context) as server:
                server.login(s.smtp_user, s.smtp_password)
                server.send_message(msg)

    async def send(self, to: str, subject: str, html: str, from_addr: Optional[str] = None) -> None:
        if not self.configured:
            raise RuntimeError("SMTP config missing: check host/port/user/password")
        msg = self._message(to, subject, html, from_addr)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._send_blocking, msg)


async def send_quietly(mailer, to: str, subject: str, html: str) -> None:
    """Background-task wrapper: a failed e-mail is logged, never raised into the request."""
    try:
        await mailer.send(to, subject, html)
    except Exception:
        logging.exception("E-mail to %s (%s) could not be sent", to, subject)
