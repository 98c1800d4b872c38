"""Invitation mails: composition and SMTP delivery."""

from __future__ import annotations

import asyncio
import html as html_lib
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from urllib.parse import urlencode

import structlog

from workspace_members.config import WorkspaceRole
from workspace_members_service.auth.jwt import create_invitation_token
from workspace_members_service.settings import Settings

logger = structlog.get_logger(__name__)

ROLE_TITLES = {
    WorkspaceRole.ADMIN.value: "an administrator",
    WorkspaceRole.LAWYER.value: "a lawyer",
}


@dataclass(frozen=True)
class OutgoingMail:
    to: str
    subject: str
    text: str
    html: str
    reply_to: str | None = None


class SmtpTransport:
    """Blocking smtplib delivery, run off the event loop."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        from_email: str = "no-reply@localhost",
        from_name: str = "Workspace Members",
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_email = from_email
        self.from_name = from_name

    def build_message(self, mail: OutgoingMail) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = mail.subject
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = mail.to
        if mail.reply_to:
            msg["Reply-To"] = mail.reply_to
        msg.attach(MIMEText(mail.text, "plain"))
        msg.attach(MIMEText(mail.html, "html"))
        return msg

    def send(self, mail: OutgoingMail) -> None:
        msg = self.build_message(mail)
        with smtplib.SMTP(self.host, self.port) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.sendmail(self.from_email, [mail.to], msg.as_string())

    async def deliver(self, mail: OutgoingMail) -> None:
        await asyncio.to_thread(self.send, mail)


class InvitationMailer:
    def __init__(self, transport: SmtpTransport | None, app_base_url: str) -> None:
        self._transport = transport
        self._app_base_url = app_base_url.rstrip("/")

    def accept_url(self, token: str) -> str:
        return f"{self._app_base_url}/invitations/accept?{urlencode({'token': token})}"

    def compose(self, user, company, role: str, inviter=None) -> OutgoingMail:
        """Build the invitation for ``user`` to join ``company`` in ``role``."""
        role_title = ROLE_TITLES.get(role, f"a {role}")
        token = create_invitation_token(user.id, company.id, role)
        link = self.accept_url(token)
        invited_by = inviter.email if inviter is not None else "A company administrator"

        subject = f"You've been invited to join {company.name} as {role_title}"
        text = (
            f"{invited_by} has invited you to join {company.name} as {role_title}.\n\n"
            f"Accept the invitation and set your password here:\n{link}\n\n"
            "If you didn't expect this invitation, you can safely ignore this email.\n"
        )
        html = (
            "<html><body>"
            f"<p><strong>{html_lib.escape(invited_by)}</strong> has invited you to join "
            f"<strong>{html_lib.escape(company.name)}</strong> as {role_title}.</p>"
            f'<p><a href="{html_lib.escape(link)}">Accept invitation</a></p>'
            "<p>If you didn't expect this invitation, you can safely ignore this email.</p>"
            "</body></html>"
        )
        return OutgoingMail(
            to=user.email,
            subject=subject,
            text=text,
            html=html,
            reply_to=company.email or None,
        )

    async def send_invitation(self, user, company, role: str, inviter=None) -> bool:
        """Send one invitation. Returns False when no transport is configured."""
        mail = self.compose(user, company, role, inviter)
        if self._transport is None:
            logger.warning("smtp_not_configured", to=mail.to, subject=mail.subject)
            return False

        await self._transport.deliver(mail)
        logger.info("invitation_mail_sent", to=mail.to, role=role, company_id=str(company.id))
        return True


def build_mailer(config: Settings) -> InvitationMailer:
    transport = None
    if config.smtp_host:
        transport = SmtpTransport(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            from_email=config.mail_from_email,
            from_name=config.mail_from_name,
        )
    return InvitationMailer(transport, config.app_base_url)
