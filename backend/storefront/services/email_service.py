"""
Storefront Backend: Transactional Email Service
==================================================

What:  Sends verification and password-reset emails over SMTP, degrading to a
       console banner when SMTP is not available.
Why:   Local development should work without SMTP credentials, and a flaky
       relay should not block sign-up or password recovery.
How:   Three cooperating pieces:
       1. EmailTransportResolver: decides once per process whether a live
          transport exists (optional aiosmtplib + EMAIL_USER/EMAIL_PASS)
       2. log_email_to_console(): prints the link for developers
       3. EmailService: builds the message, sends it, normalizes every
          failure into a NotificationOutcome
Who:   Called by the component that issues verification / reset tokens.

Dispatch Flow:
    resolve() ──▶ None ────────────────────────────▶ console banner (development=True)
       │
       └──────▶ SmtpTransport.send()
                   ├── ok ─────────────────────────▶ success
                   ├── ESOCKET / ETIMEDOUT / ECONNREFUSED ─▶ console banner (development=True)
                   └── anything else ──────────────▶ success=False + error detail

Known gap:
    Tokens are appended to the action URL verbatim (no URL encoding); the
    token issuer is expected to produce URL-safe tokens.

Base URL handling:
    CLIENT_URL loses any trailing slash when settings load, so a configured
    "https://shop.example.com/" still yields ".../verify-email/<token>"
    without a double slash. An empty CLIENT_URL falls back to the default.
"""

import asyncio
import importlib
import logging
import sys
import threading
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from enum import Enum
from typing import Any, Callable, Optional

from storefront.config import Settings, settings
from storefront.exceptions import EmailTransportError
from storefront.schemas.notification import NotificationOutcome

logger = logging.getLogger(__name__)

# Network-level failures that mean "relay unreachable", not "message rejected"
TRANSIENT_ERROR_CODES = frozenset({"ESOCKET", "ETIMEDOUT", "ECONNREFUSED"})

# Fixed per stage (connect, greeting, socket); not configurable per call
SMTP_TIMEOUT_MS = 10_000

IMPLICIT_TLS_PORT = 465


# ══════════════════════════════════════════════════════════════════════════
# Transport
# ══════════════════════════════════════════════════════════════════════════

def load_smtp_client() -> Optional[Any]:
    """
    Load the optional SMTP client library.

    Returns the `aiosmtplib` module, or None when it is not installed
    (install the `email` extra to enable live delivery).
    """
    try:
        return importlib.import_module("aiosmtplib")
    except ImportError:
        logger.info("aiosmtplib is not installed; emails will be logged to the console")
        return None


@dataclass(frozen=True)
class TransportConfig:
    """
    Connection settings for the SMTP relay.

    Invariant: `secure` (implicit TLS) is True iff port is 465.
    """

    host: str
    port: int
    secure: bool
    username: str
    secret: str
    validate_certs: bool = False
    connection_timeout_ms: int = SMTP_TIMEOUT_MS
    greeting_timeout_ms: int = SMTP_TIMEOUT_MS
    socket_timeout_ms: int = SMTP_TIMEOUT_MS

    @classmethod
    def from_settings(cls, config: Settings) -> Optional["TransportConfig"]:
        """Build from settings; None when EMAIL_USER or EMAIL_PASS is missing."""
        if not (config.email_user and config.email_pass):
            return None
        port = config.email_port
        return cls(
            host=config.email_host or "smtp.gmail.com",
            port=port,
            secure=port == IMPLICIT_TLS_PORT,
            username=config.email_user,
            secret=config.email_pass,
        )


class SmtpTransport:
    """
    Reusable handle to the SMTP relay.

    Owned by EmailTransportResolver; created at most once per process and
    never refreshed. Each send() opens a session with the stored settings and
    translates library errors into EmailTransportError with a categorized code.
    """

    def __init__(self, client: Any, config: TransportConfig):
        if not callable(getattr(client, "send", None)):
            raise TypeError("SMTP client does not expose an async send()")
        self._client = client
        self.config = config

    @staticmethod
    def build_message(sender: str, recipient: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(html, subtype="html")
        return message

    async def send(self, *, sender: str, to: str, subject: str, html: str) -> None:
        """
        Deliver one HTML message.

        Raises:
            EmailTransportError: code is ESOCKET / ETIMEDOUT / ECONNREFUSED for
                network-level failures, None for everything else.
        """
        message = self.build_message(sender, to, subject, html)
        try:
            await self._client.send(
                message,
                hostname=self.config.host,
                port=self.config.port,
                username=self.config.username,
                password=self.config.secret,
                use_tls=self.config.secure,
                validate_certs=self.config.validate_certs,
                # aiosmtplib applies one timeout to connect, greeting and reads
                timeout=self.config.socket_timeout_ms / 1000,
            )
        except Exception as e:
            raise EmailTransportError(
                message=str(e) or type(e).__name__,
                code=self.classify_error(e),
                context={"host": self.config.host, "port": self.config.port},
            ) from e

    def _library_errors(self, *names: str) -> tuple:
        found = (getattr(self._client, name, None) for name in names)
        return tuple(cls for cls in found if isinstance(cls, type))

    def classify_error(self, exc: BaseException) -> Optional[str]:
        """
        Map a send failure to a categorized code.

        Order matters: aiosmtplib's SMTPConnectTimeoutError is both a timeout
        and a connect error, and TimeoutError is itself an OSError.
        """
        timeouts = (TimeoutError, asyncio.TimeoutError) + self._library_errors("SMTPTimeoutError")
        if isinstance(exc, timeouts):
            return "ETIMEDOUT"
        if isinstance(exc, ConnectionRefusedError) or isinstance(
            exc.__cause__, ConnectionRefusedError
        ):
            return "ECONNREFUSED"
        sockets = (OSError,) + self._library_errors("SMTPConnectError", "SMTPServerDisconnected")
        if isinstance(exc, sockets):
            return "ESOCKET"
        return None


class EmailTransportResolver:
    """
    Process-wide, lazily initialized SMTP transport.

    The first resolve() loads the client library and checks credentials; the
    decision (a transport, or "unavailable") is memoized for the life of the
    process. Initialization runs under a lock so concurrent first calls
    perform the check exactly once.

    Args:
        config: Settings override (tests); defaults to the global settings.
        client_loader: Provider returning the SMTP client module or None.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        client_loader: Callable[[], Optional[Any]] = load_smtp_client,
    ):
        self._config = config
        self._client_loader = client_loader
        self._lock = threading.Lock()
        self._transport: Optional[SmtpTransport] = None
        self._checked = False

    @property
    def checked(self) -> bool:
        return self._checked

    def resolve(self) -> Optional[SmtpTransport]:
        """Return the cached transport, or None when email is unavailable."""
        if self._transport is not None:
            return self._transport
        if self._checked:
            return None

        with self._lock:
            if not self._checked:
                self._transport = self._initialize()
                self._checked = True
        return self._transport

    def _initialize(self) -> Optional[SmtpTransport]:
        try:
            client = self._client_loader()
        except Exception as e:
            logger.error("Failed to load SMTP client library: %s", str(e) or type(e).__name__)
            return None
        if client is None:
            return None

        config = TransportConfig.from_settings(self._config or settings)
        if config is None:
            logger.warning("EMAIL_USER or EMAIL_PASS not set in environment")
            return None

        try:
            transport = SmtpTransport(client, config)
        except (TypeError, ValueError) as e:
            logger.error("Failed to create email transporter: %s", str(e))
            return None

        logger.info(
            "Email transporter configured: %s:%d (secure=%s)",
            config.host,
            config.port,
            config.secure,
        )
        return transport

    def reset(self) -> None:
        """Forget the memoized decision (tests, process re-initialization)."""
        with self._lock:
            self._transport = None
            self._checked = False


# ══════════════════════════════════════════════════════════════════════════
# Console Fallback
# ══════════════════════════════════════════════════════════════════════════

def format_console_banner(kind: str, recipient: str, action_url: str) -> str:
    line = "=" * 50
    return "\n".join(
        [
            "",
            line,
            f" 📧 {kind}",
            line,
            f" To:      {recipient}",
            f" Link:    {action_url}",
            line,
            " ",
            " ⚠️  EMAIL CONFIGURATION INCOMPLETE",
            "    To enable real emails:",
            "    1. Ensure aiosmtplib is installed: pip install 'storefront-backend[email]'",
            "    2. Add to backend/.env:",
            "       EMAIL_USER=your-email@gmail.com",
            "       EMAIL_PASS=your-app-password",
            "    3. Restart the server",
            " " + line,
            "",
        ]
    )


def log_email_to_console(kind: str, recipient: str, action_url: str) -> None:
    """
    Print the notification banner to stdout so a developer can follow the link.

    Never raises: a closed, missing or non-UTF-8 stdout is logged and ignored.
    """
    try:
        sys.stdout.write(format_console_banner(kind, recipient, action_url) + "\n")
        sys.stdout.flush()
    except Exception as e:
        logger.warning("Could not write email banner to stdout: %s", str(e) or type(e).__name__)


# ══════════════════════════════════════════════════════════════════════════
# Dispatcher
# ══════════════════════════════════════════════════════════════════════════

class NotificationKind(str, Enum):
    VERIFICATION = "verification"
    PASSWORD_RESET = "password_reset"


@dataclass(frozen=True)
class NotificationRequest:
    kind: NotificationKind
    recipient: str
    token: str


@dataclass(frozen=True)
class _EmailTemplate:
    label: str          # console banner title
    noun: str           # used in outcome messages
    path: str           # appended to CLIENT_URL before the token
    subject: str
    heading: str
    intro: str
    button: str
    expiry: str         # presentational only; the token issuer enforces expiry
    footer: str


TEMPLATES = {
    NotificationKind.VERIFICATION: _EmailTemplate(
        label="VERIFICATION EMAIL",
        noun="verification",
        path="/verify-email/",
        subject="Verify Your Email Address",
        heading="Verify Your Email",
        intro=(
            "Thank you for registering with Seekon. "
            "Please click the link below to verify your email address:"
        ),
        button="Verify Email",
        expiry="This link will expire in 24 hours.",
        footer="If you did not create an account with Seekon, please ignore this email.",
    ),
    NotificationKind.PASSWORD_RESET: _EmailTemplate(
        label="PASSWORD RESET EMAIL",
        noun="password reset",
        path="/reset-password/",
        subject="Reset Your Password",
        heading="Password Reset Request",
        intro=(
            "We received a request to reset your password. "
            "Click the link below to set a new password:"
        ),
        button="Reset Password",
        expiry="This link will expire in 10 minutes for security reasons.",
        footer="If you did not request a password reset, please ignore this email or contact support.",
    ),
}

BUTTON_STYLE = (
    "display: inline-block; padding: 10px 20px; color: white; "
    "background-color: #007bff; text-decoration: none; border-radius: 5px;"
)


def render_html(template: _EmailTemplate, action_url: str) -> str:
    return (
        f"<h2>{template.heading}</h2>\n"
        f"<p>{template.intro}</p>\n"
        f'<a href="{action_url}" style="{BUTTON_STYLE}">{template.button}</a>\n'
        "<p>If the button above doesn't work, copy and paste this link into your browser:</p>\n"
        f"<p>{action_url}</p>\n"
        f"<p>{template.expiry}</p>\n"
        f"<p>{template.footer}</p>\n"
    )


class EmailService:
    """
    Builds and dispatches transactional emails.

    No exception crosses this boundary: missing configuration, a missing
    library, relay outages and rejections all come back as a
    NotificationOutcome.
    """

    def __init__(
        self,
        resolver: Optional[EmailTransportResolver] = None,
        config: Optional[Settings] = None,
    ):
        self._resolver = resolver
        self._config = config

    @property
    def resolver(self) -> EmailTransportResolver:
        return self._resolver or email_transport_resolver

    @property
    def config(self) -> Settings:
        return self._config or settings

    def build_action_url(self, kind: NotificationKind, token: str) -> str:
        return f"{self.config.client_url}{TEMPLATES[kind].path}{token}"

    def mode(self) -> str:
        """'smtp' when a live transport is available, otherwise 'console'."""
        return "smtp" if self.resolver.resolve() is not None else "console"

    async def send_verification_email(self, recipient: str, token: str) -> NotificationOutcome:
        return await self.dispatch(
            NotificationRequest(NotificationKind.VERIFICATION, recipient, token)
        )

    async def send_password_reset_email(self, recipient: str, token: str) -> NotificationOutcome:
        return await self.dispatch(
            NotificationRequest(NotificationKind.PASSWORD_RESET, recipient, token)
        )

    async def dispatch(self, request: NotificationRequest) -> NotificationOutcome:
        template = TEMPLATES[request.kind]
        action_url = self.build_action_url(request.kind, request.token)

        transport = self.resolver.resolve()
        if transport is None:
            log_email_to_console(template.label, request.recipient, action_url)
            return NotificationOutcome(
                success=True,
                message="Email logged to console (check server logs)",
                development=True,
                action_url=action_url,
            )

        sender = formataddr((self.config.email_from_name, transport.config.username))
        try:
            await transport.send(
                sender=sender,
                to=request.recipient,
                subject=template.subject,
                html=render_html(template, action_url),
            )
        except Exception as e:
            detail = getattr(e, "message", None) or str(e)
            code = getattr(e, "code", None)
            logger.error("Error sending %s email: %s", template.noun, detail)

            if code in TRANSIENT_ERROR_CODES:
                logger.warning("Email server connection failed (%s). Falling back to console logging...", code)
                log_email_to_console(template.label, request.recipient, action_url)
                return NotificationOutcome(
                    success=True,
                    message="Email logged to console (SMTP connection failed - check your network/firewall)",
                    development=True,
                    action_url=action_url,
                )
            return NotificationOutcome(
                success=False,
                message=f"Failed to send {template.noun} email",
                error=detail,
            )

        logger.info("%s email sent to %s", template.noun.capitalize(), request.recipient)
        return NotificationOutcome(
            success=True,
            message=f"{template.noun.capitalize()} email sent successfully",
        )


# ── Singleton Instances ───────────────────────────────────────────────────
email_transport_resolver = EmailTransportResolver()
email_service = EmailService()


async def send_verification_email(recipient: str, token: str) -> NotificationOutcome:
    """Send (or console-log) the account verification link for `token`."""
    return await email_service.send_verification_email(recipient, token)


async def send_password_reset_email(recipient: str, token: str) -> NotificationOutcome:
    """Send (or console-log) the password reset link for `token`."""
    return await email_service.send_password_reset_email(recipient, token)
