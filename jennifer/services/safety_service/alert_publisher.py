"""Crisis alert publishing for the Safety Service.

When the detector flags a message, a human reviewer is emailed the
triggering message, Jennifer's reply and recent conversation context.

Alerting is a side channel: a failed or slow send must never delay or
fail the chat response. CrisisAlertPublisher never raises, and
CrisisAlertDispatcher runs it off the request path.
"""
import logging
import smtplib
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Optional, Sequence, Tuple

from jennifer.shared.models import Turn

logger = logging.getLogger(__name__)

SMTP_TRANSPORT = "smtp"
SES_TRANSPORT = "ses"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CrisisAlert:
    """Immutable crisis alert.

    recent_turns is chronological, oldest first, for readability.
    """
    alert_id: str
    session_id_hash: str
    triggering_message: str
    assistant_reply: str
    recent_turns: Tuple[Turn, ...] = ()
    matched_rules: Tuple[str, ...] = ()
    pattern_version: str = ""
    created_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        session_id_hash: str,
        triggering_message: str,
        assistant_reply: str,
        recent_turns: Sequence[Turn] = (),
        matched_rules: Sequence[str] = (),
        pattern_version: str = "",
    ) -> "CrisisAlert":
        return cls(
            alert_id=f"alert_{uuid.uuid4().hex[:12]}",
            session_id_hash=session_id_hash,
            triggering_message=triggering_message,
            assistant_reply=assistant_reply,
            recent_turns=tuple(recent_turns),
            matched_rules=tuple(matched_rules),
            pattern_version=pattern_version,
        )

    @property
    def subject(self) -> str:
        return "\U0001F6A8 CRISIS ALERT - Virtual Therapist Session"

    def to_email_body(self) -> str:
        """Render the plain-text email body."""
        transcript = "\n\n".join(
            f"{turn.speaker}: {turn.content}" for turn in self.recent_turns
        )
        rules = ", ".join(self.matched_rules) or "n/a"
        return "\n".join([
            "CRISIS ALERT - Virtual Therapist Session",
            "",
            f"Time: {self.created_at.isoformat()}",
            f"Alert ID: {self.alert_id}",
            f"Session: {self.session_id_hash}",
            f"Matched rules: {rules}",
            "",
            "TRIGGERING MESSAGE:",
            self.triggering_message,
            "",
            "RECENT CONVERSATION CONTEXT:",
            transcript,
            "",
            "JENNIFER'S RESPONSE:",
            self.assistant_reply,
            "",
            "---",
            "This is an automated alert from the Jennifer White virtual therapist application.",
            "Please review and take appropriate action.",
        ])


class CrisisAlertPublisher:
    """Sends crisis alerts by email over SMTP or Amazon SES.

    Failure Handling:
        - publish() returns False instead of raising
        - Failures are logged at CRITICAL level with the rendered body so
          the alert can be followed up manually
    """

    def __init__(
        self,
        recipient: Optional[str],
        sender: str = "alerts@therapist.app",
        transport: str = SMTP_TRANSPORT,
        enabled: bool = True,
        smtp_host: str = "smtp.gmail.com",
        smtp_port: int = 587,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        smtp_timeout_seconds: float = 10.0,
        region: str = "us-east-1",
    ):
        """Initialize publisher.

        Args:
            recipient: Address that receives alerts; publishing is
                disabled when empty
            sender: From address
            transport: "smtp" or "ses"
            enabled: Whether publishing is enabled (disable for local dev)
            smtp_host: SMTP relay host
            smtp_port: SMTP relay port; STARTTLS is negotiated when offered
            smtp_user: SMTP login, skipped when empty
            smtp_password: SMTP password
            smtp_timeout_seconds: Socket timeout for the SMTP session
            region: AWS region for the SES client
        """
        if transport not in (SMTP_TRANSPORT, SES_TRANSPORT):
            raise ValueError(f"Unsupported alert transport: {transport}")

        self.recipient = recipient
        self.sender = sender
        self.transport = transport
        self.enabled = enabled and bool(recipient)
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.smtp_timeout_seconds = smtp_timeout_seconds
        self.region = region
        self._ses_client = None

        if enabled and not recipient:
            logger.warning(
                "CRISIS_ALERTS_DISABLED",
                extra={"reason": "no_recipient_configured"}
            )

        logger.info(
            "CRISIS_ALERT_PUBLISHER_INITIALIZED",
            extra={
                "transport": transport,
                "enabled": self.enabled,
            }
        )

    @property
    def ses_client(self):
        """Lazy initialization of the SES client."""
        if self._ses_client is None and self.enabled:
            try:
                import boto3
                self._ses_client = boto3.client("ses", region_name=self.region)
            except Exception as e:
                logger.error(
                    "SES_CLIENT_INIT_FAILED",
                    extra={"error": str(e)}
                )
        return self._ses_client

    def publish(self, alert: CrisisAlert) -> bool:
        """Send a crisis alert.

        Returns:
            True if the alert was handed to the mail service
        """
        if not self.enabled:
            logger.info(
                "CRISIS_ALERT_SKIPPED",
                extra={
                    "alert_id": alert.alert_id,
                    "reason": "alerts_disabled",
                }
            )
            return False

        body = alert.to_email_body()

        try:
            if self.transport == SES_TRANSPORT:
                sent = self._send_ses(alert.subject, body)
            else:
                sent = self._send_smtp(alert.subject, body)
        except Exception as e:
            logger.critical(
                "CRISIS_ALERT_SEND_FAILED",
                extra={
                    "alert_id": alert.alert_id,
                    "session_id_hash": alert.session_id_hash,
                    "transport": self.transport,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "MANUAL_REVIEW_REQUIRED",
                    "body": body,
                }
            )
            return False

        if sent:
            logger.critical(
                "CRISIS_ALERT_SENT",
                extra={
                    "alert_id": alert.alert_id,
                    "session_id_hash": alert.session_id_hash,
                    "transport": self.transport,
                    "matched_rules": list(alert.matched_rules),
                }
            )
        return sent

    def _send_smtp(self, subject: str, body: str) -> bool:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.sender
        message["To"] = self.recipient
        message.set_content(body)

        with smtplib.SMTP(
            self.smtp_host, self.smtp_port, timeout=self.smtp_timeout_seconds
        ) as server:
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls()
                server.ehlo()
            if self.smtp_user:
                server.login(self.smtp_user, self.smtp_password or "")
            server.send_message(message)
        return True

    def _send_ses(self, subject: str, body: str) -> bool:
        if self.ses_client is None:
            logger.critical(
                "CRISIS_ALERT_FALLBACK_LOG",
                extra={
                    "reason": "ses_client_unavailable",
                    "action": "MANUAL_PROCESSING_REQUIRED",
                    "body": body,
                }
            )
            return False

        response = self.ses_client.send_email(
            Source=self.sender,
            Destination={"ToAddresses": [self.recipient]},
            Message={
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {"Text": {"Data": body, "Charset": "UTF-8"}},
            },
        )
        logger.info(
            "SES_MESSAGE_ACCEPTED",
            extra={"message_id": response.get("MessageId")}
        )
        return True


class CrisisAlertDispatcher:
    """Runs alert publishing off the request path.

    dispatch() returns immediately; the caller never awaits delivery.
    Exceptions raised inside the task are logged here and go no further.
    """

    def __init__(self, publisher: CrisisAlertPublisher, max_workers: int = 2):
        self.publisher = publisher
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="crisis-alert",
        )

    def dispatch(self, alert: CrisisAlert) -> Future:
        """Schedule an alert for delivery and return its future."""
        logger.info(
            "CRISIS_ALERT_DISPATCHED",
            extra={
                "alert_id": alert.alert_id,
                "session_id_hash": alert.session_id_hash,
            }
        )
        return self._executor.submit(self._publish_safely, alert)

    def _publish_safely(self, alert: CrisisAlert) -> bool:
        try:
            return self.publisher.publish(alert)
        except Exception as e:
            logger.critical(
                "CRISIS_ALERT_TASK_FAILED",
                extra={
                    "alert_id": alert.alert_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "MANUAL_REVIEW_REQUIRED",
                }
            )
            return False

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
