"""
Founder notifications.

Composes the analysis summary email and the in-app status notifications.
Delivery goes through a NotificationSender; the pipeline calls the
best-effort helpers, which log delivery failures and never raise.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from ..config.settings import NOTIFICATION_CONFIG
from ..errors import InvalidNotificationError
from ..models.schemas import DeepAnalysis, InAppNotification, Pitch, ReviewStatus, User
from .store import NotificationInbox

log = logging.getLogger(__name__)


class NotificationSender(ABC):
    """Delivery channel owned by the surrounding application"""

    @abstractmethod
    def send_email(self, to: str, subject: str, body: str) -> None:
        ...

    @abstractmethod
    def create_notification(self, notification: InAppNotification) -> None:
        ...


class LoggingNotificationSender(NotificationSender):
    """Logs emails and keeps in-app notifications in an inbox"""

    def __init__(self, inbox: Optional[NotificationInbox] = None):
        self.inbox = inbox or NotificationInbox()

    def send_email(self, to: str, subject: str, body: str) -> None:
        log.info("Email to %s: %s (%d chars)", to, subject, len(body))

    def create_notification(self, notification: InAppNotification) -> None:
        self.inbox.create(notification)
        log.info("Notification %s for user %s", notification.type, notification.user_id)


def _bullets(items) -> str:
    return "\n".join(f"• {item}" for item in items)


class Notifier:
    """Composes and sends founder-facing messages"""

    def __init__(self, sender: NotificationSender, app_url: Optional[str] = None):
        self.sender = sender
        self.app_url = (app_url or NOTIFICATION_CONFIG["app_url"]).rstrip("/")
        self.product_name = NOTIFICATION_CONFIG["product_name"]
        self.team_name = NOTIFICATION_CONFIG["team_name"]

    # =========================================================================
    # Deep analysis email
    # =========================================================================

    def compose_analysis_email(
        self,
        user: User,
        pitch: Pitch,
        analysis: DeepAnalysis,
        status: ReviewStatus,
    ) -> Tuple[str, str]:
        """Return (subject, body) of the analysis summary"""
        score = round(analysis.overall_score)
        lines = [
            f"Hi {user.full_name or user.email},",
            "",
            f'Your pitch for "{pitch.startup_name}" has been analyzed!',
            "",
        ]

        if status == ReviewStatus.APPROVED:
            lines.append(
                f"Great news! Your pitch scored {score}/100 and is now live on {self.product_name}!"
            )
        elif status == ReviewStatus.NEEDS_REVISION:
            lines.append(
                f"Your pitch scored {score}/100. We have some suggestions to help you improve:"
            )
        else:
            lines.append(f"Your pitch needs some work before it can go live. Score: {score}/100")
        lines.append("")

        sections = [
            ("Strengths", analysis.strengths),
            ("Areas to Improve", analysis.improvements),
            ("Pitch Description Suggestions", analysis.pitch_description_improvements),
            ("Demo Feedback", analysis.demo_feedback),
        ]
        for title, items in sections:
            if items:
                lines.extend([f"{title}:", _bullets(items), ""])

        if analysis.message_to_founder:
            lines.extend([analysis.message_to_founder, ""])

        if status != ReviewStatus.APPROVED:
            lines.extend([
                "Not satisfied with the AI review? You can request a manual review "
                "from our team in your profile.",
                "",
            ])

        lines.extend([
            f"View your pitch: {self.app_url}/Profile",
            "",
            "Best,",
            self.team_name,
        ])

        subject = f"Your {self.product_name} pitch: {pitch.startup_name}"
        return subject, "\n".join(lines)

    def send_analysis_summary(
        self,
        user: User,
        pitch: Pitch,
        analysis: DeepAnalysis,
        status: ReviewStatus,
    ) -> bool:
        """Best-effort delivery of the analysis email"""
        try:
            subject, body = self.compose_analysis_email(user, pitch, analysis, status)
            self.sender.send_email(to=user.email, subject=subject, body=body)
            return True
        except Exception as e:
            log.warning("Failed to send analysis email for pitch %s: %s", pitch.id, e)
            return False

    # =========================================================================
    # In-app status notification
    # =========================================================================

    def compose_status_notification(
        self,
        pitch: Pitch,
        status: ReviewStatus,
        feedback: Optional[str] = None,
    ) -> InAppNotification:
        """
        Build the in-app notification for a status change.

        Raises:
            InvalidNotificationError: status has no notification (pending)
            ValueError: the pitch has no founder to notify
        """
        if not pitch.founder_id:
            raise ValueError(f"Pitch {pitch.id} has no founder")

        suffix = f" {feedback}" if feedback else ""
        name = pitch.startup_name
        if status == ReviewStatus.APPROVED:
            notif_type = "pitch_approved"
            message = f'Your pitch "{name}" has been approved and is now live!'
        elif status == ReviewStatus.REJECTED:
            notif_type = "pitch_rejected"
            message = f'Your pitch "{name}" was not approved.{suffix}'
        elif status == ReviewStatus.NEEDS_REVISION:
            notif_type = "pitch_needs_revision"
            message = f'Your pitch "{name}" needs some updates.{suffix}'
        else:
            raise InvalidNotificationError(f"No notification for status {status.value}")

        return InAppNotification(
            user_id=pitch.founder_id,
            type=notif_type,
            pitch_id=pitch.id,
            message=message,
            action_url=f"/Explore?pitch={pitch.id}",
        )

    def notify_status(
        self,
        pitch: Pitch,
        status: ReviewStatus,
        feedback: Optional[str] = None,
    ) -> bool:
        """Best-effort in-app notification after a review"""
        if status == ReviewStatus.PENDING or not pitch.founder_id:
            return False
        try:
            notification = self.compose_status_notification(pitch, status, feedback)
            self.sender.create_notification(notification)
            return True
        except Exception as e:
            log.warning("Failed to notify founder of pitch %s: %s", pitch.id, e)
            return False
