# backend/tutorhub/services/notification_service.py
"""
Fire-and-forget notifications for booking and payment events.

Delivery is delegated to a provider with a ``send_template`` method. The
console provider only logs; a real mail provider can be passed in. A
failed send is logged and reported as ``False`` and never propagates to
the request that triggered it.
"""

import logging
from typing import Any, Mapping, Optional, Protocol

from ..core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

PAYMENT_SUBMITTED_STUDENT = "payment_submitted_student"
PAYMENT_SUBMITTED_ADMIN = "payment_submitted_admin"
PAYMENT_APPROVED = "payment_approved"
PAYMENT_REJECTED = "payment_rejected"


class NotificationProvider(Protocol):
    def send_template(self, to_email: str, template_name: str, context: Mapping[str, Any]) -> bool:
        ...


class ConsoleNotificationProvider:
    """Provider that writes notifications to the log instead of sending them."""

    def send_template(self, to_email: str, template_name: str, context: Mapping[str, Any]) -> bool:
        logger.info(
            "[notify] %s -> %s",
            template_name,
            to_email,
            extra={"template": template_name, "context": dict(context)},
        )
        return True


class NotificationService:
    def __init__(
        self,
        provider: Optional[NotificationProvider] = None,
        config: Optional[Settings] = None,
    ):
        self.provider = provider or ConsoleNotificationProvider()
        self.config = config or default_settings
        self.logger = logging.getLogger(self.__class__.__name__)

    def send(self, kind: str, recipient: Optional[str], data: Mapping[str, Any]) -> bool:
        """Send one notification. Returns False instead of raising on failure."""
        if not self.config.notifications_enabled:
            self.logger.debug("Notifications disabled; skipping %s", kind)
            return False
        if not recipient:
            self.logger.warning("No recipient for %s notification", kind)
            return False
        try:
            return bool(self.provider.send_template(recipient, kind, data))
        except Exception as exc:
            self.logger.error(
                "Failed to send %s notification to %s: %s",
                kind,
                recipient,
                exc,
                extra={"kind": kind},
            )
            return False

    def notify_admin(self, kind: str, data: Mapping[str, Any]) -> bool:
        return self.send(kind, self.config.admin_email, data)
