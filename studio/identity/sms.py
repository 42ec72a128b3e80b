"""Outbound SMS notifier.

Delivery is fire-and-forget: the caller schedules :meth:`send` as a
background task after the HTTP response is produced. Failures are logged and
never raised back into the request.
"""
import logging

logger = logging.getLogger(__name__)


class SmsSender:
    """Sends SMS messages by writing them to the application log.

    Swap this for a gateway-backed sender in production deployments.
    """

    def deliver(self, phone_number: str, message: str) -> None:
        logger.info(f"SMS to {phone_number}: {message}")

    def send(self, phone_number: str, message: str) -> bool:
        try:
            self.deliver(phone_number, message)
        except Exception as e:
            logger.error(f"Failed to send SMS to {phone_number}: {e}")
            return False
        return True
