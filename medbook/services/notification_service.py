import logging
from collections.abc import AsyncIterator

from medbook.core.config import settings
from medbook.core.errors import AuthorizationError
from medbook.models import Doctor, Notification
from medbook.store.gateway import NOTIFICATIONS, StoreGateway

logger = logging.getLogger(__name__)


def doctor_display_name(doctor: Doctor | None) -> str:
    if doctor is None:
        return "Unknown Doctor"
    return f"{settings.doctor_title} {doctor.first_name or 'Unknown'} {doctor.last_name or ''}".strip()


def accepted_message(doctor_name: str) -> str:
    return f"Your appointment with {doctor_name} has been accepted."


def rejected_message(doctor_name: str) -> str:
    return f"Your appointment with {doctor_name} has been rejected."


async def dispatch(gateway: StoreGateway, recipient_patient_id: int, message: str) -> int:
    """Create a notification; created_at is assigned by the store. No retry on failure."""
    notification_id = await gateway.insert(
        NOTIFICATIONS,
        {"recipient_patient_id": recipient_patient_id, "message": message},
    )
    logger.info("Notification %s sent to patient %s", notification_id, recipient_patient_id)
    return notification_id


async def list_notifications(gateway: StoreGateway, patient_id: int) -> list[Notification]:
    """Newest first; equal timestamps keep insertion order (newest insert first)."""
    return await gateway.query(
        NOTIFICATIONS,
        {"recipient_patient_id": patient_id},
        order_by="created_at",
        descending=True,
    )


class NotificationFeed:
    """Lazy view over a patient's notifications.

    Nothing is read until iteration starts, and each ``async for`` re-queries
    the store, so the feed can be restarted after a delete.
    """

    def __init__(self, gateway: StoreGateway, patient_id: int) -> None:
        self.gateway = gateway
        self.patient_id = patient_id

    async def __aiter__(self) -> AsyncIterator[Notification]:
        for n in await list_notifications(self.gateway, self.patient_id):
            yield n


async def delete_notification(
    gateway: StoreGateway, notification_id: int, acting_patient_id: int
) -> None:
    """Patient-initiated removal. Never touches the booking that produced it."""
    notification = await gateway.get(NOTIFICATIONS, notification_id)
    if notification is None:
        logger.debug("Notification %s already gone", notification_id)
        return
    if notification.recipient_patient_id != acting_patient_id:
        raise AuthorizationError(
            f"Patient {acting_patient_id} does not own notification {notification_id}"
        )
    await gateway.delete(NOTIFICATIONS, notification_id)
    logger.info("Notification %s deleted by patient %s", notification_id, acting_patient_id)
