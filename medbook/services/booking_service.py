"""Booking lifecycle: pending -> accepted | rejected -> deleted.

Accept and reject are single-shot. Both go through an atomic conditional
update on ``status = pending``, so of two racing doctor actions at most one
succeeds and at most one notification goes out.
"""

import logging
from datetime import UTC, date, datetime, time
from typing import TYPE_CHECKING

from medbook.core.config import settings
from medbook.core.errors import (
    AuthorizationError,
    NotFoundError,
    TransitionConflictError,
    ValidationError,
)
from medbook.models import Booking, BookingStatus
from medbook.services import notification_service
from medbook.store.gateway import BOOKINGS, DOCTORS, StoreGateway

if TYPE_CHECKING:
    from medbook.services.reconciliation import ReconciliationTracker

logger = logging.getLogger(__name__)

PENDING = BookingStatus.PENDING.value
ACCEPTED = BookingStatus.ACCEPTED.value
REJECTED = BookingStatus.REJECTED.value


def _to_naive_utc(dt: datetime) -> datetime:
    """Convert to naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    if dt.tzinfo is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def combine_date_time(d: date, t: time) -> datetime:
    """Merge a picked calendar date and a picked clock time, to the minute."""
    return datetime(d.year, d.month, d.day, t.hour, t.minute, tzinfo=t.tzinfo)


def resolve_timestamp(value: datetime | str | None) -> datetime:
    if value is None or value == "":
        raise ValidationError("Appointment time is required")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise ValidationError(f"Not a valid appointment time: {value!r}") from None
    if not isinstance(value, datetime):
        raise ValidationError(f"Not a valid appointment time: {value!r}")
    return _to_naive_utc(value)


async def create_booking(
    gateway: StoreGateway,
    patient_id: int | None,
    doctor_id: int | None,
    appointment_at: datetime | str | None,
) -> int:
    # Identities are only checked for presence; the store owns referential integrity
    if not patient_id:
        raise ValidationError("Patient is required")
    if not doctor_id:
        raise ValidationError("Doctor is required")
    when = resolve_timestamp(appointment_at)
    booking_id = await gateway.insert(
        BOOKINGS,
        {
            "patient_id": patient_id,
            "doctor_id": doctor_id,
            "appointment_at": when,
            "status": PENDING,
        },
    )
    logger.info(
        "Booking %s created: patient=%s doctor=%s at=%s",
        booking_id, patient_id, doctor_id, when.isoformat(),
    )
    return booking_id


async def get_booking(gateway: StoreGateway, booking_id: int) -> Booking:
    booking = await gateway.get(BOOKINGS, booking_id)
    if booking is None:
        raise NotFoundError(f"Booking {booking_id} not found")
    return booking


async def list_bookings_for_patient(gateway: StoreGateway, patient_id: int) -> list[Booking]:
    return await gateway.query(BOOKINGS, {"patient_id": patient_id}, order_by="appointment_at")


async def list_bookings_for_doctor(gateway: StoreGateway, doctor_id: int) -> list[Booking]:
    return await gateway.query(BOOKINGS, {"doctor_id": doctor_id}, order_by="appointment_at")


async def _transition(
    gateway: StoreGateway, booking_id: int, acting_doctor_id: int, new_status: str
) -> Booking:
    booking = await get_booking(gateway, booking_id)
    if booking.doctor_id != acting_doctor_id:
        raise AuthorizationError(
            f"Doctor {acting_doctor_id} is not the doctor on booking {booking_id}"
        )
    won = await gateway.update_if(
        BOOKINGS, booking_id, {"status": PENDING}, {"status": new_status}
    )
    if not won:
        current = await gateway.get(BOOKINGS, booking_id)
        if current is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        raise TransitionConflictError(
            f"Booking {booking_id} is {current.status}, cannot become {new_status}"
        )
    return booking


async def _doctor_name(gateway: StoreGateway, doctor_id: int) -> str:
    return notification_service.doctor_display_name(await gateway.get(DOCTORS, doctor_id))


async def accept_booking(gateway: StoreGateway, booking_id: int, acting_doctor_id: int) -> None:
    booking = await _transition(gateway, booking_id, acting_doctor_id, ACCEPTED)
    logger.info("Booking %s accepted by doctor %s", booking_id, acting_doctor_id)
    doctor_name = await _doctor_name(gateway, booking.doctor_id)
    await notification_service.dispatch(
        gateway, booking.patient_id, notification_service.accepted_message(doctor_name)
    )


async def reject_booking(
    gateway: StoreGateway,
    booking_id: int,
    acting_doctor_id: int,
    eager_delete: bool | None = None,
) -> None:
    """Mark rejected, drop the record (eager path), then tell the patient.

    With eager_delete off the rejected record stays until the patient's
    session has shown it and reconciles it.
    """
    if eager_delete is None:
        eager_delete = settings.eager_reject_delete
    booking = await _transition(gateway, booking_id, acting_doctor_id, REJECTED)
    logger.info("Booking %s rejected by doctor %s", booking_id, acting_doctor_id)
    if eager_delete:
        await gateway.delete(BOOKINGS, booking_id)
        logger.info("Booking %s deleted on rejection", booking_id)
    doctor_name = await _doctor_name(gateway, booking.doctor_id)
    await notification_service.dispatch(
        gateway, booking.patient_id, notification_service.rejected_message(doctor_name)
    )


async def reconcile_rejected(
    gateway: StoreGateway, booking_id: int, tracker: "ReconciliationTracker"
) -> bool:
    """Deferred delete of a rejected booking the patient has already seen.

    Returns True when this call removed the record. A booking that is already
    gone counts as reconciled.
    """
    if not tracker.is_seen(booking_id):
        return False
    removed = await gateway.delete(BOOKINGS, booking_id, expected={"status": REJECTED})
    if removed:
        logger.info("Booking %s reconciled after patient saw the rejection", booking_id)
    else:
        logger.debug("Booking %s not reconciled: already gone or not rejected", booking_id)
    return removed


async def delete_booking(gateway: StoreGateway, booking_id: int, acting_patient_id: int) -> None:
    """Patient withdrawal, whatever the status."""
    booking = await gateway.get(BOOKINGS, booking_id)
    if booking is None:
        logger.debug("Booking %s already gone", booking_id)
        return
    if booking.patient_id != acting_patient_id:
        raise AuthorizationError(
            f"Patient {acting_patient_id} does not own booking {booking_id}"
        )
    await gateway.delete(BOOKINGS, booking_id)
    logger.info("Booking %s withdrawn by patient %s", booking_id, acting_patient_id)
