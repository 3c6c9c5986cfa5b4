from datetime import datetime

import pytest

from medbook.core.errors import AuthorizationError
from medbook.services import booking_service, notification_service
from medbook.services.notification_service import NotificationFeed


@pytest.mark.asyncio
async def test_list_is_newest_first_and_per_patient(gateway, patient_id, other_patient_id):
    first = await notification_service.dispatch(gateway, patient_id, "one")
    await notification_service.dispatch(gateway, other_patient_id, "not yours")
    second = await notification_service.dispatch(gateway, patient_id, "two")
    third = await notification_service.dispatch(gateway, patient_id, "three")

    notes = await notification_service.list_notifications(gateway, patient_id)
    assert [n.id for n in notes] == [third, second, first]
    assert all(n.recipient_patient_id == patient_id for n in notes)
    assert all(n.created_at is not None for n in notes)


@pytest.mark.asyncio
async def test_feed_is_lazy_and_restartable(gateway, patient_id):
    feed = NotificationFeed(gateway, patient_id)
    await notification_service.dispatch(gateway, patient_id, "one")
    keep = await notification_service.dispatch(gateway, patient_id, "two")

    assert [n.message async for n in feed] == ["two", "one"]
    await notification_service.delete_notification(gateway, keep, patient_id)
    assert [n.message async for n in feed] == ["one"]


@pytest.mark.asyncio
async def test_delete_requires_ownership(gateway, patient_id, other_patient_id):
    note_id = await notification_service.dispatch(gateway, patient_id, "hello")
    with pytest.raises(AuthorizationError):
        await notification_service.delete_notification(gateway, note_id, other_patient_id)
    assert len(await notification_service.list_notifications(gateway, patient_id)) == 1


@pytest.mark.asyncio
async def test_delete_missing_notification_is_fine(gateway, patient_id):
    await notification_service.delete_notification(gateway, 12345, patient_id)


@pytest.mark.asyncio
async def test_deleting_notification_keeps_booking(gateway, patient_id, doctor_id):
    booking_id = await booking_service.create_booking(
        gateway, patient_id, doctor_id, datetime(2024, 6, 1, 10)
    )
    await booking_service.accept_booking(gateway, booking_id, doctor_id)
    [note] = await notification_service.list_notifications(gateway, patient_id)

    await notification_service.delete_notification(gateway, note.id, patient_id)
    booking = await booking_service.get_booking(gateway, booking_id)
    assert booking.status == "accepted"


def test_doctor_display_name(monkeypatch):
    from medbook.core.config import settings
    from medbook.models import Doctor

    monkeypatch.setattr(settings, "doctor_title", "Dr.")
    assert notification_service.doctor_display_name(Doctor(email="x@y", first_name="Ann", last_name="Bo")) == "Dr. Ann Bo"
    assert notification_service.doctor_display_name(Doctor(email="x@y")) == "Dr. Unknown"
    assert notification_service.doctor_display_name(None) == "Unknown Doctor"
