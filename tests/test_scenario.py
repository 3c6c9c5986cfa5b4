import pytest

from medbook.core.errors import BusyDoctorError, NotFoundError
from medbook.services import availability_service, booking_service, notification_service
from medbook.services.availability_service import DoctorStatus
from medbook.services.sessions import PatientSession, request_booking


@pytest.mark.asyncio
async def test_request_then_reject_round_trip(gateway, patient_id, doctor_id):
    assert await availability_service.get_doctor_status(gateway, doctor_id) is DoctorStatus.AVAILABLE

    booking_id = await request_booking(gateway, patient_id, doctor_id, "2024-06-01T10:00")
    assert await availability_service.get_doctor_status(gateway, doctor_id) is DoctorStatus.BUSY

    await booking_service.reject_booking(gateway, booking_id, doctor_id, eager_delete=True)

    assert await availability_service.get_doctor_status(gateway, doctor_id) is DoctorStatus.AVAILABLE
    with pytest.raises(NotFoundError):
        await booking_service.get_booking(gateway, booking_id)
    notes = await notification_service.list_notifications(gateway, patient_id)
    assert len(notes) == 1
    assert "rejected" in notes[0].message


@pytest.mark.asyncio
async def test_busy_doctor_is_refused_before_create(gateway, patient_id, other_patient_id, doctor_id):
    await request_booking(gateway, patient_id, doctor_id, "2024-06-01T10:00")
    with pytest.raises(BusyDoctorError):
        await request_booking(gateway, other_patient_id, doctor_id, "2024-06-02T10:00")
    assert len(await booking_service.list_bookings_for_doctor(gateway, doctor_id)) == 1


@pytest.mark.asyncio
async def test_patient_session_flow(gateway, patient_id, doctor_id, other_doctor_id):
    session = PatientSession(gateway, patient_id)
    kept = await session.request(doctor_id, "2024-06-01T10:00")
    dropped = await session.request(other_doctor_id, "2024-06-01T11:00")

    await booking_service.accept_booking(gateway, kept, doctor_id)
    await session.withdraw(dropped)

    dashboard = await session.refresh()
    assert [(b.id, b.status) for b in dashboard.bookings] == [(kept, "accepted")]
    [note] = dashboard.notifications
    await session.delete_notification(note.id)
    assert (await session.refresh()).notifications == []
    assert await availability_service.get_doctor_status(gateway, other_doctor_id) is DoctorStatus.AVAILABLE
