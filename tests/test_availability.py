from datetime import datetime

import pytest

from medbook.core.errors import BusyDoctorError
from medbook.models import Booking
from medbook.services import availability_service, booking_service
from medbook.services.availability_service import DoctorStatus, compute_status


def _b(doctor_id, status):
    return Booking(patient_id=1, doctor_id=doctor_id, appointment_at=datetime(2024, 6, 1, 10), status=status)


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ([], DoctorStatus.AVAILABLE),
        (["pending"], DoctorStatus.BUSY),
        (["accepted"], DoctorStatus.BUSY),
        (["rejected"], DoctorStatus.AVAILABLE),
        (["rejected", "rejected", "accepted"], DoctorStatus.BUSY),
    ],
)
def test_compute_status(statuses, expected):
    assert compute_status(7, [_b(7, s) for s in statuses]) is expected


def test_other_doctors_bookings_do_not_count():
    assert compute_status(7, [_b(8, "pending"), _b(9, "accepted")]) is DoctorStatus.AVAILABLE


@pytest.mark.asyncio
async def test_status_follows_store(gateway, patient_id, doctor_id):
    assert await availability_service.get_doctor_status(gateway, doctor_id) is DoctorStatus.AVAILABLE

    booking_id = await booking_service.create_booking(
        gateway, patient_id, doctor_id, datetime(2024, 6, 1, 10)
    )
    assert await availability_service.get_doctor_status(gateway, doctor_id) is DoctorStatus.BUSY

    await booking_service.accept_booking(gateway, booking_id, doctor_id)
    assert await availability_service.get_doctor_status(gateway, doctor_id) is DoctorStatus.BUSY

    await booking_service.delete_booking(gateway, booking_id, patient_id)
    assert await availability_service.get_doctor_status(gateway, doctor_id) is DoctorStatus.AVAILABLE


@pytest.mark.asyncio
async def test_rejected_but_undeleted_booking_leaves_doctor_available(gateway, patient_id, doctor_id):
    booking_id = await booking_service.create_booking(
        gateway, patient_id, doctor_id, datetime(2024, 6, 1, 10)
    )
    await booking_service.reject_booking(gateway, booking_id, doctor_id, eager_delete=False)
    assert (await booking_service.get_booking(gateway, booking_id)).status == "rejected"
    assert await availability_service.get_doctor_status(gateway, doctor_id) is DoctorStatus.AVAILABLE


@pytest.mark.asyncio
async def test_list_doctors_with_status(gateway, patient_id, doctor_id, other_doctor_id):
    await booking_service.create_booking(gateway, patient_id, doctor_id, datetime(2024, 6, 1, 10))

    rows = await availability_service.list_doctors_with_status(gateway)
    by_id = {d.id: s for d, s in rows}
    assert by_id == {doctor_id: DoctorStatus.BUSY, other_doctor_id: DoctorStatus.AVAILABLE}


@pytest.mark.asyncio
async def test_ensure_doctor_available(gateway, patient_id, doctor_id):
    await availability_service.ensure_doctor_available(gateway, doctor_id)
    await booking_service.create_booking(gateway, patient_id, doctor_id, datetime(2024, 6, 1, 10))
    with pytest.raises(BusyDoctorError):
        await availability_service.ensure_doctor_available(gateway, doctor_id)
