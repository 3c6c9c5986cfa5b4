from collections.abc import Iterable
from enum import Enum

from medbook.core.errors import BusyDoctorError
from medbook.models import OUTSTANDING_STATUSES, Booking, Doctor
from medbook.store.gateway import BOOKINGS, DOCTORS, StoreGateway


class DoctorStatus(str, Enum):
    AVAILABLE = "Available"
    BUSY = "Busy"


def compute_status(doctor_id: int, bookings: Iterable[Booking]) -> DoctorStatus:
    """Busy iff at least one pending or accepted booking references the doctor.

    Recomputed from the booking set on every read; rejected bookings never count.
    """
    for b in bookings:
        if b.doctor_id == doctor_id and b.status in OUTSTANDING_STATUSES:
            return DoctorStatus.BUSY
    return DoctorStatus.AVAILABLE


async def get_doctor_status(gateway: StoreGateway, doctor_id: int) -> DoctorStatus:
    bookings = await gateway.query(BOOKINGS, {"doctor_id": doctor_id})
    return compute_status(doctor_id, bookings)


async def list_doctors_with_status(gateway: StoreGateway) -> list[tuple[Doctor, DoctorStatus]]:
    """Every doctor with derived availability, from one scan of the booking set."""
    doctors = await gateway.query(DOCTORS, order_by="last_name")
    bookings = await gateway.query(BOOKINGS)
    return [(d, compute_status(d.id, bookings)) for d in doctors]


async def ensure_doctor_available(gateway: StoreGateway, doctor_id: int) -> None:
    if await get_doctor_status(gateway, doctor_id) is DoctorStatus.BUSY:
        raise BusyDoctorError(f"Doctor {doctor_id} has an outstanding booking")
