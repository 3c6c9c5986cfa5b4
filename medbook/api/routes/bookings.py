
from fastapi import APIRouter, Depends, status

from medbook.api.deps import get_current_doctor, get_current_patient, get_gateway
from medbook.api.schemas.booking import BookAppointmentRequest
from medbook.models import Booking, BookingPublic, BookingView, Doctor, Patient
from medbook.services import booking_service, sessions
from medbook.store.gateway import SqlStoreGateway

router = APIRouter(tags=["bookings"])


def _to_public(b: Booking) -> BookingPublic:
    return BookingPublic.model_validate(b, from_attributes=True)


@router.post("/bookings", response_model=BookingPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: BookAppointmentRequest,
    gateway: SqlStoreGateway = Depends(get_gateway),
    current_patient: Patient = Depends(get_current_patient),
) -> BookingPublic:
    when = body.appointment_at
    if when is None:
        when = booking_service.combine_date_time(body.appointment_date, body.appointment_time)
    booking_id = await sessions.request_booking(gateway, current_patient.id, body.doctor_id, when)
    return _to_public(await booking_service.get_booking(gateway, booking_id))


@router.get("/bookings", response_model=list[BookingView])
async def list_my_bookings(
    gateway: SqlStoreGateway = Depends(get_gateway),
    current_patient: Patient = Depends(get_current_patient),
) -> list[BookingView]:
    bookings = await booking_service.list_bookings_for_patient(gateway, current_patient.id)
    return await sessions.to_views(gateway, bookings)


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def withdraw_booking(
    booking_id: int,
    gateway: SqlStoreGateway = Depends(get_gateway),
    current_patient: Patient = Depends(get_current_patient),
) -> None:
    await booking_service.delete_booking(gateway, booking_id, current_patient.id)


@router.get("/doctor/bookings", response_model=list[BookingView])
async def list_incoming_bookings(
    gateway: SqlStoreGateway = Depends(get_gateway),
    current_doctor: Doctor = Depends(get_current_doctor),
) -> list[BookingView]:
    return await sessions.doctor_bookings(gateway, current_doctor.id)


@router.post("/doctor/bookings/{booking_id}/accept", status_code=status.HTTP_204_NO_CONTENT)
async def accept_booking(
    booking_id: int,
    gateway: SqlStoreGateway = Depends(get_gateway),
    current_doctor: Doctor = Depends(get_current_doctor),
) -> None:
    await booking_service.accept_booking(gateway, booking_id, current_doctor.id)


@router.post("/doctor/bookings/{booking_id}/reject", status_code=status.HTTP_204_NO_CONTENT)
async def reject_booking(
    booking_id: int,
    gateway: SqlStoreGateway = Depends(get_gateway),
    current_doctor: Doctor = Depends(get_current_doctor),
) -> None:
    await booking_service.reject_booking(gateway, booking_id, current_doctor.id)
