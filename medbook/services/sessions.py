"""Patient and doctor views over the store.

These are the dashboards' read models plus the patient-side booking flow:
the busy check happens here, before ``create_booking`` is ever called.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from medbook.models import Booking, BookingView, Notification, Patient
from medbook.services import availability_service, booking_service, notification_service
from medbook.services.reconciliation import ReconciliationTracker, trackers
from medbook.store.gateway import DOCTORS, USERS, StoreGateway

logger = logging.getLogger(__name__)


def patient_display_name(patient: Patient | None) -> str:
    if patient is None:
        return "N/A"
    return f"{patient.first_name or 'Unknown'} {patient.last_name or ''}".strip()


async def to_views(gateway: StoreGateway, bookings: list[Booking]) -> list[BookingView]:
    doctors: dict[int, str] = {}
    patients: dict[int, str] = {}
    views = []
    for b in bookings:
        if b.doctor_id not in doctors:
            doctors[b.doctor_id] = notification_service.doctor_display_name(
                await gateway.get(DOCTORS, b.doctor_id)
            )
        if b.patient_id not in patients:
            patients[b.patient_id] = patient_display_name(await gateway.get(USERS, b.patient_id))
        views.append(
            BookingView(
                **b.model_dump(),
                doctor_name=doctors[b.doctor_id],
                patient_name=patients[b.patient_id],
            )
        )
    return views


async def request_booking(
    gateway: StoreGateway, patient_id: int, doctor_id: int, appointment_at: datetime | str
) -> int:
    """Patient flow: a Busy doctor is refused before anything is written."""
    await availability_service.ensure_doctor_available(gateway, doctor_id)
    return await booking_service.create_booking(gateway, patient_id, doctor_id, appointment_at)


async def doctor_bookings(gateway: StoreGateway, doctor_id: int) -> list[BookingView]:
    return await to_views(gateway, await booking_service.list_bookings_for_doctor(gateway, doctor_id))


@dataclass
class PatientDashboard:
    bookings: list[BookingView] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)
    reconciled: list[int] = field(default_factory=list)


class PatientSession:
    def __init__(
        self,
        gateway: StoreGateway,
        patient_id: int,
        tracker: ReconciliationTracker | None = None,
    ) -> None:
        self.gateway = gateway
        self.patient_id = patient_id
        self.tracker = tracker if tracker is not None else trackers.for_patient(patient_id)

    async def refresh(self) -> PatientDashboard:
        """Load the dashboard, then mark rejections seen and reconcile the SeenSet.

        The returned snapshot still contains the rejected bookings it marked,
        so each rejection is rendered once before its record goes away.
        """
        bookings = await booking_service.list_bookings_for_patient(self.gateway, self.patient_id)
        notifications = await notification_service.list_notifications(self.gateway, self.patient_id)
        dashboard = PatientDashboard(
            bookings=await to_views(self.gateway, bookings),
            notifications=notifications,
        )
        self.tracker.observe(bookings)
        dashboard.reconciled = await self.tracker.reconcile(self.gateway)
        if dashboard.reconciled:
            logger.info(
                "Patient %s: reconciled rejected bookings %s", self.patient_id, dashboard.reconciled
            )
        return dashboard

    async def request(self, doctor_id: int, appointment_at: datetime | str) -> int:
        return await request_booking(self.gateway, self.patient_id, doctor_id, appointment_at)

    async def withdraw(self, booking_id: int) -> None:
        await booking_service.delete_booking(self.gateway, booking_id, self.patient_id)

    async def delete_notification(self, notification_id: int) -> None:
        await notification_service.delete_notification(self.gateway, notification_id, self.patient_id)

    def end(self) -> None:
        """Logout: forget which rejections this session has shown."""
        trackers.end_session(self.patient_id)
        logger.info("Patient %s session ended", self.patient_id)
