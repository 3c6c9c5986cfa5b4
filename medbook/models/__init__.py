from medbook.models.user import Doctor, DoctorPublic, Patient
from medbook.models.booking import (
    OUTSTANDING_STATUSES,
    Booking,
    BookingPublic,
    BookingStatus,
    BookingView,
)
from medbook.models.notification import Notification, NotificationPublic

__all__ = [
    "Patient",
    "Doctor",
    "DoctorPublic",
    "Booking",
    "BookingPublic",
    "BookingStatus",
    "BookingView",
    "OUTSTANDING_STATUSES",
    "Notification",
    "NotificationPublic",
]
