from pydantic import BaseModel

from medbook.models import BookingView, NotificationPublic


class PatientDashboardResponse(BaseModel):
    bookings: list[BookingView]
    notifications: list[NotificationPublic]
    reconciled_booking_ids: list[int] = []
