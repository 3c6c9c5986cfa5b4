from datetime import date, datetime, time

from pydantic import BaseModel, model_validator

from medbook.models import DoctorPublic


class DoctorWithStatus(BaseModel):
    doctor: DoctorPublic
    status: str  # "Available" | "Busy"


class BookAppointmentRequest(BaseModel):
    doctor_id: int
    # Either a single instant, or the date and time picked separately
    appointment_at: datetime | None = None
    appointment_date: date | None = None
    appointment_time: time | None = None

    @model_validator(mode="after")
    def _has_when(self) -> "BookAppointmentRequest":
        if self.appointment_at is None and (
            self.appointment_date is None or self.appointment_time is None
        ):
            raise ValueError("appointment_at, or appointment_date and appointment_time, is required")
        return self
