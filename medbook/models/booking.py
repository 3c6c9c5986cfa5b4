from datetime import datetime
from enum import Enum

from pydantic import NaiveDatetime
from sqlalchemy import DateTime, func
from sqlmodel import Field, SQLModel


class BookingStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Statuses that keep the doctor busy
OUTSTANDING_STATUSES = frozenset({BookingStatus.PENDING.value, BookingStatus.ACCEPTED.value})


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    id: int | None = Field(default=None, primary_key=True)
    patient_id: int = Field(foreign_key="users.id", index=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True)
    # Naive UTC, stored as TIMESTAMP WITHOUT TIME ZONE
    appointment_at: NaiveDatetime = Field(sa_type=DateTime(), index=True)
    status: str = Field(default=BookingStatus.PENDING.value, index=True)
    created_at: NaiveDatetime | None = Field(
        default=None, sa_type=DateTime(), sa_column_kwargs={"server_default": func.now()}
    )


class BookingPublic(SQLModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_at: datetime
    status: str
    created_at: datetime | None = None


class BookingView(BookingPublic):
    """Booking enriched with counterpart names for the dashboards."""

    doctor_name: str
    patient_name: str
