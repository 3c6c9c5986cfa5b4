from datetime import datetime

from pydantic import NaiveDatetime
from sqlalchemy import DateTime, func
from sqlmodel import Field, SQLModel


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"
    id: int | None = Field(default=None, primary_key=True)
    # No foreign key to bookings: a notification outlives the booking that spawned it
    recipient_patient_id: int = Field(foreign_key="users.id", index=True)
    message: str
    created_at: NaiveDatetime | None = Field(
        default=None, index=True, sa_type=DateTime(), sa_column_kwargs={"server_default": func.now()}
    )


class NotificationPublic(SQLModel):
    id: int
    recipient_patient_id: int
    message: str
    created_at: datetime | None = None
