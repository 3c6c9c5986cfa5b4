from sqlmodel import Field, SQLModel


class PersonBase(SQLModel):
    email: str = Field(unique=True, index=True)
    first_name: str | None = None
    last_name: str | None = None
    profile_photo: str | None = None  # download URL from blob storage


class Patient(PersonBase, table=True):
    """Row in the identity provider's Users collection; read-only here."""

    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)


class Doctor(PersonBase, table=True):
    """Row in the identity provider's Doctors collection; read-only here."""

    __tablename__ = "doctors"
    id: int | None = Field(default=None, primary_key=True)


class DoctorPublic(SQLModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    profile_photo: str | None = None
