from fastapi import APIRouter, Depends

from medbook.api.deps import get_gateway
from medbook.api.schemas.booking import DoctorWithStatus
from medbook.models import DoctorPublic
from medbook.services.availability_service import list_doctors_with_status
from medbook.store.gateway import SqlStoreGateway

router = APIRouter(prefix="/doctors", tags=["doctors"])


@router.get("", response_model=list[DoctorWithStatus])
async def list_doctors(gateway: SqlStoreGateway = Depends(get_gateway)) -> list[DoctorWithStatus]:
    """All doctors, each with availability derived from outstanding bookings."""
    rows = await list_doctors_with_status(gateway)
    return [
        DoctorWithStatus(doctor=DoctorPublic.model_validate(d, from_attributes=True), status=s.value)
        for d, s in rows
    ]
