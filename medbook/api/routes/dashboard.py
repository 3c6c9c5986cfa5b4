from fastapi import APIRouter, Depends, status

from medbook.api.deps import get_current_patient, get_gateway
from medbook.api.schemas.dashboard import PatientDashboardResponse
from medbook.models import NotificationPublic, Patient
from medbook.services.sessions import PatientSession
from medbook.store.gateway import SqlStoreGateway

router = APIRouter(prefix="/patient", tags=["patient"])


@router.get("/dashboard", response_model=PatientDashboardResponse)
async def patient_dashboard(
    gateway: SqlStoreGateway = Depends(get_gateway),
    current_patient: Patient = Depends(get_current_patient),
) -> PatientDashboardResponse:
    """
    Refresh the patient's view. Rejected bookings in this response are marked
    seen, and bookings seen on an earlier or this refresh are removed.
    """
    dashboard = await PatientSession(gateway, current_patient.id).refresh()
    return PatientDashboardResponse(
        bookings=dashboard.bookings,
        notifications=[
            NotificationPublic.model_validate(n, from_attributes=True) for n in dashboard.notifications
        ],
        reconciled_booking_ids=dashboard.reconciled,
    )


@router.post("/session/end", status_code=status.HTTP_204_NO_CONTENT)
async def end_patient_session(
    gateway: SqlStoreGateway = Depends(get_gateway),
    current_patient: Patient = Depends(get_current_patient),
) -> None:
    """Logout hook: drops the session's memory of rejections already shown."""
    PatientSession(gateway, current_patient.id).end()
