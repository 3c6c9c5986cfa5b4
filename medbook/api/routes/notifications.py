from fastapi import APIRouter, Depends, status

from medbook.api.deps import get_current_patient, get_gateway
from medbook.models import NotificationPublic, Patient
from medbook.services import notification_service
from medbook.store.gateway import SqlStoreGateway

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationPublic])
async def list_my_notifications(
    gateway: SqlStoreGateway = Depends(get_gateway),
    current_patient: Patient = Depends(get_current_patient),
) -> list[NotificationPublic]:
    rows = await notification_service.list_notifications(gateway, current_patient.id)
    return [NotificationPublic.model_validate(n, from_attributes=True) for n in rows]


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_notification(
    notification_id: int,
    gateway: SqlStoreGateway = Depends(get_gateway),
    current_patient: Patient = Depends(get_current_patient),
) -> None:
    await notification_service.delete_notification(gateway, notification_id, current_patient.id)
