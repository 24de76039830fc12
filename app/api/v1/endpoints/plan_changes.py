from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_gym_admin
from app.db.session import get_db
from app.models.plan_change import PlanChangeStatus
from app.schemas.plan_change import PlanChangeDecision, PlanChangeListResponse
from app.services.plan_change import plan_change_service

router = APIRouter()


@router.get("/", response_model=PlanChangeListResponse)
async def list_plan_changes(
    *,
    db: Session = Depends(get_db),
    status: Optional[PlanChangeStatus] = Query(None, description="Filtrar por estado"),
    session: AdminSession = Depends(require_gym_admin),
) -> PlanChangeListResponse:
    """
    Solicitudes de cambio de plan: pendientes primero y después las más recientes.
    """
    return plan_change_service.list_requests(db, session, status=status)


@router.post("/{request_id}/approve", response_model=PlanChangeDecision)
async def approve_plan_change(
    *,
    db: Session = Depends(get_db),
    request_id: str = Path(..., description="ID de la solicitud"),
    session: AdminSession = Depends(require_gym_admin),
) -> PlanChangeDecision:
    """
    Aprobar un cambio de plan.

    El perfil recibe la nueva duración y el ciclo empieza de nuevo hoy.

    Raises:
        HTTPException 409: Si la solicitud ya fue revisada
    """
    return plan_change_service.approve(db, session, request_id)


@router.post("/{request_id}/reject", response_model=PlanChangeDecision)
async def reject_plan_change(
    *,
    db: Session = Depends(get_db),
    request_id: str = Path(..., description="ID de la solicitud"),
    session: AdminSession = Depends(require_gym_admin),
) -> PlanChangeDecision:
    return plan_change_service.reject(db, session, request_id)
