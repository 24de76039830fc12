from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_gym_admin
from app.db.session import get_db
from app.models.user import EnrollmentStatus
from app.schemas.enrollment import EnrollmentListResponse, EnrollmentTransitionResult
from app.services.enrollment import enrollment_service

router = APIRouter()


@router.get("/", response_model=EnrollmentListResponse)
async def list_enrollments(
    *,
    db: Session = Depends(get_db),
    status: Optional[EnrollmentStatus] = Query(None, description="Filtrar por estado"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    session: AdminSession = Depends(require_gym_admin),
) -> EnrollmentListResponse:
    """
    Solicitudes de inscripción del gimnasio, más recientes primero.

    Los contadores se calculan siempre sobre todas las solicitudes.
    """
    return enrollment_service.list_with_counts(db, session, status=status, limit=limit)


@router.post("/{enrollment_id}/approve", response_model=EnrollmentTransitionResult)
async def approve_enrollment(
    *,
    db: Session = Depends(get_db),
    enrollment_id: str = Path(..., description="ID de la solicitud"),
    session: AdminSession = Depends(require_gym_admin),
) -> EnrollmentTransitionResult:
    """
    Aprobar una solicitud pendiente y activar la membresía.

    Args:
        db: Sesión de base de datos
        enrollment_id: ID de la solicitud

    Returns:
        EnrollmentTransitionResult: Solicitud y perfil tras la aprobación

    Raises:
        HTTPException 404: Si la solicitud no existe
        HTTPException 409: Si la solicitud ya fue rechazada
    """
    return enrollment_service.approve(db, session, enrollment_id)


@router.post("/{enrollment_id}/reject", response_model=EnrollmentTransitionResult)
async def reject_enrollment(
    *,
    db: Session = Depends(get_db),
    enrollment_id: str = Path(..., description="ID de la solicitud"),
    session: AdminSession = Depends(require_gym_admin),
) -> EnrollmentTransitionResult:
    """Rechazar una solicitud pendiente."""
    return enrollment_service.reject(db, session, enrollment_id)
