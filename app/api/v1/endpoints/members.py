import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_gym_admin
from app.db.session import get_db
from app.schemas.enrollment import EnrollmentTransitionResult
from app.schemas.member import MemberDetail, MemberFilter, MemberListResponse
from app.services.enrollment import enrollment_service
from app.services.member import member_service

logger = logging.getLogger("members_api")

router = APIRouter()


@router.get("/", response_model=MemberListResponse)
async def list_members(
    *,
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, description="Buscar por nombre o email"),
    member_filter: MemberFilter = Query(MemberFilter.ALL, alias="filter"),
    session: AdminSession = Depends(require_gym_admin),
) -> MemberListResponse:
    """
    Miembros del gimnasio con su estado de membresía.

    Args:
        db: Sesión de base de datos
        search: Texto a buscar en nombre o email
        member_filter: all | active | inactive | pending | expiring | expired | recent

    Returns:
        MemberListResponse: Miembros con vencimiento calculado
    """
    return member_service.list_members(db, session, search=search, member_filter=member_filter)


@router.get("/{uid}", response_model=MemberDetail)
async def get_member(
    *,
    db: Session = Depends(get_db),
    uid: str = Path(..., description="UID del miembro"),
    session: AdminSession = Depends(require_gym_admin),
) -> MemberDetail:
    """Perfil del miembro con su historial de inscripciones y visitas."""
    return member_service.get_member_detail(db, session, uid)


@router.post("/{uid}/approve", response_model=EnrollmentTransitionResult)
async def approve_member(
    *,
    db: Session = Depends(get_db),
    uid: str = Path(...),
    session: AdminSession = Depends(require_gym_admin),
) -> EnrollmentTransitionResult:
    return enrollment_service.approve_member(db, session, uid)


@router.post("/{uid}/reject", response_model=EnrollmentTransitionResult)
async def reject_member(
    *,
    db: Session = Depends(get_db),
    uid: str = Path(...),
    session: AdminSession = Depends(require_gym_admin),
) -> EnrollmentTransitionResult:
    return enrollment_service.reject_member(db, session, uid)


@router.post("/{uid}/set-pending", response_model=EnrollmentTransitionResult)
async def set_member_pending(
    *,
    db: Session = Depends(get_db),
    uid: str = Path(...),
    session: AdminSession = Depends(require_gym_admin),
) -> EnrollmentTransitionResult:
    """
    Devolver a pendiente una membresía aprobada.

    La siguiente aprobación reinicia el ciclo de la membresía.
    """
    return enrollment_service.set_member_pending(db, session, uid)


@router.delete("/{uid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_member(
    *,
    db: Session = Depends(get_db),
    uid: str = Path(...),
    session: AdminSession = Depends(require_gym_admin),
) -> None:
    """Eliminar el perfil de un miembro del gimnasio."""
    member_service.delete_member(db, session, uid)
