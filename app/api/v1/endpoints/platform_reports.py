from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_super_admin
from app.db.session import get_db
from app.schemas.gym_report import FlaggedGym, GymReport as GymReportSchema
from app.services.gym_report import gym_report_service

router = APIRouter()


@router.get("/reports", response_model=List[GymReportSchema])
async def list_platform_reports(
    *,
    db: Session = Depends(get_db),
    gym_id: Optional[str] = Query(None, description="Filtrar por gimnasio"),
    session: AdminSession = Depends(require_super_admin),
) -> List[GymReportSchema]:
    """[SUPER ADMIN] Reportes de incidencias de todos los gimnasios, más recientes primero."""
    return gym_report_service.list_platform_reports(db, gym_id=gym_id)


@router.get("/flagged-gyms", response_model=List[FlaggedGym])
async def list_flagged_gyms(
    *,
    db: Session = Depends(get_db),
    session: AdminSession = Depends(require_super_admin),
) -> List[FlaggedGym]:
    """
    [SUPER ADMIN] Gimnasios marcados por acumular reportes activos.

    Un reporte cuenta mientras está pending o reviewed.

    Returns:
        List[FlaggedGym]: Gimnasios ordenados por número de reportes activos
    """
    return gym_report_service.flagged_gyms(db)
