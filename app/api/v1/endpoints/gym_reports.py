from typing import Optional

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_gym_admin
from app.db.session import get_db
from app.schemas.gym_report import (
    GymReport as GymReportSchema,
    GymReportListResponse,
    ReportResolution,
    ReportReview,
)
from app.services.gym_report import gym_report_service

router = APIRouter()


@router.get("/", response_model=GymReportListResponse)
async def list_gym_reports(
    *,
    db: Session = Depends(get_db),
    session: AdminSession = Depends(require_gym_admin),
) -> GymReportListResponse:
    """Reportes de incidencias del gimnasio, más recientes primero."""
    return gym_report_service.list_for_gym(db, session)


@router.post("/{report_id}/review", response_model=GymReportSchema)
async def review_gym_report(
    *,
    db: Session = Depends(get_db),
    report_id: str = Path(..., description="ID del reporte"),
    review_in: Optional[ReportReview] = Body(None),
    session: AdminSession = Depends(require_gym_admin),
) -> GymReportSchema:
    """
    Marcar un reporte como revisado, con notas opcionales.

    Raises:
        HTTPException 409: Si el reporte no está pendiente
    """
    notes = review_in.admin_notes if review_in else None
    return gym_report_service.mark_reviewed(db, session, report_id, notes)


@router.post("/{report_id}/reject", response_model=GymReportSchema)
async def reject_gym_report(
    *,
    db: Session = Depends(get_db),
    report_id: str = Path(..., description="ID del reporte"),
    review_in: Optional[ReportReview] = Body(None),
    session: AdminSession = Depends(require_gym_admin),
) -> GymReportSchema:
    notes = review_in.admin_notes if review_in else None
    return gym_report_service.reject(db, session, report_id, notes)


@router.post("/{report_id}/resolve", response_model=ReportResolution)
async def resolve_gym_report(
    *,
    db: Session = Depends(get_db),
    report_id: str = Path(..., description="ID del reporte"),
    session: AdminSession = Depends(require_gym_admin),
) -> ReportResolution:
    """Resolver un reporte. El registro se elimina."""
    return gym_report_service.resolve(db, session, report_id)
