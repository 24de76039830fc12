from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_gym_admin
from app.db.session import get_db
from app.schemas.dashboard import DashboardSummary
from app.services.dashboard import dashboard_service

router = APIRouter()


@router.get("/", response_model=DashboardSummary)
async def get_dashboard(
    *,
    db: Session = Depends(get_db),
    session: AdminSession = Depends(require_gym_admin),
) -> DashboardSummary:
    """
    Indicadores principales del gimnasio del admin.

    Returns:
        DashboardSummary: Miembros activos, pendientes, ingresos de hoy y últimos pagos
    """
    return dashboard_service.get_summary(db, session)
