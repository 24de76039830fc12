from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_gym_admin
from app.core.date_utils import utc_now
from app.db.session import get_db
from app.schemas.payments import ReportTotals
from app.services.reports import report_service

router = APIRouter()


@router.get("/totals", response_model=ReportTotals)
async def get_report_totals(
    *,
    db: Session = Depends(get_db),
    session: AdminSession = Depends(require_gym_admin),
) -> ReportTotals:
    """Ingresos y contadores de inscripciones del gimnasio."""
    return report_service.totals(db, session)


@router.get("/export")
async def export_report(
    *,
    db: Session = Depends(get_db),
    session: AdminSession = Depends(require_gym_admin),
) -> StreamingResponse:
    """
    Exportar todas las inscripciones del gimnasio a CSV.

    Returns:
        StreamingResponse: Archivo CSV descargable
    """
    output = report_service.export_csv(db, session)
    filename = f"gym_report_{utc_now().strftime('%Y%m%d')}.csv"
    return StreamingResponse(
        output,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
