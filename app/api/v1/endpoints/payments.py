from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_gym_admin
from app.core.date_utils import utc_now
from app.db.session import get_db
from app.models.user import EnrollmentStatus
from app.schemas.payments import PaymentListResponse
from app.services.payments import payment_service

router = APIRouter()


@router.get("/", response_model=PaymentListResponse)
async def list_payments(
    *,
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, description="Nombre del miembro o ID de transacción"),
    method: Optional[str] = Query(None, description="Método de pago ('all' para todos)"),
    status: Optional[EnrollmentStatus] = Query(None),
    session: AdminSession = Depends(require_gym_admin),
) -> PaymentListResponse:
    """
    Pagos del gimnasio, más recientes primero, con totales de la lista filtrada.
    """
    return payment_service.list_payments(db, session, search=search, method=method, status=status)


@router.get("/export")
async def export_payments(
    *,
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None),
    method: Optional[str] = Query(None),
    status: Optional[EnrollmentStatus] = Query(None),
    session: AdminSession = Depends(require_gym_admin),
) -> StreamingResponse:
    """
    Exportar los pagos filtrados a CSV.

    Returns:
        StreamingResponse: Archivo CSV descargable
    """
    output = payment_service.export_csv(db, session, search=search, method=method, status=status)
    filename = f"payments_{utc_now().strftime('%Y%m%d')}.csv"
    return StreamingResponse(
        output,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
