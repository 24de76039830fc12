from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_gym_admin
from app.db.session import get_db
from app.schemas.attendance import AttendanceToday, CheckInRecord
from app.services.attendance import attendance_service

router = APIRouter()

DATE_KEY_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


@router.get("/today", response_model=AttendanceToday)
async def get_today_attendance(
    *,
    db: Session = Depends(get_db),
    session: AdminSession = Depends(require_gym_admin),
) -> AttendanceToday:
    """
    Asistencia de hoy en la zona horaria del gimnasio.

    Returns:
        AttendanceToday: Resumen, miembros dentro ahora y visitas cerradas hoy
    """
    return attendance_service.get_today(db, session)


@router.get("/history", response_model=List[CheckInRecord])
async def get_attendance_history(
    *,
    db: Session = Depends(get_db),
    date_from: Optional[str] = Query(None, pattern=DATE_KEY_PATTERN, description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, pattern=DATE_KEY_PATTERN, description="YYYY-MM-DD"),
    user_id: Optional[str] = Query(None),
    session: AdminSession = Depends(require_gym_admin),
) -> List[CheckInRecord]:
    """Historial de visitas entre dos fechas (inclusivas)."""
    return attendance_service.get_history(db, session, date_from=date_from, date_to=date_to, user_id=user_id)
