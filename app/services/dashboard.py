import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession
from app.core.config import get_settings
from app.core.date_utils import normalize_date
from app.core.timezone_utils import gym_day_bounds_utc
from app.models.user import EnrollmentStatus, UserRole
from app.repositories.enrollment import enrollment_repository
from app.repositories.user import user_repository
from app.schemas.dashboard import DashboardSummary
from app.schemas.enrollment import Enrollment as EnrollmentSchema

logger = logging.getLogger(__name__)


class DashboardService:
    def get_summary(self, db: Session, session: AdminSession, now: Optional[datetime] = None) -> DashboardSummary:
        """
        Indicadores de la pantalla principal del admin.

        - Miembros activos: perfiles ``member`` aprobados del gimnasio.
        - Ingresos de hoy: importe de las inscripciones aprobadas creadas desde
          la medianoche local del gimnasio.
        - Listas cortas de pendientes y de últimos pagos aprobados.

        Args:
            db: Sesión de base de datos
            session: Sesión del operador
            now: Instante de referencia naive UTC (por defecto, ahora)

        Returns:
            DashboardSummary: Indicadores del gimnasio
        """
        settings = get_settings()
        gym_id = session.require_gym_id()
        list_limit = settings.DASHBOARD_LIST_LIMIT

        active_members = user_repository.count(
            db,
            filters={
                "gym_id": gym_id,
                "role": UserRole.MEMBER,
                "enrollment_status": EnrollmentStatus.APPROVED,
            },
        )
        pending_count = enrollment_repository.count(
            db, filters={"gym_id": gym_id, "status": EnrollmentStatus.PENDING}
        )
        pending_list = enrollment_repository.list_for_gym(
            db, gym_id=gym_id, status=EnrollmentStatus.PENDING, limit=list_limit
        )

        approved = enrollment_repository.list_for_gym(db, gym_id=gym_id, status=EnrollmentStatus.APPROVED)
        timezone_name = (session.gym.timezone if session.gym else None) or settings.DEFAULT_GYM_TIMEZONE
        day_start, day_end = gym_day_bounds_utc(timezone_name, now)
        today_revenue = 0.0
        for e in approved:
            created = normalize_date(e.created_at)
            if created is not None and day_start <= created < day_end:
                today_revenue += e.amount or 0.0

        logger.debug(f"Dashboard {gym_id}: {active_members} activos, {pending_count} pendientes")
        return DashboardSummary(
            active_members=active_members,
            pending_enrollments=pending_count,
            today_revenue=float(today_revenue),
            pending_list=[EnrollmentSchema.model_validate(e) for e in pending_list],
            recent_payments=[EnrollmentSchema.model_validate(e) for e in approved[:list_limit]],
        )


dashboard_service = DashboardService()
